"""Pytest fixtures shared across unit and Django integration tests."""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence

import pytest

from analysis.series_filter import Series


def grid_markup(dimensions: Sequence[str], *, skip: dict[str, set[str]] | None = None) -> str:
    """Build dimension grid markup with one panel per dimension.

    Args:
        dimensions: Dimension names, in display order.
        skip: Optional mapping of dimension -> roles to leave out.
    """

    skip = skip or {}
    roles = ("placeholder", "tooltip", "title", "legend")
    panels: list[str] = []
    for dimension in dimensions:
        for role in roles:
            if role in skip.get(dimension, set()):
                continue
            panels.append(
                f'<div class="dimension-time-series-{role}" dimension="{dimension}" id="{role}-{dimension}"></div>'
            )
    return '<div id="dimension-time-series-area">' + "".join(panels) + "</div>"


@pytest.fixture
def make_grid() -> Callable[..., str]:
    """Return the grid markup builder."""

    return grid_markup


@pytest.fixture
def make_series() -> Callable[..., Series]:
    """Return a factory for Series with JSON-encoded dimension metadata."""

    def _make(
        *points: tuple[float, float],
        dimensions: Sequence[str] = ("*",),
        names: Sequence[str] = ("country",),
        label: str | None = None,
    ) -> Series:
        return Series(
            data=tuple(points),
            dimensions=json.dumps(list(dimensions)),
            dimension_names=json.dumps(list(names)),
            label=label,
        )

    return _make


def pytest_collection_modifyitems(items: Sequence[pytest.Item]) -> None:
    """Enforce that every test has exactly one speed marker.

    The suite must be runnable by intent:
    - `unit`: pure, fast tests with no Django request cycle.
    - `integration`: tests touching Django views, templates, or IO.

    Each test must have exactly one of these markers.
    """

    invalid: list[str] = []
    for item in items:
        has_unit = item.get_closest_marker("unit") is not None
        has_integration = item.get_closest_marker("integration") is not None
        if has_unit == has_integration:
            markers = []
            if has_unit:
                markers.append("unit")
            if has_integration:
                markers.append("integration")
            invalid.append(f"{item.nodeid} (markers={markers or 'none'})")

    if invalid:
        joined = "\n".join(f"- {nodeid}" for nodeid in invalid)
        raise pytest.UsageError(
            "Each test must have exactly one speed marker: `@pytest.mark.unit` or "
            "`@pytest.mark.integration`.\n"
            f"Offending tests:\n{joined}"
        )

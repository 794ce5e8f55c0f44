"""Render configuration shared by every dimension panel.

`RenderConfig` is an immutable value. The base config is derived once per page
load from the browser location; a mode toggle builds a new base with
`with_mode`, and every panel render receives its own copy from `for_panel`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Literal, Sequence

from .series_filter import Series, top_series
from .time_units import ONE_WEEK_MILLIS, to_millis
from .url_state import MODE_HASH_KEY, parse_hash_parameters, parse_path

RenderMode = Literal["same", "own"]

DEFAULT_MODE: RenderMode = "same"

SeriesFilter = Callable[[Sequence[Series]], list[Series]]


@dataclass(frozen=True, slots=True)
class SideControls:
    """Aggregation controls read from the dashboard side panel.

    Args:
        amount: Aggregate size (number or numeric string).
        unit: Aggregate unit name, e.g. `"HOURS"`.
    """

    amount: object = 1
    unit: object = "HOURS"


@dataclass(frozen=True, slots=True)
class RenderConfig:
    """How every dimension panel is currently drawn.

    Args:
        mode: `"same"` shares one y-axis scale across panels, `"own"` lets each
            panel scale itself. Other strings are passed through untouched.
        legend: Whether the legend is drawn.
        filter: Series selection applied before drawing.
        aggregate_millis: Aggregation bucket width.
        window_millis: Overlay window width (overlay views only).
        window_offset_millis: Overlay offset window (overlay views only).
        dimension: Dimension name (per-panel copies only).
        legend_container: Legend region handle (per-panel copies only).
    """

    mode: str = DEFAULT_MODE
    legend: bool = True
    filter: SeriesFilter = field(default=top_series, compare=False)
    aggregate_millis: int | float = 0
    window_millis: int | None = None
    window_offset_millis: int | float | None = None
    dimension: str | None = None
    legend_container: object | None = None

    @property
    def is_overlay(self) -> bool:
        return self.window_millis is not None

    def with_mode(self, mode: str) -> "RenderConfig":
        """Return a copy with a different comparison mode."""

        return replace(self, mode=mode)

    def for_panel(self, *, dimension: str, legend_container: object | None) -> "RenderConfig":
        """Return a fresh per-panel copy carrying the panel identity."""

        return replace(self, dimension=dimension, legend_container=legend_container)

    def to_payload(self) -> dict[str, Any]:
        """Serialize for JSON responses (the filter callable is omitted)."""

        payload: dict[str, Any] = {
            "mode": self.mode,
            "legend": self.legend,
            "aggregateMillis": self.aggregate_millis,
        }
        if self.is_overlay:
            payload["windowMillis"] = self.window_millis
            payload["windowOffsetMillis"] = self.window_offset_millis
        if self.dimension is not None:
            payload["dimension"] = self.dimension
        return payload


def derive_config(url_hash: str, url_path: str, side_controls: SideControls) -> RenderConfig:
    """Derive the base RenderConfig from the browser location and side panel.

    Derivation never raises: malformed side controls produce NaN millisecond
    values, and unknown modes in the hash are kept as-is.

    Args:
        url_hash: Current hash fragment (leading `#` optional).
        url_path: Current URL path.
        side_controls: Aggregate size/unit controls.

    Returns:
        Base RenderConfig without per-panel identity.
    """

    hash_params = parse_hash_parameters(url_hash)
    mode = hash_params.get(MODE_HASH_KEY) or DEFAULT_MODE
    aggregate_millis = to_millis(side_controls.amount, side_controls.unit)

    window_millis: int | None = None
    window_offset_millis: int | float | None = None
    if parse_path(url_path).is_overlay:
        # TODO: expose the overlay window width as a side-panel control.
        window_millis = ONE_WEEK_MILLIS
        window_offset_millis = to_millis(side_controls.amount, side_controls.unit)

    return RenderConfig(
        mode=mode,
        legend=True,
        filter=top_series,
        aggregate_millis=aggregate_millis,
        window_millis=window_millis,
        window_offset_millis=window_offset_millis,
    )


def side_controls_from_metric_function(metric_function: str | None) -> SideControls:
    """Read default aggregation controls from a metric function path segment.

    Metric functions are named like `AGGREGATE_1_HOURS`; anything else falls
    back to one hour.

    Args:
        metric_function: Metric function segment of the dashboard path.

    Returns:
        SideControls with the encoded size and unit.
    """

    parts = (metric_function or "").split("_")
    if len(parts) == 3 and parts[0] == "AGGREGATE" and parts[1].isdigit():
        return SideControls(amount=int(parts[1]), unit=parts[2])
    return SideControls()

"""Top-N selection for comparison series.

Each dimension panel can expand into many series (one per dimension value).
To bound visual clutter, only the series with the largest baseline value (the
y value of their first point) are drawn.
"""

from __future__ import annotations

import json
import numbers
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any, Iterable, Mapping

TOP_SERIES_LIMIT = 4

Point = tuple[float, float | None]


class SeriesPayloadError(ValueError):
    """Raised when series data or dimension metadata is malformed."""


@dataclass(frozen=True, slots=True)
class Series:
    """A single comparison series as produced by the chart data source.

    Args:
        data: Ordered `(x, y)` points. A missing measurement has a `None` y.
        dimensions: JSON-encoded list of dimension values for this series.
        dimension_names: JSON-encoded list naming each position of `dimensions`.
        label: Optional display label.
    """

    data: tuple[Point, ...] = ()
    dimensions: str = "[]"
    dimension_names: str = "[]"
    label: str | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Series":
        """Build a Series from a wire payload using camelCase keys.

        `dimensions`/`dimensionNames` may be given as JSON strings or as lists;
        lists are re-encoded so the click handler always parses strings.

        Raises:
            SeriesPayloadError: When a point is not an `[x, y]` pair of numbers
                (y may be null) or the metadata is neither a list nor a string.
        """

        raw_data = payload.get("data") or ()
        if not isinstance(raw_data, (list, tuple)):
            raise SeriesPayloadError("Series `data` must be a list of [x, y] points.")
        return cls(
            data=tuple(_point(raw) for raw in raw_data),
            dimensions=_as_json_text(payload.get("dimensions"), name="dimensions"),
            dimension_names=_as_json_text(
                payload.get("dimensionNames", payload.get("dimension_names")),
                name="dimensionNames",
            ),
            label=payload.get("label"),
        )

    @property
    def baseline(self) -> float | None:
        """The y value of the first point, or None for an empty series.

        A first point with a null y counts as zero.
        """

        if not self.data:
            return None
        return self.data[0][1] or 0

    def dimension_pairs(self) -> list[tuple[str, object]]:
        """Decode the metadata into `(name, value)` pairs, one per named position.

        Positions past the end of the value list pair with None.

        Raises:
            SeriesPayloadError: When either field is not a JSON list.
        """

        values = _json_list(self.dimensions, name="dimensions")
        names = _json_list(self.dimension_names, name="dimensionNames")
        return [(str(name), values[index] if index < len(values) else None) for index, name in enumerate(names)]


def _is_number(value: object) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _point(raw: object) -> Point:
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise SeriesPayloadError(f"Series point {raw!r} must be an [x, y] pair.")
    x, y = raw
    if not _is_number(x) or not (y is None or _is_number(y)):
        raise SeriesPayloadError(f"Series point {raw!r} must hold numbers.")
    return (x, y)


def _as_json_text(value: object, *, name: str) -> str:
    if value is None:
        return "[]"
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return json.dumps(list(value))
    raise SeriesPayloadError(f"Series `{name}` must be a list or a JSON string.")


def _json_list(text: str, *, name: str) -> list[Any]:
    try:
        decoded = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SeriesPayloadError(f"Series `{name}` is not valid JSON.") from exc
    if not isinstance(decoded, list):
        raise SeriesPayloadError(f"Series `{name}` must be a JSON list.")
    return decoded


def compare_by_baseline(a: Series, b: Series) -> int:
    """Comparator ranking series by baseline value, descending.

    Empty series sort after every non-empty series and compare equal to each
    other.
    """

    a_first = a.baseline
    b_first = b.baseline
    if a_first is None and b_first is None:
        return 0
    if a_first is None:
        return 1
    if b_first is None:
        return -1
    if b_first > a_first:
        return 1
    if b_first < a_first:
        return -1
    return 0


def top_series(series_list: Iterable[Series], *, limit: int = TOP_SERIES_LIMIT) -> list[Series]:
    """Return the top series by baseline value.

    The input is not mutated. `sorted` is stable, so series that compare equal
    (including pairs of empty series) keep their relative input order.

    Args:
        series_list: Candidate series.
        limit: Maximum number of series to keep.

    Returns:
        At most `limit` series, highest baseline first.
    """

    ranked = sorted(series_list, key=cmp_to_key(compare_by_baseline))
    return ranked[:limit]

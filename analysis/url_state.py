"""Browser address-state codecs for the dimension time-series dashboard.

The dashboard persists view state in two independent stores of the browser
location:

- the hash fragment (soft state): writing it does not navigate, so callers must
  re-render themselves;
- the query string (hard state): writing it navigates, so the whole page is
  rebuilt from the new URL.

This module is pure (no Django imports) and only encodes/decodes those stores.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Collection, Mapping
from urllib.parse import parse_qsl, quote, unquote, urlencode, urlsplit, urlunsplit

MODE_HASH_KEY = "dimensionTimeSeriesMode"
WILDCARD = "*"
OVERLAY_VIEW_TYPE = "TIME_SERIES_OVERLAY"

_PATH_FIELDS = (
    "collection",
    "metric_function",
    "metric_view_type",
    "dimension_view_type",
    "baseline_millis",
    "current_millis",
)


@dataclass(frozen=True, slots=True)
class MetricPath:
    """Parsed dashboard path.

    Dashboard URLs have the shape
    `/dashboard/<collection>/<metric_function>/<metric_view_type>/<dimension_view_type>/<baseline>/<current>`.
    Missing trailing segments are `None`.
    """

    collection: str | None = None
    metric_function: str | None = None
    metric_view_type: str | None = None
    dimension_view_type: str | None = None
    baseline_millis: int | None = None
    current_millis: int | None = None

    @property
    def is_overlay(self) -> bool:
        return self.metric_view_type == OVERLAY_VIEW_TYPE


@dataclass(frozen=True, slots=True)
class Location:
    """Immutable snapshot of a browser location.

    Attributes:
        path: URL path (always starts with `/`).
        query: Query string without the leading `?`.
        fragment: Hash fragment without the leading `#`.
        origin: Optional `scheme://host` prefix.
    """

    path: str = "/"
    query: str = ""
    fragment: str = ""
    origin: str = ""

    @classmethod
    def from_href(cls, href: str) -> "Location":
        """Split an absolute or relative href into a Location."""

        parts = urlsplit(href or "/")
        origin = f"{parts.scheme}://{parts.netloc}" if parts.scheme and parts.netloc else ""
        return cls(path=parts.path or "/", query=parts.query, fragment=parts.fragment, origin=origin)

    @property
    def href(self) -> str:
        scheme, _, netloc = self.origin.partition("://")
        return urlunsplit((scheme, netloc, self.path, self.query, self.fragment))

    @property
    def hash(self) -> str:
        return f"#{self.fragment}" if self.fragment else ""

    @property
    def search(self) -> str:
        return f"?{self.query}" if self.query else ""

    def with_fragment(self, fragment: str) -> "Location":
        """Return a copy with a new hash fragment (leading `#` optional)."""

        return replace(self, fragment=fragment.removeprefix("#"))

    def with_query(self, query: str) -> "Location":
        """Return a copy with a new query string (leading `?` optional)."""

        return replace(self, query=query.removeprefix("?"))


def parse_hash_parameters(fragment: str) -> dict[str, str]:
    """Parse `#key=value&other=value` into a dict.

    Args:
        fragment: Hash fragment with or without the leading `#`.

    Returns:
        Mapping of decoded keys to decoded values. A key without `=` maps to "".
    """

    raw = (fragment or "").removeprefix("#")
    params: dict[str, str] = {}
    for token in raw.split("&"):
        if not token:
            continue
        key, _, value = token.partition("=")
        if not key:
            continue
        params[unquote(key)] = unquote(value)
    return params


def encode_hash_parameters(params: Mapping[str, str]) -> str:
    """Encode a mapping into a `#`-prefixed hash fragment (insertion order kept)."""

    if not params:
        return ""
    tokens = [f"{quote(str(key), safe='')}={quote(str(value), safe='')}" for key, value in params.items()]
    return "#" + "&".join(tokens)


def parse_dimension_values(query: str) -> dict[str, str]:
    """Parse a query string into a dimension name -> selected value mapping.

    Repeated keys keep the last value; blank values are preserved.
    """

    raw = (query or "").removeprefix("?")
    return dict(parse_qsl(raw, keep_blank_values=True))


def encode_dimension_values(values: Mapping[str, str]) -> str:
    """Encode dimension selections into a `?`-prefixed query string."""

    if not values:
        return ""
    return "?" + urlencode(list(values.items()))


def split_query_values(
    values: Mapping[str, str], reserved: Collection[str]
) -> tuple[dict[str, str], dict[str, str]]:
    """Split query values into dimension selections and reserved (non-dimension) keys.

    Returns:
        `(dimension_values, reserved_values)`, each in query order.
    """

    dimension_values: dict[str, str] = {}
    reserved_values: dict[str, str] = {}
    for key, value in values.items():
        if key in reserved:
            reserved_values[key] = value
        else:
            dimension_values[key] = value
    return dimension_values, reserved_values


def parse_path(path: str) -> MetricPath:
    """Parse a dashboard path into its metric/dimension view segments.

    Args:
        path: URL path, e.g. `/dashboard/ads/AGGREGATE_1_HOURS/TIME_SERIES_OVERLAY/MULTI_TIME_SERIES/1/2`.

    Returns:
        MetricPath; segments that are absent (or non-numeric time bounds) are None.
    """

    segments = [unquote(segment) for segment in (path or "").split("/") if segment]
    if segments and segments[0] == "dashboard":
        segments = segments[1:]

    values: dict[str, object] = {}
    for name, segment in zip(_PATH_FIELDS, segments):
        if name.endswith("_millis"):
            values[name] = _parse_int(segment)
        else:
            values[name] = segment
    return MetricPath(**values)  # type: ignore[arg-type]


def _parse_int(value: str) -> int | None:
    """Best-effort int parsing for path segments."""

    try:
        return int(value)
    except ValueError:
        return None

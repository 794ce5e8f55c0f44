"""Time-unit conversion for aggregation and overlay windows."""

from __future__ import annotations

import math
from enum import Enum


class TimeUnit(str, Enum):
    """Supported aggregation units, named the way the side-panel control posts them."""

    MILLISECONDS = "MILLISECONDS"
    SECONDS = "SECONDS"
    MINUTES = "MINUTES"
    HOURS = "HOURS"
    DAYS = "DAYS"
    WEEKS = "WEEKS"


MILLIS_PER_UNIT: dict[TimeUnit, int] = {
    TimeUnit.MILLISECONDS: 1,
    TimeUnit.SECONDS: 1_000,
    TimeUnit.MINUTES: 60_000,
    TimeUnit.HOURS: 3_600_000,
    TimeUnit.DAYS: 86_400_000,
    TimeUnit.WEEKS: 604_800_000,
}


def parse_time_unit(raw: object) -> TimeUnit | None:
    """Return the TimeUnit for a raw name (case-insensitive), or None."""

    if isinstance(raw, TimeUnit):
        return raw
    normalized = str(raw or "").strip().upper()
    try:
        return TimeUnit(normalized)
    except ValueError:
        return None


def to_millis(amount: object, unit: object) -> int | float:
    """Convert an amount of a time unit into milliseconds.

    Malformed input never raises: an unparseable amount or an unknown unit
    yields `math.nan`, matching how the side-panel controls are read without
    validation.

    Args:
        amount: Number (or numeric string) of units.
        unit: TimeUnit or unit name such as `"HOURS"`.

    Returns:
        Milliseconds as an int when the amount is integral, a float otherwise,
        or `math.nan` for invalid input.
    """

    time_unit = parse_time_unit(unit)
    if time_unit is None:
        return math.nan
    try:
        value = float(str(amount).strip())
    except ValueError:
        return math.nan
    if not math.isfinite(value):
        return math.nan

    millis = value * MILLIS_PER_UNIT[time_unit]
    if millis.is_integer():
        return int(millis)
    return millis


ONE_WEEK_MILLIS = int(to_millis(1, TimeUnit.WEEKS))

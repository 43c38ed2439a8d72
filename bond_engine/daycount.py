from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Union

import pandas as pd

from .exceptions import UnsupportedConvention, ValidationError

DateLike = Union[str, date, datetime, pd.Timestamp]


class DayCount(str, Enum):
    """Day count conventions, valued by their market labels."""

    THIRTY_U_360 = "30U/360"
    THIRTY_360 = "30/360"
    THIRTY_E_360 = "30E/360"
    ACTUAL_ACTUAL = "ACTUAL/ACTUAL"
    ACTUAL_360 = "ACTUAL/360"
    ACTUAL_365 = "ACTUAL/365"

    @classmethod
    def parse(cls, value: Union[str, "DayCount"]) -> "DayCount":
        if isinstance(value, DayCount):
            return value
        key = str(value).upper().replace(" ", "")
        key = _ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise UnsupportedConvention(f"Unsupported day count convention: {value}") from None


_ALIASES = {
    "ACT/360": "ACTUAL/360",
    "ACT/365": "ACTUAL/365",
    "ACT/365F": "ACTUAL/365",
    "ACTUAL/365F": "ACTUAL/365",
    "ACT/ACT": "ACTUAL/ACTUAL",
    "30/360US": "30U/360",
    "30/360E": "30E/360",
}


def as_date(value: DateLike) -> pd.Timestamp:
    """
    Coerce to a tz-naive, midnight-normalized Timestamp.

    ISO strings with a UTC suffix ("2026-01-15T00:00:00.000Z") are converted
    to UTC wall time before the zone is dropped.
    """
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid date: {value!r}") from e
    if ts is pd.NaT:
        raise ValidationError(f"Invalid date: {value!r}")
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts.normalize()


def _actual_actual(start: pd.Timestamp, end: pd.Timestamp) -> float:
    total = 0.0
    current = start
    while current < end:
        next_break = min(pd.Timestamp(year=current.year + 1, month=1, day=1), end)
        days_in_year = 366 if current.is_leap_year else 365
        total += (next_break - current).days / days_in_year
        current = next_break
    return total


def _days_360(y1: int, m1: int, d1: int, y2: int, m2: int, d2: int) -> int:
    return (y2 - y1) * 360 + (m2 - m1) * 30 + (d2 - d1)


def year_fraction(start: DateLike, end: DateLike, convention: Union[str, DayCount]) -> float:
    """
    Year fraction between two dates under a day count convention.

    Returns 0.0 when end is on or before start: a valuation before the
    reference date accrues nothing.

    Supported:
    - ACTUAL/360, ACTUAL/365 (fixed denominators)
    - ACTUAL/ACTUAL (ISDA: split at each 1 January)
    - 30/360, 30U/360 (US bond basis)
    - 30E/360 (European)
    """
    dc = DayCount.parse(convention)
    start = as_date(start)
    end = as_date(end)

    if end <= start:
        return 0.0

    if dc is DayCount.ACTUAL_360:
        return (end - start).days / 360.0

    if dc is DayCount.ACTUAL_365:
        return (end - start).days / 365.0

    if dc is DayCount.ACTUAL_ACTUAL:
        return _actual_actual(start, end)

    d1, d2 = start.day, end.day

    if dc in (DayCount.THIRTY_360, DayCount.THIRTY_U_360):
        # 30/360 US: end-of-month carry only when the start is already 30
        if d1 == 31:
            d1 = 30
        if d2 == 31 and d1 >= 30:
            d2 = 30
    else:
        if d1 == 31:
            d1 = 30
        if d2 == 31:
            d2 = 30

    return _days_360(start.year, start.month, d1, end.year, end.month, d2) / 360.0

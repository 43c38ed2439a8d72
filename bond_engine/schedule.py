from __future__ import annotations

from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd

from .daycount import DateLike, DayCount, as_date, year_fraction
from .exceptions import ValidationError

SUPPORTED_FREQUENCIES = (1, 2, 4, 12)

MaturityInput = Union[int, float, Mapping[str, DateLike], Sequence[DateLike]]


@dataclass(frozen=True)
class BondMaturity:
    start: pd.Timestamp
    end: pd.Timestamp
    years: float
    issue_date: Optional[pd.Timestamp] = None

    def __post_init__(self):
        if self.end <= self.start:
            raise ValidationError(f"Maturity end {self.end.date()} must be after start {self.start.date()}.")


def validate_frequency(freq: int) -> int:
    if isinstance(freq, bool) or freq not in SUPPORTED_FREQUENCIES:
        raise ValidationError(f"Supported frequencies: {SUPPORTED_FREQUENCIES}, got {freq!r}.")
    return int(freq)


def build_maturity(maturity: MaturityInput, today: Optional[DateLike] = None) -> BondMaturity:
    """
    Build a BondMaturity from a tenor in years or an explicit date range.

    - number: start today, end start + tenor; years is the tenor itself
    - {"start": ..., "end": ...} or (start, end): years is the ACTUAL/ACTUAL span
    """
    if isinstance(maturity, BondMaturity):
        return maturity

    if isinstance(maturity, (int, float)) and not isinstance(maturity, bool):
        if maturity <= 0:
            raise ValidationError(f"Maturity must be positive, got {maturity}.")
        start = as_date(today if today is not None else pd.Timestamp.today())
        if float(maturity).is_integer():
            end = start + pd.DateOffset(years=int(maturity))
        else:
            end = start + pd.DateOffset(months=int(round(maturity * 12)))
        return BondMaturity(start=start, end=pd.Timestamp(end), years=float(maturity))

    if isinstance(maturity, Mapping):
        try:
            start, end = maturity["start"], maturity["end"]
        except KeyError as e:
            raise ValidationError(f"Maturity range needs 'start' and 'end': {dict(maturity)!r}") from e
        issue = maturity.get("issueDate") or maturity.get("issue_date")
    elif isinstance(maturity, Sequence) and not isinstance(maturity, str) and len(maturity) == 2:
        start, end = maturity
        issue = None
    else:
        raise ValidationError(f"Unsupported maturity specification: {maturity!r}")

    start, end = as_date(start), as_date(end)
    if end <= start:
        raise ValidationError(f"Maturity end {end.date()} must be after start {start.date()}.")

    return BondMaturity(
        start=start,
        end=end,
        years=year_fraction(start, end, DayCount.ACTUAL_ACTUAL),
        issue_date=as_date(issue) if issue is not None else None,
    )


def period_count(years: float, freq: int) -> int:
    return max(1, int(round(years * freq)))


def coupon_schedule(
    start: DateLike,
    end: DateLike,
    freq: int,
    years: float,
) -> Tuple[pd.Timestamp, ...]:
    """
    Coupon dates from the period after issue through maturity.

    Each step adds 12/freq months to the previous date; pandas clamps to the
    last day of a shorter month and that clamped day carries forward. The
    n-th date, and any step landing past maturity, is replaced by the
    maturity date, so the final period may be an irregular stub.
    """
    start = as_date(start)
    end = as_date(end)
    freq = validate_frequency(freq)

    if end <= start:
        raise ValidationError(f"Maturity end {end.date()} must be after start {start.date()}.")

    months = 12 // freq
    n = period_count(years, freq)

    dates: List[pd.Timestamp] = []
    d = start
    for k in range(1, n + 1):
        d = pd.Timestamp(d + pd.DateOffset(months=months))
        if k == n or d >= end:
            dates.append(end)
            break
        dates.append(d)

    return tuple(dates)


def previous_coupon_date(schedule: Sequence[pd.Timestamp], issue: pd.Timestamp, as_of: pd.Timestamp) -> pd.Timestamp:
    """Latest scheduled date on or before as_of, or the issue date."""
    last = issue
    for d in schedule:
        if as_of < d:
            break
        last = d
    return last


def next_coupon_date(schedule: Sequence[pd.Timestamp], as_of: pd.Timestamp) -> Optional[pd.Timestamp]:
    """First scheduled date strictly after as_of, None once matured."""
    for d in schedule:
        if d > as_of:
            return d
    return None

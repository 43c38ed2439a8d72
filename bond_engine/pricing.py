from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Optional, Tuple, Union

import numpy as np
import pandas as pd

from .accrual import accrued_interest
from .daycount import DateLike, as_date, year_fraction
from .exceptions import ValidationError

if TYPE_CHECKING:
    from .bonds import Bond


class PriceMode(str, Enum):
    CLEAN = "clean"
    DIRTY = "dirty"

    @classmethod
    def parse(cls, value: Union[str, "PriceMode"]) -> "PriceMode":
        if isinstance(value, PriceMode):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(f"Unsupported price mode: {value!r}") from None


def discount_times(bond: "Bond", as_of: pd.Timestamp) -> np.ndarray:
    """Periods (fractional for the first/stub one) from as_of to each remaining coupon date."""
    future = [d for d in bond.schedule if d > as_of]
    return np.array(
        [year_fraction(as_of, d, bond.day_count) * bond.frequency for d in future],
        dtype=float,
    )


def compute_price(
    bond: "Bond",
    rate: Optional[float] = None,
    as_of: Optional[DateLike] = None,
    mode: Optional[Union[str, PriceMode]] = None,
) -> float:
    """
    Price per unit of face value at a flat periodic-compounded rate.

    Each remaining coupon face*c/freq is discounted by (1+rate/freq)^t with
    t = yearfrac(as_of, date)*freq; face is discounted at the final t.
    DIRTY adds accrued interest / face. The rate is not range-checked:
    rates near -freq give unstable (nan/inf) prices rather than errors.
    """
    if rate is None:
        rate = bond.market_rate
    as_of = as_date(as_of if as_of is not None else pd.Timestamp.today())
    mode = PriceMode.parse(mode) if mode is not None else bond.price_mode

    face = float(bond.face_value)
    t = discount_times(bond, as_of)

    if len(t) == 0:
        clean = 0.0
    else:
        coupon = face * bond.coupon_rate / bond.frequency
        with np.errstate(all="ignore"):
            dfs = np.power(1.0 + rate / bond.frequency, -t)
            pv = float(coupon * np.sum(dfs) + face * dfs[-1])
        clean = pv / face

    if mode is PriceMode.DIRTY:
        return clean + float(accrued_interest(bond, as_of)) / face
    return clean


def price_dirty_clean(
    bond: "Bond",
    rate: Optional[float] = None,
    as_of: Optional[DateLike] = None,
) -> Tuple[float, float, float]:
    """
    Returns (dirty, clean, accrued) per unit of face value, all from one
    accrual computation at the same date.
    """
    as_of = as_date(as_of if as_of is not None else pd.Timestamp.today())
    clean = compute_price(bond, rate, as_of, PriceMode.CLEAN)
    ai = float(accrued_interest(bond, as_of)) / float(bond.face_value)
    return clean + ai, clean, ai

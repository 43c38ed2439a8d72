from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from .bonds import Bond


def macaulay_duration(bond: "Bond") -> float:
    """
    Macaulay duration in years, clean-price basis (accrued interest excluded).

    Coupons and the final face are discounted at the market rate over whole
    periods 1..N; defined as 0 when the total present value is 0.
    """
    n = bond.total_periods
    freq = bond.frequency
    face = float(bond.face_value)
    coupon = face * bond.coupon_rate / freq

    t = np.arange(1, n + 1, dtype=float)
    cfs = np.full(n, coupon, dtype=float)
    cfs[-1] += face

    with np.errstate(all="ignore"):
        pv = cfs / np.power(1.0 + bond.market_rate / freq, t)

    pv_total = float(np.sum(pv))
    if pv_total == 0.0 or not np.isfinite(pv_total):
        return 0.0
    return float(np.sum(t * pv)) / pv_total / freq


def modified_duration(bond: "Bond") -> float:
    return macaulay_duration(bond) / (1.0 + bond.market_rate / bond.frequency)

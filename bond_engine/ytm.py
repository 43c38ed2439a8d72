from __future__ import annotations

import logging
from typing import TYPE_CHECKING, NamedTuple, Optional, Tuple

import numpy as np
import pandas as pd
from scipy.optimize import brentq

from .config import get_settings
from .exceptions import ConvergenceError
from .schedule import period_count

if TYPE_CHECKING:
    from .bonds import Bond

logger = logging.getLogger(__name__)

# |f'(y)| below this ends the Newton loop instead of taking a huge step
DERIVATIVE_FLOOR = 1e-10


class YieldCurvePoint(NamedTuple):
    maturity_years: float
    ytm: float


def _pv_and_slope(y: float, coupon: float, face: float, periods: int, freq: int) -> Tuple[float, float]:
    t = np.arange(1, periods + 1, dtype=float)
    base = 1.0 + y / freq
    disc = np.power(base, t)

    pv = float(np.sum(coupon / disc) + face / disc[-1])
    slope = float(
        -np.sum(t * coupon / (disc * base * freq))
        - periods * face / (disc[-1] * base * freq)
    )
    return pv, slope


def solve_ytm(
    bond: "Bond",
    price_ratio: Optional[float] = None,
    maturity_years: Optional[float] = None,
    iterations: Optional[int] = None,
    tolerance: Optional[float] = None,
) -> float:
    """
    Yield to maturity by Newton-Raphson over whole coupon periods.

    Best effort: the loop exits on |dy| < tolerance, on a derivative below
    DERIVATIVE_FLOOR, on a non-finite step, or at the iteration cap, and in
    every case returns the last estimate. Non-convergence is logged, not
    raised; use solve_ytm_bracketed when a guarantee is needed.
    """
    settings = get_settings()
    if price_ratio is None:
        price_ratio = bond.price.buy
    if maturity_years is None:
        maturity_years = bond.maturity.years
    if iterations is None:
        iterations = settings.ytm_max_iterations
    if tolerance is None:
        tolerance = settings.ytm_tolerance

    if maturity_years <= 0:
        return 0.0

    freq = bond.frequency
    face = float(bond.face_value)
    coupon = face * bond.coupon_rate / freq
    periods = period_count(maturity_years, freq)
    target = price_ratio * face

    y = float(bond.market_rate or bond.coupon_rate)
    converged = False

    for i in range(iterations):
        with np.errstate(all="ignore"):
            pv, slope = _pv_and_slope(y, coupon, face, periods, freq)

        if not np.isfinite(slope) or abs(slope) < DERIVATIVE_FLOOR:
            logger.debug("YTM solver stopped at iteration %d: derivative %.3g below floor", i, slope)
            break

        nxt = y - (pv - target) / slope
        if not np.isfinite(nxt):
            logger.debug("YTM solver stopped at iteration %d: non-finite step", i)
            break

        if abs(nxt - y) < tolerance:
            y = nxt
            converged = True
            break
        y = nxt

    if not converged:
        logger.debug(
            "YTM not converged (price=%.6f, years=%.4f); returning last estimate %.10f",
            price_ratio, maturity_years, y,
        )
    return float(y)


def solve_ytm_bracketed(
    bond: "Bond",
    price_ratio: Optional[float] = None,
    maturity_years: Optional[float] = None,
    lower: float = -0.9,
    upper: float = 5.0,
    tolerance: float = 1e-14,
) -> float:
    """
    Same pricing equation as solve_ytm, solved with brentq inside
    [lower, upper]. Raises ConvergenceError when the bracket holds no root.
    """
    if price_ratio is None:
        price_ratio = bond.price.buy
    if maturity_years is None:
        maturity_years = bond.maturity.years
    if maturity_years <= 0:
        return 0.0

    freq = bond.frequency
    face = float(bond.face_value)
    coupon = face * bond.coupon_rate / freq
    periods = period_count(maturity_years, freq)
    target = price_ratio * face

    def residual(y: float) -> float:
        with np.errstate(all="ignore"):
            return _pv_and_slope(y, coupon, face, periods, freq)[0] - target

    fa, fb = residual(lower), residual(upper)
    if not (np.isfinite(fa) and np.isfinite(fb)) or fa * fb > 0:
        raise ConvergenceError(
            f"Yield not bracketed in [{lower}, {upper}] for price {price_ratio}."
        )

    try:
        return float(brentq(residual, lower, upper, maxiter=500, xtol=tolerance))
    except (RuntimeError, ValueError) as e:
        raise ConvergenceError(str(e)) from e


def current_yield(bond: "Bond") -> float:
    """Annual coupon over the buy price."""
    return bond.coupon_rate / bond.price.buy


def yield_curve(bond: "Bond", points: Optional[int] = None) -> Tuple[YieldCurvePoint, ...]:
    """
    YTM of the buy quote re-solved at evenly spaced maturities, from one
    coupon period up to the bond's full maturity.
    """
    if points is None:
        points = get_settings().yield_curve_points

    min_years = 1.0 / bond.frequency
    out = []
    for i in range(1, points + 1):
        years = max(min_years, bond.maturity.years / points * i)
        out.append(YieldCurvePoint(years, solve_ytm(bond, bond.price.buy, years)))
    return tuple(out)


def yield_curve_frame(bond: "Bond") -> pd.DataFrame:
    return pd.DataFrame(list(bond.yield_curve), columns=["maturity_years", "ytm"])

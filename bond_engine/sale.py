"""
Sale and exit scenarios for a single bond.

Every function values against one date; simulate_sale builds its whole
summary from a single accrual and pricing pass so that no field is ever
computed against a different valuation date than the others.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Optional

import pandas as pd

from .accrual import accrued_interest
from .daycount import DateLike, as_date
from .money import Money
from .pricing import PriceMode, compute_price
from .tax import capital_gains_tax

if TYPE_CHECKING:
    from .bonds import Bond


@dataclass(frozen=True)
class SaleSummary:
    as_of: pd.Timestamp
    clean_price: Money
    dirty_price: Money
    accrued_interest: Money
    capital_gains_tax: Money
    net_gain: Money
    sell_price_used: float

    def to_dict(self) -> Dict[str, object]:
        return {
            "asOfDate": self.as_of.isoformat(),
            "cleanPrice": self.clean_price.to_dict(),
            "dirtyPrice": self.dirty_price.to_dict(),
            "accruedInterest": self.accrued_interest.to_dict(),
            "capitalGainsTax": self.capital_gains_tax.to_dict(),
            "netGain": self.net_gain.to_dict(),
            "sellPriceUsed": self.sell_price_used,
        }


def _valuation_date(as_of: Optional[DateLike]) -> pd.Timestamp:
    return as_date(as_of if as_of is not None else pd.Timestamp.today())


def sell_price_ratio(bond: "Bond", as_of: Optional[DateLike] = None) -> float:
    """Manual sell quote if set, otherwise the market-implied dirty price."""
    if bond.price.sell is not None:
        return bond.price.sell
    return compute_price(bond, bond.market_rate, _valuation_date(as_of), PriceMode.DIRTY)


def _cgt_for_ratio(bond: "Bond", sell_ratio: float) -> Money:
    return capital_gains_tax(
        bond,
        bond.face_value.multiply(sell_ratio),
        bond.face_value.multiply(bond.price.buy),
    )


def _net_gain(bond: "Bond", sell_ratio: float, accrued: Money, cgt: Money) -> Money:
    proceeds = bond.face_value.multiply(sell_ratio) + accrued
    return proceeds - bond.face_value.multiply(bond.price.buy) - cgt


def capital_gains_on_sale(bond: "Bond", as_of: Optional[DateLike] = None) -> Money:
    return _cgt_for_ratio(bond, sell_price_ratio(bond, as_of))


def net_gain_on_sale(bond: "Bond", as_of: Optional[DateLike] = None) -> Money:
    """Sale proceeds plus accrued interest, less purchase cost and capital gains tax."""
    return simulate_sale(bond, as_of).net_gain


def total_return_on_sale(bond: "Bond", as_of: Optional[DateLike] = None) -> float:
    invested = bond.face_value.multiply(bond.price.buy)
    return net_gain_on_sale(bond, as_of).ratio(invested)


def simulate_sale(bond: "Bond", as_of: Optional[DateLike] = None) -> SaleSummary:
    as_of = _valuation_date(as_of)
    face = float(bond.face_value)

    accrued = accrued_interest(bond, as_of)
    clean = compute_price(bond, bond.market_rate, as_of, PriceMode.CLEAN)
    dirty = clean + float(accrued) / face

    sell_ratio = bond.price.sell if bond.price.sell is not None else dirty
    cgt = _cgt_for_ratio(bond, sell_ratio)

    return SaleSummary(
        as_of=as_of,
        clean_price=bond.face_value.multiply(clean),
        dirty_price=bond.face_value.multiply(dirty),
        accrued_interest=accrued,
        capital_gains_tax=cgt,
        net_gain=_net_gain(bond, sell_ratio, accrued, cgt),
        sell_price_used=sell_ratio,
    )

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Optional

import pandas as pd

from .daycount import DateLike, as_date, year_fraction
from .money import Money, to_decimal
from .schedule import previous_coupon_date

if TYPE_CHECKING:
    from .bonds import Bond


def accrued_interest(bond: "Bond", as_of: Optional[DateLike] = None) -> Money:
    """
    Interest earned since the last coupon, in currency units.

    Zero on or before the first scheduled coupon, on a coupon date, and on
    or after maturity. Net of withholding tax when tax is enabled; rounded
    half-to-even to the minor unit.
    """
    as_of = as_date(as_of if as_of is not None else pd.Timestamp.today())
    zero = Money.zero(bond.currency)
    schedule = bond.schedule

    if not schedule or as_of <= schedule[0] or as_of >= schedule[-1]:
        return zero

    last_coupon = previous_coupon_date(schedule, bond.maturity.start, as_of)
    if as_of <= last_coupon:
        return zero

    fraction = year_fraction(last_coupon, as_of, bond.day_count)
    if fraction <= 0:
        return zero

    amount = bond.face_value.to_major() * to_decimal(bond.coupon_rate) * to_decimal(fraction)

    if bond.tax.enabled and bond.tax.interest_fwt:
        amount = amount * (Decimal(1) - to_decimal(bond.tax.interest_fwt))

    return Money.from_major(amount, bond.currency)

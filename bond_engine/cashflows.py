from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Dict, List, Tuple, Union

import pandas as pd

from .daycount import year_fraction
from .money import Money, Number, money_sum, round_minor, to_decimal

if TYPE_CHECKING:
    from .bonds import Bond


@dataclass(frozen=True)
class CashflowPeriod:
    period: int
    pay_date: pd.Timestamp
    interest: Money
    principal: Money
    total: Money
    tax: Money

    @property
    def date_label(self) -> str:
        return self.pay_date.strftime("%Y-%m-%d")

    @property
    def gross_interest(self) -> Money:
        return self.interest + self.tax

    def to_dict(self) -> Dict[str, object]:
        return {
            "period": self.period,
            "dateLabel": self.date_label,
            "interest": self.interest.to_dict(),
            "principal": self.principal.to_dict(),
            "total": self.total.to_dict(),
            "tax": self.tax.to_dict(),
        }


def _split_minor(total: int, parts: int) -> List[int]:
    """Equal half-even shares of `total`; the last share takes the remainder."""
    share = round_minor(Decimal(total) / parts)
    head = [share] * (parts - 1)
    return head + [total - sum(head)]


def build_cashflow_table(bond: "Bond", monthly: bool = False) -> Tuple[CashflowPeriod, ...]:
    """
    One row per scheduled coupon date.

    Gross interest accrues over the true length of each period (stubs
    included) and is rounded half-to-even to the minor unit; withheld tax is
    rounded from that gross and net interest is the remainder, so
    net + tax == gross exactly. Principal is repaid in full on the last row.

    With monthly=True each coupon period is spread over its 12/freq months:
    net interest and tax are split into equal minor-unit shares that sum back
    to the period's amounts, month rows are dated one month apart ending on
    the coupon date, and principal stays on the final month. A monthly bond
    is returned unchanged.
    """
    cur = bond.currency
    face_minor = Decimal(bond.face_value.minor_units)
    rate = to_decimal(bond.coupon_rate)
    fwt = to_decimal(bond.tax.interest_fwt) if bond.tax.enabled else Decimal(0)

    rows = []
    prev = bond.maturity.start
    last = len(bond.schedule) - 1

    months = 12 // bond.frequency if monthly else 1

    for i, pay_date in enumerate(bond.schedule):
        frac = to_decimal(year_fraction(prev, pay_date, bond.day_count))
        gross = round_minor(face_minor * rate * frac)
        tax = round_minor(Decimal(gross) * fwt)
        net = gross - tax
        principal = bond.face_value.minor_units if i == last else 0

        for m, (net_m, tax_m) in enumerate(zip(_split_minor(net, months), _split_minor(tax, months))):
            back = months - 1 - m
            month_principal = principal if back == 0 else 0
            rows.append(
                CashflowPeriod(
                    period=i * months + m + 1,
                    pay_date=pay_date - pd.DateOffset(months=back) if back else pay_date,
                    interest=Money(net_m, cur),
                    principal=Money(month_principal, cur),
                    total=Money(net_m + month_principal, cur),
                    tax=Money(tax_m, cur),
                )
            )
        prev = pay_date

    return tuple(rows)


def cashflow_frame(bond: "Bond", monthly: bool = False) -> pd.DataFrame:
    """Cashflow table as a DataFrame in major currency units."""
    rows = bond.cashflows if not monthly else build_cashflow_table(bond, monthly=True)
    return pd.DataFrame(
        [
            {
                "period": r.period,
                "pay_date": r.pay_date,
                "date_label": r.date_label,
                "interest": float(r.interest),
                "tax": float(r.tax),
                "principal": float(r.principal),
                "total": float(r.total),
            }
            for r in rows
        ],
        columns=["period", "pay_date", "date_label", "interest", "tax", "principal", "total"],
    )


# ---- lifetime totals ----

def total_interest_earned(bond: "Bond") -> Money:
    return money_sum((r.interest for r in bond.cashflows), bond.currency)


def total_cash_received(bond: "Bond") -> Money:
    return money_sum((r.total for r in bond.cashflows), bond.currency)


def invested_amount(bond: "Bond") -> Money:
    return bond.face_value.multiply(bond.price.buy)


def lifetime_net_gain(bond: "Bond") -> Money:
    """Cash received over the life of the bond minus the purchase cost."""
    return total_cash_received(bond) - invested_amount(bond)


def lifetime_total_return(bond: "Bond") -> float:
    return lifetime_net_gain(bond).ratio(invested_amount(bond))


def required_investment_for_monthly_income(bond: "Bond", target_monthly: Union[Money, Number]) -> Money:
    """Purchase cost of enough bonds to yield target_monthly of gross coupon per month."""
    target = target_monthly.to_major() if isinstance(target_monthly, Money) else to_decimal(target_monthly)
    monthly_per_bond = bond.face_value.to_major() * to_decimal(bond.coupon_rate) / 12

    if monthly_per_bond == 0:
        return Money.zero(bond.currency)

    bonds_needed = target / monthly_per_bond
    return bond.face_value.multiply(to_decimal(bond.price.buy) * bonds_needed)

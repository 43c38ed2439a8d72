from __future__ import annotations

from typing import TYPE_CHECKING

from .money import Money, money_sum

if TYPE_CHECKING:
    from .bonds import Bond


def interest_withholding(bond: "Bond", amount: Money) -> Money:
    """Final withholding tax on a coupon amount."""
    if not bond.tax.enabled or not bond.tax.interest_fwt:
        return Money.zero(amount.currency)
    return amount.multiply(bond.tax.interest_fwt)


def capital_gains_tax(bond: "Bond", sell_amount: Money, cost_basis: Money) -> Money:
    """Tax on a positive gain only; losses are clamped to zero before the rate applies."""
    if not bond.tax.enabled or not bond.tax.capital_gains:
        return Money.zero(sell_amount.currency)

    gain = sell_amount - cost_basis
    if gain.minor_units <= 0:
        return Money.zero(sell_amount.currency)
    return gain.multiply(bond.tax.capital_gains)


def estate_or_donor_tax(bond: "Bond") -> Money:
    """Informational: face value times the estate/donor rate."""
    if not bond.tax.enabled or not bond.tax.estate_or_donor:
        return Money.zero(bond.currency)
    return bond.face_value.multiply(bond.tax.estate_or_donor)


def total_interest_tax(bond: "Bond") -> Money:
    return money_sum((r.tax for r in bond.cashflows), bond.currency)


def total_tax(bond: "Bond", include_estate: bool = False) -> Money:
    """
    Lifetime tax: withheld interest tax, plus capital gains at the configured
    sell price when one is set, plus estate/donor tax when requested.
    """
    total = total_interest_tax(bond)

    if bond.price.sell is not None:
        total = total + capital_gains_tax(
            bond,
            bond.face_value.multiply(bond.price.sell),
            bond.face_value.multiply(bond.price.buy),
        )

    if include_estate:
        total = total + estate_or_donor_tax(bond)

    return total


def net_gain_after_tax(bond: "Bond", sell_amount: Money) -> Money:
    """Sale amount less purchase cost, capital gains tax and lifetime interest tax."""
    invested = bond.face_value.multiply(bond.price.buy)
    return (
        sell_amount
        - invested
        - capital_gains_tax(bond, sell_amount, invested)
        - total_interest_tax(bond)
    )

import pandas as pd
import pytest

from bond_engine.accrual import accrued_interest
from bond_engine.bonds import Bond


def test_zero_before_and_at_first_coupon(par_bond):
    assert accrued_interest(par_bond, "2026-01-10").is_zero()
    assert accrued_interest(par_bond, "2026-04-15").is_zero()
    assert accrued_interest(par_bond, "2026-07-15").is_zero()


def test_zero_on_every_coupon_date(par_bond):
    for d in par_bond.schedule:
        assert accrued_interest(par_bond, d).is_zero(), f"accrued should be 0 on {d.date()}"


def test_positive_strictly_between_coupons(par_bond):
    for prev, nxt in zip(par_bond.schedule[:-1], par_bond.schedule[1:]):
        mid = prev + (nxt - prev) / 2
        assert accrued_interest(par_bond, mid).is_positive()


def test_amount_under_thirty_360(par_bond):
    assert accrued_interest(par_bond, "2026-10-15").minor_units == 150000


def test_net_of_withholding_when_taxed(par_bond):
    taxed = par_bond.with_tax_enabled(True).with_interest_fwt(0.2)
    assert accrued_interest(taxed, "2026-10-15").minor_units == 120000


def test_rounded_to_minor_units(act365_bond):
    # 17 days: 100000 * 0.06 * 17 / 365 = 279.4520...
    assert accrued_interest(act365_bond, "2026-08-01").minor_units == 27945


def test_zero_after_maturity(par_bond):
    assert accrued_interest(par_bond, "2031-01-15").is_zero()
    assert accrued_interest(par_bond, "2031-06-01").is_zero()


def test_accrued_currency_follows_face():
    bond = Bond.initialize(
        face_value=1_000_000,
        currency="JPY",
        coupon_rate=0.01,
        maturity={"start": "2026-01-15", "end": "2028-01-15"},
        day_count="30/360",
    )
    ai = bond.accrued_interest(pd.Timestamp("2026-09-15"))
    assert ai.currency == "JPY"
    assert ai.minor_units == 1667  # 1,000,000 * 0.01 * 60/360

import pytest

from bond_engine.bonds import Bond
from bond_engine.risk import macaulay_duration, modified_duration


def test_par_bond_macaulay_duration(par_bond):
    # closed form for a 10-period 3% par bond: 8.78611 periods
    assert macaulay_duration(par_bond) == pytest.approx(4.39306, abs=1e-4)


def test_modified_duration_relation(par_bond):
    assert modified_duration(par_bond) == pytest.approx(macaulay_duration(par_bond) / 1.03)
    assert par_bond.modified_duration() < par_bond.macaulay_duration()


def test_zero_coupon_duration_is_maturity(par_bond):
    zero = par_bond.with_coupon_rate(0.0)
    assert macaulay_duration(zero) == pytest.approx(5.0)


def test_duration_shortens_as_rates_rise(par_bond):
    low = macaulay_duration(par_bond.with_market_rate(0.02))
    high = macaulay_duration(par_bond.with_market_rate(0.12))
    assert 0.0 < high < low < 5.0


def test_duration_ignores_accrued_interest():
    a = Bond.initialize(face_value=1000, coupon_rate=0.05, maturity=3, market_rate=0.05, today="2026-02-13")
    b = a.with_tax_enabled(True)
    assert macaulay_duration(a) == pytest.approx(macaulay_duration(b))

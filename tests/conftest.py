import pytest

from bond_engine.bonds import Bond


@pytest.fixture(scope="module")
def par_bond():
    """5Y 6% semiannual on 30/360, issued mid-month so no day is ever clamped."""
    return Bond.initialize(
        face_value=100000,
        coupon_rate=0.06,
        maturity={"start": "2026-01-15", "end": "2031-01-15"},
        frequency=2,
        day_count="30/360",
        currency="USD",
    )


@pytest.fixture(scope="module")
def act365_bond():
    return Bond.initialize(
        face_value=100000,
        coupon_rate=0.06,
        maturity={"start": "2026-01-15", "end": "2031-01-15"},
        frequency=2,
        day_count="ACTUAL/365",
        currency="USD",
    )

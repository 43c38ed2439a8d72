import pandas as pd
import pytest

from bond_engine.money import Money
from bond_engine.sale import (
    SaleSummary,
    capital_gains_on_sale,
    net_gain_on_sale,
    sell_price_ratio,
    simulate_sale,
    total_return_on_sale,
)

SALE_DATE = "2026-10-15"


def usd(x):
    return Money.from_major(x, "USD")


@pytest.fixture(scope="module")
def sold_bond(par_bond):
    return par_bond.with_tax_enabled(True).with_sell_price(1.05)


def test_sale_with_manual_quote(sold_bond):
    s = simulate_sale(sold_bond, SALE_DATE)

    assert isinstance(s, SaleSummary)
    assert s.as_of == pd.Timestamp(SALE_DATE)
    # 90/360 of a 6% coupon on 100000, net of 20% withholding
    assert s.accrued_interest == usd(1200)
    assert s.capital_gains_tax == usd(750)
    assert s.net_gain == usd(105000 + 1200 - 100000 - 750)
    assert s.sell_price_used == 1.05


def test_sale_fields_share_one_valuation(sold_bond):
    s = simulate_sale(sold_bond, SALE_DATE)
    spread = (s.dirty_price - s.clean_price - s.accrued_interest).minor_units
    assert abs(spread) <= 1, "dirty must equal clean + accrued at the same date"


def test_no_gain_no_capital_gains_tax(par_bond):
    at_cost = par_bond.with_tax_enabled(True).with_sell_price(1.0)
    at_loss = par_bond.with_tax_enabled(True).with_sell_price(0.97)

    assert simulate_sale(at_cost, SALE_DATE).capital_gains_tax.is_zero()
    assert capital_gains_on_sale(at_loss, SALE_DATE).is_zero()
    assert net_gain_on_sale(at_loss, SALE_DATE) == usd(97000 + 1200 - 100000)


def test_market_implied_sell_price(par_bond):
    s = simulate_sale(par_bond, SALE_DATE)
    dirty = par_bond.price_at(as_of=SALE_DATE, mode="dirty")

    assert s.sell_price_used == pytest.approx(dirty, abs=1e-12)
    assert sell_price_ratio(par_bond, SALE_DATE) == pytest.approx(dirty, abs=1e-12)
    assert s.capital_gains_tax.is_zero(), "tax is disabled on the base bond"


def test_wrappers_agree_with_simulation(sold_bond):
    s = simulate_sale(sold_bond, SALE_DATE)

    assert net_gain_on_sale(sold_bond, SALE_DATE) == s.net_gain
    assert sold_bond.net_gain_on_sale(SALE_DATE) == s.net_gain
    assert sold_bond.capital_gains_tax(SALE_DATE) == s.capital_gains_tax
    assert total_return_on_sale(sold_bond, SALE_DATE) == pytest.approx(5450 / 100000)


def test_summary_to_dict(sold_bond):
    d = simulate_sale(sold_bond, SALE_DATE).to_dict()
    assert d["asOfDate"].startswith("2026-10-15")
    assert d["accruedInterest"] == {"minorUnits": 120000, "currencyCode": "USD"}
    assert d["sellPriceUsed"] == 1.05

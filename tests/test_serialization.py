import copy
import json

import pandas as pd
import pytest

from bond_engine.bonds import Bond
from bond_engine.exceptions import ValidationError
from bond_engine.serialization import bond_from_json, bond_to_dict, bond_to_json


@pytest.fixture(scope="module")
def taxed(par_bond):
    return par_bond.with_tax_enabled(True).with_sell_price(1.02).with_market_rate(0.055)


def test_dict_shape(taxed):
    d = bond_to_dict(taxed)

    assert set(d) == {
        "faceValue", "couponRate", "maturity", "price", "frequency",
        "marketRate", "marketRateDerived", "quoteDate", "dayCount", "priceMode",
        "tax", "cashflowSummary",
    }
    assert d["faceValue"] == {"minorUnits": 10000000, "currencyCode": "USD"}
    assert d["maturity"]["start"].startswith("2026-01-15")
    assert d["maturity"]["end"].startswith("2031-01-15")
    assert d["price"] == {"buy": 1.0, "sell": 1.02}
    assert d["dayCount"] == "30/360"
    assert d["priceMode"] == "clean"
    assert d["marketRateDerived"] is False
    assert d["quoteDate"] is None
    assert d["tax"]["enabled"] is True
    assert d["tax"]["interestFWT"] == 0.2

    rows = d["cashflowSummary"]
    assert len(rows) == 10
    assert rows[0]["dateLabel"] == "2026-07-15"
    assert rows[0]["interest"] == {"minorUnits": 240000, "currencyCode": "USD"}
    assert rows[0]["tax"] == {"minorUnits": 60000, "currencyCode": "USD"}


def test_json_round_trip(taxed):
    restored = Bond.parse_from_json(taxed.to_json())

    assert restored == taxed
    assert restored.cashflows == taxed.cashflows
    assert restored.market_rate == 0.055
    assert json.loads(restored.to_json()) == json.loads(bond_to_json(taxed))


def test_tampered_cashflows_are_recomputed(taxed):
    d = bond_to_dict(taxed)
    d["cashflowSummary"][0]["interest"]["minorUnits"] = 1
    d["cashflowSummary"] = d["cashflowSummary"][:2]

    restored = bond_from_json(d)
    assert len(restored.cashflows) == 10
    assert restored.cashflows[0].interest == taxed.cashflows[0].interest


def test_input_mapping_not_mutated(taxed):
    d = bond_to_dict(taxed)
    snapshot = copy.deepcopy(d)
    bond_from_json(d)
    assert d == snapshot


def test_missing_fields_take_defaults():
    bond = bond_from_json('{"faceValue": {"minorUnits": 500000, "currencyCode": "JPY"}, "maturity": 3}')
    assert bond.currency == "JPY"
    assert bond.face_value.minor_units == 500000
    assert bond.coupon_rate == 0.05
    assert bond.price_mode.value == "clean"


@pytest.mark.parametrize(
    "payload",
    [
        "{not json",
        "[1, 2, 3]",
        '{"faceValue": {"minorUnits": "abc", "currencyCode": "USD"}}',
        '{"faceValue": {"currencyCode": "USD"}}',
        '{"couponRate": -0.5}',
        '{"marketRate": "abc", "marketRateDerived": true}',
        '{"marketRate": -0.01}',
    ],
)
def test_invalid_payloads(payload):
    with pytest.raises(ValidationError):
        bond_from_json(payload)


def test_negative_derived_rate_round_trips():
    premium = Bond.initialize(face_value=1000, coupon_rate=0.0, maturity=5, price={"buy": 1.05}, today="2026-02-13")
    d = bond_to_dict(premium)

    assert d["marketRate"] < 0
    assert d["marketRateDerived"] is True
    assert d["quoteDate"].startswith("2026-02-13")

    restored = bond_from_json(premium.to_json())
    assert restored.market_rate == premium.market_rate
    assert restored.market_rate_derived
    assert restored.quote_date == pd.Timestamp("2026-02-13")
    assert restored.with_tax_enabled(True).market_rate == premium.market_rate


def test_derived_rate_is_carried_not_re_derived():
    premium = Bond.initialize(face_value=1000, coupon_rate=0.0, maturity=5, price={"buy": 1.05}, today="2026-02-13")
    moved = premium.with_buy_price(1.02)

    restored = bond_from_json(moved.to_json())
    assert restored.price.buy == 1.02
    assert restored.market_rate == premium.market_rate

"""
Dict / JSON round trip for Bond.

Output carries every configuration field plus the cashflow table; money is
written as {"minorUnits", "currencyCode"} and dates as ISO-8601. Input is
always rebuilt through Bond.initialize: a serialized cashflow table is
dropped and recomputed, never trusted. A market rate flagged as derived is
restored as derived, so it skips the range check applied to caller input.
"""
from __future__ import annotations

import copy
import json
from dataclasses import replace
from typing import TYPE_CHECKING, Any, Dict, Mapping, Union

from .exceptions import ValidationError

if TYPE_CHECKING:
    from .bonds import Bond


def bond_to_dict(bond: "Bond") -> Dict[str, Any]:
    m = bond.maturity
    maturity: Dict[str, Any] = {
        "start": m.start.isoformat(),
        "end": m.end.isoformat(),
        "years": m.years,
    }
    if m.issue_date is not None:
        maturity["issueDate"] = m.issue_date.isoformat()

    return {
        "faceValue": bond.face_value.to_dict(),
        "couponRate": bond.coupon_rate,
        "maturity": maturity,
        "price": {"buy": bond.price.buy, "sell": bond.price.sell},
        "frequency": bond.frequency,
        "marketRate": bond.market_rate,
        "marketRateDerived": bond.market_rate_derived,
        "quoteDate": bond.quote_date.isoformat() if bond.quote_date is not None else None,
        "dayCount": bond.day_count.value,
        "priceMode": bond.price_mode.value,
        "tax": bond.tax.to_dict(),
        "cashflowSummary": [row.to_dict() for row in bond.cashflows],
    }


def bond_to_json(bond: "Bond", **kwargs) -> str:
    return json.dumps(bond_to_dict(bond), **kwargs)


def bond_from_json(data: Union[str, Mapping[str, Any]]) -> "Bond":
    from .bonds import Bond

    if isinstance(data, str):
        try:
            parsed = json.loads(data)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid bond JSON: {e}") from e
    else:
        parsed = copy.deepcopy(dict(data))

    if not isinstance(parsed, dict):
        raise ValidationError("Bond JSON must be an object.")

    parsed.pop("cashflowSummary", None)

    maturity = parsed.get("maturity")
    if isinstance(maturity, Mapping):
        maturity = {k: v for k, v in maturity.items() if k in ("start", "end", "issueDate")}

    derived = bool(parsed.get("marketRateDerived"))

    bond = Bond.initialize(
        face_value=parsed.get("faceValue"),
        coupon_rate=parsed.get("couponRate"),
        maturity=maturity,
        price=parsed.get("price"),
        frequency=parsed.get("frequency"),
        market_rate=None if derived else parsed.get("marketRate"),
        day_count=parsed.get("dayCount"),
        tax=parsed.get("tax"),
        price_mode=parsed.get("priceMode") or "clean",
        today=parsed.get("quoteDate"),
    )

    # a derived rate is carried as-is, even when the quote has since moved
    if derived and parsed.get("marketRate") is not None:
        try:
            rate = float(parsed["marketRate"])
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid market rate: {parsed['marketRate']!r}") from e
        bond = replace(bond, market_rate=rate, market_rate_derived=True)
    return bond

"""
Bond Analytics Engine

Single fixed-coupon bond valuation:
- daycount: year fractions under the supported conventions
- schedule: coupon dates with month-end roll and capped final stub
- bonds: Bond aggregate + price quote + tax settings
- pricing: clean/dirty price at a flat rate
- ytm: Newton-Raphson / bracketed yield solvers + yield curve
- accrual: accrued interest since the last coupon
- risk: Macaulay/modified duration
- cashflows: period cashflow table + lifetime totals
- tax: withholding, capital gains, estate/donor
- sale: sale simulation at a valuation date
- serialization: dict/JSON round trip
"""
from .bonds import Bond, PriceQuote, TaxSettings
from .cashflows import CashflowPeriod
from .daycount import DayCount, year_fraction
from .exceptions import BondEngineError, ConvergenceError, UnsupportedConvention, ValidationError
from .money import Money
from .pricing import PriceMode, compute_price
from .sale import SaleSummary, simulate_sale
from .schedule import BondMaturity, coupon_schedule
from .ytm import YieldCurvePoint, solve_ytm

__all__ = [
    "Bond",
    "BondEngineError",
    "BondMaturity",
    "CashflowPeriod",
    "ConvergenceError",
    "DayCount",
    "Money",
    "PriceMode",
    "PriceQuote",
    "SaleSummary",
    "TaxSettings",
    "UnsupportedConvention",
    "ValidationError",
    "YieldCurvePoint",
    "compute_price",
    "coupon_schedule",
    "simulate_sale",
    "solve_ytm",
    "year_fraction",
]

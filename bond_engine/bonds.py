from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional, Tuple, Union

import pandas as pd

from . import accrual, pricing, risk, sale
from . import cashflows as flows
from . import tax as taxes
from . import ytm as yields
from .config import get_settings
from .daycount import DateLike, DayCount, as_date, year_fraction
from .exceptions import ValidationError
from .money import Money, Number
from .pricing import PriceMode
from .schedule import BondMaturity, MaturityInput, build_maturity, coupon_schedule, validate_frequency

logger = logging.getLogger(__name__)


def _check_unit_rate(name: str, value: float) -> float:
    if value is None or not (0.0 <= float(value) <= 1.0):
        raise ValidationError(f"{name} must be between 0 and 1, got {value!r}.")
    return float(value)


@dataclass(frozen=True)
class PriceQuote:
    """Buy and optional sell price as ratios of face value (1.0 = par)."""

    buy: float = 1.0
    sell: Optional[float] = None

    def __post_init__(self):
        if self.buy is None or float(self.buy) <= 0:
            raise ValidationError(f"Buy price must be positive, got {self.buy!r}.")
        if self.sell is not None and float(self.sell) <= 0:
            raise ValidationError(f"Sell price must be positive, got {self.sell!r}.")
        object.__setattr__(self, "buy", float(self.buy))
        if self.sell is not None:
            object.__setattr__(self, "sell", float(self.sell))

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "PriceQuote":
        if data is None:
            return cls()
        if isinstance(data, PriceQuote):
            return data
        buy = data.get("buy")
        return cls(buy=1.0 if buy is None else buy, sell=data.get("sell"))


@dataclass(frozen=True)
class TaxSettings:
    enabled: bool = False
    interest_fwt: float = 0.2
    capital_gains: float = 0.15
    estate_or_donor: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "enabled", bool(self.enabled))
        object.__setattr__(self, "interest_fwt", _check_unit_rate("Interest FWT", self.interest_fwt))
        object.__setattr__(self, "capital_gains", _check_unit_rate("Capital gains tax", self.capital_gains))
        object.__setattr__(self, "estate_or_donor", _check_unit_rate("Estate/donor tax", self.estate_or_donor))

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "TaxSettings":
        if data is None:
            return cls()
        if isinstance(data, TaxSettings):
            return data

        def pick(camel: str, snake: str, default: Any) -> Any:
            value = data.get(camel, data.get(snake))
            return default if value is None else value

        return cls(
            enabled=pick("enabled", "enabled", False),
            interest_fwt=pick("interestFWT", "interest_fwt", 0.2),
            capital_gains=pick("capitalGains", "capital_gains", 0.15),
            estate_or_donor=pick("estateOrDonor", "estate_or_donor", 0.0),
        )

    def to_dict(self) -> dict:
        return {
            "enabled": self.enabled,
            "interestFWT": self.interest_fwt,
            "capitalGains": self.capital_gains,
            "estateOrDonor": self.estate_or_donor,
        }


@dataclass(frozen=True)
class Bond:
    """
    Single fixed-coupon bond.

    Instances are immutable snapshots. Construction validates every field and
    eagerly derives the coupon schedule, the cashflow table and the yield
    curve; each with_* method returns a new, fully recomputed Bond and leaves
    the original untouched, including when the change is rejected.

    When market_rate is None it is derived once, at construction, as the
    yield of the buy quote (clean, or clean + accrued in DIRTY mode, with
    accrued taken at quote_date or the current date when unset). A derived
    rate may be negative for a premium quote; only a rate supplied by the
    caller is range-checked.
    """

    face_value: Money
    coupon_rate: float
    maturity: BondMaturity
    price: PriceQuote = field(default_factory=PriceQuote)
    frequency: int = 2
    market_rate: Optional[float] = None
    day_count: DayCount = DayCount.ACTUAL_365
    tax: TaxSettings = field(default_factory=TaxSettings)
    price_mode: PriceMode = PriceMode.CLEAN
    quote_date: Optional[pd.Timestamp] = field(default=None, compare=False)
    market_rate_derived: bool = field(default=False, repr=False, compare=False)

    schedule: Tuple[pd.Timestamp, ...] = field(init=False, repr=False, compare=False)
    cashflows: Tuple[flows.CashflowPeriod, ...] = field(init=False, repr=False, compare=False)
    yield_curve: Tuple[yields.YieldCurvePoint, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not isinstance(self.face_value, Money):
            raise ValidationError(f"face_value must be Money, got {type(self.face_value).__name__}.")
        if not self.face_value.is_positive():
            raise ValidationError("Face value must be positive.")
        if self.coupon_rate is None or float(self.coupon_rate) < 0:
            raise ValidationError("Coupon rate cannot be negative.")
        if self.market_rate is not None and not self.market_rate_derived and float(self.market_rate) < 0:
            raise ValidationError("Market rate cannot be negative.")

        object.__setattr__(self, "coupon_rate", float(self.coupon_rate))
        object.__setattr__(self, "frequency", validate_frequency(self.frequency))
        object.__setattr__(self, "day_count", DayCount.parse(self.day_count))
        object.__setattr__(self, "price_mode", PriceMode.parse(self.price_mode))
        object.__setattr__(self, "price", PriceQuote.from_mapping(self.price))
        object.__setattr__(self, "tax", TaxSettings.from_mapping(self.tax))
        if self.quote_date is not None:
            object.__setattr__(self, "quote_date", as_date(self.quote_date))

        self._recompute()

    def _recompute(self) -> None:
        schedule = coupon_schedule(self.maturity.start, self.maturity.end, self.frequency, self.maturity.years)
        object.__setattr__(self, "schedule", schedule)
        object.__setattr__(self, "cashflows", flows.build_cashflow_table(self))

        if self.market_rate is None:
            object.__setattr__(self, "market_rate", yields.solve_ytm(self, self._quoted_price_ratio()))
            object.__setattr__(self, "market_rate_derived", True)
        else:
            object.__setattr__(self, "market_rate", float(self.market_rate))

        object.__setattr__(self, "yield_curve", yields.yield_curve(self))
        logger.debug(
            "Bond %s %.4f%% x%d %s -> %s: %d periods, market rate %.6f",
            self.face_value, self.coupon_rate * 100, self.frequency, self.maturity.start.date(),
            self.maturity.end.date(), len(schedule), self.market_rate,
        )

    def _quoted_price_ratio(self) -> float:
        if self.price_mode is PriceMode.DIRTY:
            return self.price.buy + float(accrual.accrued_interest(self, self.quote_date)) / float(self.face_value)
        return self.price.buy

    # ---- construction ----

    @classmethod
    def initialize(
        cls,
        face_value: Union[Money, Number, Mapping[str, Any], None] = None,
        coupon_rate: Optional[float] = None,
        maturity: Optional[MaturityInput] = None,
        price: Union[PriceQuote, Mapping[str, Any], None] = None,
        frequency: Optional[int] = None,
        market_rate: Optional[float] = None,
        day_count: Union[DayCount, str, None] = None,
        tax: Union[TaxSettings, Mapping[str, Any], None] = None,
        price_mode: Union[PriceMode, str] = PriceMode.CLEAN,
        currency: Optional[str] = None,
        today: Optional[DateLike] = None,
    ) -> "Bond":
        """
        Build a bond from loose inputs, filling gaps from the settings defaults.

        face_value may be Money, a {"minorUnits", "currencyCode"} mapping or a
        major-unit number in `currency`. maturity may be a tenor in years
        (starting `today`) or a {"start", "end"} range. `today` also pins the
        date at which a DIRTY buy quote is split into clean and accrued.
        """
        settings = get_settings()
        currency = (currency or settings.default_currency).upper()

        if face_value is None:
            face_value = settings.default_face_value
        if isinstance(face_value, Mapping):
            face_value = Money.from_dict(face_value)
        elif not isinstance(face_value, Money):
            face_value = Money.from_major(face_value, currency)

        return cls(
            face_value=face_value,
            coupon_rate=settings.default_coupon_rate if coupon_rate is None else coupon_rate,
            maturity=build_maturity(settings.default_maturity_years if maturity is None else maturity, today),
            price=PriceQuote.from_mapping(price),
            frequency=settings.default_frequency if frequency is None else frequency,
            market_rate=market_rate,
            day_count=day_count or settings.default_day_count,
            tax=TaxSettings.from_mapping(tax),
            price_mode=price_mode,
            quote_date=today,
        )

    # ---- mutation (returns a new Bond) ----

    def with_face_value(self, value: Union[Money, Number]) -> "Bond":
        if not isinstance(value, Money):
            value = Money.from_major(value, self.currency)
        return replace(self, face_value=value)

    def with_coupon_rate(self, rate: float) -> "Bond":
        return replace(self, coupon_rate=rate)

    def with_buy_price(self, buy: float) -> "Bond":
        return replace(self, price=PriceQuote(buy=buy, sell=self.price.sell))

    def with_sell_price(self, sell: Optional[float]) -> "Bond":
        return replace(self, price=PriceQuote(buy=self.price.buy, sell=sell))

    def with_frequency(self, freq: int) -> "Bond":
        return replace(self, frequency=freq)

    def with_market_rate(self, rate: float) -> "Bond":
        if rate is None:
            raise ValidationError("Market rate is required.")
        return replace(self, market_rate=rate, market_rate_derived=False)

    def with_day_count(self, convention: Union[DayCount, str]) -> "Bond":
        return replace(self, day_count=DayCount.parse(convention))

    def with_price_mode(self, mode: Union[PriceMode, str]) -> "Bond":
        return replace(self, price_mode=PriceMode.parse(mode))

    def with_maturity(self, maturity: MaturityInput, today: Optional[DateLike] = None) -> "Bond":
        return replace(self, maturity=build_maturity(maturity, today))

    def with_issue_date(self, issue: DateLike) -> "Bond":
        start = as_date(issue)
        return replace(self, maturity=self._maturity_between(start, self.maturity.end, issue_date=start))

    def with_maturity_date(self, end: DateLike) -> "Bond":
        m = self.maturity
        return replace(self, maturity=self._maturity_between(m.start, as_date(end), issue_date=m.issue_date))

    @staticmethod
    def _maturity_between(start: pd.Timestamp, end: pd.Timestamp, issue_date=None) -> BondMaturity:
        if end <= start:
            raise ValidationError("Maturity date must be after issue date.")
        return BondMaturity(start, end, year_fraction(start, end, DayCount.ACTUAL_ACTUAL), issue_date)

    def with_tax_enabled(self, enabled: Optional[bool] = None) -> "Bond":
        """Set the tax switch, or flip it when called without an argument."""
        flag = (not self.tax.enabled) if enabled is None else bool(enabled)
        return replace(self, tax=replace(self.tax, enabled=flag))

    def with_interest_fwt(self, rate: float) -> "Bond":
        return replace(self, tax=replace(self.tax, interest_fwt=rate))

    def with_capital_gains(self, rate: float) -> "Bond":
        return replace(self, tax=replace(self.tax, capital_gains=rate))

    def with_estate_or_donor(self, rate: float) -> "Bond":
        return replace(self, tax=replace(self.tax, estate_or_donor=rate))

    # ---- core values ----

    @property
    def currency(self) -> str:
        return self.face_value.currency

    @property
    def coupon_per_period(self) -> Money:
        return self.face_value.multiply(self.coupon_rate).divide(self.frequency)

    @property
    def total_periods(self) -> int:
        return len(self.schedule)

    @property
    def issue_date(self) -> pd.Timestamp:
        return self.maturity.issue_date or self.maturity.start

    # ---- queries ----

    def current_yield(self) -> float:
        return yields.current_yield(self)

    def ytm(self, iterations: Optional[int] = None, tolerance: Optional[float] = None) -> float:
        return yields.solve_ytm(self, self.price.buy, self.maturity.years, iterations, tolerance)

    def price_at(self, rate: Optional[float] = None, as_of: Optional[DateLike] = None, mode=None) -> float:
        return pricing.compute_price(self, rate, as_of, mode)

    def accrued_interest(self, as_of: Optional[DateLike] = None) -> Money:
        return accrual.accrued_interest(self, as_of)

    def macaulay_duration(self) -> float:
        return risk.macaulay_duration(self)

    def modified_duration(self) -> float:
        return risk.modified_duration(self)

    def cashflow_table(self, monthly: bool = False) -> Tuple[flows.CashflowPeriod, ...]:
        return flows.build_cashflow_table(self, monthly) if monthly else self.cashflows

    def cashflow_frame(self, monthly: bool = False) -> pd.DataFrame:
        return flows.cashflow_frame(self, monthly)

    def total_interest_earned(self) -> Money:
        return flows.total_interest_earned(self)

    def total_cash_received(self) -> Money:
        return flows.total_cash_received(self)

    def net_gain(self) -> Money:
        return flows.lifetime_net_gain(self)

    def total_return(self) -> float:
        return flows.lifetime_total_return(self)

    def required_investment_for_monthly_income(self, target_monthly: Union[Money, Number]) -> Money:
        return flows.required_investment_for_monthly_income(self, target_monthly)

    def total_interest_tax(self) -> Money:
        return taxes.total_interest_tax(self)

    def total_tax(self, include_estate: bool = False) -> Money:
        return taxes.total_tax(self, include_estate)

    def estate_or_donor_tax(self) -> Money:
        return taxes.estate_or_donor_tax(self)

    def sell_price(self, as_of: Optional[DateLike] = None) -> float:
        return sale.sell_price_ratio(self, as_of)

    def capital_gains_tax(self, as_of: Optional[DateLike] = None) -> Money:
        return sale.capital_gains_on_sale(self, as_of)

    def net_gain_on_sale(self, as_of: Optional[DateLike] = None) -> Money:
        return sale.net_gain_on_sale(self, as_of)

    def total_return_on_sale(self, as_of: Optional[DateLike] = None) -> float:
        return sale.total_return_on_sale(self, as_of)

    def simulate_sale(self, as_of: Optional[DateLike] = None) -> sale.SaleSummary:
        return sale.simulate_sale(self, as_of)

    # ---- serialization ----

    def to_dict(self) -> dict:
        from .serialization import bond_to_dict  # local import to keep module boundaries clean

        return bond_to_dict(self)

    def to_json(self, **kwargs) -> str:
        from .serialization import bond_to_json

        return bond_to_json(self, **kwargs)

    @classmethod
    def parse_from_json(cls, data: Union[str, Mapping[str, Any]]) -> "Bond":
        from .serialization import bond_from_json

        return bond_from_json(data)

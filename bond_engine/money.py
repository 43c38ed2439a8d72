"""
Minor-unit money value.

Amounts are held as exact integers of the currency's minor unit (cents for
USD, none for JPY). Every operation that can produce a fraction of a minor
unit rounds back half-to-even, the one rounding rule used at every monetary
boundary in the engine.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_EVEN
from typing import Dict, Union

from .exceptions import ValidationError

Number = Union[int, float, Decimal]

# ISO 4217 minor-unit exponents that differ from the usual 2.
_MINOR_UNIT_EXPONENTS: Dict[str, int] = {
    "BHD": 3,
    "CLP": 0,
    "ISK": 0,
    "JOD": 3,
    "JPY": 0,
    "KRW": 0,
    "KWD": 3,
    "OMR": 3,
    "TND": 3,
    "VND": 0,
}


def minor_unit_exponent(currency: str) -> int:
    return _MINOR_UNIT_EXPONENTS.get(currency.upper(), 2)


def to_decimal(value: Number) -> Decimal:
    """Exact decimal for ints/Decimals, shortest repr for floats."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValidationError("Booleans are not numeric amounts.")
    if isinstance(value, int):
        return Decimal(value)
    return Decimal(repr(float(value)))


def round_minor(amount_minor: Decimal) -> int:
    """Round an amount expressed in minor units to an integer, half-to-even."""
    return int(amount_minor.quantize(Decimal(1), rounding=ROUND_HALF_EVEN))


@dataclass(frozen=True)
class Money:
    minor_units: int
    currency: str

    def __post_init__(self):
        if not isinstance(self.minor_units, int) or isinstance(self.minor_units, bool):
            raise ValidationError(f"minor_units must be an int, got {self.minor_units!r}")
        if not isinstance(self.currency, str) or len(self.currency) != 3:
            raise ValidationError(f"Invalid currency code: {self.currency!r}")
        object.__setattr__(self, "currency", self.currency.upper())

    # ---- construction ----

    @classmethod
    def from_major(cls, amount: Number, currency: str) -> "Money":
        scale = Decimal(10) ** minor_unit_exponent(currency)
        return cls(round_minor(to_decimal(amount) * scale), currency)

    @classmethod
    def from_minor(cls, units: int, currency: str) -> "Money":
        return cls(int(units), currency)

    @classmethod
    def zero(cls, currency: str) -> "Money":
        return cls(0, currency)

    # ---- views ----

    @property
    def exponent(self) -> int:
        return minor_unit_exponent(self.currency)

    def to_major(self) -> Decimal:
        return Decimal(self.minor_units).scaleb(-self.exponent)

    def __float__(self) -> float:
        return float(self.to_major())

    def is_zero(self) -> bool:
        return self.minor_units == 0

    def is_positive(self) -> bool:
        return self.minor_units > 0

    def is_negative(self) -> bool:
        return self.minor_units < 0

    # ---- arithmetic ----

    def _check(self, other: "Money") -> None:
        if not isinstance(other, Money):
            raise TypeError(f"Expected Money, got {type(other).__name__}")
        if other.currency != self.currency:
            raise ValidationError(f"Currency mismatch: {self.currency} vs {other.currency}")

    def __add__(self, other: "Money") -> "Money":
        self._check(other)
        return Money(self.minor_units + other.minor_units, self.currency)

    def __sub__(self, other: "Money") -> "Money":
        self._check(other)
        return Money(self.minor_units - other.minor_units, self.currency)

    def __neg__(self) -> "Money":
        return Money(-self.minor_units, self.currency)

    def multiply(self, factor: Number) -> "Money":
        """Scale by a rate or ratio, rounding half-to-even to the minor unit."""
        return Money(round_minor(Decimal(self.minor_units) * to_decimal(factor)), self.currency)

    def __mul__(self, factor: Number) -> "Money":
        return self.multiply(factor)

    __rmul__ = __mul__

    def divide(self, divisor: Number) -> "Money":
        d = to_decimal(divisor)
        if d == 0:
            raise ZeroDivisionError("Money division by zero")
        return Money(round_minor(Decimal(self.minor_units) / d), self.currency)

    def ratio(self, other: "Money") -> float:
        self._check(other)
        if other.minor_units == 0:
            return 0.0
        return self.minor_units / other.minor_units

    def __lt__(self, other: "Money") -> bool:
        self._check(other)
        return self.minor_units < other.minor_units

    def __le__(self, other: "Money") -> bool:
        self._check(other)
        return self.minor_units <= other.minor_units

    def __gt__(self, other: "Money") -> bool:
        self._check(other)
        return self.minor_units > other.minor_units

    def __ge__(self, other: "Money") -> bool:
        self._check(other)
        return self.minor_units >= other.minor_units

    # ---- serialization ----

    def to_dict(self) -> Dict[str, object]:
        return {"minorUnits": self.minor_units, "currencyCode": self.currency}

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "Money":
        try:
            return cls(int(data["minorUnits"]), str(data["currencyCode"]))
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid money payload: {data!r}") from e

    def __str__(self) -> str:
        return f"{self.to_major():.{self.exponent}f} {self.currency}"


def money_sum(items, currency: str) -> Money:
    total = Money.zero(currency)
    for m in items:
        total = total + m
    return total

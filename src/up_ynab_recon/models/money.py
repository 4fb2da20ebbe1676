"""Signed currency amounts with two decimal places."""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_DOWN
from typing import Union
import re

from ..utils.exceptions import InvalidAmount

CENT = Decimal("0.01")
_CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")


def parse_currency(code: str) -> str:
    """Validate an ISO 4217 style currency code."""
    normalized = (code or "").strip().upper()
    if not _CURRENCY_PATTERN.match(normalized):
        raise InvalidAmount(f"invalid currency code: `{code}`")
    return normalized


@dataclass(frozen=True, order=True)
class Money:
    """
    An amount of a single currency.

    Amounts are held as a ``Decimal`` quantized to cents. Arithmetic between
    two different currencies raises ``InvalidAmount``.
    """

    amount: Decimal
    currency: str

    def __post_init__(self) -> None:
        try:
            quantized = Decimal(self.amount).quantize(CENT)
        except (InvalidOperation, TypeError, ValueError) as e:
            raise InvalidAmount(f"invalid amount: `{self.amount}`") from e
        object.__setattr__(self, "amount", quantized)
        object.__setattr__(self, "currency", parse_currency(self.currency))

    @classmethod
    def from_minor_units(cls, value: int, currency: str) -> "Money":
        """Build from an integer count of cents."""
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidAmount(f"minor units must be an integer, got `{value!r}`")
        return cls(Decimal(value).scaleb(-2), currency)

    @classmethod
    def from_milliunits(cls, value: int, currency: str, factor: int = 10) -> "Money":
        """
        Build from YNAB milliunits (thousandths of the currency unit).

        ``factor`` milliunits make one cent; sub-cent remainders are truncated
        toward zero.
        """
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidAmount(f"milliunits must be an integer, got `{value!r}`")
        cents = Decimal(value) / Decimal(factor)
        return cls.from_minor_units(int(cents.to_integral_value(rounding=ROUND_DOWN)), currency)

    @classmethod
    def zero(cls, currency: str) -> "Money":
        return cls(Decimal("0"), currency)

    @property
    def minor_units(self) -> int:
        return int(self.amount.scaleb(2))

    def to_milliunits(self, factor: int = 10) -> int:
        return self.minor_units * factor

    def is_positive(self) -> bool:
        return self.amount > 0

    def is_negative(self) -> bool:
        return self.amount < 0

    def __abs__(self) -> "Money":
        return Money(abs(self.amount), self.currency)

    def __neg__(self) -> "Money":
        return Money(-self.amount, self.currency)

    def __add__(self, other: "Money") -> "Money":
        self._check_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: "Money") -> "Money":
        self._check_currency(other)
        return Money(self.amount - other.amount, self.currency)

    def _check_currency(self, other: Union["Money", object]) -> None:
        if not isinstance(other, Money):
            raise TypeError(f"cannot combine Money with {type(other).__name__}")
        if other.currency != self.currency:
            raise InvalidAmount(
                f"currency mismatch: {self.currency} and {other.currency}"
            )

    def __str__(self) -> str:
        return f"{self.amount} {self.currency}"

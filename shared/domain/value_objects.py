"""
Common Value Objects

- Money: an amount in minor units (cents) with a currency
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from shared.domain.base import ValueObject

SUPPORTED_CURRENCIES = ('usd', 'eur', 'gbp', 'kzt')

Number = Union[int, Decimal]


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Amounts are integers in the currency's minor unit, so prices and
    splits never accumulate float error. Fractional results are rounded
    half-up to the nearest cent.
    """
    cents: int
    currency: str = 'usd'

    def __post_init__(self):
        if not isinstance(self.cents, int):
            raise TypeError("Money is held in whole cents")
        if self.cents < 0:
            raise ValueError("Amount cannot be negative")
        if self.currency not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Unsupported currency: {self.currency}")

    @classmethod
    def zero(cls, currency: str = 'usd') -> 'Money':
        return cls(0, currency)

    def _check_same_currency(self, other: 'Money'):
        if not isinstance(other, Money):
            raise TypeError("Can only combine Money with Money")
        if self.currency != other.currency:
            raise ValueError(f"Currency mismatch: {self.currency} and {other.currency}")

    def __add__(self, other: 'Money') -> 'Money':
        self._check_same_currency(other)
        return Money(self.cents + other.cents, self.currency)

    def __sub__(self, other: 'Money') -> 'Money':
        self._check_same_currency(other)
        return Money(self.cents - other.cents, self.currency)

    def percent(self, percent: Number) -> 'Money':
        """Return ``percent`` % of this amount, rounded half-up to a whole cent."""
        value = Decimal(self.cents) * Decimal(percent) / Decimal(100)
        return Money(int(value.quantize(Decimal('1'), rounding=ROUND_HALF_UP)), self.currency)

    @property
    def is_zero(self) -> bool:
        return self.cents == 0

    def __str__(self):
        return f"{Decimal(self.cents) / 100:,.2f} {self.currency.upper()}"

    def __repr__(self):
        return f"Money({self.cents}, '{self.currency}')"

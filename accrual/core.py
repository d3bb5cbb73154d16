"""
Core types and pure functions for the loan accrual system.

This module provides the foundational value types used by the period model
and the accrual engine:
1. Decimal arithmetic settings: precision and rounding applied per computation
2. Currency configuration: minor-unit precision table
3. Exceptions: AccrualError and domain-specific error types
4. Immutable value types: Money, RatePercent
5. Helpers: to_decimal, minor_units_for, round_money

All functions in this module are pure. Nothing here holds mutable state.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_EVEN, Context, localcontext
from types import MappingProxyType
from typing import Any, Mapping, Optional


# ============================================================================
# DECIMAL CONTEXT CONFIGURATION
# ============================================================================
#
# Accrual arithmetic must be deterministic across platforms and threads.
# The global Decimal context is NEVER modified. Every computation enters
# decimal_context() instead, which yields a thread-local copy.
#
# Context parameters:
#   - prec=50: Precision sufficient for intermediate financial calculations
#   - rounding=ROUND_HALF_EVEN: Banker's rounding (unbiased)
#
ACCRUAL_DECIMAL_PRECISION = 50
ACCRUAL_ROUNDING = ROUND_HALF_EVEN


def decimal_context():
    """Return a context manager with the accrual Decimal settings."""
    return localcontext(Context(prec=ACCRUAL_DECIMAL_PRECISION, rounding=ACCRUAL_ROUNDING))


# ============================================================================
# CURRENCY CONFIGURATION
# ============================================================================

# Minor-unit digits used when no entry exists for a currency code.
DEFAULT_MINOR_UNITS = 2

# Currencies whose minor unit is not 2 digits (ISO 4217).
# Codes not listed here, including unknown ones, use DEFAULT_MINOR_UNITS.
CURRENCY_MINOR_UNITS: Mapping[str, int] = MappingProxyType({
    'BIF': 0, 'CLP': 0, 'DJF': 0, 'GNF': 0, 'ISK': 0, 'JPY': 0, 'KMF': 0,
    'KRW': 0, 'PYG': 0, 'RWF': 0, 'UGX': 0, 'UYI': 0, 'VND': 0, 'VUV': 0,
    'XAF': 0, 'XOF': 0, 'XPF': 0,
    'BHD': 3, 'IQD': 3, 'JOD': 3, 'KWD': 3, 'LYD': 3, 'OMR': 3, 'TND': 3,
    'CLF': 4, 'UYW': 4,
})

CURRENCY_CODE_LENGTH = 3

# Largest minor-unit override accepted for a currency.
MAX_MINOR_UNITS = 18


# ============================================================================
# EXCEPTIONS
# ============================================================================

class AccrualError(Exception):
    """Base exception for all accrual validation errors."""
    pass


class InvalidPeriod(AccrualError):
    """Raised when an accrual period ends before it starts."""
    pass


class InvalidPrincipal(AccrualError):
    """Raised when a loan principal is negative."""
    pass


class CurrencyMismatch(AccrualError):
    """Raised when combining Money values denominated in different currencies."""
    pass


class AmountOutOfRange(AccrualError):
    """Raised when an amount is too large to accrue with Decimal arithmetic."""
    pass


# ============================================================================
# HELPERS
# ============================================================================

def to_decimal(value: Any, field_name: str = "value") -> Decimal:
    """
    Convert a number-like value to a finite Decimal.

    Floats go through str() so that 0.1 becomes Decimal("0.1") rather than
    its binary expansion.

    Raises:
        ValueError: If the value cannot be converted or is NaN/infinite.
    """
    if isinstance(value, bool):
        raise ValueError(f"{field_name} must be a number, got {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except ArithmeticError:
            raise ValueError(f"{field_name} is not a valid decimal: {value!r}") from None
    else:
        raise ValueError(f"{field_name} must be a number, got {type(value).__name__}")
    if result.is_nan() or result.is_infinite():
        raise ValueError(f"{field_name} must be finite, got {value!r}")
    return result


def validate_currency_code(code: str) -> str:
    """Check that a currency code is exactly three ASCII letters and return it."""
    if (
        not isinstance(code, str)
        or len(code) != CURRENCY_CODE_LENGTH
        or not code.isascii()
        or not code.isalpha()
    ):
        raise ValueError(f"currency must be a {CURRENCY_CODE_LENGTH}-letter code, got {code!r}")
    return code


def minor_units_for(currency: str, overrides: Optional[Mapping[str, int]] = None) -> int:
    """
    Return the number of minor-unit digits for a currency.

    Lookup order: overrides, CURRENCY_MINOR_UNITS, DEFAULT_MINOR_UNITS.
    """
    if overrides and currency in overrides:
        return overrides[currency]
    return CURRENCY_MINOR_UNITS.get(currency, DEFAULT_MINOR_UNITS)


def round_money(amount: Decimal, places: int) -> Decimal:
    """
    Round an amount to a number of decimal places with banker's rounding.

    Working precision grows with the amount so every integer digit is kept.
    A result that rounds to zero is returned unsigned (-0.004 -> 0.00).
    """
    quantizer = Decimal(10) ** -places
    digits = max(ACCRUAL_DECIMAL_PRECISION, amount.adjusted() + places + 2)
    with localcontext(Context(prec=digits, rounding=ACCRUAL_ROUNDING)):
        rounded = amount.quantize(quantizer, rounding=ACCRUAL_ROUNDING)
    if rounded.is_zero():
        return rounded.copy_abs()
    return rounded


# ============================================================================
# VALUE TYPES
# ============================================================================

@dataclass(frozen=True, slots=True)
class Money:
    """
    An amount of a single currency.

    Attributes:
        amount: Decimal amount (any sign; principals are checked by the engine).
        currency: Three-letter currency code. Not checked against a registry,
                  the code is an opaque label carried through calculations.

    This class is immutable (frozen=True) and memory-optimized (slots=True).
    """
    amount: Decimal
    currency: str

    def __post_init__(self):
        if not isinstance(self.amount, Decimal) or not self.amount.is_finite():
            object.__setattr__(self, 'amount', to_decimal(self.amount, "amount"))
        validate_currency_code(self.currency)

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        if other.currency != self.currency:
            raise CurrencyMismatch(
                f"Cannot add {other.currency} to {self.currency}"
            )
        with decimal_context():
            return Money(self.amount + other.amount, self.currency)

    def rounded(self, places: int) -> Money:
        """Return a copy rounded to the given number of decimal places."""
        return Money(round_money(self.amount, places), self.currency)

    @classmethod
    def zero(cls, currency: str) -> Money:
        return cls(Decimal("0"), currency)

    def __str__(self) -> str:
        return f"{self.amount} {self.currency}"


@dataclass(frozen=True, slots=True, order=True)
class RatePercent:
    """
    An annual interest rate quoted in percent (Decimal("5.0") means 5.0%).

    Zero and negative values are allowed.
    """
    value: Decimal

    def __post_init__(self):
        if not isinstance(self.value, Decimal) or not self.value.is_finite():
            object.__setattr__(self, 'value', to_decimal(self.value, "rate"))

    def __add__(self, other: RatePercent) -> RatePercent:
        if not isinstance(other, RatePercent):
            return NotImplemented
        with decimal_context():
            return RatePercent(self.value + other.value)

    @property
    def fraction(self) -> Decimal:
        """The rate as a plain fraction (5% -> 0.05)."""
        with decimal_context():
            return self.value / Decimal(100)

    def is_zero(self) -> bool:
        return self.value == 0

    def __str__(self) -> str:
        return f"{self.value}%"

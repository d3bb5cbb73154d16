"""
engine.py - Simple Interest Accrual Engine

This module turns a LoanAccrualRequest into an AccrualResult using a pure
function architecture with explicit inputs.

ARCHITECTURE (Pure Function Pattern):
=====================================

1. FROZEN DATACLASSES (explicit inputs and outputs):
   - LoanAccrualRequest: period, principal, base rate, margin
   - AccrualResult: rounded interest plus every input used to produce it
   - RateFixing: a base rate that applies from a given date

2. PURE CALCULATION FUNCTIONS (calculate_*):
   - Take all inputs explicitly as parameters
   - No hidden state, trivially testable

3. ENGINE ENTRY POINTS:
   - accrue(): validate, compose the rate, prorate, round
   - AccrualEngine: immutable holder of convention and minor-unit overrides
   - total_interest(), accrue_with_fixings(): multi-period aggregation

Key Formulas:
    effective_rate = base_rate + margin                     (percent)
    raw_interest   = principal * effective_rate * days / (100 * denominator)
    interest       = round_half_even(raw_interest, minor_units(currency))
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, DecimalException
from types import MappingProxyType
import logging
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from .core import (
    AmountOutOfRange, InvalidPeriod, InvalidPrincipal, MAX_MINOR_UNITS, Money,
    RatePercent, decimal_context, minor_units_for, round_money, to_decimal,
    validate_currency_code,
)
from .daycount import (
    AccrualPeriod, DayCountConvention, DEFAULT_CONVENTION,
    day_count, split_period,
)

logger = logging.getLogger(__name__)


# ============================================================================
# FROZEN DATACLASSES
# ============================================================================

@dataclass(frozen=True, slots=True)
class LoanAccrualRequest:
    """
    Immutable input to one accrual computation.

    Rates given as plain numbers are converted to RatePercent here so the
    engine only ever sees typed values.
    """
    period: AccrualPeriod
    principal: Money
    base_rate: RatePercent
    margin: RatePercent

    def __post_init__(self):
        if not isinstance(self.base_rate, RatePercent):
            object.__setattr__(self, 'base_rate', RatePercent(self.base_rate))
        if not isinstance(self.margin, RatePercent):
            object.__setattr__(self, 'margin', RatePercent(self.margin))

    @property
    def currency(self) -> str:
        return self.principal.currency


@dataclass(frozen=True, slots=True)
class AccrualResult:
    """
    Immutable result of one accrual computation.

    interest and base_interest are rounded to the currency's minor units.
    raw_interest keeps the unrounded figure for audit.
    """
    interest: Money
    effective_rate: RatePercent
    day_count: int
    year_fraction: Decimal
    base_interest: Money
    raw_interest: Decimal
    period: AccrualPeriod
    principal: Money
    base_rate: RatePercent
    margin: RatePercent
    convention: DayCountConvention

    @property
    def currency(self) -> str:
        return self.interest.currency


@dataclass(frozen=True, slots=True)
class RateFixing:
    """A base rate that applies from effective_from until the next fixing."""
    effective_from: date
    base_rate: RatePercent

    def __post_init__(self):
        if not isinstance(self.base_rate, RatePercent):
            object.__setattr__(self, 'base_rate', RatePercent(self.base_rate))


# ============================================================================
# PURE CALCULATION FUNCTIONS
# ============================================================================

def calculate_effective_rate(base_rate: RatePercent, margin: RatePercent) -> RatePercent:
    """Effective annual rate: base rate plus margin, exact decimal addition."""
    return base_rate + margin


def calculate_raw_interest(
    principal: Decimal,
    rate: RatePercent,
    days: int,
    denominator: int,
) -> Decimal:
    """
    Unrounded simple interest for a number of accrual days.

    PURE FUNCTION - All inputs explicit.

    Args:
        principal: Outstanding principal amount
        rate: Annual rate in percent
        days: Accrual days under the convention
        denominator: Days per year under the convention (365 or 360)

    Returns:
        principal * rate% * days / denominator, with one final division
    """
    if days == 0 or rate.is_zero() or principal == 0:
        return Decimal("0")
    with decimal_context():
        return (principal * rate.value * Decimal(days)) / (Decimal(100) * Decimal(denominator))


def validate_request(request: LoanAccrualRequest) -> None:
    """
    Check the preconditions of accrue().

    Raises:
        InvalidPrincipal: If the principal amount is negative.
        InvalidPeriod: If the period ends before it starts.
    """
    if request.principal.amount < 0:
        logger.warning("Rejected negative principal %s", request.principal)
        raise InvalidPrincipal(
            f"principal must be non-negative, got {request.principal}"
        )
    if request.period.end < request.period.start:
        logger.warning("Rejected reversed period %s", request.period)
        raise InvalidPeriod(
            f"end date {request.period.end} is before start date {request.period.start}"
        )


# ============================================================================
# ENGINE
# ============================================================================

def accrue(
    request: LoanAccrualRequest,
    convention: DayCountConvention = DEFAULT_CONVENTION,
    minor_units: Optional[Mapping[str, int]] = None,
) -> AccrualResult:
    """
    Compute simple interest on a flat principal over one accrual period.

    Args:
        request: Period, principal, base rate and margin
        convention: Day count convention (default ACT/365F)
        minor_units: Optional currency -> decimal places overrides

    Returns:
        AccrualResult with interest rounded half-even to the currency's
        minor units.

    Raises:
        InvalidPrincipal: Negative principal.
        InvalidPeriod: Period end before start.
        AmountOutOfRange: Principal too large for Decimal arithmetic.

    Example:
        request = LoanAccrualRequest(
            AccrualPeriod(date(2023, 1, 1), date(2023, 12, 31)),
            Money(Decimal("1000.00"), "GBP"),
            RatePercent(Decimal("5.0")),
            RatePercent(Decimal("1.5")),
        )
        accrue(request).interest  # Money(Decimal("64.82"), "GBP")
    """
    validate_request(request)
    convention = DayCountConvention.parse(convention)

    period = request.period
    days = day_count(period.start, period.end, convention)
    denominator = convention.denominator
    with decimal_context():
        fraction = Decimal(days) / Decimal(denominator)

    rate = calculate_effective_rate(request.base_rate, request.margin)
    currency = request.currency
    places = minor_units_for(currency, minor_units)
    try:
        raw = calculate_raw_interest(request.principal.amount, rate, days, denominator)
        raw_base = calculate_raw_interest(request.principal.amount, request.base_rate, days, denominator)
        interest = Money(round_money(raw, places), currency)
        base_interest = Money(round_money(raw_base, places), currency)
    except DecimalException as exc:
        logger.warning("Cannot accrue on principal %s: %s", request.principal, exc)
        raise AmountOutOfRange(
            f"principal {request.principal} is out of range for accrual"
        ) from exc

    logger.debug(
        "Accrued %s on %s over %s (%s, %d days, rate %s, raw %s)",
        interest, request.principal, period, convention.value, days, rate, raw,
    )

    return AccrualResult(
        interest=interest,
        effective_rate=rate,
        day_count=days,
        year_fraction=fraction,
        base_interest=base_interest,
        raw_interest=raw,
        period=period,
        principal=request.principal,
        base_rate=request.base_rate,
        margin=request.margin,
        convention=convention,
    )


def _freeze_minor_units(overrides: Optional[Mapping[str, int]]) -> Mapping[str, int]:
    frozen = {}
    for code, places in (overrides or {}).items():
        validate_currency_code(code)
        if isinstance(places, bool) or not isinstance(places, int) or not 0 <= places <= MAX_MINOR_UNITS:
            raise ValueError(
                f"minor units for {code} must be an integer from 0 to {MAX_MINOR_UNITS}, got {places!r}"
            )
        frozen[code] = places
    return MappingProxyType(frozen)


@dataclass(frozen=True)
class AccrualEngine:
    """
    Stateless accrual service bound to a convention and a precision table.

    Safe to share between threads: every field is immutable and accrue()
    allocates only request-scoped values.

    Attributes:
        convention: Day count convention used for every request
        minor_units: Currency -> decimal places, layered over CURRENCY_MINOR_UNITS
    """
    convention: DayCountConvention = DEFAULT_CONVENTION
    minor_units: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'convention', DayCountConvention.parse(self.convention))
        object.__setattr__(self, 'minor_units', _freeze_minor_units(self.minor_units))

    def places_for(self, currency: str) -> int:
        return minor_units_for(currency, self.minor_units)

    def accrue(self, request: LoanAccrualRequest) -> AccrualResult:
        return accrue(request, self.convention, self.minor_units)

    def accrue_many(self, requests: Iterable[LoanAccrualRequest]) -> List[AccrualResult]:
        """Accrue independent requests, preserving order."""
        return [self.accrue(request) for request in requests]


# ============================================================================
# MULTI-PERIOD AGGREGATION
# ============================================================================

def total_interest(results: Iterable[AccrualResult]) -> Money:
    """
    Sum the rounded interest of several results.

    Raises:
        CurrencyMismatch: If results are in different currencies.
        ValueError: If there are no results.
    """
    total: Optional[Money] = None
    for result in results:
        total = result.interest if total is None else total + result.interest
    if total is None:
        raise ValueError("Cannot total an empty set of accrual results")
    return total


def _rate_on(day: date, fixings: Sequence[RateFixing]) -> RatePercent:
    applicable = [f for f in fixings if f.effective_from <= day]
    if not applicable:
        raise ValueError(f"No base rate fixing effective on {day}")
    return applicable[-1].base_rate


def accrue_with_fixings(
    principal: Money,
    period: AccrualPeriod,
    margin: RatePercent,
    fixings: Sequence[RateFixing],
    convention: DayCountConvention = DEFAULT_CONVENTION,
    minor_units: Optional[Mapping[str, int]] = None,
) -> Tuple[List[AccrualResult], Money]:
    """
    Accrue interest when the base rate changes during the period.

    The period is split at every fixing date inside it. Each sub-period is
    accrued at the base rate fixed most recently on or before its start,
    and the rounded sub-period amounts are summed.

    Args:
        principal: Flat principal for the whole period
        period: Overall accrual period
        margin: Margin added to every base rate
        fixings: Base rate fixings; one must be effective on period.start
        convention: Day count convention
        minor_units: Optional currency -> decimal places overrides

    Returns:
        Tuple of (per-sub-period results, total interest)

    Raises:
        ValueError: If no fixing is effective at the start of the period.
    """
    if not isinstance(margin, RatePercent):
        margin = RatePercent(to_decimal(margin, "margin"))
    ordered = sorted(fixings, key=lambda f: f.effective_from)
    pieces = split_period(period, (f.effective_from for f in ordered))

    results = [
        accrue(
            LoanAccrualRequest(piece, principal, _rate_on(piece.start, ordered), margin),
            convention,
            minor_units,
        )
        for piece in pieces
    ]
    return results, total_interest(results)

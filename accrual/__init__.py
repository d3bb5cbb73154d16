"""
accrual - Loan Interest Accrual

Computes simple interest on a flat loan balance over a calendar period,
using Decimal arithmetic, a day-count convention and banker's rounding to
the currency's minor units.

Usage:
    from datetime import date
    from decimal import Decimal
    from accrual import AccrualPeriod, LoanAccrualRequest, Money, RatePercent, accrue

    request = LoanAccrualRequest(
        period=AccrualPeriod(date(2023, 1, 1), date(2023, 12, 31)),
        principal=Money(Decimal("1000.00"), "GBP"),
        base_rate=RatePercent(Decimal("5.0")),
        margin=RatePercent(Decimal("1.5")),
    )
    result = accrue(request)
    result.interest        # Money(amount=Decimal('64.82'), currency='GBP')
    result.day_count       # 364
"""

# Core types
from .core import (
    AccrualError,
    InvalidPeriod,
    InvalidPrincipal,
    CurrencyMismatch,
    AmountOutOfRange,
    Money,
    RatePercent,
    to_decimal,
    minor_units_for,
    round_money,
    CURRENCY_MINOR_UNITS,
    DEFAULT_MINOR_UNITS,
    ACCRUAL_DECIMAL_PRECISION,
    MAX_MINOR_UNITS,
)

# Period model
from .daycount import (
    DayCountConvention,
    DEFAULT_CONVENTION,
    AccrualPeriod,
    day_count,
    year_fraction,
    split_period,
    monthly_boundaries,
)

# Engine
from .engine import (
    LoanAccrualRequest,
    AccrualResult,
    AccrualEngine,
    RateFixing,
    accrue,
    accrue_with_fixings,
    total_interest,
    calculate_effective_rate,
    calculate_raw_interest,
    validate_request,
)

# Breakdowns
from .schedule import (
    ScheduleEntry,
    AccrualSchedule,
    AccrualBreakdown,
    build_daily_schedule,
    build_monthly_breakdown,
)

__all__ = [
    'AccrualError', 'InvalidPeriod', 'InvalidPrincipal', 'CurrencyMismatch',
    'AmountOutOfRange', 'Money', 'RatePercent', 'to_decimal', 'minor_units_for', 'round_money',
    'CURRENCY_MINOR_UNITS', 'DEFAULT_MINOR_UNITS', 'ACCRUAL_DECIMAL_PRECISION', 'MAX_MINOR_UNITS',
    'DayCountConvention', 'DEFAULT_CONVENTION', 'AccrualPeriod',
    'day_count', 'year_fraction', 'split_period', 'monthly_boundaries',
    'LoanAccrualRequest', 'AccrualResult', 'AccrualEngine', 'RateFixing',
    'accrue', 'accrue_with_fixings', 'total_interest',
    'calculate_effective_rate', 'calculate_raw_interest', 'validate_request',
    'ScheduleEntry', 'AccrualSchedule', 'AccrualBreakdown',
    'build_daily_schedule', 'build_monthly_breakdown',
]

__version__ = '1.0.0'

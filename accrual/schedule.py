"""
schedule.py - Accrual Breakdowns

Two views that justify an accrued interest figure:

    Daily schedule:    one entry per accrual day in [start, end), with the
                       unrounded interest earned that day at the base rate
                       alone and at base rate plus margin.
    Monthly breakdown: the period split at calendar-month starts, each piece
                       accrued and rounded on its own.

In both cases the totals are the whole-period figures from accrue(), so a
breakdown never changes the reported interest.
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Mapping, Optional, Tuple

from dateutil.relativedelta import relativedelta

from .core import Money, decimal_context
from .daycount import (
    DayCountConvention, DEFAULT_CONVENTION,
    day_count, monthly_boundaries, split_period,
)
from .engine import (
    AccrualResult, LoanAccrualRequest,
    accrue, calculate_raw_interest,
)


@dataclass(frozen=True, slots=True)
class ScheduleEntry:
    """Interest earned on a single accrual day."""
    accrual_date: date
    days_elapsed: int
    day_count: int
    interest_without_margin: Decimal
    interest_with_margin: Decimal


@dataclass(frozen=True, slots=True)
class AccrualSchedule:
    """Daily entries plus the whole-period result they add up to."""
    entries: Tuple[ScheduleEntry, ...]
    result: AccrualResult

    @property
    def currency(self) -> str:
        return self.result.currency

    @property
    def total_without_margin(self) -> Money:
        return self.result.base_interest

    @property
    def total_with_margin(self) -> Money:
        return self.result.interest

    def raw_total_with_margin(self) -> Decimal:
        """Sum of the unrounded daily amounts at base rate plus margin."""
        with decimal_context():
            return sum((e.interest_with_margin for e in self.entries), Decimal("0"))

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True, slots=True)
class AccrualBreakdown:
    """Sub-period results plus the whole-period result."""
    rows: Tuple[AccrualResult, ...]
    result: AccrualResult

    @property
    def total(self) -> Money:
        return self.result.interest

    def __len__(self) -> int:
        return len(self.rows)


def build_daily_schedule(
    request: LoanAccrualRequest,
    convention: DayCountConvention = DEFAULT_CONVENTION,
    minor_units: Optional[Mapping[str, int]] = None,
) -> AccrualSchedule:
    """
    Build the day-by-day accrual schedule for a request.

    Under 30/360 a calendar day can carry 0 (the 31st) or several (end of
    February) accrual days; the entry's day_count reflects that.
    """
    result = accrue(request, convention, minor_units)
    convention = result.convention
    principal = request.principal.amount
    denominator = convention.denominator

    entries = []
    current = request.period.start
    elapsed = 0
    while current < request.period.end:
        following = current + relativedelta(days=1)
        days = day_count(current, following, convention)
        entries.append(ScheduleEntry(
            accrual_date=current,
            days_elapsed=elapsed,
            day_count=days,
            interest_without_margin=calculate_raw_interest(principal, request.base_rate, days, denominator),
            interest_with_margin=calculate_raw_interest(principal, result.effective_rate, days, denominator),
        ))
        current = following
        elapsed += 1

    return AccrualSchedule(entries=tuple(entries), result=result)


def build_monthly_breakdown(
    request: LoanAccrualRequest,
    convention: DayCountConvention = DEFAULT_CONVENTION,
    minor_units: Optional[Mapping[str, int]] = None,
) -> AccrualBreakdown:
    """
    Split a request at calendar-month starts and accrue each piece.

    Row amounts are rounded independently, so their sum can differ from the
    total by a few minor units.
    """
    result = accrue(request, convention, minor_units)
    pieces = split_period(request.period, monthly_boundaries(request.period))
    rows = tuple(
        accrue(
            LoanAccrualRequest(piece, request.principal, request.base_rate, request.margin),
            result.convention,
            minor_units,
        )
        for piece in pieces
    )
    return AccrualBreakdown(rows=rows, result=result)

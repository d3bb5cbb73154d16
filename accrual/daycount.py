"""
daycount.py - Day-Count Conventions and Accrual Periods

An AccrualPeriod is an ordered pair of calendar dates (start <= end).
A DayCountConvention turns that pair into:
    day_count:     integer number of accrual days
    year_fraction: day_count / denominator (365 or 360), as a Decimal

Supported conventions:
    ACT/365F  actual days / 365 (leap days count in the numerator only)
    ACT/360   actual days / 360
    30/360    European 30E/360: day-of-month 31 clamped to 30 on both ends,
              end of February left as is

Accrual runs from start (inclusive) to end (exclusive), so start == end is a
zero-length period with day_count 0.
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Iterable, List

from dateutil.relativedelta import relativedelta

from .core import InvalidPeriod, decimal_context


class DayCountConvention(str, Enum):
    """Supported day count conventions."""
    ACTUAL_365_FIXED = "ACT/365F"
    ACTUAL_360 = "ACT/360"
    THIRTY_360 = "30/360"

    @property
    def denominator(self) -> int:
        if self is DayCountConvention.ACTUAL_365_FIXED:
            return 365
        return 360

    @classmethod
    def parse(cls, value: str | DayCountConvention) -> DayCountConvention:
        """Look up a convention by value ("ACT/360") or name ("ACTUAL_360")."""
        if isinstance(value, cls):
            return value
        token = str(value).strip().upper()
        for convention in cls:
            if token in (convention.value, convention.name):
                return convention
        # Common aliases
        if token in ("ACT/365", "ACT/365FIXED", "A/365F"):
            return cls.ACTUAL_365_FIXED
        if token in ("30E/360", "EUROBOND"):
            return cls.THIRTY_360
        raise ValueError(f"Unknown day count convention: {value!r}")


DEFAULT_CONVENTION = DayCountConvention.ACTUAL_365_FIXED


def _as_date(value: date) -> date:
    # datetime is a subclass of date; drop the time of day
    if isinstance(value, datetime):
        return value.date()
    if not isinstance(value, date):
        raise TypeError(f"Expected a date, got {type(value).__name__}")
    return value


def _thirty_360_days(start: date, end: date) -> int:
    d1 = min(start.day, 30)
    d2 = min(end.day, 30)
    return 360 * (end.year - start.year) + 30 * (end.month - start.month) + (d2 - d1)


# =============================================================================
# PURE FUNCTIONS
# =============================================================================

def day_count(start: date, end: date, convention: DayCountConvention = DEFAULT_CONVENTION) -> int:
    """
    Number of accrual days from start to end under a convention.

    Raises:
        InvalidPeriod: If end is before start.
    """
    start, end = _as_date(start), _as_date(end)
    if end < start:
        raise InvalidPeriod(f"end date {end} is before start date {start}")
    convention = DayCountConvention.parse(convention)
    if convention is DayCountConvention.THIRTY_360:
        return _thirty_360_days(start, end)
    return (end - start).days


def year_fraction(start: date, end: date, convention: DayCountConvention = DEFAULT_CONVENTION) -> Decimal:
    """
    Fraction of a year between start and end: day_count / denominator.

    Decimal division at 50 significant digits, never binary floating point.
    """
    convention = DayCountConvention.parse(convention)
    days = day_count(start, end, convention)
    with decimal_context():
        return Decimal(days) / Decimal(convention.denominator)


# =============================================================================
# ACCRUAL PERIOD
# =============================================================================

@dataclass(frozen=True, slots=True)
class AccrualPeriod:
    """A date range [start, end) over which interest accrues."""
    start: date
    end: date

    def __post_init__(self):
        object.__setattr__(self, 'start', _as_date(self.start))
        object.__setattr__(self, 'end', _as_date(self.end))
        if self.end < self.start:
            raise InvalidPeriod(f"end date {self.end} is before start date {self.start}")

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def day_count(self, convention: DayCountConvention = DEFAULT_CONVENTION) -> int:
        return day_count(self.start, self.end, convention)

    def year_fraction(self, convention: DayCountConvention = DEFAULT_CONVENTION) -> Decimal:
        return year_fraction(self.start, self.end, convention)

    def contains(self, day: date) -> bool:
        """True if interest accrues on this day (start inclusive, end exclusive)."""
        return self.start <= _as_date(day) < self.end

    def __str__(self) -> str:
        return f"{self.start.isoformat()} -> {self.end.isoformat()}"


def split_period(period: AccrualPeriod, boundaries: Iterable[date]) -> List[AccrualPeriod]:
    """
    Split a period into adjacent sub-periods at the given dates.

    Boundaries outside (start, end) are ignored; duplicates collapse.
    The sub-periods cover the whole period exactly and in order.
    """
    cuts = sorted({_as_date(b) for b in boundaries if period.start < _as_date(b) < period.end})
    edges = [period.start, *cuts, period.end]
    return [AccrualPeriod(a, b) for a, b in zip(edges, edges[1:])]


def monthly_boundaries(period: AccrualPeriod) -> List[date]:
    """First day of every calendar month strictly inside the period."""
    boundaries: List[date] = []
    cursor = date(period.start.year, period.start.month, 1) + relativedelta(months=1)
    while cursor < period.end:
        boundaries.append(cursor)
        cursor += relativedelta(months=1)
    return boundaries

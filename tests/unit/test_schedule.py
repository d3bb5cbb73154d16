"""
test_schedule.py - Unit tests for daily schedules and monthly breakdowns
"""

import pytest
from datetime import date
from decimal import Decimal
from accrual import (
    DayCountConvention, InvalidPrincipal, Money,
    accrue, build_daily_schedule, build_monthly_breakdown, round_money,
)


class TestDailySchedule:
    """One entry per accrual day in [start, end)."""

    def test_one_entry_per_day(self, request_factory):
        schedule = build_daily_schedule(request_factory(date(2023, 1, 1), date(2023, 1, 11)))
        assert len(schedule) == 10
        assert schedule.entries[0].accrual_date == date(2023, 1, 1)
        assert schedule.entries[0].days_elapsed == 0
        assert schedule.entries[-1].accrual_date == date(2023, 1, 10)
        assert schedule.entries[-1].days_elapsed == 9

    def test_daily_amounts(self, request_factory):
        schedule = build_daily_schedule(request_factory(date(2023, 1, 1), date(2023, 1, 11)))
        entry = schedule.entries[0]
        assert entry.day_count == 1
        assert round_money(entry.interest_without_margin, 8) == Decimal("0.13698630")
        assert round_money(entry.interest_with_margin, 8) == Decimal("0.17808219")
        assert len({e.interest_with_margin for e in schedule.entries}) == 1

    def test_totals_are_engine_figures(self, request_factory):
        request = request_factory(date(2023, 1, 1), date(2023, 1, 11))
        schedule = build_daily_schedule(request)
        assert schedule.total_with_margin == accrue(request).interest == Money(Decimal("1.78"), "GBP")
        assert schedule.total_without_margin == Money(Decimal("1.37"), "GBP")
        assert schedule.currency == "GBP"

    def test_raw_total_rounds_to_total(self, gbp_request):
        schedule = build_daily_schedule(gbp_request)
        assert len(schedule) == 364
        assert round_money(schedule.raw_total_with_margin(), 2) == schedule.total_with_margin.amount

    def test_zero_length_period(self, zero_length_request):
        schedule = build_daily_schedule(zero_length_request)
        assert len(schedule) == 0
        assert schedule.total_with_margin.amount == 0
        assert schedule.raw_total_with_margin() == 0

    def test_thirty_360_day_weights(self, request_factory):
        schedule = build_daily_schedule(
            request_factory(date(2023, 2, 27), date(2023, 3, 2)),
            DayCountConvention.THIRTY_360,
        )
        assert [e.day_count for e in schedule.entries] == [1, 3, 1]
        assert sum(e.day_count for e in schedule.entries) == schedule.result.day_count == 5

    def test_thirty_360_31st_carries_nothing(self, request_factory):
        schedule = build_daily_schedule(
            request_factory(date(2023, 1, 30), date(2023, 2, 1)),
            DayCountConvention.THIRTY_360,
        )
        assert [e.day_count for e in schedule.entries] == [0, 1]
        assert schedule.entries[0].interest_with_margin == 0

    def test_negative_principal_rejected(self, request_factory):
        with pytest.raises(InvalidPrincipal):
            build_daily_schedule(request_factory(date(2023, 1, 1), date(2023, 1, 5), amount="-10"))


class TestMonthlyBreakdown:
    """Period split at calendar-month starts."""

    def test_rows_follow_month_starts(self, request_factory):
        breakdown = build_monthly_breakdown(request_factory(date(2023, 1, 15), date(2023, 4, 10)))
        assert [(r.period.start, r.period.end) for r in breakdown.rows] == [
            (date(2023, 1, 15), date(2023, 2, 1)),
            (date(2023, 2, 1), date(2023, 3, 1)),
            (date(2023, 3, 1), date(2023, 4, 1)),
            (date(2023, 4, 1), date(2023, 4, 10)),
        ]
        assert [r.day_count for r in breakdown.rows] == [17, 28, 31, 9]
        assert sum(r.day_count for r in breakdown.rows) == breakdown.result.day_count

    def test_total_is_whole_period_interest(self, gbp_request):
        breakdown = build_monthly_breakdown(gbp_request)
        assert len(breakdown) == 12
        assert breakdown.total == Money(Decimal("64.82"), "GBP")

    def test_row_sum_within_rounding_of_total(self, gbp_request):
        breakdown = build_monthly_breakdown(gbp_request)
        row_sum = sum(r.interest.amount for r in breakdown.rows)
        assert abs(row_sum - breakdown.total.amount) <= Decimal("0.01") * len(breakdown) / 2

    def test_convention_applied_to_rows(self, gbp_request):
        breakdown = build_monthly_breakdown(gbp_request, "ACT/360")
        assert all(r.convention is DayCountConvention.ACTUAL_360 for r in breakdown.rows)

    def test_single_month(self, request_factory):
        breakdown = build_monthly_breakdown(request_factory(date(2023, 5, 3), date(2023, 5, 20)))
        assert len(breakdown) == 1
        assert breakdown.rows[0].interest == breakdown.total

    def test_zero_length_period(self, zero_length_request):
        breakdown = build_monthly_breakdown(zero_length_request)
        assert len(breakdown) == 1
        assert breakdown.total.amount == 0

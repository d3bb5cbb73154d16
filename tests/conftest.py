"""
conftest.py - Shared pytest fixtures for accrual tests

Provides:
- make_request(): build a LoanAccrualRequest from plain values
- Reference requests (the GBP one-year scenario, zero-length, JPY)
"""

import pytest
from datetime import date
from decimal import Decimal

from accrual import AccrualPeriod, LoanAccrualRequest, Money, RatePercent


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def make_request(
    start: date,
    end: date,
    amount="1000.00",
    currency: str = "GBP",
    base_rate="5.0",
    margin="1.5",
) -> LoanAccrualRequest:
    """Create a request from plain values for testing."""
    return LoanAccrualRequest(
        period=AccrualPeriod(start, end),
        principal=Money(Decimal(str(amount)), currency),
        base_rate=RatePercent(Decimal(str(base_rate))),
        margin=RatePercent(Decimal(str(margin))),
    )


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def gbp_request() -> LoanAccrualRequest:
    """1000.00 GBP at 5.0% + 1.5% from 2023-01-01 to 2023-12-31."""
    return make_request(date(2023, 1, 1), date(2023, 12, 31))


@pytest.fixture
def zero_length_request() -> LoanAccrualRequest:
    return make_request(date(2023, 6, 30), date(2023, 6, 30), base_rate="12.0", margin="3.0")


@pytest.fixture
def jpy_request() -> LoanAccrualRequest:
    """1,000,000 JPY at 1.0% for a full non-leap year."""
    return make_request(
        date(2023, 1, 1), date(2024, 1, 1),
        amount="1000000", currency="JPY", base_rate="0.75", margin="0.25",
    )


SCENARIO_ARGS = [
    "--start-date", "2023-01-01",
    "--end-date", "2023-12-31",
    "--loan-amount", "1000.00",
    "--loan-currency", "GBP",
    "--base-interest-rate", "5.0",
    "--margin", "1.5",
]


@pytest.fixture
def scenario_args():
    """Command-line arguments for the GBP one-year scenario."""
    return list(SCENARIO_ARGS)


@pytest.fixture
def request_factory():
    """Return make_request() so tests can build their own requests."""
    return make_request

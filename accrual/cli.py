"""
cli.py - Command Line Interface

Parses raw command-line input into typed values, runs the accrual engine
and prints the result to stdout.

Usage:
    loan-accrual --start-date 2023-01-01 --end-date 2023-12-31 \\
        --loan-amount 1000.00 --loan-currency GBP \\
        --base-interest-rate 5.0 --margin 1.5 [--schedule daily]

Exit codes:
    0  success
    2  malformed input (unparseable date, non-numeric rate, bad currency)
    3  input parsed but rejected by the engine (negative principal,
       end date before start date, principal out of Decimal range)
"""
from __future__ import annotations

import argparse
from datetime import date, datetime
from decimal import Decimal
import logging
import sys
from typing import Dict, List, Optional, Sequence, TextIO

from .core import AccrualError, MAX_MINOR_UNITS, Money, RatePercent, round_money, to_decimal
from .daycount import AccrualPeriod, DayCountConvention, DEFAULT_CONVENTION
from .engine import AccrualEngine, AccrualResult, LoanAccrualRequest
from .schedule import AccrualBreakdown, AccrualSchedule, build_daily_schedule, build_monthly_breakdown

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_PARSE_ERROR = 2
EXIT_VALIDATION_ERROR = 3

DATE_FMT = "YYYY-MM-DD"
DATE_PATTERN = "%Y-%m-%d"
SCHEDULE_CHOICES = ("none", "daily", "monthly")

# Display precision for unrounded daily amounts
DAILY_DISPLAY_PLACES = 6


class ParseError(Exception):
    """Raised when command-line input cannot be converted to a typed value."""
    pass


# =============================================================================
# PARSING
# =============================================================================

def parse_date(value: str) -> date:
    try:
        return datetime.strptime(value.strip(), DATE_PATTERN).date()
    except ValueError:
        raise ParseError(f"Invalid date {value!r}. Please use the format {DATE_FMT}.") from None


def parse_decimal(value: str, field_name: str) -> Decimal:
    try:
        return to_decimal(value, field_name)
    except ValueError as exc:
        raise ParseError(f"Invalid {field_name} {value!r}: {exc}") from None


def parse_currency(value: str) -> str:
    code = value.strip()
    if len(code) == 3 and code.isascii() and code.isalpha() and code.isupper():
        return code
    raise ParseError(
        f"Invalid currency {value!r}. Please use three uppercase letters (e.g., USD, EUR)."
    )


def parse_convention(value: str) -> DayCountConvention:
    try:
        return DayCountConvention.parse(value)
    except ValueError as exc:
        raise ParseError(str(exc)) from None


def parse_minor_units(values: Optional[Sequence[str]]) -> Dict[str, int]:
    """Parse repeated CODE=DIGITS flags into a precision override table."""
    table: Dict[str, int] = {}
    for item in values or ():
        code, sep, digits = item.partition("=")
        digits = digits.strip()
        if not sep or not (digits.isascii() and digits.isdigit()):
            raise ParseError(f"Invalid minor units {item!r}. Please use CODE=DIGITS (e.g., JPY=0).")
        places = int(digits)
        if places > MAX_MINOR_UNITS:
            raise ParseError(f"Invalid minor units {item!r}. At most {MAX_MINOR_UNITS} digits are supported.")
        table[parse_currency(code)] = places
    return table


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="loan-accrual",
        description="Compute simple interest accrued on a loan over a date range.",
    )
    parser.add_argument("--start-date", required=True, help=f"Start date (format: {DATE_FMT}).")
    parser.add_argument("--end-date", required=True, help=f"End date (format: {DATE_FMT}).")
    parser.add_argument("--loan-amount", required=True, help="Loan principal, e.g. 1000.00.")
    parser.add_argument("--loan-currency", required=True, help="Three-letter currency code, e.g. GBP.")
    parser.add_argument("--base-interest-rate", required=True, help="Base rate in percent, e.g. 5.0.")
    parser.add_argument("--margin", required=True, help="Margin over base rate in percent, e.g. 1.5.")
    parser.add_argument(
        "--convention",
        default=DEFAULT_CONVENTION.value,
        help="Day count convention: ACT/365F, ACT/360 or 30/360. Default: ACT/365F.",
    )
    parser.add_argument(
        "--minor-units",
        action="append",
        metavar="CODE=DIGITS",
        help="Override rounding precision for a currency. May be repeated.",
    )
    parser.add_argument(
        "--schedule",
        choices=SCHEDULE_CHOICES,
        default="none",
        help="Also print a daily schedule or monthly breakdown.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging on stderr.")
    return parser


def build_request(args: argparse.Namespace) -> LoanAccrualRequest:
    """
    Convert parsed arguments into a LoanAccrualRequest.

    Raises:
        ParseError: Malformed input.
        AccrualError: Well-formed input that violates an accrual invariant.
    """
    start = parse_date(args.start_date)
    end = parse_date(args.end_date)
    amount = parse_decimal(args.loan_amount, "loan amount")
    currency = parse_currency(args.loan_currency)
    base_rate = parse_decimal(args.base_interest_rate, "base interest rate")
    margin = parse_decimal(args.margin, "margin")

    return LoanAccrualRequest(
        period=AccrualPeriod(start, end),
        principal=Money(amount, currency),
        base_rate=RatePercent(base_rate),
        margin=RatePercent(margin),
    )


# =============================================================================
# RENDERING
# =============================================================================

def render_table(headers: Sequence[str], rows: Sequence[Sequence[object]]) -> str:
    """Render rows as a box-drawn table. The last row is set off as a footer."""
    cells = [[str(c) for c in headers]] + [[str(c) for c in row] for row in rows]
    widths = [max(len(r[i]) for r in cells) for i in range(len(headers))]

    def line(left: str, mid: str, right: str) -> str:
        return left + mid.join("─" * (w + 2) for w in widths) + right

    def row_text(row: List[str]) -> str:
        return "│" + "│".join(f" {c.rjust(w)} " for c, w in zip(row, widths)) + "│"

    lines = [line("┌", "┬", "┐"), row_text(cells[0]), line("├", "┼", "┤")]
    body = cells[1:]
    for i, row in enumerate(body):
        if i == len(body) - 1 and len(body) > 1:
            lines.append(line("├", "┼", "┤"))
        lines.append(row_text(row))
    lines.append(line("└", "┴", "┘"))
    return "\n".join(lines)


def render_result(result: AccrualResult) -> str:
    fraction = round_money(result.year_fraction, 10)
    lines = [
        f"Accrual period          : {result.period}",
        f"Day count               : {result.day_count} ({result.convention.value})",
        f"Year fraction           : {fraction}",
        f"Principal               : {result.principal}",
        f"Base rate               : {result.base_rate}",
        f"Margin                  : {result.margin}",
        f"Effective rate          : {result.effective_rate}",
        f"Interest without margin : {result.base_interest}",
        f"Interest                : {result.interest}",
    ]
    return "\n".join(lines)


def render_daily_schedule(schedule: AccrualSchedule) -> str:
    rows: List[List[object]] = [
        [
            entry.accrual_date.isoformat(),
            entry.days_elapsed,
            entry.day_count,
            round_money(entry.interest_without_margin, DAILY_DISPLAY_PLACES),
            round_money(entry.interest_with_margin, DAILY_DISPLAY_PLACES),
            schedule.currency,
        ]
        for entry in schedule.entries
    ]
    rows.append([
        "Total", "", schedule.result.day_count,
        schedule.total_without_margin.amount,
        schedule.total_with_margin.amount,
        schedule.currency,
    ])
    return render_table(
        ["Accrual Date", "Days Elapsed", "Day Count",
         "Interest Without Margin", "Interest With Margin", "Currency"],
        rows,
    )


def render_monthly_breakdown(breakdown: AccrualBreakdown) -> str:
    rows: List[List[object]] = [
        [
            row.period.start.isoformat(),
            row.period.end.isoformat(),
            row.day_count,
            row.base_interest.amount,
            row.interest.amount,
            row.currency,
        ]
        for row in breakdown.rows
    ]
    result = breakdown.result
    rows.append([
        "Total", "", result.day_count,
        result.base_interest.amount, result.interest.amount, result.currency,
    ])
    return render_table(
        ["From", "To", "Day Count", "Interest Without Margin", "Interest With Margin", "Currency"],
        rows,
    )


# =============================================================================
# ENTRY POINT
# =============================================================================

def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def run(args: argparse.Namespace, out: TextIO) -> int:
    try:
        convention = parse_convention(args.convention)
        engine = AccrualEngine(convention=convention, minor_units=parse_minor_units(args.minor_units))
        request = build_request(args)
    except ParseError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_PARSE_ERROR
    except AccrualError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    try:
        if args.schedule == "daily":
            schedule = build_daily_schedule(request, engine.convention, engine.minor_units)
            result = schedule.result
            table = render_daily_schedule(schedule)
        elif args.schedule == "monthly":
            breakdown = build_monthly_breakdown(request, engine.convention, engine.minor_units)
            result = breakdown.result
            table = render_monthly_breakdown(breakdown)
        else:
            result = engine.accrue(request)
            table = None
    except AccrualError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    if table is not None:
        print(table, file=out)
    print(render_result(result), file=out)
    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    logger.debug("Arguments: %s", vars(args))
    return run(args, sys.stdout)

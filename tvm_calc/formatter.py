"""Output helpers for the TVM calculator.

This module provides simple functions to render schedules, summaries and
calculator results in a tabular text format. We rely only on built-in
printing and string formatting; amounts go through ``format_currency`` so the
caller's currency choice is applied here and nowhere in the engine.
"""

from __future__ import annotations

from typing import Dict, Iterable

from .currency import format_currency
from .data_models import (
    AprResult,
    InvestmentGrowth,
    Payment,
    ScheduleSummary,
    TvmKind,
    TvmResult,
    YearTotals,
)
from .settings import DEFAULT_CURRENCY


def print_summary(summary: ScheduleSummary, currency: str = DEFAULT_CURRENCY) -> None:
    """Print a summary of schedule metrics in a human-readable format."""

    def money(value: float) -> str:
        return format_currency(value, currency)

    print("Summary")
    print("-" * 72)
    print(f"Principal          : {money(summary.original_principal)}")
    print(f"Periodic payment   : {money(summary.periodic_payment)}")
    print(f"Payments made      : {summary.total_payments} of {summary.scheduled_periods}")
    print(f"Total interest     : {money(summary.total_interest)}")
    print(f"Total paid         : {money(summary.total_amount_paid)}")
    if summary.extra_payment_total:
        print(f"Extra payments     : {money(summary.extra_payment_total)}")
        print(f"Interest saved     : {money(summary.interest_saved)}")
        print(f"Payments saved     : {summary.time_saved}")
    print(f"Original payoff    : {summary.original_payoff_date.isoformat()}")
    print(f"Payoff date        : {summary.payoff_date.isoformat()}")
    if summary.overrun:
        print("WARNING            : balance not repaid within the term")
    if summary.unpaid_interest:
        print(f"Unpaid interest    : {money(summary.unpaid_interest)}")
    print("-" * 72)


def print_schedule(schedule: Iterable[Payment], currency: str = DEFAULT_CURRENCY) -> None:
    """Print the amortization schedule as a simple table."""
    headers = [
        "No",
        "Date",
        "Payment",
        "Principal",
        "Interest",
        "Extra",
        "Balance",
        "CumInterest",
    ]
    print("\t".join(headers))
    for entry in schedule:
        row = [
            str(entry.payment_number),
            entry.date.isoformat(),
            format_currency(entry.gross_payment, currency),
            format_currency(entry.principal_portion, currency),
            format_currency(entry.interest_portion, currency),
            format_currency(entry.extra_payment, currency),
            format_currency(entry.remaining_balance, currency),
            format_currency(entry.cumulative_interest, currency),
        ]
        print("\t".join(row))


def print_yearly(totals: Iterable[YearTotals], currency: str = DEFAULT_CURRENCY) -> None:
    print("\t".join(["Year", "Payments", "Paid", "Principal", "Interest", "EndBalance"]))
    for year in totals:
        print(
            "\t".join(
                [
                    str(year.year),
                    str(year.payments),
                    format_currency(year.gross_payment, currency),
                    format_currency(year.principal, currency),
                    format_currency(year.interest, currency),
                    format_currency(year.end_balance, currency),
                ]
            )
        )


def print_apr(result: AprResult, currency: str = DEFAULT_CURRENCY) -> None:
    print("APR")
    print("-" * 72)
    print(f"Nominal rate       : {result.nominal_rate:.4f}%")
    print(f"APR                : {result.apr:.4f}%")
    if not result.converged:
        print(f"WARNING            : search stopped after {result.iterations} iterations")
    print(f"Monthly payment    : {format_currency(result.monthly_payment, currency)}")
    print(f"Total fees         : {format_currency(result.total_fees, currency)}")
    print(f"Net loan amount    : {format_currency(result.net_loan_amount, currency)}")
    print(f"Total interest     : {format_currency(result.total_interest, currency)}")
    print(f"Total cost         : {format_currency(result.total_cost, currency)}")
    print("-" * 72)


def print_tvm_result(result: TvmResult, currency: str = DEFAULT_CURRENCY) -> None:
    if result.kind is TvmKind.RATE:
        value = f"{result.value:.4f}% a year"
    elif result.kind is TvmKind.NPER:
        value = f"{result.value:.2f} periods"
    else:
        value = format_currency(result.value, currency)
    print(f"{result.kind.name:<6} = {value}")
    print(f"Formula: {result.formula}")
    print(result.explanation)
    if not result.converged:
        print(f"WARNING: not converged after {result.iterations} iterations; value is unreliable")


def print_loan_result(values: Dict[str, float], currency: str = DEFAULT_CURRENCY) -> None:
    """Print the key/value results of the loan calculator.

    Keys ending in ``_percent``, ``_months`` or ``_years`` are printed as
    plain numbers; everything else is money.
    """
    for key, value in values.items():
        label = key.replace("_", " ").capitalize()
        if key.endswith("_percent"):
            text = f"{value:.4f}%"
        elif key.endswith(("_months", "_years")):
            text = f"{value:.2f}"
        else:
            text = format_currency(value, currency)
        print(f"{label:<24}: {text}")


def print_investment(growth: InvestmentGrowth, currency: str = DEFAULT_CURRENCY) -> None:
    print(f"Future value       : {format_currency(growth.future_value, currency)}")
    print(f"Contributions      : {format_currency(growth.total_contributions, currency)}")
    print(f"Gains              : {format_currency(growth.total_gains, currency)}")
    print(f"Gain               : {growth.gain_percentage:.2f}%")


def print_comparison(
    s1: ScheduleSummary,
    s2: ScheduleSummary,
    currency: str = DEFAULT_CURRENCY,
) -> None:
    """Print a comparison of two schedule summaries side by side.

    The difference column is scenario2 - scenario1; a negative difference
    means the second scenario is cheaper or shorter.
    """
    print("Comparison")
    print("=" * 72)
    print(f"{'Metric':20s} {'Scenario1':>15s} {'Scenario2':>15s} {'Difference':>15s}")
    for key in ("periodic_payment", "total_amount_paid", "total_interest"):
        v1 = getattr(s1, key)
        v2 = getattr(s2, key)
        print(
            f"{key:20s} {format_currency(v1, currency):>15s} "
            f"{format_currency(v2, currency):>15s} {format_currency(v2 - v1, currency):>15s}"
        )
    diff = s2.total_payments - s1.total_payments
    print(f"{'total_payments':20s} {s1.total_payments:15d} {s2.total_payments:15d} {diff:15d}")
    print("=" * 72)

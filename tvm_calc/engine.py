"""Amortization schedule generator.

This module steps a loan through its payment periods and records one
``Payment`` row per period until the balance is retired. It supports monthly,
quarterly, semi-annual and annual payments, a constant extra payment added to
every period and one-off overpayments applied on the first payment on or after
their date. Results are returned as a list of ``Payment`` objects along with a
``ScheduleSummary``.
"""

from __future__ import annotations

import math
import warnings
from collections import deque
from datetime import date
from itertools import groupby
from typing import Deque, Dict, Iterable, List, Tuple

from .data_models import (
    LoanParameters,
    Overpayment,
    Payment,
    ScheduleConfig,
    ScheduleSummary,
    YearTotals,
)
from .errors import InvalidInputError, ScheduleOverrunWarning
from .formulas import annuity_future_value, future_value, periodic_payment
from .settings import BALANCE_EPSILON
from .utils import add_months


def _validate(loan: LoanParameters, config: ScheduleConfig) -> None:
    if loan.principal <= 0:
        raise InvalidInputError("Principal must be positive")
    if loan.annual_rate_percent < 0:
        raise InvalidInputError("Interest rate must not be negative")
    if loan.term_years <= 0:
        raise InvalidInputError("Loan term must be positive")
    if config.extra_payment < 0:
        raise InvalidInputError("Extra payment must not be negative")
    if any(op.amount < 0 for op in config.overpayments):
        raise InvalidInputError("Overpayment amounts must not be negative")
    if config.periodic_payment is not None and config.periodic_payment <= 0:
        raise InvalidInputError("Periodic payment must be positive")


def _term_periods(loan: LoanParameters, periods_per_year: int) -> Tuple[float, int]:
    """Exact number of periods in the term and the number of rows it needs.

    A fractional term gets one more, shorter, final payment.
    """
    exact = round(loan.total_periods(periods_per_year), 9)
    return exact, math.ceil(exact)


def _baseline_interest(principal: float, rate: float, payment: float, periods: float) -> float:
    """Interest paid over the term without any extra payments."""
    whole = math.floor(periods)
    if whole == periods:
        return payment * periods - principal
    remaining = future_value(principal, rate, whole) - annuity_future_value(payment, rate, whole)
    return payment * whole + remaining * (1 + rate) - principal


def _prepare_overpayments(
    overpayments: Iterable[Overpayment],
    first_date: date,
    last_date: date,
) -> Deque[Tuple[date, float]]:
    """Sum overpayments by date, in date order.

    Each lump sum is applied on the first payment dated on or after it, so
    dates must fall within the scheduled payment dates.
    """
    mapping: Dict[date, float] = {}
    for op in overpayments:
        if not first_date <= op.date <= last_date:
            raise InvalidInputError(
                f"Overpayment on {op.date.isoformat()} is outside the schedule "
                f"({first_date.isoformat()} to {last_date.isoformat()})"
            )
        mapping[op.date] = mapping.get(op.date, 0.0) + op.amount
    return deque(sorted(mapping.items()))


def compute_schedule(
    config: ScheduleConfig,
    epsilon: float = BALANCE_EPSILON,
) -> Tuple[List[Payment], ScheduleSummary]:
    """Compute the amortization schedule and summary for a loan.

    Parameters
    ----------
    config: ScheduleConfig
        The loan and payment settings.
    epsilon: float
        A balance at or below this amount counts as repaid. The residual is
        added to the principal of the last row so the schedule ends at zero.

    Returns
    -------
    schedule: List[Payment]
        One entry per payment, in chronological order.
    summary: ScheduleSummary
        Totals, time and interest saved by extra payments and payoff date.

    Raises
    ------
    InvalidInputError
        If the configuration is out of range, or an overpayment is dated
        before the first or after the last scheduled payment.

    Warns
    -----
    ScheduleOverrunWarning
        If the scheduled number of payments is used up before the balance is
        repaid. ``summary.overrun`` is set in that case.
    """
    loan = config.loan
    _validate(loan, config)
    if loan.principal <= epsilon:
        raise InvalidInputError(f"Principal must exceed {epsilon}")
    periods_per_year = config.frequency.value
    months_per_period = config.frequency.months_per_period
    rate = loan.periodic_rate(periods_per_year)
    exact_periods, total_periods = _term_periods(loan, periods_per_year)
    original_payoff_date = add_months(config.start_date, (total_periods - 1) * months_per_period)

    scheduled_payment = periodic_payment(loan.principal, rate, exact_periods)
    base_payment = (
        config.periodic_payment if config.periodic_payment is not None else scheduled_payment
    )
    pending = _prepare_overpayments(config.overpayments, config.start_date, original_payoff_date)

    schedule: List[Payment] = []
    balance = float(loan.principal)
    cumulative_interest = 0.0
    cumulative_principal = 0.0
    unpaid_interest = 0.0
    extra_total = 0.0
    period = 1

    while balance > epsilon and period <= total_periods:
        current_date = add_months(config.start_date, (period - 1) * months_per_period)
        interest = balance * rate
        extra = config.extra_payment
        while pending and pending[0][0] <= current_date:
            extra += pending.popleft()[1]
        scheduled_principal = base_payment - interest
        principal_portion = scheduled_principal + extra

        if principal_portion < 0:
            # Payment below the interest due: nothing reaches the principal,
            # the row records what was paid and the shortfall is tracked.
            unpaid_interest += interest - (base_payment + extra)
            interest = base_payment + extra
            principal_portion = 0.0
        elif principal_portion > balance:
            principal_portion = balance

        new_balance = balance - principal_portion
        if new_balance <= epsilon:
            principal_portion += new_balance
            new_balance = 0.0

        extra_applied = max(0.0, min(extra, principal_portion - max(scheduled_principal, 0.0)))
        cumulative_interest += interest
        cumulative_principal += principal_portion
        extra_total += extra_applied

        schedule.append(
            Payment(
                payment_number=period,
                date=current_date,
                gross_payment=principal_portion + interest,
                principal_portion=principal_portion,
                interest_portion=interest,
                extra_payment=extra_applied,
                remaining_balance=new_balance,
                cumulative_interest=cumulative_interest,
                cumulative_principal=cumulative_principal,
            )
        )
        balance = new_balance
        period += 1

    overrun = balance > epsilon
    if overrun:
        warnings.warn(
            f"Schedule reached its {total_periods} scheduled payments with "
            f"{balance:.2f} still owed; the payment may not cover the interest",
            ScheduleOverrunWarning,
            stacklevel=2,
        )

    if extra_total > 0:
        baseline = _baseline_interest(loan.principal, rate, scheduled_payment, exact_periods)
        interest_saved = baseline - cumulative_interest
    else:
        interest_saved = 0.0

    summary = ScheduleSummary(
        original_principal=float(loan.principal),
        total_payments=len(schedule),
        total_amount_paid=cumulative_interest + cumulative_principal,
        total_interest=cumulative_interest,
        total_principal=cumulative_principal,
        periodic_payment=base_payment,
        extra_payment_total=extra_total,
        scheduled_periods=total_periods,
        time_saved=total_periods - len(schedule),
        interest_saved=interest_saved,
        payoff_date=schedule[-1].date,
        original_payoff_date=original_payoff_date,
        overrun=overrun,
        unpaid_interest=unpaid_interest,
    )
    return schedule, summary


def aggregate_yearly(schedule: Iterable[Payment]) -> List[YearTotals]:
    """Aggregate schedule rows by calendar year of their payment date."""
    totals: List[YearTotals] = []
    for year, group in groupby(schedule, key=lambda entry: entry.date.year):
        rows = list(group)
        totals.append(
            YearTotals(
                year=year,
                payments=len(rows),
                gross_payment=sum(r.gross_payment for r in rows),
                principal=sum(r.principal_portion for r in rows),
                interest=sum(r.interest_portion for r in rows),
                extra_payment=sum(r.extra_payment for r in rows),
                end_balance=rows[-1].remaining_balance,
            )
        )
    return totals

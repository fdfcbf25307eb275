"""Loan calculator: solve for payment, amount, term or rate of a monthly loan.

Each mode takes the three known quantities and returns the fourth together
with the usual totals. Insurance and taxes are monthly costs on top of the
loan payment; fees are a one-off cost added to the total.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from .errors import InvalidInputError
from .formulas import (
    loan_amount_from_payment,
    loan_term_from_payment,
    monthly_payment,
    to_periodic_rate,
)
from .settings import MONTHS_IN_YEAR
from .solvers import solve_rate_for_payment

LOAN_MODES = ("payment", "amount", "term", "rate")


@dataclass(frozen=True)
class LoanResult:
    mode: str
    values: Dict[str, float] = field(default_factory=dict)
    converged: bool = True


def _require_positive(**values: float) -> None:
    for name, value in values.items():
        if value <= 0:
            raise InvalidInputError(f"{name.replace('_', ' ').capitalize()} must be positive")


def solve_loan(
    mode: str,
    principal: float = 0.0,
    annual_rate_percent: float = 0.0,
    years: float = 0.0,
    payment: float = 0.0,
    down_payment: float = 0.0,
    fees: float = 0.0,
    insurance: float = 0.0,
    taxes: float = 0.0,
) -> LoanResult:
    """Solve the loan for ``mode``, one of ``LOAN_MODES``."""
    if mode not in LOAN_MODES:
        raise InvalidInputError(f"Unknown loan calculation: {mode}")
    if annual_rate_percent < 0:
        raise InvalidInputError("Interest rate must not be negative")
    monthly_costs = insurance + taxes
    monthly_rate = to_periodic_rate(annual_rate_percent, MONTHS_IN_YEAR)

    if mode == "payment":
        pmt = monthly_payment(principal, annual_rate_percent, years)
        total = pmt * years * MONTHS_IN_YEAR
        return LoanResult(
            mode,
            {
                "monthly_payment": pmt,
                "total_monthly_payment": pmt + monthly_costs,
                "loan_amount": principal,
                "total_payments": total,
                "total_interest": total - principal,
                "total_cost": total + fees,
            },
        )

    if mode == "amount":
        _require_positive(payment=payment, loan_term=years)
        periods = years * MONTHS_IN_YEAR
        loan = loan_amount_from_payment(payment, monthly_rate, periods)
        total = payment * periods
        return LoanResult(
            mode,
            {
                "max_loan_amount": loan,
                "max_purchase_price": loan + down_payment,
                "monthly_payment": payment,
                "total_monthly_payment": payment + monthly_costs,
                "total_payments": total,
                "total_interest": total - loan,
                "total_cost": total + fees,
            },
        )

    if mode == "term":
        months = loan_term_from_payment(principal, payment, monthly_rate)
        total = payment * months
        return LoanResult(
            mode,
            {
                "loan_term_years": months / MONTHS_IN_YEAR,
                "loan_term_months": months,
                "loan_amount": principal,
                "monthly_payment": payment,
                "total_monthly_payment": payment + monthly_costs,
                "total_payments": total,
                "total_interest": total - principal,
                "total_cost": total + fees,
            },
        )

    _require_positive(loan_term=years)
    periods = years * MONTHS_IN_YEAR
    solved = solve_rate_for_payment(principal, payment, periods)
    total = payment * periods
    return LoanResult(
        mode,
        {
            "annual_rate_percent": solved.value * MONTHS_IN_YEAR * 100,
            "monthly_rate_percent": solved.value * 100,
            "loan_amount": principal,
            "monthly_payment": payment,
            "total_monthly_payment": payment + monthly_costs,
            "total_payments": total,
            "total_interest": total - principal,
            "total_cost": total + fees,
        },
        converged=solved.converged,
    )

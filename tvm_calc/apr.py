"""Annual percentage rate including fees and points.

The APR is the annual rate at which the present value of the scheduled
monthly payments equals the amount the borrower actually receives, i.e. the
principal less fees and points. The monthly payment itself is still computed
from the nominal rate on the full principal, so any fee pushes the APR above
the nominal rate.
"""

from __future__ import annotations

import warnings
from typing import Callable, Dict, Tuple

from .data_models import AprResult
from .errors import InvalidInputError, NonConvergenceWarning
from .formulas import annuity_present_value, monthly_payment
from .settings import APR_STEP, APR_TOLERANCE, MAX_ITERATIONS, MONTHS_IN_YEAR

# (payment, periods, net amount, nominal rate, max_iterations, tolerance, step)
# -> (annual rate, iterations, converged)
_Search = Callable[[float, float, float, float, int, float, float], Tuple[float, int, bool]]


def _present_value(payment: float, annual_rate: float, periods: float) -> float:
    return annuity_present_value(payment, annual_rate / MONTHS_IN_YEAR, periods)


def _step_search(
    payment: float,
    periods: float,
    net_amount: float,
    nominal_rate: float,
    max_iterations: int,
    tolerance: float,
    step: float,
) -> Tuple[float, int, bool]:
    """Walk from the nominal rate in fixed steps toward the net amount.

    A walk of ``max_iterations`` steps only covers ``max_iterations * step``
    of rate, so large fees leave it short of the answer. It also rarely lands
    within ``tolerance`` of the net amount and usually ends oscillating one
    step either side of it.
    """
    apr = nominal_rate
    for iteration in range(max_iterations):
        pv = _present_value(payment, apr, periods)
        if abs(pv - net_amount) < tolerance:
            return apr, iteration, True
        apr += step if pv > net_amount else -step
    return apr, max_iterations, False


def _bisection_search(
    payment: float,
    periods: float,
    net_amount: float,
    nominal_rate: float,
    max_iterations: int,
    tolerance: float,
    step: float,
) -> Tuple[float, int, bool]:
    """Bracket the rate between zero and an expanding upper bound, then bisect.

    The present value falls as the rate rises, and at a zero rate it equals
    the sum of the payments, which is never below the net amount.
    """
    low = 0.0
    if abs(_present_value(payment, low, periods) - net_amount) < tolerance:
        return low, 0, True

    high = nominal_rate + 0.01
    iterations = 0
    while _present_value(payment, high, periods) > net_amount:
        iterations += 1
        if iterations >= max_iterations:
            return high, iterations, False
        low, high = high, high * 2

    while iterations < max_iterations:
        iterations += 1
        mid = (low + high) / 2
        diff = _present_value(payment, mid, periods) - net_amount
        if abs(diff) < tolerance:
            return mid, iterations, True
        if diff > 0:
            low = mid
        else:
            high = mid
    return (low + high) / 2, iterations, False


_SEARCHES: Dict[str, _Search] = {
    "bisection": _bisection_search,
    "step": _step_search,
}


def calculate_apr(
    principal: float,
    nominal_rate_percent: float,
    term_years: float,
    fees: float = 0.0,
    points: float = 0.0,
    method: str = "bisection",
    max_iterations: int = MAX_ITERATIONS,
    tolerance: float = APR_TOLERANCE,
    step: float = APR_STEP,
) -> AprResult:
    """Compute the APR of a monthly-paid loan.

    Parameters
    ----------
    principal: float
        Amount borrowed.
    nominal_rate_percent: float
        Quoted annual rate in percent.
    term_years: float
        Loan term in years.
    fees: float
        Flat fees deducted from the amount disbursed.
    points: float
        Discount points, each one percent of the principal.
    method: str
        ``"bisection"`` (default) or ``"step"`` for the fixed-step walk.
    max_iterations, tolerance, step:
        Iteration cap, tolerance on the present value difference and the
        rate step of the ``"step"`` method.

    Returns
    -------
    AprResult
        APR and nominal rate in percent, plus payment and cost totals. When
        the search stops at its cap ``converged`` is False, the last estimate
        is returned and a ``NonConvergenceWarning`` is issued.
    """
    if fees < 0 or points < 0:
        raise InvalidInputError("Fees and points must not be negative")
    if max_iterations < 1:
        raise InvalidInputError("max_iterations must be at least 1")
    search = _SEARCHES.get(method)
    if search is None:
        raise InvalidInputError(f"Unknown APR search method: {method}")

    payment = monthly_payment(principal, nominal_rate_percent, term_years)
    periods = term_years * MONTHS_IN_YEAR
    total_fees = fees + points * principal / 100
    net_amount = principal - total_fees
    if net_amount <= 0:
        raise InvalidInputError("Fees and points consume the whole principal")

    apr, iterations, converged = search(
        payment,
        periods,
        net_amount,
        nominal_rate_percent / 100,
        max_iterations,
        tolerance,
        step,
    )
    if not converged:
        warnings.warn(
            f"APR search did not converge within {max_iterations} iterations; "
            f"last estimate {apr * 100:.4f}% is unreliable",
            NonConvergenceWarning,
            stacklevel=2,
        )

    total_interest = payment * periods - principal
    return AprResult(
        apr=apr * 100,
        nominal_rate=nominal_rate_percent,
        monthly_payment=payment,
        total_interest=total_interest,
        total_fees=total_fees,
        net_loan_amount=net_amount,
        total_cost=principal + total_interest + total_fees,
        iterations=iterations,
        converged=converged,
    )

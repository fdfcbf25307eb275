"""Newton-Raphson solvers for rates that have no closed-form inverse.

Each solver returns a :class:`SolverResult`. When the iteration cap is
reached before successive estimates agree within ``tolerance`` the last
estimate is still returned, with ``converged=False``, and a
:class:`NonConvergenceWarning` is issued. A vanishing derivative or an
estimate at or below -100 % is a :class:`DomainError`.
"""

from __future__ import annotations

import warnings
from typing import Callable, Iterable, List, Tuple

from .data_models import SolverResult
from .errors import DomainError, InvalidInputError, NonConvergenceWarning
from .settings import (
    DERIVATIVE_EPSILON,
    MAX_ITERATIONS,
    PAYMENT_RATE_TOLERANCE,
    RATE_TOLERANCE,
)


def _newton(
    func: Callable[[float], Tuple[float, float]],
    initial_guess: float,
    max_iterations: int,
    tolerance: float,
    label: str,
    keep_positive: bool = False,
) -> SolverResult:
    """Run Newton-Raphson on ``func``, which returns ``(f(r), f'(r))``."""
    if max_iterations < 1:
        raise InvalidInputError("max_iterations must be at least 1")
    if tolerance <= 0:
        raise InvalidInputError("tolerance must be positive")
    rate = initial_guess
    for iteration in range(1, max_iterations + 1):
        if rate <= -1:
            raise DomainError(f"{label}: rate estimate fell to {rate:.6f}, at or below -100%")
        value, slope = func(rate)
        if abs(slope) < DERIVATIVE_EPSILON:
            raise DomainError(f"{label}: derivative vanished at rate {rate:.6f}")
        new_rate = rate - value / slope
        if keep_positive and new_rate <= 0:
            # halve toward zero instead of stepping across it
            new_rate = rate / 2
        if abs(new_rate - rate) < tolerance:
            return SolverResult(value=new_rate, iterations=iteration, converged=True)
        rate = new_rate
    warnings.warn(
        f"{label} did not converge within {max_iterations} iterations; "
        f"last estimate {rate:.6f} is unreliable",
        NonConvergenceWarning,
        stacklevel=3,
    )
    return SolverResult(value=rate, iterations=max_iterations, converged=False)


def solve_rate_newton(
    pv: float,
    fv: float,
    periods: float,
    initial_guess: float = 0.1,
    max_iterations: int = MAX_ITERATIONS,
    tolerance: float = RATE_TOLERANCE,
) -> SolverResult:
    """Periodic rate that grows ``pv`` into ``fv`` over ``periods`` periods.

    Solves ``pv * (1 + r)^n - fv = 0`` with derivative
    ``pv * n * (1 + r)^(n - 1)``.
    """
    if periods <= 0:
        raise InvalidInputError("Number of periods must be positive")

    def growth(rate: float) -> Tuple[float, float]:
        base = 1 + rate
        return pv * base ** periods - fv, pv * periods * base ** (periods - 1)

    return _newton(growth, initial_guess, max_iterations, tolerance, "Rate solver")


def solve_rate_for_payment(
    principal: float,
    payment: float,
    periods: float,
    initial_guess: float = 0.01,
    max_iterations: int = MAX_ITERATIONS,
    tolerance: float = PAYMENT_RATE_TOLERANCE,
) -> SolverResult:
    """Periodic rate at which ``payment`` retires ``principal`` in ``periods``.

    Solves the annuity payment equation ``P*r*q/(q - 1) - PMT = 0`` with
    ``q = (1 + r)^n``.

    Raises
    ------
    DomainError
        If the payments add up to less than the principal, which would need
        a negative rate.
    """
    if principal <= 0:
        raise InvalidInputError("Principal must be positive")
    if payment <= 0:
        raise InvalidInputError("Payment must be positive")
    if periods <= 0:
        raise InvalidInputError("Number of periods must be positive")

    total_paid = payment * periods
    if abs(total_paid - principal) <= 1e-9 * principal:
        return SolverResult(value=0.0, iterations=0, converged=True)
    if total_paid < principal:
        raise DomainError(
            f"Payments total {total_paid:.2f}, less than the principal {principal:.2f}"
        )

    def annuity(rate: float) -> Tuple[float, float]:
        q = (1 + rate) ** periods
        value = principal * rate * q / (q - 1) - payment
        slope = principal * (q * (q - 1) - rate * periods * q / (1 + rate)) / (q - 1) ** 2
        return value, slope

    return _newton(
        annuity,
        initial_guess,
        max_iterations,
        tolerance,
        "Payment rate solver",
        keep_positive=True,
    )


def internal_rate_of_return(
    cash_flows: Iterable[float],
    initial_guess: float = 0.1,
    max_iterations: int = MAX_ITERATIONS,
    tolerance: float = RATE_TOLERANCE,
) -> SolverResult:
    """Rate at which the net present value of ``cash_flows`` is zero.

    ``cash_flows[0]`` happens now (usually the negative initial investment),
    ``cash_flows[t]`` at the end of period ``t``.
    """
    flows: List[float] = [float(cf) for cf in cash_flows]
    if len(flows) < 2:
        raise InvalidInputError("At least two cash flows are required")
    if not (any(cf > 0 for cf in flows) and any(cf < 0 for cf in flows)):
        raise DomainError("Cash flows need both a positive and a negative amount")

    def npv(rate: float) -> Tuple[float, float]:
        value = 0.0
        slope = 0.0
        for period, cf in enumerate(flows):
            value += cf / (1 + rate) ** period
            slope -= period * cf / (1 + rate) ** (period + 1)
        return value, slope

    return _newton(npv, initial_guess, max_iterations, tolerance, "IRR solver")

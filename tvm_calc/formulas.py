"""Closed-form time-value-of-money formulas.

Every function here works on a fractional *periodic* rate (``0.005`` for
0.5 % per period) except :func:`monthly_payment`, which takes the annual
percentage a borrower quotes. :func:`to_periodic_rate` is the one place the
percent-to-fraction conversion is done for the rest of the package.

The annuity payment formula is:

    payment = P * (r * (1 + r)^n) / ((1 + r)^n - 1)

where ``P`` is the principal, ``r`` the periodic rate and ``n`` the number of
payments. When the rate is zero it simplifies to ``P / n``.
"""

from __future__ import annotations

import math

from .data_models import PaymentTiming
from .errors import DomainError, InvalidInputError
from .settings import MONTHS_IN_YEAR


def to_periodic_rate(annual_rate_percent: float, periods_per_year: int) -> float:
    """Convert an annual percentage into a fractional rate per period."""
    if periods_per_year <= 0:
        raise InvalidInputError("Periods per year must be positive")
    return annual_rate_percent / 100 / periods_per_year


def _check_rate(rate: float) -> None:
    if rate <= -1:
        raise DomainError(f"Periodic rate must be greater than -100%, got {rate}")


def periodic_payment(principal: float, rate: float, periods: float) -> float:
    """Level payment that retires ``principal`` over ``periods`` payments."""
    if periods <= 0:
        raise InvalidInputError("Number of periods must be positive")
    _check_rate(rate)
    if rate == 0:
        return principal / periods
    factor = (1 + rate) ** periods
    return principal * (rate * factor) / (factor - 1)


def monthly_payment(principal: float, annual_rate_percent: float, years: float) -> float:
    """Return the monthly payment of a fully amortizing loan.

    Parameters
    ----------
    principal: float
        Amount borrowed; must be positive.
    annual_rate_percent: float
        Nominal annual rate in percent; must not be negative.
    years: float
        Loan term in years; must be positive.

    Raises
    ------
    InvalidInputError
        If any of the inputs is out of range.
    """
    if principal <= 0:
        raise InvalidInputError("Principal must be positive")
    if annual_rate_percent < 0:
        raise InvalidInputError("Interest rate must not be negative")
    if years <= 0:
        raise InvalidInputError("Loan term must be positive")
    n_months = years * MONTHS_IN_YEAR
    if annual_rate_percent == 0:
        return principal / n_months
    return periodic_payment(principal, to_periodic_rate(annual_rate_percent, MONTHS_IN_YEAR), n_months)


def present_value(future_value: float, rate: float, periods: float) -> float:
    """Discount a single future amount back ``periods`` periods."""
    _check_rate(rate)
    return future_value / (1 + rate) ** periods


def future_value(present_value: float, rate: float, periods: float) -> float:
    """Compound a single present amount forward ``periods`` periods."""
    _check_rate(rate)
    return present_value * (1 + rate) ** periods


def _due_factor(rate: float, timing: PaymentTiming) -> float:
    return 1 + rate if timing is PaymentTiming.BEGINNING else 1.0


def annuity_present_value(
    payment: float,
    rate: float,
    periods: float,
    timing: PaymentTiming = PaymentTiming.END,
) -> float:
    """Present value of ``periods`` level payments.

    Payments at the beginning of each period (annuity due) are worth one
    extra period of interest.
    """
    _check_rate(rate)
    if rate == 0:
        return payment * periods
    factor = (1 - (1 + rate) ** -periods) / rate
    return payment * factor * _due_factor(rate, timing)


def annuity_future_value(
    payment: float,
    rate: float,
    periods: float,
    timing: PaymentTiming = PaymentTiming.END,
) -> float:
    """Future value of ``periods`` level payments."""
    _check_rate(rate)
    if rate == 0:
        return payment * periods
    factor = ((1 + rate) ** periods - 1) / rate
    return payment * factor * _due_factor(rate, timing)


def payment_for_future_value(
    future_value: float,
    rate: float,
    periods: float,
    timing: PaymentTiming = PaymentTiming.END,
) -> float:
    """Level payment that accumulates to ``future_value`` (a sinking fund)."""
    if periods <= 0:
        raise InvalidInputError("Number of periods must be positive")
    return future_value / annuity_future_value(1.0, rate, periods, timing)


def loan_amount_from_payment(payment: float, rate: float, periods: float) -> float:
    """Largest principal that ``payment`` retires over ``periods`` periods."""
    if payment <= 0:
        raise InvalidInputError("Payment must be positive")
    if periods <= 0:
        raise InvalidInputError("Number of periods must be positive")
    return annuity_present_value(payment, rate, periods)


def loan_term_from_payment(principal: float, payment: float, rate: float) -> float:
    """Number of periods needed for ``payment`` to retire ``principal``.

    Solves ``n = -ln(1 - P*r/PMT) / ln(1 + r)``. The result is fractional;
    the last payment of a real schedule is correspondingly smaller.

    Raises
    ------
    DomainError
        If the payment does not exceed the interest of the first period, so
        the loan would never be repaid.
    """
    if principal <= 0:
        raise InvalidInputError("Principal must be positive")
    if payment <= 0:
        raise InvalidInputError("Payment must be positive")
    _check_rate(rate)
    if rate == 0:
        return principal / payment
    ratio = principal * rate / payment
    if ratio >= 1:
        raise DomainError(
            f"Payment {payment:.2f} does not cover the periodic interest "
            f"{principal * rate:.2f}; the loan is never repaid"
        )
    return -math.log(1 - ratio) / math.log(1 + rate)


def periods_for_growth(present_value: float, future_value: float, rate: float) -> float:
    """Number of periods for ``present_value`` to grow into ``future_value``."""
    _check_rate(rate)
    if present_value <= 0 or future_value <= 0:
        raise DomainError("Present and future value must both be positive")
    if rate == 0:
        if present_value == future_value:
            return 0.0
        raise DomainError("A zero rate never changes the value")
    periods = math.log(future_value / present_value) / math.log(1 + rate)
    if periods < 0:
        raise DomainError("The rate moves the value away from the target")
    return periods


def total_interest(payment: float, periods: float, principal: float) -> float:
    return payment * periods - principal

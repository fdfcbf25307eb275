"""Time-value-of-money calculator.

One handler per :class:`TvmKind`, selected through ``_HANDLERS``. Each
handler reads the fields of :class:`TvmInputs` it needs and returns a
:class:`TvmResult` with the value, the formula used and a short explanation.
Rates in results are annual percentages; periods count compounding periods.
"""

from __future__ import annotations

from typing import Callable, Dict, Union

from .data_models import PaymentTiming, TvmInputs, TvmKind, TvmResult
from .errors import DomainError, InvalidInputError
from .formulas import (
    annuity_future_value,
    annuity_present_value,
    future_value,
    loan_term_from_payment,
    payment_for_future_value,
    periodic_payment,
    periods_for_growth,
    present_value,
)
from .settings import COMPOUNDING_FREQUENCIES
from .solvers import solve_rate_for_payment, solve_rate_newton


def _require_periods(inputs: TvmInputs) -> None:
    if inputs.periods <= 0:
        raise InvalidInputError("Number of periods must be positive")


def _rate_text(inputs: TvmInputs) -> str:
    return f"{inputs.annual_rate_percent:.2f}% a year compounded {inputs.compounding_frequency}x"


def _solve_pv(inputs: TvmInputs) -> TvmResult:
    _require_periods(inputs)
    rate, n = inputs.periodic_rate, inputs.periods
    if inputs.payment == 0:
        return TvmResult(
            kind=TvmKind.PV,
            value=present_value(inputs.future_value, rate, n),
            formula="PV = FV / (1 + r)^n",
            explanation=(
                f"Present value of {inputs.future_value:,.2f} received after {n:g} periods "
                f"at {_rate_text(inputs)}"
            ),
        )
    value = annuity_present_value(inputs.payment, rate, n, inputs.timing) + present_value(
        inputs.future_value, rate, n
    )
    return TvmResult(
        kind=TvmKind.PV,
        value=value,
        formula="PV = PMT * [(1 - (1 + r)^-n) / r] * (1 + r*type) + FV / (1 + r)^n",
        explanation=(
            f"Present value of {n:g} payments of {inputs.payment:,.2f} "
            f"({inputs.timing.value} of period) plus {inputs.future_value:,.2f} at the end"
        ),
    )


def _solve_fv(inputs: TvmInputs) -> TvmResult:
    _require_periods(inputs)
    rate, n = inputs.periodic_rate, inputs.periods
    if inputs.payment == 0:
        return TvmResult(
            kind=TvmKind.FV,
            value=future_value(inputs.present_value, rate, n),
            formula="FV = PV * (1 + r)^n",
            explanation=(
                f"Future value of {inputs.present_value:,.2f} after {n:g} periods "
                f"at {_rate_text(inputs)}"
            ),
        )
    value = annuity_future_value(inputs.payment, rate, n, inputs.timing) + future_value(
        inputs.present_value, rate, n
    )
    return TvmResult(
        kind=TvmKind.FV,
        value=value,
        formula="FV = PMT * [((1 + r)^n - 1) / r] * (1 + r*type) + PV * (1 + r)^n",
        explanation=(
            f"Future value of {n:g} payments of {inputs.payment:,.2f} "
            f"({inputs.timing.value} of period) on top of {inputs.present_value:,.2f}"
        ),
    )


def _solve_pmt(inputs: TvmInputs) -> TvmResult:
    _require_periods(inputs)
    rate, n = inputs.periodic_rate, inputs.periods
    if inputs.future_value == 0:
        if inputs.present_value <= 0:
            raise InvalidInputError("Present value must be positive to compute a loan payment")
        value = periodic_payment(inputs.present_value, rate, n)
        if inputs.timing is PaymentTiming.BEGINNING:
            value /= 1 + rate
        return TvmResult(
            kind=TvmKind.PMT,
            value=value,
            formula="PMT = PV * r / (1 - (1 + r)^-n)",
            explanation=(
                f"Payment that repays {inputs.present_value:,.2f} over {n:g} periods "
                f"at {_rate_text(inputs)}"
            ),
        )
    remaining = inputs.future_value - future_value(inputs.present_value, rate, n)
    if remaining <= 0:
        raise DomainError(
            f"{inputs.present_value:,.2f} already grows past {inputs.future_value:,.2f} "
            f"in {n:g} periods"
        )
    return TvmResult(
        kind=TvmKind.PMT,
        value=payment_for_future_value(remaining, rate, n, inputs.timing),
        formula="PMT = (FV - PV * (1 + r)^n) * r / ((1 + r)^n - 1) / (1 + r*type)",
        explanation=(
            f"Payment that grows {inputs.present_value:,.2f} into {inputs.future_value:,.2f} "
            f"over {n:g} periods at {_rate_text(inputs)}"
        ),
    )


def _solve_rate(inputs: TvmInputs) -> TvmResult:
    _require_periods(inputs)
    n = inputs.periods
    if inputs.payment == 0:
        result = solve_rate_newton(inputs.present_value, inputs.future_value, n)
        formula = "(1 + r)^n = FV / PV, solved by Newton-Raphson"
        explanation = (
            f"Rate that grows {inputs.present_value:,.2f} into {inputs.future_value:,.2f} "
            f"over {n:g} periods"
        )
    else:
        result = solve_rate_for_payment(inputs.present_value, inputs.payment, n)
        formula = "PMT = PV * r * (1 + r)^n / ((1 + r)^n - 1), solved by Newton-Raphson"
        explanation = (
            f"Rate at which {n:g} payments of {inputs.payment:,.2f} repay "
            f"{inputs.present_value:,.2f}"
        )
    return TvmResult(
        kind=TvmKind.RATE,
        value=result.value * inputs.compounding_frequency * 100,
        formula=formula,
        explanation=explanation,
        converged=result.converged,
        iterations=result.iterations,
    )


def _solve_nper(inputs: TvmInputs) -> TvmResult:
    rate = inputs.periodic_rate
    if inputs.payment == 0:
        return TvmResult(
            kind=TvmKind.NPER,
            value=periods_for_growth(inputs.present_value, inputs.future_value, rate),
            formula="n = ln(FV / PV) / ln(1 + r)",
            explanation=(
                f"Periods for {inputs.present_value:,.2f} to grow into "
                f"{inputs.future_value:,.2f} at {_rate_text(inputs)}"
            ),
        )
    # A payment at the start of a period is worth one more period of interest.
    payment = inputs.payment
    if inputs.timing is PaymentTiming.BEGINNING:
        payment *= 1 + rate
    return TvmResult(
        kind=TvmKind.NPER,
        value=loan_term_from_payment(inputs.present_value, payment, rate),
        formula="n = -ln(1 - PV * r / (PMT * (1 + r*type))) / ln(1 + r)",
        explanation=(
            f"Payments of {inputs.payment:,.2f} ({inputs.timing.value} of period) needed to "
            f"repay {inputs.present_value:,.2f} at {_rate_text(inputs)}"
        ),
    )


_HANDLERS: Dict[TvmKind, Callable[[TvmInputs], TvmResult]] = {
    TvmKind.PV: _solve_pv,
    TvmKind.FV: _solve_fv,
    TvmKind.PMT: _solve_pmt,
    TvmKind.RATE: _solve_rate,
    TvmKind.NPER: _solve_nper,
}


def calculate(kind: Union[TvmKind, str], inputs: TvmInputs) -> TvmResult:
    """Solve for ``kind`` given the other TVM quantities in ``inputs``."""
    try:
        kind = TvmKind(kind.lower() if isinstance(kind, str) else kind)
    except ValueError:
        raise InvalidInputError(f"Unknown calculation kind: {kind}") from None
    if inputs.compounding_frequency not in COMPOUNDING_FREQUENCIES:
        raise InvalidInputError(
            f"Compounding frequency must be one of {COMPOUNDING_FREQUENCIES}"
        )
    if inputs.annual_rate_percent < 0:
        raise InvalidInputError("Interest rate must not be negative")
    return _HANDLERS[kind](inputs)

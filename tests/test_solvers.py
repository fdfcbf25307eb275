import pytest

from tvm_calc.errors import DomainError, InvalidInputError, NonConvergenceWarning
from tvm_calc.formulas import monthly_payment
from tvm_calc.solvers import (
    internal_rate_of_return,
    solve_rate_for_payment,
    solve_rate_newton,
)


def test_no_growth_needs_no_rate():
    result = solve_rate_newton(pv=1000, fv=1000, periods=10)
    assert result.converged
    assert result.value == pytest.approx(0.0, abs=1e-3)


def test_doubling_in_ten_periods():
    result = solve_rate_newton(1000, 2000, 10)
    assert result.converged
    assert result.value == pytest.approx(2 ** 0.1 - 1, abs=1e-4)
    assert result.iterations < 100


def test_zero_present_value_has_no_derivative():
    with pytest.raises(DomainError):
        solve_rate_newton(0, 1000, 10)


def test_iteration_cap_returns_last_estimate_flagged():
    with pytest.warns(NonConvergenceWarning):
        result = solve_rate_newton(1000, 2000, 10, max_iterations=1)
    assert not result.converged
    assert result.iterations == 1
    assert result.value != pytest.approx(2 ** 0.1 - 1, abs=1e-4)


def test_invalid_solver_settings():
    with pytest.raises(InvalidInputError):
        solve_rate_newton(1000, 2000, 10, max_iterations=0)
    with pytest.raises(InvalidInputError):
        solve_rate_newton(1000, 2000, 0)


def test_rate_for_payment_recovers_monthly_rate():
    pmt = monthly_payment(100_000, 6, 30)
    result = solve_rate_for_payment(100_000, pmt, 360)
    assert result.converged
    assert result.value == pytest.approx(0.005, abs=1e-7)


def test_rate_for_payment_from_low_guess():
    pmt = monthly_payment(20_000, 9, 5)
    result = solve_rate_for_payment(20_000, pmt, 60, initial_guess=0.0001)
    assert result.converged
    assert result.value == pytest.approx(0.0075, abs=1e-7)


def test_rate_for_payment_zero_rate():
    result = solve_rate_for_payment(12_000, 1000, 12)
    assert result.value == 0.0
    assert result.converged


def test_rate_for_payment_needs_payments_above_principal():
    with pytest.raises(DomainError):
        solve_rate_for_payment(12_000, 900, 12)


def test_irr_simple_cases():
    assert internal_rate_of_return([-1000, 1100]).value == pytest.approx(0.1)
    assert internal_rate_of_return([-1000, 500, 500]).value == pytest.approx(0.0, abs=1e-6)


def test_irr_requires_sign_change():
    with pytest.raises(DomainError):
        internal_rate_of_return([100, 200])
    with pytest.raises(InvalidInputError):
        internal_rate_of_return([-100])

import pytest

from tvm_calc.apr import calculate_apr
from tvm_calc.errors import InvalidInputError, NonConvergenceWarning
from tvm_calc.formulas import annuity_present_value


def test_fees_and_points_raise_apr_above_nominal():
    result = calculate_apr(100_000, 5, 20, fees=2000, points=1)
    assert result.total_fees == pytest.approx(3000)
    assert result.net_loan_amount == pytest.approx(97_000)
    assert result.converged
    assert result.apr > 5
    assert 5.3 < result.apr < 5.45
    assert result.monthly_payment == pytest.approx(659.96, abs=0.01)
    assert result.total_cost == pytest.approx(100_000 + result.total_interest + 3000)


def test_apr_discounts_payments_to_net_amount():
    result = calculate_apr(100_000, 5, 20, fees=2000, points=1)
    pv = annuity_present_value(result.monthly_payment, result.apr / 100 / 12, 240)
    assert pv == pytest.approx(97_000, abs=1e-3)


def test_no_fees_apr_equals_nominal():
    result = calculate_apr(200_000, 4.25, 30)
    assert result.apr == pytest.approx(4.25, abs=1e-6)
    assert result.converged


def test_zero_rate_without_fees():
    result = calculate_apr(12_000, 0, 1)
    assert result.apr == 0.0
    assert result.iterations == 0
    assert result.monthly_payment == pytest.approx(1000)


def test_zero_rate_with_fees_has_positive_apr():
    result = calculate_apr(12_000, 0, 1, fees=100)
    assert result.converged
    assert result.apr > 0


def test_step_walk_moves_one_step_per_iteration():
    with pytest.warns(NonConvergenceWarning):
        result = calculate_apr(100_000, 5, 20, fees=2000, points=1, method="step", max_iterations=5)
    assert not result.converged
    assert result.iterations == 5
    assert result.apr == pytest.approx(5.05, abs=1e-9)


def test_step_walk_cannot_reach_large_fees():
    with pytest.warns(NonConvergenceWarning):
        result = calculate_apr(100_000, 5, 20, fees=20_000, method="step")
    assert not result.converged
    assert result.apr == pytest.approx(6.0, abs=1e-6)
    assert calculate_apr(100_000, 5, 20, fees=20_000).apr > 7


@pytest.mark.parametrize(
    "kwargs",
    [
        {"fees": 100_000},
        {"fees": 50_000, "points": 50},
        {"fees": -1},
        {"points": -1},
        {"method": "newton"},
        {"max_iterations": 0},
    ],
)
def test_invalid_apr_inputs(kwargs):
    with pytest.raises(InvalidInputError):
        calculate_apr(100_000, 5, 20, **kwargs)


def test_invalid_loan_inputs():
    with pytest.raises(InvalidInputError):
        calculate_apr(0, 5, 20)

import math

import pytest

from tvm_calc.data_models import PaymentTiming
from tvm_calc.errors import DomainError, InvalidInputError
from tvm_calc.formulas import (
    annuity_future_value,
    annuity_present_value,
    future_value,
    loan_amount_from_payment,
    loan_term_from_payment,
    monthly_payment,
    payment_for_future_value,
    periods_for_growth,
    present_value,
    to_periodic_rate,
    total_interest,
)


def test_monthly_payment_known_case():
    pmt = monthly_payment(100_000, 6, 30)
    assert pmt == pytest.approx(599.55, abs=0.01)
    assert total_interest(pmt, 360, 100_000) == pytest.approx(115_838, abs=1)


def test_monthly_payment_zero_rate_is_exact():
    assert monthly_payment(12_000, 0, 1) == 1000


@pytest.mark.parametrize(
    "principal, rate, years",
    [(0, 5, 10), (-100, 5, 10), (1000, -1, 10), (1000, 5, 0), (1000, 5, -2)],
)
def test_monthly_payment_rejects_invalid_input(principal, rate, years):
    with pytest.raises(InvalidInputError):
        monthly_payment(principal, rate, years)


@pytest.mark.parametrize(
    "principal, rate, years",
    [(1_000, 0.5, 1), (250_000, 3.25, 15), (50_000, 12, 5), (10_000, 0, 3)],
)
def test_total_paid_covers_principal(principal, rate, years):
    paid = monthly_payment(principal, rate, years) * years * 12
    if rate == 0:
        assert paid == pytest.approx(principal)
    else:
        assert paid > principal


def test_loan_amount_inverts_monthly_payment():
    rate = to_periodic_rate(6, 12)
    pmt = monthly_payment(100_000, 6, 30)
    assert math.isclose(loan_amount_from_payment(pmt, rate, 360), 100_000, rel_tol=1e-6)


def test_loan_amount_zero_rate():
    assert loan_amount_from_payment(500, 0, 24) == 12_000


def test_single_sum_compounding():
    assert future_value(1000, 0.05, 2) == pytest.approx(1102.5)
    assert present_value(1102.5, 0.05, 2) == pytest.approx(1000)


def test_annuity_due_is_worth_one_more_period():
    ordinary = annuity_present_value(100, 0.01, 12)
    due = annuity_present_value(100, 0.01, 12, PaymentTiming.BEGINNING)
    assert ordinary == pytest.approx(1125.51, abs=0.01)
    assert due == pytest.approx(ordinary * 1.01)
    assert annuity_future_value(100, 0.01, 12, PaymentTiming.BEGINNING) == pytest.approx(
        annuity_future_value(100, 0.01, 12) * 1.01
    )


def test_zero_rate_annuities_are_plain_sums():
    assert annuity_present_value(100, 0, 10) == 1000
    assert annuity_future_value(100, 0, 10) == 1000
    assert payment_for_future_value(10_000, 0, 10) == 1000


def test_loan_term_from_payment():
    rate = to_periodic_rate(6, 12)
    pmt = monthly_payment(100_000, 6, 30)
    assert loan_term_from_payment(100_000, pmt, rate) == pytest.approx(360)
    assert loan_term_from_payment(12_000, 1000, 0) == 12


@pytest.mark.parametrize("payment", [500, 400, 1])
def test_loan_term_fails_when_payment_does_not_cover_interest(payment):
    with pytest.raises(DomainError):
        loan_term_from_payment(100_000, payment, 0.005)


def test_periods_for_growth():
    assert periods_for_growth(1000, 2000, 0.05) == pytest.approx(math.log(2) / math.log(1.05))
    with pytest.raises(DomainError):
        periods_for_growth(1000, 2000, 0)
    with pytest.raises(DomainError):
        periods_for_growth(0, 2000, 0.05)


def test_rate_at_or_below_minus_one_is_rejected():
    with pytest.raises(DomainError):
        future_value(1000, -1, 3)

from datetime import date

import pytest

from tvm_calc.data_models import LoanParameters, Overpayment, PaymentFrequency, ScheduleConfig
from tvm_calc.engine import aggregate_yearly, compute_schedule
from tvm_calc.errors import InvalidInputError, ScheduleOverrunWarning
from tvm_calc.formulas import monthly_payment


def make_config(**overrides):
    params = dict(
        principal=100_000,
        annual_rate_percent=6,
        term_years=30,
        start_date=date(2024, 1, 1),
    )
    params.update(overrides)
    return ScheduleConfig(**params)


def test_thirty_year_mortgage():
    schedule, summary = compute_schedule(make_config())
    assert len(schedule) == 360
    assert schedule[0].interest_portion == pytest.approx(500.0)
    assert schedule[-1].remaining_balance == 0.0
    assert summary.periodic_payment == pytest.approx(599.55, abs=0.01)
    assert summary.total_interest == pytest.approx(115_838, abs=1)
    assert summary.total_payments == 360
    assert summary.time_saved == 0
    assert summary.interest_saved == 0.0
    assert not summary.overrun


def test_schedule_invariants():
    schedule, summary = compute_schedule(make_config(principal=250_000, annual_rate_percent=4.5, term_years=15))
    balances = [row.remaining_balance for row in schedule]
    assert all(later <= earlier for earlier, later in zip(balances, balances[1:]))
    assert balances[-1] == pytest.approx(0.0, abs=0.01)
    assert sum(row.principal_portion for row in schedule) == pytest.approx(250_000, abs=0.01)
    for row in schedule:
        assert row.gross_payment == pytest.approx(row.principal_portion + row.interest_portion)
    assert schedule[-1].cumulative_interest == pytest.approx(summary.total_interest)
    assert schedule[-1].cumulative_principal == pytest.approx(summary.total_principal)
    assert [row.payment_number for row in schedule] == list(range(1, 181))


def test_zero_rate_schedule():
    schedule, summary = compute_schedule(make_config(principal=12_000, annual_rate_percent=0, term_years=1))
    assert len(schedule) == 12
    assert all(row.gross_payment == pytest.approx(1000) for row in schedule)
    assert summary.total_interest == 0.0
    assert schedule[-1].remaining_balance == 0.0


def test_payoff_dates():
    _, summary = compute_schedule(make_config())
    assert summary.original_payoff_date == date(2053, 12, 1)
    assert summary.payoff_date == date(2053, 12, 1)


def test_quarterly_dates_advance_three_months():
    schedule, _ = compute_schedule(make_config(term_years=10, frequency=PaymentFrequency.QUARTERLY))
    assert len(schedule) == 40
    assert schedule[1].date == date(2024, 4, 1)
    assert schedule[4].date == date(2025, 1, 1)
    assert schedule[0].interest_portion == pytest.approx(100_000 * 0.06 / 4)


def test_annual_frequency():
    schedule, summary = compute_schedule(make_config(term_years=5, frequency=PaymentFrequency.ANNUAL))
    assert len(schedule) == 5
    assert schedule[-1].date == date(2028, 1, 1)
    assert summary.periodic_payment == pytest.approx(23_739.64, abs=0.01)


def test_month_end_dates_are_clamped_not_drifting():
    schedule, _ = compute_schedule(make_config(term_years=1, start_date=date(2024, 1, 31)))
    assert schedule[1].date == date(2024, 2, 29)
    assert schedule[2].date == date(2024, 3, 31)


def test_extra_payment_shortens_schedule():
    schedule, summary = compute_schedule(make_config(extra_payment=200))
    assert len(schedule) < 360
    assert summary.time_saved == 360 - len(schedule)
    assert summary.interest_saved > 0
    assert summary.extra_payment_total > 0
    assert schedule[0].extra_payment == pytest.approx(200)
    assert schedule[0].principal_portion == pytest.approx(599.55 - 500 + 200, abs=0.01)
    assert schedule[-1].remaining_balance == 0.0
    assert sum(row.principal_portion for row in schedule) == pytest.approx(100_000, abs=0.01)
    assert summary.payoff_date < summary.original_payoff_date


def test_one_off_overpayment():
    baseline, _ = compute_schedule(make_config())
    config = make_config(overpayments=[Overpayment(date(2024, 6, 1), 10_000)])
    schedule, summary = compute_schedule(config)
    assert schedule[5].extra_payment == pytest.approx(10_000)
    assert schedule[5].principal_portion == pytest.approx(baseline[5].principal_portion + 10_000)
    assert len(schedule) < len(baseline)
    assert summary.extra_payment_total == pytest.approx(10_000)


def test_extra_payment_covering_balance_truncates_last_row():
    config = make_config(principal=10_000, annual_rate_percent=12, term_years=1, extra_payment=1_000_000)
    schedule, summary = compute_schedule(config)
    assert len(schedule) == 1
    row = schedule[0]
    assert row.principal_portion == pytest.approx(10_000)
    assert row.interest_portion == pytest.approx(100)
    assert row.gross_payment == pytest.approx(10_100)
    assert row.extra_payment == pytest.approx(10_000 - (summary.periodic_payment - 100))
    assert row.remaining_balance == 0.0
    assert summary.time_saved == 11


def test_payment_below_interest_overruns():
    with pytest.warns(ScheduleOverrunWarning):
        schedule, summary = compute_schedule(make_config(periodic_payment=400))
    assert summary.overrun
    assert len(schedule) == 360
    assert all(row.remaining_balance == 100_000 for row in schedule)
    assert all(row.principal_portion == 0 for row in schedule)
    assert schedule[0].interest_portion == pytest.approx(400)
    assert summary.total_interest == pytest.approx(400 * 360)
    assert summary.unpaid_interest == pytest.approx(100 * 360)


def test_payment_above_interest_but_too_small_overruns():
    with pytest.warns(ScheduleOverrunWarning):
        schedule, summary = compute_schedule(make_config(periodic_payment=550))
    assert summary.overrun
    assert 0 < schedule[-1].remaining_balance < 100_000


@pytest.mark.parametrize(
    "overrides",
    [
        {"principal": 0},
        {"principal": -5},
        {"annual_rate_percent": -1},
        {"term_years": 0},
        {"extra_payment": -10},
        {"periodic_payment": 0},
        {"overpayments": [Overpayment(date(2024, 2, 1), -1)]},
    ],
)
def test_invalid_configs(overrides):
    with pytest.raises(InvalidInputError):
        compute_schedule(make_config(**overrides))


def test_aggregate_yearly():
    schedule, summary = compute_schedule(make_config())
    years = aggregate_yearly(schedule)
    assert len(years) == 30
    assert years[0].year == 2024
    assert all(y.payments == 12 for y in years)
    assert years[-1].end_balance == 0.0
    assert sum(y.interest for y in years) == pytest.approx(summary.total_interest)


def test_loan_parameters_of_config():
    loan = make_config(term_years=2).loan
    assert loan == LoanParameters(100_000, 6, 2)
    assert loan.periodic_rate(12) == pytest.approx(0.005)
    assert loan.total_periods(4) == 8


def test_fractional_term_ends_with_short_payment():
    schedule, summary = compute_schedule(make_config(principal=12_000, annual_rate_percent=5, term_years=1.05))
    assert summary.periodic_payment == pytest.approx(monthly_payment(12_000, 5, 1.05))
    assert len(schedule) == 13
    assert summary.scheduled_periods == 13
    assert not summary.overrun
    assert schedule[-1].remaining_balance == 0.0
    assert schedule[-1].gross_payment < summary.periodic_payment
    assert sum(row.principal_portion for row in schedule) == pytest.approx(12_000, abs=0.01)
    assert summary.original_payoff_date == date(2025, 1, 1)


def test_zero_rate_fractional_term():
    schedule, _ = compute_schedule(make_config(principal=1_300, annual_rate_percent=0, term_years=1.08))
    assert len(schedule) == 13
    assert schedule[-1].gross_payment == pytest.approx(1_300 - 12 * 1_300 / 12.96)


def test_overpayment_applies_on_next_payment_after_its_date():
    config = make_config(
        start_date=date(2024, 1, 15),
        overpayments=[Overpayment(date(2024, 6, 1), 10_000), Overpayment(date(2024, 6, 10), 5_000)],
    )
    baseline, _ = compute_schedule(make_config(start_date=date(2024, 1, 15)))
    schedule, summary = compute_schedule(config)
    assert schedule[4].extra_payment == 0
    assert schedule[5].date == date(2024, 6, 15)
    assert schedule[5].extra_payment == pytest.approx(15_000)
    assert summary.extra_payment_total == pytest.approx(15_000)
    assert len(schedule) < len(baseline)
    assert summary.payoff_date < date(2053, 12, 15)


def test_overpayment_on_last_scheduled_date_is_accepted():
    config = make_config(term_years=1, overpayments=[Overpayment(date(2024, 12, 1), 100)])
    schedule, summary = compute_schedule(config)
    assert len(schedule) == 12
    assert summary.payoff_date == date(2024, 12, 1)
    assert schedule[-1].remaining_balance == 0.0


@pytest.mark.parametrize("when", [date(2023, 12, 31), date(2054, 1, 2)])
def test_overpayment_outside_schedule_is_rejected(when):
    config = make_config(start_date=date(2024, 1, 15), overpayments=[Overpayment(when, 1_000)])
    with pytest.raises(InvalidInputError, match="outside the schedule"):
        compute_schedule(config)


def test_extra_payment_saves_interest_on_fractional_term():
    _, plain = compute_schedule(make_config(term_years=10.55))
    _, summary = compute_schedule(make_config(term_years=10.55, extra_payment=100))
    assert summary.interest_saved == pytest.approx(plain.total_interest - summary.total_interest)

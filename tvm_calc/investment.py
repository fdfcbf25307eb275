"""Investment-side helpers built on the core formulas."""

from __future__ import annotations

from typing import Iterable, Optional

from .data_models import InflationImpact, InvestmentGrowth
from .errors import DomainError, InvalidInputError
from .formulas import annuity_future_value, future_value, payment_for_future_value, to_periodic_rate
from .settings import MONTHS_IN_YEAR


def future_value_with_contributions(
    present_value: float,
    contribution: float,
    annual_rate_percent: float,
    years: float,
    compounding_frequency: int = MONTHS_IN_YEAR,
) -> InvestmentGrowth:
    """Grow a lump sum plus a contribution made at the end of every period.

    Contributions follow the compounding frequency, so with the default
    monthly compounding ``contribution`` is a monthly deposit.
    """
    if present_value < 0 or contribution < 0:
        raise InvalidInputError("Amounts must not be negative")
    if years <= 0:
        raise InvalidInputError("Investment period must be positive")
    rate = to_periodic_rate(annual_rate_percent, compounding_frequency)
    periods = years * compounding_frequency

    total = future_value(present_value, rate, periods)
    if contribution > 0:
        total += annuity_future_value(contribution, rate, periods)
    contributed = present_value + contribution * periods
    gains = total - contributed
    return InvestmentGrowth(
        future_value=total,
        total_contributions=contributed,
        total_gains=gains,
        gain_percentage=gains / contributed * 100 if contributed > 0 else 0.0,
    )


def required_monthly_contribution(
    target_amount: float,
    current_amount: float,
    annual_rate_percent: float,
    years: float,
) -> float:
    """Monthly deposit needed to reach ``target_amount``; 0 if already on track."""
    if years <= 0:
        raise InvalidInputError("Investment period must be positive")
    rate = to_periodic_rate(annual_rate_percent, MONTHS_IN_YEAR)
    periods = years * MONTHS_IN_YEAR
    remaining = target_amount - future_value(current_amount, rate, periods)
    if remaining <= 0:
        return 0.0
    return payment_for_future_value(remaining, rate, periods)


def net_present_value(cash_flows: Iterable[float], discount_rate_percent: float) -> float:
    """NPV of cash flows at periods 0..N, discounted at a percent rate."""
    rate = discount_rate_percent / 100
    if rate <= -1:
        raise DomainError("Discount rate must be greater than -100%")
    return sum(cf / (1 + rate) ** t for t, cf in enumerate(cash_flows))


def inflation_impact(amount: float, inflation_rate_percent: float, years: float) -> InflationImpact:
    if amount <= 0:
        raise InvalidInputError("Amount must be positive")
    growth = (1 + inflation_rate_percent / 100) ** years
    real_value = amount / growth
    loss = amount - real_value
    return InflationImpact(
        original_amount=amount,
        future_nominal_value=amount * growth,
        real_value=real_value,
        purchasing_power_loss=loss,
        loss_percentage=loss / amount * 100,
    )


def payback_period(initial_investment: float, annual_cash_flows: Iterable[float]) -> Optional[float]:
    """Years until cumulative cash flows recover ``initial_investment``.

    The year of recovery is prorated linearly. Returns None if the cash
    flows never recover the investment.
    """
    cumulative = 0.0
    for year, cash_flow in enumerate(annual_cash_flows):
        previous = cumulative
        cumulative += cash_flow
        if cumulative >= initial_investment:
            if cash_flow == 0:
                return float(year)
            return year + (initial_investment - previous) / cash_flow
    return None


def sharpe_ratio(portfolio_return: float, risk_free_rate: float, standard_deviation: float) -> float:
    if standard_deviation == 0:
        raise DomainError("Standard deviation cannot be zero")
    return (portfolio_return - risk_free_rate) / standard_deviation

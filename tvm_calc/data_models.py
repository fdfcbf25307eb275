"""Data models for the TVM calculator.

This module defines dataclasses representing the entities passed in and out
of the calculation engine: loan parameters, schedule configuration, one-off
overpayments, individual schedule rows and the aggregate results of the APR
and TVM calculators. All of them are frozen so a result can be handed to the
formatter or the web layer without fear of it being changed underneath.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional


class PaymentFrequency(Enum):
    """How often a scheduled payment is made. The value is periods per year."""

    MONTHLY = 12
    QUARTERLY = 4
    SEMIANNUAL = 2
    ANNUAL = 1

    @property
    def months_per_period(self) -> int:
        return 12 // self.value

    @classmethod
    def from_name(cls, name: str) -> "PaymentFrequency":
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown payment frequency: {name}") from None


class PaymentTiming(Enum):
    """Whether annuity payments fall at the end or beginning of each period."""

    END = "end"
    BEGINNING = "beginning"


class TvmKind(Enum):
    """The quantity a TVM calculation solves for."""

    PV = "pv"
    FV = "fv"
    PMT = "pmt"
    RATE = "rate"
    NPER = "nper"


@dataclass(frozen=True)
class LoanParameters:
    """Principal, annual rate and term of a loan.

    Attributes
    ----------
    principal: float
        The amount borrowed.
    annual_rate_percent: float
        Nominal annual interest rate in percent (``5.5`` means 5.5 %).
    term_years: float
        Loan term in years.
    """

    principal: float
    annual_rate_percent: float
    term_years: float

    def periodic_rate(self, periods_per_year: int = 12) -> float:
        return self.annual_rate_percent / 100 / periods_per_year

    def total_periods(self, periods_per_year: int = 12) -> float:
        return self.term_years * periods_per_year


@dataclass(frozen=True)
class Overpayment:
    """A one-off extra payment applied to the principal.

    Attributes
    ----------
    date: date
        The lump sum is added to the first scheduled payment on or after
        this date; it must lie within the scheduled payment dates.
    amount: float
        Extra money applied to the principal on that date.
    """

    date: date
    amount: float


@dataclass(frozen=True)
class ScheduleConfig:
    """Inputs of the amortization generator.

    ``extra_payment`` is added to every period. ``periodic_payment`` replaces
    the computed base payment when set; a value below the first period's
    interest will not retire the loan within the term.
    """

    principal: float
    annual_rate_percent: float
    term_years: float
    start_date: date
    frequency: PaymentFrequency = PaymentFrequency.MONTHLY
    extra_payment: float = 0.0
    overpayments: List[Overpayment] = field(default_factory=list)
    periodic_payment: Optional[float] = None

    @property
    def loan(self) -> LoanParameters:
        return LoanParameters(self.principal, self.annual_rate_percent, self.term_years)


@dataclass(frozen=True)
class Payment:
    """One row of an amortization schedule.

    The extra payment of the period is already included in
    ``principal_portion``, so ``gross_payment`` always equals
    ``principal_portion + interest_portion``. ``extra_payment`` repeats the
    extra amount for display.
    """

    payment_number: int
    date: date
    gross_payment: float
    principal_portion: float
    interest_portion: float
    extra_payment: float
    remaining_balance: float
    cumulative_interest: float
    cumulative_principal: float


@dataclass(frozen=True)
class ScheduleSummary:
    """Aggregate metrics over a generated schedule."""

    original_principal: float
    total_payments: int
    total_amount_paid: float
    total_interest: float
    total_principal: float
    periodic_payment: float
    extra_payment_total: float
    scheduled_periods: int
    time_saved: int
    interest_saved: float
    payoff_date: date
    original_payoff_date: date
    overrun: bool = False
    unpaid_interest: float = 0.0  # interest accrued but not covered by the payments


@dataclass(frozen=True)
class YearTotals:
    """Schedule rows of one calendar year added together."""

    year: int
    payments: int
    gross_payment: float
    principal: float
    interest: float
    extra_payment: float
    end_balance: float


@dataclass(frozen=True)
class SolverResult:
    """Outcome of an iterative solver.

    ``value`` is the last estimate. When ``converged`` is False the iteration
    cap was reached before the tolerance was met and the value should be
    treated as unreliable.
    """

    value: float
    iterations: int
    converged: bool


@dataclass(frozen=True)
class TvmInputs:
    """Inputs shared by the five TVM calculations.

    ``periods`` counts compounding periods; the periodic rate is
    ``annual_rate_percent / 100 / compounding_frequency``.
    """

    present_value: float = 0.0
    future_value: float = 0.0
    payment: float = 0.0
    annual_rate_percent: float = 0.0
    periods: float = 0.0
    compounding_frequency: int = 12
    timing: PaymentTiming = PaymentTiming.END

    @property
    def periodic_rate(self) -> float:
        return self.annual_rate_percent / 100 / self.compounding_frequency


@dataclass(frozen=True)
class TvmResult:
    kind: TvmKind
    value: float
    formula: str
    explanation: str
    converged: bool = True
    iterations: int = 0


@dataclass(frozen=True)
class InvestmentGrowth:
    future_value: float
    total_contributions: float
    total_gains: float
    gain_percentage: float


@dataclass(frozen=True)
class InflationImpact:
    """Effect of inflation on an amount held for a number of years.

    ``real_value`` is what the amount will buy in today's money;
    ``future_nominal_value`` is what today's basket will cost then.
    """

    original_amount: float
    future_nominal_value: float
    real_value: float
    purchasing_power_loss: float
    loss_percentage: float


@dataclass(frozen=True)
class AprResult:
    """Result of the APR calculation. Rates are in percent."""

    apr: float
    nominal_rate: float
    monthly_payment: float
    total_interest: float
    total_fees: float
    net_loan_amount: float
    total_cost: float
    iterations: int
    converged: bool

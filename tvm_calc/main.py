"""Command-line interface for the TVM calculator.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute loan payments, full amortization schedules,
APRs and time-value-of-money quantities, or compare two loan scenarios.
Schedules can be printed to the terminal or exported to JSON/CSV files.
"""

from __future__ import annotations

import csv
import functools
import json
import logging
import shlex
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import click

from .apr import calculate_apr
from .currency import currency_options, is_supported
from .data_models import (
    Overpayment,
    Payment,
    PaymentFrequency,
    PaymentTiming,
    ScheduleConfig,
    ScheduleSummary,
    TvmInputs,
)
from .engine import aggregate_yearly, compute_schedule
from .errors import TvmError
from .formatter import (
    print_apr,
    print_comparison,
    print_investment,
    print_loan_result,
    print_schedule,
    print_summary,
    print_tvm_result,
    print_yearly,
)
from .investment import future_value_with_contributions
from .loan import LOAN_MODES, solve_loan
from .settings import COMPOUNDING_FREQUENCIES, DEFAULT_CURRENCY, MAX_SCHEDULE_ROWS
from .tvm import calculate
from .utils import float_from_str, parse_date, to_jsonable

logger = logging.getLogger(__name__)


def parse_amount(value: str) -> float:
    """Parse a numeric string with optional suffixes.

    Accepts plain floats ("500000") and shorthand with ``k``/``m`` suffixes
    (e.g., "500k" meaning 500_000). Returns a float.
    """
    value = value.strip().lower()
    factor = 1.0
    if value.endswith("k"):
        factor = 1_000.0
        value = value[:-1]
    elif value.endswith("m"):
        factor = 1_000_000.0
        value = value[:-1]
    try:
        return float_from_str(value) * factor
    except ValueError:
        raise click.BadParameter(f"Invalid amount: {value}")


def _amount(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    return parse_amount(value)


def _date(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> Optional[date]:
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc))


def _currency(ctx: click.Context, param: click.Parameter, value: str) -> str:
    if not is_supported(value):
        raise click.BadParameter(f"Unsupported currency: {value}")
    return value.upper()


def parse_overpayment_strings(values: Tuple[str, ...]) -> List[Overpayment]:
    overpayments: List[Overpayment] = []
    for item in values:
        ym, sep, amt_str = item.rpartition(":")
        if not sep:
            raise click.BadParameter(
                f"Overpayment must be in YYYY-MM[-DD]:AMOUNT format; got {item}"
            )
        try:
            dt = parse_date(ym)
        except ValueError as exc:
            raise click.BadParameter(str(exc))
        overpayments.append(Overpayment(date=dt, amount=parse_amount(amt_str)))
    return overpayments


def engine_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Report calculation errors as click errors instead of tracebacks."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except TvmError as exc:
            logger.debug("Calculation failed", exc_info=True)
            raise click.ClickException(str(exc))

    return wrapper


_SCHEDULE_OPTIONS = [
    click.option("--principal", "-p", "principal", required=True, callback=_amount, help="Loan amount (accepts k/m suffixes)"),
    click.option("--rate", "-r", "rate", required=True, type=float, help="Annual interest rate (percent)"),
    click.option("--years", "-y", "years", required=True, type=float, help="Loan term in years"),
    click.option(
        "--frequency",
        "-f",
        "frequency",
        type=click.Choice([f.name.lower() for f in PaymentFrequency]),
        default="monthly",
        show_default=True,
        help="Payment frequency",
    ),
    click.option("--start-date", "-s", "start_date", callback=_date, help="First payment date (YYYY-MM or YYYY-MM-DD); defaults to today"),
    click.option("--extra", "-e", "extra", callback=_amount, help="Extra payment added to every period"),
    click.option("--overpayment", "overpayment", multiple=True, help="One-off overpayment in YYYY-MM[-DD]:AMOUNT format, applied on the first payment on or after that date"),
    click.option("--payment", "payment", callback=_amount, help="Override the periodic payment"),
]

_CURRENCY_OPTION = click.option(
    "--currency",
    "-c",
    "currency",
    envvar="TVM_CALC_CURRENCY",
    default=DEFAULT_CURRENCY,
    show_default=True,
    callback=_currency,
    help="Currency used to display amounts",
)


def schedule_options(func: Callable[..., Any]) -> Callable[..., Any]:
    for option in reversed(_SCHEDULE_OPTIONS):
        func = option(func)
    return func


def build_config_from_options(
    principal: float,
    rate: float,
    years: float,
    frequency: str = "monthly",
    start_date: Optional[date] = None,
    extra: Optional[float] = None,
    overpayment: Tuple[str, ...] = (),
    payment: Optional[float] = None,
) -> ScheduleConfig:
    return ScheduleConfig(
        principal=principal,
        annual_rate_percent=rate,
        term_years=years,
        start_date=start_date or date.today(),
        frequency=PaymentFrequency.from_name(frequency),
        extra_payment=extra or 0.0,
        overpayments=parse_overpayment_strings(tuple(overpayment)),
        periodic_payment=payment,
    )


def export_to_json(path: Path, schedule: List[Payment], summary: ScheduleSummary) -> None:
    """Export schedule and summary to a JSON file."""
    data = {"summary": to_jsonable(summary), "schedule": to_jsonable(schedule)}
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_to_csv(path: Path, schedule: List[Payment]) -> None:
    """Export schedule to a CSV file."""
    header = [
        "Payment_Number",
        "Date",
        "Payment",
        "Principal",
        "Interest",
        "Extra_Payment",
        "Remaining_Balance",
        "Cumulative_Interest",
        "Cumulative_Principal",
    ]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for e in schedule:
            writer.writerow(
                [
                    e.payment_number,
                    e.date.isoformat(),
                    round(e.gross_payment, 2),
                    round(e.principal_portion, 2),
                    round(e.interest_portion, 2),
                    round(e.extra_payment, 2),
                    round(e.remaining_balance, 2),
                    round(e.cumulative_interest, 2),
                    round(e.cumulative_principal, 2),
                ]
            )


@click.group()
@click.option("--verbose", "-v", count=True, help="Increase logging verbosity")
def cli(verbose: int) -> None:
    """A command-line time-value-of-money and loan calculator."""
    logging.basicConfig(
        level=max(logging.WARNING - 10 * verbose, logging.DEBUG),
        format="%(levelname)s %(name)s: %(message)s",
    )
    logging.captureWarnings(True)


@cli.command()
@click.option("--solve", "mode", type=click.Choice(LOAN_MODES), default="payment", show_default=True, help="Quantity to solve for")
@click.option("--principal", "-p", "principal", callback=_amount, help="Loan amount")
@click.option("--rate", "-r", "rate", type=float, default=0.0, help="Annual interest rate (percent)")
@click.option("--years", "-y", "years", type=float, default=0.0, help="Loan term in years")
@click.option("--payment", "payment", callback=_amount, help="Monthly payment")
@click.option("--down-payment", "-d", "down_payment", callback=_amount, help="Down payment (amount mode)")
@click.option("--fees", "fees", callback=_amount, help="One-off fees added to the total cost")
@click.option("--insurance", "insurance", callback=_amount, help="Monthly insurance")
@click.option("--taxes", "taxes", callback=_amount, help="Monthly property taxes")
@_CURRENCY_OPTION
@engine_errors
def payment(
    mode: str,
    principal: Optional[float],
    rate: float,
    years: float,
    payment: Optional[float],
    down_payment: Optional[float],
    fees: Optional[float],
    insurance: Optional[float],
    taxes: Optional[float],
    currency: str,
) -> None:
    """Solve a monthly loan for its payment, amount, term or rate."""
    result = solve_loan(
        mode,
        principal=principal or 0.0,
        annual_rate_percent=rate,
        years=years,
        payment=payment or 0.0,
        down_payment=down_payment or 0.0,
        fees=fees or 0.0,
        insurance=insurance or 0.0,
        taxes=taxes or 0.0,
    )
    print_loan_result(result.values, currency)
    if not result.converged:
        click.echo("Warning: the rate search did not converge; the result is unreliable.", err=True)


@cli.command()
@schedule_options
@click.option("--yearly", is_flag=True, help="Show yearly totals instead of every payment")
@click.option("--all", "show_all", is_flag=True, help="Print every row of long schedules")
@click.option("--output", "-o", "output", type=str, help="Output file path (.json or .csv)")
@_CURRENCY_OPTION
@engine_errors
def schedule(
    principal: float,
    rate: float,
    years: float,
    frequency: str,
    start_date: Optional[date],
    extra: Optional[float],
    overpayment: Tuple[str, ...],
    payment: Optional[float],
    yearly: bool,
    show_all: bool,
    output: Optional[str],
    currency: str,
) -> None:
    """Compute and print the full amortization schedule."""
    config = build_config_from_options(
        principal, rate, years, frequency, start_date, extra, overpayment, payment
    )
    schedule_entries, summary = compute_schedule(config)
    logger.debug("Generated %d schedule rows", len(schedule_entries))
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, schedule_entries, summary)
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, schedule_entries)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
        click.echo(f"Schedule exported to {path}")
        return

    print_summary(summary, currency)
    if yearly:
        print_yearly(aggregate_yearly(schedule_entries), currency)
    elif not show_all and len(schedule_entries) > MAX_SCHEDULE_ROWS:
        # Limit schedule length printed to avoid flooding the terminal
        click.echo(
            f"Schedule has {len(schedule_entries)} rows; showing first {MAX_SCHEDULE_ROWS} rows."
        )
        print_schedule(schedule_entries[:MAX_SCHEDULE_ROWS], currency)
    else:
        print_schedule(schedule_entries, currency)


@cli.command()
@schedule_options
@click.option("--output", "-o", "output", type=str, help="Output file path (.json)")
@_CURRENCY_OPTION
@engine_errors
def summary(
    principal: float,
    rate: float,
    years: float,
    frequency: str,
    start_date: Optional[date],
    extra: Optional[float],
    overpayment: Tuple[str, ...],
    payment: Optional[float],
    output: Optional[str],
    currency: str,
) -> None:
    """Compute and print only the summary metrics for a loan."""
    config = build_config_from_options(
        principal, rate, years, frequency, start_date, extra, overpayment, payment
    )
    _, summary_data = compute_schedule(config)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension")
        with path.open("w", encoding="utf-8") as f:
            json.dump({"summary": to_jsonable(summary_data)}, f, indent=2)
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(summary_data, currency)


@cli.command()
@click.option("--principal", "-p", "principal", required=True, callback=_amount, help="Loan amount")
@click.option("--rate", "-r", "rate", required=True, type=float, help="Nominal annual rate (percent)")
@click.option("--years", "-y", "years", required=True, type=float, help="Loan term in years")
@click.option("--fees", "fees", callback=_amount, help="Flat fees deducted from the loan")
@click.option("--points", "points", type=float, default=0.0, help="Discount points (percent of principal)")
@click.option("--method", type=click.Choice(["bisection", "step"]), default="bisection", show_default=True, help="APR search method")
@_CURRENCY_OPTION
@engine_errors
def apr(
    principal: float,
    rate: float,
    years: float,
    fees: Optional[float],
    points: float,
    method: str,
    currency: str,
) -> None:
    """Compute the annual percentage rate including fees and points."""
    result = calculate_apr(principal, rate, years, fees=fees or 0.0, points=points, method=method)
    print_apr(result, currency)


@cli.command()
@click.option("--solve", "kind", type=click.Choice(["pv", "fv", "pmt", "rate", "nper"]), required=True, help="Quantity to solve for")
@click.option("--pv", "present_value", callback=_amount, help="Present value")
@click.option("--fv", "future_value", callback=_amount, help="Future value")
@click.option("--pmt", "payment", callback=_amount, help="Payment per period")
@click.option("--rate", "-r", "rate", type=float, default=0.0, help="Annual interest rate (percent)")
@click.option("--periods", "-n", "periods", type=float, default=0.0, help="Number of compounding periods")
@click.option(
    "--compounding",
    "compounding",
    type=click.Choice([str(f) for f in COMPOUNDING_FREQUENCIES]),
    default="12",
    show_default=True,
    help="Compounding periods per year",
)
@click.option("--timing", type=click.Choice([t.value for t in PaymentTiming]), default="end", show_default=True, help="Payment timing")
@_CURRENCY_OPTION
@engine_errors
def tvm(
    kind: str,
    present_value: Optional[float],
    future_value: Optional[float],
    payment: Optional[float],
    rate: float,
    periods: float,
    compounding: str,
    timing: str,
    currency: str,
) -> None:
    """Solve for PV, FV, PMT, RATE or NPER."""
    inputs = TvmInputs(
        present_value=present_value or 0.0,
        future_value=future_value or 0.0,
        payment=payment or 0.0,
        annual_rate_percent=rate,
        periods=periods,
        compounding_frequency=int(compounding),
        timing=PaymentTiming(timing),
    )
    print_tvm_result(calculate(kind, inputs), currency)


@cli.command()
@click.option("--initial", "initial", callback=_amount, help="Initial investment")
@click.option("--contribution", "contribution", callback=_amount, help="Deposit per compounding period")
@click.option("--rate", "-r", "rate", required=True, type=float, help="Annual return (percent)")
@click.option("--years", "-y", "years", required=True, type=float, help="Investment period in years")
@click.option(
    "--compounding",
    "compounding",
    type=click.Choice([str(f) for f in COMPOUNDING_FREQUENCIES]),
    default="12",
    show_default=True,
    help="Compounding periods per year",
)
@_CURRENCY_OPTION
@engine_errors
def invest(
    initial: Optional[float],
    contribution: Optional[float],
    rate: float,
    years: float,
    compounding: str,
    currency: str,
) -> None:
    """Project the value of an investment with regular contributions."""
    growth = future_value_with_contributions(
        initial or 0.0, contribution or 0.0, rate, years, int(compounding)
    )
    print_investment(growth, currency)


@click.command()
@schedule_options
def _scenario_command(**params: Any) -> None:
    """Option parser for one ``compare`` scenario."""


def parse_scenario_opts(opts: str) -> Dict[str, Any]:
    """Parse a quoted scenario string with the ``schedule`` options."""
    try:
        ctx = _scenario_command.make_context("scenario", shlex.split(opts))
    except click.ClickException as exc:
        raise click.BadParameter(f"Invalid scenario {opts!r}: {exc.format_message()}")
    return dict(ctx.params)


@cli.command()
@click.option("--scenario1", "scenario1", required=True, help="First scenario options quoted string")
@click.option("--scenario2", "scenario2", required=True, help="Second scenario options quoted string")
@_CURRENCY_OPTION
@engine_errors
def compare(scenario1: str, scenario2: str, currency: str) -> None:
    """Compare two loan scenarios.

    Scenarios are provided as quoted option strings, for example:

        tvm-calc compare --scenario1 "-p 500k -r 3.5 -y 30" --scenario2 "-p 500k -r 3.2 -y 25"
    """
    config1 = build_config_from_options(**parse_scenario_opts(scenario1))
    config2 = build_config_from_options(**parse_scenario_opts(scenario2))
    _, summary1 = compute_schedule(config1)
    _, summary2 = compute_schedule(config2)
    print_comparison(summary1, summary2, currency)


@cli.command()
def currencies() -> None:
    """List the supported display currencies."""
    for code, label in currency_options():
        click.echo(f"{code}  {label}")


if __name__ == "__main__":
    cli()

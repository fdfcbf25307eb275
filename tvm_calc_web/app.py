import logging
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request

from tvm_calc.apr import calculate_apr
from tvm_calc.currency import currency_options, format_currency, is_supported
from tvm_calc.data_models import (
    Overpayment,
    PaymentFrequency,
    PaymentTiming,
    ScheduleConfig,
    TvmInputs,
)
from tvm_calc.engine import aggregate_yearly, compute_schedule
from tvm_calc.errors import InvalidInputError, TvmError
from tvm_calc.loan import solve_loan
from tvm_calc.settings import DEFAULT_CURRENCY, MAX_SCHEDULE_ROWS
from tvm_calc.tvm import calculate
from tvm_calc.utils import parse_date, to_jsonable

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["MAX_SCHEDULE_ROWS"] = MAX_SCHEDULE_ROWS
app.config["DEFAULT_CURRENCY"] = DEFAULT_CURRENCY


def _payload() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidInputError("Request body must be a JSON object")
    return data


def _number(data: Dict[str, Any], name: str, default: Optional[float] = None) -> float:
    value = data.get(name, default)
    if value is None or value == "":
        raise InvalidInputError(f"{name} is required")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"{name} must be a number") from None


def _log_unreliable(endpoint: str, converged: bool = True, overrun: bool = False) -> None:
    if not converged:
        logger.warning("%s: iterative search did not converge; result is unreliable", endpoint)
    if overrun:
        logger.warning("%s: balance not repaid within the scheduled payments", endpoint)


def _schedule_config(data: Dict[str, Any]) -> ScheduleConfig:
    try:
        start_date = parse_date(str(data.get("start_date", "")))
        frequency = PaymentFrequency.from_name(str(data.get("frequency", "monthly")))
    except ValueError as exc:
        raise InvalidInputError(str(exc)) from None
    overpayments = []
    for item in data.get("overpayments", []):
        try:
            overpayments.append(
                Overpayment(date=parse_date(item["date"]), amount=_number(item, "amount"))
            )
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise InvalidInputError(f"Invalid overpayment {item!r}") from exc
    periodic_payment = data.get("periodic_payment")
    return ScheduleConfig(
        principal=_number(data, "principal"),
        annual_rate_percent=_number(data, "annual_rate_percent"),
        term_years=_number(data, "term_years"),
        start_date=start_date,
        frequency=frequency,
        extra_payment=_number(data, "extra_payment", 0.0),
        overpayments=overpayments,
        periodic_payment=_number(data, "periodic_payment") if periodic_payment is not None else None,
    )


@app.errorhandler(TvmError)
def handle_calculation_error(exc: TvmError):
    logger.info("Rejected calculation: %s", exc)
    return jsonify({"error": str(exc)}), 400


@app.post("/api/payment")
def loan_payment():
    data = _payload()
    result = solve_loan(
        data.get("mode", "payment"),
        principal=_number(data, "principal", 0.0),
        annual_rate_percent=_number(data, "annual_rate_percent", 0.0),
        years=_number(data, "years", 0.0),
        payment=_number(data, "payment", 0.0),
        down_payment=_number(data, "down_payment", 0.0),
        fees=_number(data, "fees", 0.0),
        insurance=_number(data, "insurance", 0.0),
        taxes=_number(data, "taxes", 0.0),
    )
    _log_unreliable("payment", converged=result.converged)
    return jsonify(to_jsonable(result))


@app.post("/api/schedule")
def amortization_schedule():
    data = _payload()
    config = _schedule_config(data)
    full_schedule, summary = compute_schedule(config)
    _log_unreliable("schedule", overrun=summary.overrun)
    response: Dict[str, Any] = {"summary": to_jsonable(summary)}
    if data.get("yearly"):
        response["yearly"] = to_jsonable(aggregate_yearly(full_schedule))
    max_rows = app.config["MAX_SCHEDULE_ROWS"]
    if data.get("full") or len(full_schedule) <= max_rows:
        response["schedule"] = to_jsonable(full_schedule)
    else:
        response["schedule"] = to_jsonable(full_schedule[:max_rows])
        response["truncated"] = len(full_schedule) - max_rows
    return jsonify(response)


@app.post("/api/apr")
def annual_percentage_rate():
    data = _payload()
    result = calculate_apr(
        _number(data, "principal"),
        _number(data, "nominal_rate_percent"),
        _number(data, "term_years"),
        fees=_number(data, "fees", 0.0),
        points=_number(data, "points", 0.0),
        method=str(data.get("method", "bisection")),
    )
    _log_unreliable("apr", converged=result.converged)
    return jsonify(to_jsonable(result))


@app.post("/api/tvm")
def time_value():
    data = _payload()
    try:
        timing = PaymentTiming(data.get("timing", "end"))
    except ValueError:
        raise InvalidInputError(f"Unknown payment timing: {data.get('timing')}") from None
    inputs = TvmInputs(
        present_value=_number(data, "present_value", 0.0),
        future_value=_number(data, "future_value", 0.0),
        payment=_number(data, "payment", 0.0),
        annual_rate_percent=_number(data, "annual_rate_percent", 0.0),
        periods=_number(data, "periods", 0.0),
        compounding_frequency=int(_number(data, "compounding_frequency", 12)),
        timing=timing,
    )
    result = calculate(data.get("kind", ""), inputs)
    _log_unreliable("tvm", converged=result.converged)
    return jsonify(to_jsonable(result))


@app.get("/api/currencies")
def currencies():
    code = request.args.get("currency", app.config["DEFAULT_CURRENCY"])
    if not is_supported(code):
        raise InvalidInputError(f"Unsupported currency: {code}")
    return jsonify(
        {
            "currencies": [{"code": c, "label": label} for c, label in currency_options()],
            "sample": format_currency(1234.5, code),
        }
    )


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    print("Starting TVM calculator API...")
    app.run(host="0.0.0.0", port=8710, debug=True)

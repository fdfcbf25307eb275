"""Utility functions for the TVM calculator.

This module provides helpers for parsing user input into Python data types and
for handling dates, including adding months to a payment date and parsing
``YYYY-MM`` / ``YYYY-MM-DD`` strings into ``datetime.date`` instances.
"""

from __future__ import annotations

import calendar
from dataclasses import asdict, is_dataclass
from datetime import date
from enum import Enum
from typing import Any


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM`` or ``YYYY-MM-DD`` string into a ``date``.

    A missing day component defaults to the first day of the month.

    Raises
    ------
    ValueError
        If the string is not a valid date.
    """
    try:
        parts = value.strip().split("-")
        if len(parts) not in (2, 3):
            raise ValueError
        year = int(parts[0])
        month = int(parts[1])
        day = int(parts[2]) if len(parts) == 3 else 1
        return date(year, month, day)
    except ValueError as exc:
        raise ValueError(f"Invalid date string: {value}") from exc


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The day of the month is clamped to the last valid day if needed (e.g.,
    adding one month to Jan 31 yields Feb 28 or 29).
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def float_from_str(value: str) -> float:
    """Convert a numeric string into a ``float``.

    The function strips thousands separators and surrounding whitespace. It
    raises ``ValueError`` if conversion fails.
    """
    try:
        cleaned = value.replace(",", "").replace("_", "").strip()
        return float(cleaned)
    except ValueError as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc


def to_jsonable(value: Any) -> Any:
    """Convert result dataclasses into JSON-serialisable structures.

    Dates become ISO strings and enums their values; lists and dicts are
    converted recursively.
    """
    if is_dataclass(value) and not isinstance(value, type):
        return to_jsonable(asdict(value))
    if isinstance(value, dict):
        return {key: to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value

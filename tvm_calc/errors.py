"""Exceptions and warning categories raised by the calculation engine."""

from __future__ import annotations


class TvmError(ValueError):
    """Base class for calculation errors."""


class InvalidInputError(TvmError):
    """A numeric input is missing, zero or negative where it must be positive."""


class DomainError(TvmError):
    """Inputs are individually valid but the formula has no answer for them."""


class NonConvergenceWarning(UserWarning):
    """An iterative solver hit its iteration cap before meeting its tolerance."""


class ScheduleOverrunWarning(UserWarning):
    """An amortization schedule hit its period cap with a balance left."""

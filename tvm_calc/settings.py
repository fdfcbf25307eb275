"""Default constants for the solvers and the display layer.

Solver caps and tolerances are only defaults; every solver accepts them as
keyword arguments. Display defaults can be overridden from the environment.
"""

from __future__ import annotations

import os

MONTHS_IN_YEAR = 12

# Iterative solvers
MAX_ITERATIONS = 100
RATE_TOLERANCE = 1e-4  # successive-iterate difference, single-sum rate
PAYMENT_RATE_TOLERANCE = 1e-6  # successive-iterate difference, annuity rate
DERIVATIVE_EPSILON = 1e-12

# APR search
APR_TOLERANCE = 1e-4  # on the PV difference
APR_STEP = 0.0001  # annual rate fraction per step of the linear walk

# Amortization
BALANCE_EPSILON = 0.01

COMPOUNDING_FREQUENCIES = (1, 2, 4, 12, 365)

# Display
DEFAULT_CURRENCY = os.environ.get("TVM_CALC_CURRENCY", "USD").upper()
MAX_SCHEDULE_ROWS = int(os.environ.get("TVM_CALC_MAX_ROWS", "120"))

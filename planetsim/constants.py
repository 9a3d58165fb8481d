"""Physical constants and step-size policy shared by the integrator."""

import math

# Gravitational constant (m^3 kg^-1 s^-2)
G_REAL = 6.67e-11

# Error bound meaning "no useful bound can be computed".  Every operation that
# consumes an error bound only adds non-negative values to it, so infinity
# saturates instead of overflowing.
UNBOUNDED_ERROR = math.inf

# Retry policy of the adaptive stepper
SAFETY_FACTOR = 0.95
DEGENERATE_STEP_DIVISOR = 10.0
MAX_PASS_ATTEMPTS = 50
MIN_TIME_STEP = 1e-9  # seconds

# Default trial step: min(end_time / DEFAULT_STEPS_PER_RUN, MAX_DEFAULT_STEP)
DEFAULT_STEPS_PER_RUN = 1000
MAX_DEFAULT_STEP = 100.0  # seconds

CARTESIAN = "c"
SPHERICAL = "s"

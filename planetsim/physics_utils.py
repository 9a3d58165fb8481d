"""Adaptive stepper: whole-system passes retried until the error bound fits."""

import logging
import math

from . import constants as C
from .errors import ToleranceUnattainable
from .integrators import Generation, step_generation
from .utils import distance_to_display, time_to_display

logger = logging.getLogger(__name__)


def default_step(end_time: float) -> float:
    """Trial step used when the caller does not provide one."""
    step = min(end_time / C.DEFAULT_STEPS_PER_RUN, C.MAX_DEFAULT_STEP)
    return step if step > 0 else C.MAX_DEFAULT_STEP


def rescale_step(step_size: float, error: float, tolerance: float) -> float:
    """Trial step for the next pass after ``error`` exceeded ``tolerance``.

    The error bound grows roughly linearly with the step size, so one Newton
    step towards ``SAFETY_FACTOR * tolerance`` is taken.  A degenerate bound
    carries no information about that slope and the step is cut by a fixed
    factor instead.
    """
    if not math.isfinite(error):
        return step_size / C.DEGENERATE_STEP_DIVISOR
    return step_size * C.SAFETY_FACTOR * tolerance / error


def run_pass(
    start: Generation,
    buffers,
    masses,
    radii,
    system_mass,
    end_time,
    step_size,
    g_constant=C.G_REAL,
    names=None,
) -> Generation:
    """Integrate ``start`` from t=0 to ``end_time`` at a fixed trial step.

    ``start`` is only read.  The two generations in ``buffers`` are swapped
    after every sub-step; the one holding the final state is returned.
    """
    current, spare = buffers
    current.copy_from(start)
    elapsed = 0.0
    while elapsed < end_time:
        step_generation(
            current,
            spare,
            masses,
            radii,
            system_mass,
            min(end_time - elapsed, step_size),
            g_constant,
            names,
        )
        current, spare = spare, current
        elapsed += step_size
    return current


def integrate(
    system,
    tolerance,
    end_time,
    initial_step=None,
    *,
    g_constant=C.G_REAL,
    progress=None,
    max_attempts=C.MAX_PASS_ATTEMPTS,
    min_step=C.MIN_TIME_STEP,
):
    """Move ``system`` forward by ``end_time`` seconds within ``tolerance``.

    Full passes from t=0 are repeated with a shrinking step until the largest
    position error bound of any body is below ``tolerance`` metres.  Only the
    accepted pass is committed to ``system``; a failed pass is discarded and
    the next one starts again from the snapshot taken before the first.

    Parameters
    ----------
    system : System
        Bodies to move. Modified in place on success and returned.
    tolerance : float
        Largest acceptable position error in metres. An infinite tolerance
        accepts the first pass at ``initial_step`` even when its bound is
        unbounded.
    end_time : float
        Simulated duration in seconds.
    initial_step : float, optional
        First trial step. Defaults to :func:`default_step`.
    progress : callable, optional
        Called as ``progress(step_size, error)`` after every pass.
    max_attempts : int or None
        Number of passes after which :class:`ToleranceUnattainable` is raised.
        ``None`` retries forever.
    min_step : float or None
        Smallest trial step that will be attempted. ``None`` disables the floor.

    Raises
    ------
    CollisionDetected
        Two bodies touched during any pass. ``system`` is left unchanged.
    ToleranceUnattainable
        The retry budget or the step floor was exhausted.
    """
    if not tolerance > 0:
        raise ValueError("tolerance must be positive")
    if end_time < 0:
        raise ValueError("end_time must not be negative")
    step_size = default_step(end_time) if initial_step is None else float(initial_step)
    if not step_size > 0:
        raise ValueError("initial_step must be positive")

    snapshot = system.generation()
    buffers = (Generation(len(system)), Generation(len(system)))
    attempt = 0
    while True:
        attempt += 1
        final = run_pass(
            snapshot,
            buffers,
            system.masses,
            system.radii,
            system.system_mass,
            end_time,
            step_size,
            g_constant,
            system.names,
        )
        error = final.max_position_error()
        logger.info(
            "Step = %s, Error < %s",
            time_to_display(step_size),
            distance_to_display(error),
        )
        if progress is not None:
            progress(step_size, error)
        if error < tolerance or math.isinf(tolerance):
            system.commit(final)
            return system

        if max_attempts is not None and attempt >= max_attempts:
            raise ToleranceUnattainable(step_size, error, tolerance)
        new_step = rescale_step(step_size, error, tolerance)
        if min_step is not None and new_step < min_step:
            raise ToleranceUnattainable(step_size, error, tolerance)
        logger.debug(
            "Pass %d rejected, rolling back and retrying with step %g s",
            attempt,
            new_step,
        )
        step_size = new_step

"""numba-compiled kernels for the per-body step.

Both kernels are compiled with ``error_model="numpy"`` so that a division by
zero yields ``inf`` instead of raising; an infinite jerk bound or error term is
how the kernels report that no bound exists.
"""

import math

import numba as nb


@nb.njit(error_model="numpy")
def jerk_bound_jit(system_mass, max_velocity, min_dist, step_size, g_const):
    """Upper bound on the magnitude of the jerk of any body over one step.

    The bound treats the two closest bodies as carrying the whole system mass
    and approaching each other at twice the largest speed in the system.
    ``t`` is a lower bound on the time they need to halve their separation;
    if ``step_size`` is not shorter than ``t`` no bound is returned (``inf``).
    """
    if min_dist <= 0.0:
        return math.inf
    closing_sq = 4.0 * max_velocity * max_velocity
    gm = g_const * system_mass
    t = min_dist / (2.0 * math.sqrt(closing_sq + 4.0 * gm / min_dist))
    if step_size >= t:
        return math.inf
    new_min_dist = (1.0 - step_size / t) * min_dist
    falling_speed = math.sqrt(
        2.0 * gm * (1.0 / new_min_dist - 1.0 / min_dist) + closing_sq
    )
    return 2.0 * gm * falling_speed / new_min_dist ** 3


@nb.njit(error_model="numpy")
def velocity_update_jit(index, positions, velocity, masses, position_errors,
                        separations, position_error, step_size, g_const):
    """Newtonian velocity kick for body ``index`` with its error increment.

    Returns the new velocity, the increase of the velocity error caused by the
    uncertainty in every body's position, and the (possibly saturated)
    position error of ``index``.
    """
    new_velocity = velocity.copy()
    velocity_error = 0.0
    for j in range(masses.shape[0]):
        if j == index:
            continue
        r = separations[j]
        multiplier = step_size * masses[j] * g_const / r ** 3
        for k in range(3):
            new_velocity[k] += (positions[j, k] - positions[index, k]) * multiplier
        widened = r - position_error - position_errors[j]
        if widened <= 0.0:
            position_error = math.inf
            velocity_error = math.inf
        else:
            velocity_error += step_size * masses[j] * g_const * (
                1.0 / widened ** 2 - 1.0 / r ** 2
            )
    return new_velocity, velocity_error, position_error

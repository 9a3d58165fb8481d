"""Single-step integrator with a rigorous bound on the error it introduces.

The velocity of a body is advanced with the acceleration at the start of the
step and its position with the trapezoidal rule.  Per step the true error in
velocity is bounded by ``h*|acceleration_error| + h**2*M/2`` and the true
error in position by ``h*velocity_error + h**3*M/6`` where ``M`` bounds the
magnitude of the jerk.  Both bounds accumulate over a pass.
"""

import math

import numpy as np

from . import constants as C
from .errors import CollisionDetected
from .jit import jerk_bound_jit, velocity_update_jit


def distance(p1, p2=None) -> float:
    """Euclidean distance between two points, or the norm of ``p1``."""
    p1 = np.asarray(p1, dtype=float)
    if p2 is None:
        return float(np.linalg.norm(p1))
    return float(np.linalg.norm(p1 - np.asarray(p2, dtype=float)))


def separations_from(positions: np.ndarray, index: int) -> np.ndarray:
    """Distances from body ``index`` to every body (itself included)."""
    return np.linalg.norm(positions - positions[index], axis=1)


class Generation:
    """State of every body at one simulated instant.

    Two instances are swapped back and forth during a pass so that a sub-step
    never allocates.  Masses, radii and names do not change during a run and
    are passed alongside.
    """

    __slots__ = ("positions", "velocities", "position_errors", "velocity_errors")

    def __init__(self, num_bodies: int):
        self.positions = np.zeros((num_bodies, 3), dtype=np.float64)
        self.velocities = np.zeros((num_bodies, 3), dtype=np.float64)
        self.position_errors = np.zeros(num_bodies, dtype=np.float64)
        self.velocity_errors = np.zeros(num_bodies, dtype=np.float64)

    @classmethod
    def from_arrays(cls, positions, velocities, position_errors=None, velocity_errors=None):
        gen = cls(len(positions))
        gen.positions[:] = positions
        gen.velocities[:] = velocities
        if position_errors is not None:
            gen.position_errors[:] = position_errors
        if velocity_errors is not None:
            gen.velocity_errors[:] = velocity_errors
        return gen

    def __len__(self):
        return len(self.position_errors)

    def copy_from(self, other: "Generation") -> None:
        np.copyto(self.positions, other.positions)
        np.copyto(self.velocities, other.velocities)
        np.copyto(self.position_errors, other.position_errors)
        np.copyto(self.velocity_errors, other.velocity_errors)

    def copy(self) -> "Generation":
        gen = Generation(len(self))
        gen.copy_from(self)
        return gen

    def max_position_error(self) -> float:
        if len(self) == 0:
            return 0.0
        return float(np.max(self.position_errors))


def check_collisions(positions, radii, index, names=None, separations=None):
    """Raise :class:`CollisionDetected` if body ``index`` touches another body."""
    if separations is None:
        separations = separations_from(positions, index)
    contact = separations <= radii + radii[index]
    contact[index] = False
    if contact.any():
        other = int(np.flatnonzero(contact)[0])
        raise CollisionDetected(index, other, names)


def advance_body_arrays(
    positions,
    velocities,
    position_errors,
    velocity_errors,
    masses,
    radii,
    system_mass,
    index,
    step_size,
    g_constant=C.G_REAL,
    names=None,
):
    """Advance body ``index`` by ``step_size`` against a read-only generation.

    Returns ``(position, velocity, position_error, velocity_error)`` for the
    body after the step.  None of the input arrays are modified.

    Raises
    ------
    CollisionDetected
        If the body is touching any other body before the step.
    """
    step_size = float(step_size)
    g_constant = float(g_constant)
    separations = separations_from(positions, index)
    check_collisions(positions, radii, index, names, separations)

    position_error = float(position_errors[index])
    velocity_error = float(velocity_errors[index])

    speeds = np.linalg.norm(velocities, axis=1) + velocity_errors
    max_velocity = float(np.max(speeds))

    others = np.ones(len(masses), dtype=bool)
    others[index] = False
    if others.any():
        # lower bound on the true separation given the errors already present
        min_dist = float(
            np.min(separations[others] - position_error - position_errors[others])
        )
        jerk = jerk_bound_jit(
            float(system_mass), max_velocity, min_dist, step_size, g_constant
        )
    else:
        jerk = 0.0
    if math.isinf(jerk):
        position_error = C.UNBOUNDED_ERROR

    new_velocity, velocity_error_increment, position_error = velocity_update_jit(
        index,
        positions,
        velocities[index],
        masses,
        position_errors,
        separations,
        position_error,
        step_size,
        g_constant,
    )

    # trapezoidal rule
    new_position = positions[index] + step_size * (velocities[index] + new_velocity) / 2.0

    velocity_error += velocity_error_increment + step_size ** 2 * jerk / 2.0
    position_error += step_size * velocity_error + step_size ** 3 * jerk / 6.0
    return new_position, new_velocity, position_error, velocity_error


def step_generation(
    current: Generation,
    out: Generation,
    masses,
    radii,
    system_mass,
    step_size,
    g_constant=C.G_REAL,
    names=None,
) -> Generation:
    """Advance every body of ``current`` by ``step_size`` into ``out``.

    Every body reads the same ``current`` generation, so the collision check
    for the sub-step sees positions from before any update.
    """
    if step_size <= 0:
        raise ValueError("step_size must be positive")
    for i in range(len(current)):
        pos, vel, pos_err, vel_err = advance_body_arrays(
            current.positions,
            current.velocities,
            current.position_errors,
            current.velocity_errors,
            masses,
            radii,
            system_mass,
            i,
            step_size,
            g_constant,
            names,
        )
        out.positions[i] = pos
        out.velocities[i] = vel
        out.position_errors[i] = pos_err
        out.velocity_errors[i] = vel_err
    return out

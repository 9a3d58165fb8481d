import math

import numpy as np

from planetsim.jit import jerk_bound_jit, velocity_update_jit


def test_jerk_bound_degenerate_separation():
    assert math.isinf(jerk_bound_jit(1.0, 0.0, 0.0, 0.1, 1.0))
    assert math.isinf(jerk_bound_jit(1.0, 0.0, -3.0, 0.1, 1.0))


def test_jerk_bound_step_too_long():
    # t = 1 / (2 * sqrt(4)) = 0.25
    assert math.isinf(jerk_bound_jit(1.0, 0.0, 1.0, 0.25, 1.0))
    assert math.isfinite(jerk_bound_jit(1.0, 0.0, 1.0, 0.2, 1.0))


def test_jerk_bound_closed_form():
    s, v, d, h, g = 3.0, 0.5, 2.0, 0.05, 1.0
    t = d / (2 * math.sqrt(4 * v * v + 4 * g * s / d))
    new_d = (1 - h / t) * d
    falling = math.sqrt(2 * g * s * (1 / new_d - 1 / d) + 4 * v * v)
    expected = 2 * g * s * falling / new_d ** 3
    assert math.isclose(jerk_bound_jit(s, v, d, h, g), expected, rel_tol=1e-12)


def test_jerk_bound_grows_with_step():
    small = jerk_bound_jit(10.0, 1.0, 5.0, 0.01, 1.0)
    large = jerk_bound_jit(10.0, 1.0, 5.0, 0.1, 1.0)
    assert 0 < small < large


def test_jerk_bound_without_gravity_or_motion():
    assert jerk_bound_jit(1.0, 0.0, 1.0, 0.1, 0.0) == 0.0


def test_infinite_speed_has_no_bound():
    assert math.isinf(jerk_bound_jit(1.0, math.inf, 1.0, 1e-9, 1.0))


def test_velocity_update_matches_newton():
    positions = np.array([[0.0, 0.0, 0.0], [3.0, 4.0, 0.0], [0.0, 0.0, -2.0]])
    masses = np.array([1.0, 5.0, 2.0])
    velocity = np.array([0.1, 0.0, 0.0])
    errors = np.zeros(3)
    seps = np.linalg.norm(positions - positions[0], axis=1)
    h, g = 0.01, 2.0

    new_vel, vel_err, pos_err = velocity_update_jit(
        0, positions, velocity, masses, errors, seps, 0.0, h, g
    )

    acc = np.zeros(3)
    for j in (1, 2):
        r = positions[j] - positions[0]
        acc += g * masses[j] * r / np.linalg.norm(r) ** 3
    assert np.allclose(new_vel, velocity + h * acc)
    assert vel_err == 0.0
    assert pos_err == 0.0
    assert np.allclose(velocity, [0.1, 0.0, 0.0])


def test_velocity_update_error_term():
    positions = np.array([[0.0, 0.0, 0.0], [10.0, 0.0, 0.0]])
    masses = np.array([1.0, 4.0])
    errors = np.array([0.5, 1.5])
    seps = np.array([0.0, 10.0])
    _, vel_err, pos_err = velocity_update_jit(
        0, positions, np.zeros(3), masses, errors, seps, 0.5, 0.1, 1.0
    )
    expected = 0.1 * 4.0 * (1 / 8.0 ** 2 - 1 / 10.0 ** 2)
    assert math.isclose(vel_err, expected, rel_tol=1e-12)
    assert pos_err == 0.5

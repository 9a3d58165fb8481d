"""Conversions between Cartesian and spherical coordinates.

Spherical coordinates use the mathematical convention ``(r, azimuth, polar)``
with the polar angle measured from the +z axis.
"""

import numpy as np


def to_cartesian(spherical) -> np.ndarray:
    r, azimuth, polar = np.asarray(spherical, dtype=float)
    return np.array(
        [
            r * np.sin(polar) * np.cos(azimuth),
            r * np.sin(polar) * np.sin(azimuth),
            r * np.cos(polar),
        ]
    )


def to_spherical(cartesian) -> np.ndarray:
    x, y, z = np.asarray(cartesian, dtype=float)
    rho = np.hypot(x, y)
    return np.array([np.hypot(rho, z), np.arctan2(y, x), np.arctan2(rho, z)])

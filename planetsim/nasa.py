"""NASA JPL ephemeris helpers."""

from datetime import datetime
from typing import Optional

import numpy as np
from jplephem.spk import SPK

from .physics import Body, System

SECONDS_PER_DAY = 86400.0


def load_ephemeris(path: str) -> SPK:
    """Load a JPL SPK ephemeris file."""
    return SPK.open(path)


def body_state(ephem: SPK, target: int, epoch: datetime) -> tuple[np.ndarray, np.ndarray]:
    """Return barycentric position in metres and velocity in m/s.

    SPK segments are expressed in km and km/day.
    """
    jd = epoch.timestamp() / SECONDS_PER_DAY + 2440587.5
    pos, vel = ephem[0, target].compute_and_differentiate(jd)
    pos = np.asarray(pos, dtype=float) * 1000.0
    vel = np.asarray(vel, dtype=float) * 1000.0 / SECONDS_PER_DAY
    return pos, vel


def create_body(
    ephem: SPK,
    target: int,
    epoch: datetime,
    mass: float,
    *,
    radius: float = 0.0,
    name: Optional[str] = None,
) -> Body:
    """Create a :class:`Body` instance from ephemeris data."""
    pos, vel = body_state(ephem, target, epoch)
    return Body(mass, pos, vel, radius=radius, name=name or str(target))


def system_from_ephemeris(ephem: SPK, epoch: datetime, specs, name: str = "Ephemeris") -> System:
    """Build a :class:`System` from ``(target, mass, radius, name)`` tuples."""
    bodies = [
        create_body(ephem, target, epoch, mass, radius=radius, name=body_name)
        for target, mass, radius, body_name in specs
    ]
    return System(name, bodies)

"""Bodies and systems for the error-bounded n-body integrator.

A :class:`System` is loaded once and afterwards only replaced generation by
generation; the :class:`Body` values it hands out are never modified by the
integrator.
"""
import numpy as np

from .constants import G_REAL
from .coordinates import to_cartesian
from .integrators import Generation, advance_body_arrays


def _vector3(values):
    v = np.asarray(values, dtype=float).reshape(-1)
    if v.size < 3:
        v = np.pad(v, (0, 3 - v.size))
    return v[:3].copy()


class Body:
    """A massive body together with bounds on its accumulated error."""

    def __init__(
        self,
        mass,
        pos,
        vel,
        radius=0.0,
        name=None,
        position_error=0.0,
        velocity_error=0.0,
    ):
        """Create a body storing position and velocity as 3-D vectors.

        Parameters
        ----------
        mass : float
            Mass in kilograms, strictly positive.
        pos : array-like
            Position in metres. Values with fewer than three components are
            padded with zeros.
        vel : array-like
            Velocity in m/s, padded like ``pos``.
        radius : float, optional
            Physical radius in metres used for collision detection.
        name : str, optional
            Display label.
        position_error, velocity_error : float, optional
            Upper bounds on the error already present in ``pos`` and ``vel``.
        """
        self.mass = float(mass)
        if not self.mass > 0:
            raise ValueError(f"mass must be positive, got {mass!r}")
        self.radius = float(radius)
        if self.radius < 0:
            raise ValueError(f"radius must be non-negative, got {radius!r}")
        self.pos = _vector3(pos)
        self.vel = _vector3(vel)
        self.name = name if name else "Body"
        self.position_error = float(position_error)
        self.velocity_error = float(velocity_error)

    def __repr__(self):
        return (
            f"Body(name={self.name!r}, mass={self.mass}, radius={self.radius}, "
            f"pos={self.pos.tolist()}, vel={self.vel.tolist()}, "
            f"position_error={self.position_error}, "
            f"velocity_error={self.velocity_error})"
        )

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.vel))

    def replace(self, pos, vel, position_error, velocity_error) -> "Body":
        """Return a new body with the same identity and a new state."""
        return Body(
            self.mass,
            pos,
            vel,
            radius=self.radius,
            name=self.name,
            position_error=position_error,
            velocity_error=velocity_error,
        )

    @staticmethod
    def from_spherical(mass, pos_spherical, vel, radius=0.0, name=None):
        """Create a :class:`Body` from an ``(r, azimuth, polar)`` position."""
        return Body(mass, to_cartesian(pos_spherical), vel, radius=radius, name=name)


class System:
    """An ordered, fixed set of bodies and their total mass."""

    def __init__(self, name, bodies):
        self.name = name
        self.bodies = list(bodies)
        # bodies never gain or lose mass, so this is computed once
        self.system_mass = float(sum(b.mass for b in self.bodies))
        self.masses = np.array([b.mass for b in self.bodies], dtype=np.float64)
        self.radii = np.array([b.radius for b in self.bodies], dtype=np.float64)
        self.names = [b.name for b in self.bodies]

    def __len__(self):
        return len(self.bodies)

    def __iter__(self):
        return iter(self.bodies)

    def __getitem__(self, index):
        return self.bodies[index]

    def __repr__(self):
        return f"System(name={self.name!r}, bodies={len(self.bodies)})"

    def generation(self) -> Generation:
        """Snapshot of the current body states as a new :class:`Generation`."""
        gen = Generation(len(self.bodies))
        for i, b in enumerate(self.bodies):
            gen.positions[i] = b.pos
            gen.velocities[i] = b.vel
            gen.position_errors[i] = b.position_error
            gen.velocity_errors[i] = b.velocity_error
        return gen

    def commit(self, generation: Generation) -> None:
        """Replace every body with the state stored in ``generation``."""
        self.bodies = [
            b.replace(
                generation.positions[i],
                generation.velocities[i],
                generation.position_errors[i],
                generation.velocity_errors[i],
            )
            for i, b in enumerate(self.bodies)
        ]

    def max_position_error(self) -> float:
        return max((b.position_error for b in self.bodies), default=0.0)


def advance(system, index, step_size, g_constant=G_REAL) -> Body:
    """Advance one body of ``system`` by ``step_size`` seconds.

    The system is left untouched; the returned body carries the new position,
    velocity and accumulated error bounds.

    Raises
    ------
    CollisionDetected
        If body ``index`` is touching any other body.
    """
    if step_size <= 0:
        raise ValueError("step_size must be positive")
    gen = system.generation()
    pos, vel, pos_err, vel_err = advance_body_arrays(
        gen.positions,
        gen.velocities,
        gen.position_errors,
        gen.velocity_errors,
        system.masses,
        system.radii,
        system.system_mass,
        index,
        step_size,
        g_constant,
        system.names,
    )
    return system.bodies[index].replace(pos, vel, pos_err, vel_err)


def system_energy(bodies, g_constant=G_REAL):
    """Return total kinetic and potential energy."""
    kinetic = 0.0
    potential = 0.0
    for b in bodies:
        kinetic += 0.5 * b.mass * np.dot(b.vel, b.vel)
    for i, bi in enumerate(bodies):
        for j, bj in enumerate(bodies[i+1:], i+1):
            r = np.linalg.norm(bj.pos - bi.pos)
            if r == 0:
                continue
            potential -= g_constant * bi.mass * bj.mass / r
    return kinetic, potential, kinetic + potential

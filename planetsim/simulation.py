"""Command line front end: load a system, integrate it, report the result."""

import argparse
import logging
import sys

from importlib.metadata import version, PackageNotFoundError

from . import constants as C
from .analysis import PassHistory, energy_drift
from .coordinates import to_spherical
from .errors import CollisionDetected, MalformedSystemFile, ToleranceUnattainable
from .physics_utils import integrate
from .state_io import load_system, save_state
from .utils import distance_to_display

try:
    _PACKAGE_VERSION = version("planetsim")
except PackageNotFoundError:
    _PACKAGE_VERSION = "0.0.0"

logger = logging.getLogger(__name__)


def describe_body(body, coordinates=C.CARTESIAN) -> str:
    """One line of the final report for ``body``."""
    vx, vy, vz = body.vel
    velocity = f"with velocity vector ({vx:f}m/s, {vy:f}m/s, {vz:f}m/s)."
    if coordinates == C.SPHERICAL:
        r, azimuth, polar = to_spherical(body.pos)
        return (
            f"{body.name} is {r:f}m from the center, at azimuthal angle "
            f"{azimuth:f} and polar angle {polar:f}, {velocity}"
        )
    x, y, z = body.pos
    return f"{body.name} is located at ({x:f}m, {y:f}m, {z:f}m), {velocity}"


class Simulation:
    """Load a system file and move it forward within an error tolerance."""

    def __init__(self, system, g_constant=C.G_REAL):
        self.system = system
        self.g_constant = g_constant
        self.history = PassHistory()
        self.simulation_time = 0.0

    @classmethod
    def from_file(cls, path, g_constant=C.G_REAL):
        return cls(load_system(path), g_constant=g_constant)

    # ------------------------------------------------------------------
    def run(self, end_time, tolerance, start_step=None, **kwargs):
        """Integrate for ``end_time`` seconds; see :func:`integrate`."""
        initial = list(self.system.bodies)
        passes_before = self.history.total
        integrate(
            self.system,
            tolerance,
            end_time,
            start_step,
            g_constant=self.g_constant,
            progress=self.history.update,
            **kwargs,
        )
        self.simulation_time += end_time
        logger.info(
            "Accepted after %d pass(es); worst position error < %s",
            self.history.total - passes_before,
            distance_to_display(self.system.max_position_error()),
        )
        logger.info(
            "Relative energy drift: %.3e",
            energy_drift(initial, self.system.bodies, self.g_constant),
        )
        return self.system

    # ------------------------------------------------------------------
    def report(self, coordinates=C.CARTESIAN):
        return [describe_body(b, coordinates) for b in self.system]


def _split_optional(extra, parser):
    """Interpret the optional ``[START_STEP] [COORDS]`` positionals."""
    start_step = None
    coordinates = C.CARTESIAN
    if len(extra) > 2:
        parser.error("too many arguments")
    if extra:
        try:
            start_step = float(extra[0])
        except ValueError:
            coordinates = extra[0]
        if len(extra) > 1:
            coordinates = extra[1]
    coordinates = coordinates[:1].lower()
    if coordinates not in (C.CARTESIAN, C.SPHERICAL):
        parser.error("coordinate system must be 'c' or 's'")
    return start_step, coordinates


def main(argv=None):
    parser = argparse.ArgumentParser(
        description=(
            "Move an n-body system forward in time, shrinking the step size "
            "until the bound on the position error is below MAX_ERROR."
        )
    )
    parser.add_argument("file", help="System description file")
    parser.add_argument("end_time", type=float, help="Simulated time in seconds")
    parser.add_argument("max_error", type=float, help="Largest acceptable position error in metres")
    parser.add_argument(
        "extra",
        nargs="*",
        metavar="[START_STEP] [COORDS]",
        help="Initial step in seconds and output coordinates ('c' or 's')",
    )
    parser.add_argument("--save-json", help="Write the final system to a JSON file")
    parser.add_argument("--history-csv", help="Write the step/error of every pass to CSV")
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=C.MAX_PASS_ATTEMPTS,
        help="Give up after this many passes (0 retries forever)",
    )
    parser.add_argument(
        "--min-step",
        type=float,
        default=C.MIN_TIME_STEP,
        help="Give up when the trial step drops below this (0 disables)",
    )
    parser.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_PACKAGE_VERSION}")
    args = parser.parse_args(argv)
    start_step, coordinates = _split_optional(args.extra, parser)

    logging.basicConfig(
        level=logging.ERROR if args.quiet else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    try:
        sim = Simulation.from_file(args.file)
    except (OSError, MalformedSystemFile) as exc:
        logger.error("Cannot load %s: %s", args.file, exc)
        return 2

    print(f"Simulating {sim.system.name}:")
    try:
        sim.run(
            args.end_time,
            args.max_error,
            start_step,
            max_attempts=args.max_attempts or None,
            min_step=args.min_step or None,
        )
    except CollisionDetected as exc:
        print(exc)
        logger.error("Simulation aborted; no result is valid")
        return 1
    except ToleranceUnattainable as exc:
        logger.error("%s", exc)
        return 2
    except ValueError as exc:
        parser.error(str(exc))
    finally:
        if args.history_csv:
            sim.history.export_csv(args.history_csv)

    print("No collisions have occurred.")
    for line in sim.report(coordinates):
        print(line)
    if args.save_json:
        save_state(args.save_json, sim.system)
    return 0


if __name__ == "__main__":  # pragma: no cover - manual tool
    sys.exit(main())

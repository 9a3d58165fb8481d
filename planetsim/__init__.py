"""N-body integration with a rigorous bound on the accumulated error."""

from importlib.metadata import PackageNotFoundError, version

from .physics import Body, System, advance, system_energy
from .integrators import Generation, distance, step_generation
from .physics_utils import integrate
from .errors import CollisionDetected, MalformedSystemFile, ToleranceUnattainable
from .constants import G_REAL, UNBOUNDED_ERROR

from .state_io import load_system, parse_system, save_state, load_state
try:
    __version__ = version("planetsim")
except PackageNotFoundError:
    # Fallback when package metadata is unavailable (e.g. running from source)
    __version__ = "0.0.0"

__all__ = [
    "Body",
    "System",
    "advance",
    "system_energy",
    "Generation",
    "distance",
    "step_generation",
    "integrate",
    "CollisionDetected",
    "MalformedSystemFile",
    "ToleranceUnattainable",
    "G_REAL",
    "UNBOUNDED_ERROR",
    "__version__",
    "load_system",
    "parse_system",
    "save_state",
    "load_state",
]

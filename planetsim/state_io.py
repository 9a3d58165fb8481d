"""Reading system description files and JSON checkpoints."""

import json
import math
from pathlib import Path

from . import constants as C
from .errors import MalformedSystemFile
from .physics import Body, System

BODY_FIELDS = 9  # name mass radius p1 p2 p3 vx vy vz


def _content_lines(text):
    for number, line in enumerate(text.splitlines(), 1):
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            yield number, stripped.split()


def parse_system(text: str, filename="<string>") -> System:
    """Parse a system description.

    The first line holds ``system_name number_of_bodies [c|s]``; each following
    line holds ``name mass radius p1 p2 p3 vx vy vz``.  With ``s`` the position
    is ``(r, azimuth, polar)``.  Velocities are always Cartesian.
    """
    lines = list(_content_lines(text))
    if not lines:
        raise MalformedSystemFile(filename, 1, "empty system description")

    header_line, header = lines[0]
    if len(header) not in (2, 3):
        raise MalformedSystemFile(
            filename, header_line, "expected 'name number_of_bodies [c|s]'"
        )
    system_name = header[0]
    try:
        count = int(header[1])
    except ValueError:
        raise MalformedSystemFile(
            filename, header_line, f"invalid body count {header[1]!r}"
        ) from None
    coordinates = header[2].lower() if len(header) == 3 else C.CARTESIAN
    if coordinates not in (C.CARTESIAN, C.SPHERICAL):
        raise MalformedSystemFile(
            filename, header_line, f"unknown coordinate system {header[2]!r}"
        )

    rows = lines[1:]
    if len(rows) != count:
        raise MalformedSystemFile(
            filename, header_line, f"header declares {count} bodies, found {len(rows)}"
        )

    bodies = []
    for number, fields in rows:
        if len(fields) != BODY_FIELDS:
            raise MalformedSystemFile(
                filename, number, f"expected {BODY_FIELDS} fields, found {len(fields)}"
            )
        try:
            mass, radius, p1, p2, p3, vx, vy, vz = (float(f) for f in fields[1:])
        except ValueError as exc:
            raise MalformedSystemFile(filename, number, str(exc)) from None
        try:
            if coordinates == C.SPHERICAL:
                body = Body.from_spherical(
                    mass, [p1, p2, p3], [vx, vy, vz], radius=radius, name=fields[0]
                )
            else:
                body = Body(mass, [p1, p2, p3], [vx, vy, vz], radius=radius, name=fields[0])
        except ValueError as exc:
            raise MalformedSystemFile(filename, number, str(exc)) from None
        bodies.append(body)
    return System(system_name, bodies)


def load_system(filepath) -> System:
    """Load a system description file."""
    path = Path(filepath)
    return parse_system(path.read_text(), filename=path)


def _bound_to_json(value):
    return None if math.isinf(value) else value


def _bound_from_json(item, key):
    value = item.get(key, 0.0)
    return C.UNBOUNDED_ERROR if value is None else value


def save_state(filepath, system: System):
    """Serialize a system, error bounds included, to a JSON file.

    An unbounded error is written as ``null`` so the file stays strict JSON.
    """
    data = {
        "name": system.name,
        "bodies": [
            {
                "name": b.name,
                "mass": b.mass,
                "radius": b.radius,
                "pos": b.pos.tolist(),
                "vel": b.vel.tolist(),
                "position_error": _bound_to_json(b.position_error),
                "velocity_error": _bound_to_json(b.velocity_error),
            }
            for b in system
        ],
    }
    Path(filepath).write_text(json.dumps(data, indent=2, allow_nan=False))


def load_state(filepath) -> System:
    """Load a system written by :func:`save_state`."""
    data = json.loads(Path(filepath).read_text())
    bodies = []
    for item in data.get("bodies", []):
        bodies.append(
            Body(
                item["mass"],
                item.get("pos", [0, 0, 0]),
                item.get("vel", [0, 0, 0]),
                radius=item.get("radius", 0.0),
                name=item.get("name"),
                position_error=_bound_from_json(item, "position_error"),
                velocity_error=_bound_from_json(item, "velocity_error"),
            )
        )
    return System(data.get("name", "System"), bodies)

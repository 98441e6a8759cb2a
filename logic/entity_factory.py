"""logic/entity_factory.py — Table-driven agent and obstacle spawning.

A descriptor is a plain dict (usually one table of a scenario TOML)::

    {
        "name": "courier",
        "position": [0.0, 0.0, 0.0],
        "vehicle":  {"mass": 1.0, "max_speed": 6.0, "radius": 0.5,
                     "safe_distance": 8.0, "velocity": [5.0, 0.0, 5.0]},
        "steering": {"kind": "path", "path": [[10, 0, 0], [10, 0, 10]]},
    }

``_VEHICLE_FIELDS`` maps descriptor keys to ``Vehicle`` kwargs together
with their cast, default and allowed range.  Anything the simulation
cannot run with (no terrain installed, a negative mass, a pursuit
target that is not a vehicle, an unknown strategy) raises
``ValueError`` here, at spawn, never mid-tick.
"""

from __future__ import annotations
from typing import Any, Callable

from pygame.math import Vector3

from core.ecs import World
from core.terrain import Terrain
from core import constants as C
from components import Vehicle, Obstacle, Steering, Transform, Identity
from logic.diagnostics import log
from logic.steering import build_strategy, get_strategy


# ── Field-schema helpers ─────────────────────────────────────────────

def _float(v: Any, key: str) -> float:
    try:
        return float(v)
    except (TypeError, ValueError):
        raise ValueError(f"{key} must be a number, got {v!r}") from None


def _vector(v: Any, key: str = "vector") -> Vector3:
    """Accept ``[x, y, z]``, ``[x, z]`` (y = 0) or ``{x=, y=, z=}``."""
    if isinstance(v, Vector3):
        return Vector3(v)
    if isinstance(v, dict):
        return Vector3(_float(v.get("x", 0.0), key + ".x"),
                       _float(v.get("y", 0.0), key + ".y"),
                       _float(v.get("z", 0.0), key + ".z"))
    if isinstance(v, (list, tuple)):
        if len(v) == 3:
            return Vector3(*(_float(c, key) for c in v))
        if len(v) == 2:
            return Vector3(_float(v[0], key), 0.0, _float(v[1], key))
    raise ValueError(f"{key} must be [x, y, z], [x, z] or a table, got {v!r}")


def _at_least(lo: float, strict: bool = False) -> Callable[[float, str], None]:
    def check(value: float, key: str) -> None:
        if value < lo or (strict and value == lo):
            op = ">" if strict else ">="
            raise ValueError(f"{key} must be {op} {lo}, got {value}")
    return check


# ── Vehicle schema ───────────────────────────────────────────────────
# kwarg → (descriptor key, default, range check)

_VEHICLE_FIELDS: dict[str, tuple[str, float, Callable]] = {
    "mass":          ("mass",          C.DEFAULT_MASS,          _at_least(0.0, strict=True)),
    "max_speed":     ("max_speed",     C.DEFAULT_MAX_SPEED,     _at_least(0.0)),
    "radius":        ("radius",        C.DEFAULT_RADIUS,        _at_least(0.0)),
    "safe_distance": ("safe_distance", C.DEFAULT_SAFE_DISTANCE, _at_least(0.0)),
}


def build_vehicle(sub: dict, position: Vector3) -> Vehicle:
    """Construct a ``Vehicle`` from the ``vehicle`` sub-table."""
    kwargs: dict[str, Any] = {}
    for kwarg, (key, default, check) in _VEHICLE_FIELDS.items():
        value = _float(sub.get(key, default), key)
        check(value, key)
        kwargs[kwarg] = value
    velocity = _vector(sub.get("velocity", C.DEFAULT_VELOCITY), "velocity")
    return Vehicle(position=position, velocity=velocity, **kwargs)


# ── Spawning ─────────────────────────────────────────────────────────

def spawn_vehicle(world: World, desc: dict,
                  names: dict[str, int] | None = None) -> int:
    """Create a steering agent from *desc*.  Returns the new entity ID.

    *names* maps descriptor names to entity IDs so a ``steering`` table
    can refer to other agents (``target = "zombie"``).  The vehicle is
    registered under its own name before the strategy is resolved.

    ``pursue`` / ``evade`` keep the referenced entity and track it every
    tick.  ``seek`` / ``flee`` take a fixed point: ``target`` may be a
    vector, or an agent name that resolves to where that agent stands
    at spawn.
    """
    if world.res(Terrain) is None:
        raise ValueError("install a Terrain resource before spawning vehicles")

    position = _vector(desc.get("position", (0.0, 0.0, 0.0)), "position")
    vehicle = build_vehicle(desc.get("vehicle") or {}, position)

    eid = world.spawn()
    name = str(desc.get("name") or f"vehicle_{eid}")
    world.add(eid, Identity(name=name, kind="vehicle"))
    world.add(eid, vehicle)
    world.add(eid, Transform(position=Vector3(position),
                             forward=Vector3(vehicle.facing)))
    if names is not None:
        names[name] = eid

    steer = desc.get("steering")
    if steer is not None:
        try:
            attach_steering(world, eid, steer, names or {})
        except ValueError:
            world.kill(eid)
            world.purge()
            if names is not None:
                names.pop(name, None)
            raise

    log(world, eid, "spawn", f"spawned {name}",
        mass=vehicle.mass, max_speed=vehicle.max_speed)
    return eid


def attach_steering(world: World, eid: int, steer: dict,
                    names: dict[str, int]) -> Steering:
    """Build, validate and attach the strategy described by *steer*."""
    if not isinstance(steer, dict) or "kind" not in steer:
        raise ValueError("steering table needs a 'kind'")
    params = {k: v for k, v in steer.items() if k not in ("kind", "active")}
    kind = str(steer["kind"])

    factory = get_strategy(kind)
    tracks = bool(getattr(factory, "tracks_entity", False))
    for key in ("target", "threat"):
        if key in params:
            ref = params.pop(key)
            params["target"] = (_resolve(ref, names) if tracks
                                else _point(world, ref, names))
    if "point" in params:
        params["target"] = _vector(params.pop("point"), "point")
    if "path" in params:
        params["path"] = [_waypoint(p) for p in params["path"]]

    strategy = build_strategy(kind, **params)
    strategy.validate(world, eid)
    steering = Steering(strategy=strategy, kind=kind,
                        active=bool(steer.get("active", True)))
    world.add(eid, steering)
    return steering


def spawn_obstacle(world: World, desc: dict) -> int:
    """Create a static obstacle from ``{position, radius}``."""
    radius = _float(desc.get("radius", 1.0), "radius")
    _at_least(0.0)(radius, "radius")
    position = _vector(desc.get("position", (0.0, 0.0, 0.0)), "position")

    eid = world.spawn()
    world.add(eid, Identity(name=str(desc.get("name") or f"obstacle_{eid}"),
                            kind="obstacle"))
    world.add(eid, Obstacle(position=position, radius=radius))
    return eid


def _resolve(ref: Any, names: dict[str, int]) -> int:
    if isinstance(ref, int):
        return ref
    if isinstance(ref, str) and ref in names:
        return names[ref]
    raise ValueError(f"unknown entity reference {ref!r}")


def _point(world: World, ref: Any, names: dict[str, int]) -> Vector3:
    """A fixed target: a vector, or where the named agent stands right now."""
    if isinstance(ref, (str, int)) and not isinstance(ref, bool):
        eid = _resolve(ref, names)
        try:
            return Vector3(world.require(eid, Vehicle).position)
        except KeyError:
            raise ValueError(f"target {ref!r} is not a vehicle") from None
    return _vector(ref, "target")


def _waypoint(p: Any) -> dict:
    if isinstance(p, dict) and "position" in p:
        return {"position": _vector(p["position"], "waypoint"),
                "radius": _float(p.get("radius", 0.0), "waypoint.radius")}
    return {"position": _vector(p, "waypoint"), "radius": 0.0}

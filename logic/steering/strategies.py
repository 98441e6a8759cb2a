"""logic/steering/strategies.py — Behaviour strategies.

A strategy turns the force library into one *ultimate force* per tick:

    1. sum a weighted subset of ``logic.steering.forces`` outputs
    2. clamp the sum to ``vehicle.max_speed``
    3. zero the vertical component (movement is horizontal-plane only)

Each agent owns its strategy instance through the ``Steering``
component, so per-agent state (the path cursor) lives on the strategy.
Collaborators (pursuit targets, paths) are resolved once at spawn via
``validate()``; during a tick everything cross-agent is read from the
tick snapshot.

Registered kinds: ``path``, ``seek``, ``flee``, ``pursue``, ``evade``,
``wander``, ``flock``.
"""

from __future__ import annotations
import random
from typing import Iterable

from pygame.math import Vector3

from core.ecs import World
from core.events import WaypointReached
from core.tuning import get as _tun
from components import Vehicle, Waypoint, Bounds
from logic.diagnostics import log, emit
from logic.perception import neighbors_of, target_of, obstacles
from logic.steering import forces
from logic.steering.registry import register_strategy


def finalize(force: Vector3, max_speed: float) -> Vector3:
    """Clamp *force* to *max_speed* and flatten it onto the x/z plane."""
    if max_speed <= 0.0:
        return Vector3()
    out = Vector3(force)
    if out.length() > max_speed:
        out = out.clamp_magnitude(max_speed)
    out.y = 0.0
    return out


def _avoid_weight() -> float:
    return _tun("steering.avoid", "weight", 3.0)


class SteeringStrategy:
    """Interface every behaviour implements."""

    kind = ""
    tracks_entity = False    # target is an entity id rather than a point

    def compute_steering_force(self, world: World, eid: int,
                               vehicle: Vehicle) -> Vector3:
        raise NotImplementedError

    def validate(self, world: World, eid: int) -> None:
        """Check collaborators at spawn time; raise ``ValueError`` if missing."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


# ── Path following ───────────────────────────────────────────────────

def _as_waypoint(p) -> Waypoint:
    if isinstance(p, Waypoint):
        return p
    if isinstance(p, dict):
        return Waypoint(position=Vector3(p["position"]),
                        radius=float(p.get("radius", 0.0)))
    return Waypoint(position=Vector3(p))


class PathFollowing(SteeringStrategy):
    """Seek each waypoint of a fixed, cyclic path in turn.

    The agent counts as arrived once its horizontal distance to the
    current waypoint is below ``waypoint.radius + arrival_margin``.  The
    cursor then advances and wraps back to 0 after the last waypoint.
    The seek force for this tick is still the one aimed at the waypoint
    just reached.
    """

    kind = "path"

    def __init__(self, path: Iterable, current_index: int = 0):
        self.path: tuple[Waypoint, ...] = tuple(_as_waypoint(p) for p in path)
        if not self.path:
            raise ValueError("path needs at least one waypoint")
        self.current_index = int(current_index) % len(self.path)

    @property
    def target(self) -> Waypoint:
        return self.path[self.current_index]

    def compute_steering_force(self, world, eid, vehicle):
        waypoint = self.path[self.current_index]
        force = forces.seek(vehicle, waypoint.position)

        margin = _tun("steering.path", "arrival_margin", 2.0)
        if forces.circle_collision(waypoint.position, waypoint.radius,
                                   vehicle.position, 0.0, margin):
            reached = self.current_index
            self.current_index += 1
            if self.current_index >= len(self.path):
                self.current_index = 0
            log(world, eid, "path", f"reached waypoint {reached}",
                next=self.current_index)
            emit(world, WaypointReached(eid=eid, index=reached,
                                        next_index=self.current_index))

        return finalize(force, vehicle.max_speed)

    def __repr__(self) -> str:
        return f"PathFollowing({len(self.path)} waypoints, at={self.current_index})"


# ── Static targets ───────────────────────────────────────────────────

class SeekPoint(SteeringStrategy):
    """Head for a fixed point, dodging obstacles on the way."""

    kind = "seek"

    def __init__(self, target, avoid: bool = True):
        self.target = Vector3(target)
        self.avoid = avoid

    def compute_steering_force(self, world, eid, vehicle):
        force = forces.seek(vehicle, self.target)
        if self.avoid:
            force += forces.avoid_obstacles(vehicle, obstacles(world)) * _avoid_weight()
        return finalize(force, vehicle.max_speed)


class FleePoint(SteeringStrategy):
    """Run from a fixed point.

    With ``panic_distance`` set the agent only flees while that close;
    beyond it the strategy contributes no force.
    """

    kind = "flee"

    def __init__(self, target, panic_distance: float | None = None,
                 avoid: bool = True):
        self.target = Vector3(target)
        self.panic_distance = panic_distance
        self.avoid = avoid

    def compute_steering_force(self, world, eid, vehicle):
        force = Vector3()
        if (self.panic_distance is None
                or vehicle.position.distance_to(self.target) <= self.panic_distance):
            force += forces.flee(vehicle, self.target)
        if self.avoid:
            force += forces.avoid_obstacles(vehicle, obstacles(world)) * _avoid_weight()
        return finalize(force, vehicle.max_speed)


# ── Moving targets ───────────────────────────────────────────────────

class _Tracking(SteeringStrategy):
    """Shared spawn-time check for strategies that follow another agent."""

    tracks_entity = True

    def __init__(self, target: int, avoid: bool = True):
        self.target = int(target)
        self.avoid = avoid

    def validate(self, world, eid):
        if self.target == eid:
            raise ValueError(f"{self.kind}: entity {eid} cannot track itself")
        try:
            world.require(self.target, Vehicle)
        except KeyError as exc:
            raise ValueError(f"{self.kind}: target is not a vehicle ({exc})") from exc

    def __repr__(self) -> str:
        return f"{type(self).__name__}(target={self.target})"


class Pursuit(_Tracking):
    """Seek where the target will be half a second from now."""

    kind = "pursue"

    def compute_steering_force(self, world, eid, vehicle):
        force = forces.pursue(vehicle, target_of(world, self.target))
        if self.avoid:
            force += forces.avoid_obstacles(vehicle, obstacles(world)) * _avoid_weight()
        return finalize(force, vehicle.max_speed)


class Evasion(_Tracking):
    """Flee where the threat will be half a second from now."""

    kind = "evade"

    def compute_steering_force(self, world, eid, vehicle):
        force = forces.evade(vehicle, target_of(world, self.target))
        if self.avoid:
            force += forces.avoid_obstacles(vehicle, obstacles(world)) * _avoid_weight()
        return finalize(force, vehicle.max_speed)


# ── Wander ───────────────────────────────────────────────────────────

class Wandering(SteeringStrategy):
    """Smooth random walk that turns back toward the centre of ``bounds``."""

    kind = "wander"

    def __init__(self, bounds: Bounds | tuple | None = None,
                 seed: int | None = None, avoid: bool = True):
        if isinstance(bounds, (tuple, list)):
            bounds = Bounds(lo=float(bounds[0]), hi=float(bounds[1]))
        self.bounds = bounds
        self.rng = random.Random(seed)
        self.avoid = avoid

    def compute_steering_force(self, world, eid, vehicle):
        if self.bounds is not None and forces.out_of_bounds(
                vehicle.position, self.bounds.lo, self.bounds.hi):
            force = forces.seek(vehicle, self.bounds.center)
        else:
            force = forces.wander(vehicle, self.rng)
        if self.avoid:
            force += forces.avoid_obstacles(vehicle, obstacles(world)) * _avoid_weight()
        return finalize(force, vehicle.max_speed)


# ── Flocking ─────────────────────────────────────────────────────────

class Flocking(SteeringStrategy):
    """Cohesion + alignment + separation over nearby agents.

    Neighbours are every other agent within ``radius`` in the tick
    snapshot.  Weights default to the ``[steering.flock]`` tuning table.
    ``wander_weight`` adds a little wander so a lone agent keeps moving.
    """

    kind = "flock"

    def __init__(self, radius: float | None = None,
                 separation_distance: float | None = None,
                 cohesion_weight: float | None = None,
                 alignment_weight: float | None = None,
                 separation_weight: float | None = None,
                 wander_weight: float = 0.0,
                 seed: int | None = None,
                 avoid: bool = True):
        def pick(value, key):
            return float(value if value is not None else _tun("steering.flock", key))

        self.radius = pick(radius, "radius")
        self.separation_distance = pick(separation_distance, "separation_distance")
        self.cohesion_weight = pick(cohesion_weight, "cohesion_weight")
        self.alignment_weight = pick(alignment_weight, "alignment_weight")
        self.separation_weight = pick(separation_weight, "separation_weight")
        self.wander_weight = float(wander_weight)
        self.rng = random.Random(seed)
        self.avoid = avoid

    def compute_steering_force(self, world, eid, vehicle):
        flock = neighbors_of(world, eid, vehicle, self.radius)
        force = Vector3()
        if flock:
            force += forces.cohesion(vehicle, flock) * self.cohesion_weight
            force += forces.alignment(vehicle, flock) * self.alignment_weight
            force += forces.separation(
                vehicle, flock, self.separation_distance) * self.separation_weight
        if self.wander_weight:
            force += forces.wander(vehicle, self.rng) * self.wander_weight
        if self.avoid:
            force += forces.avoid_obstacles(vehicle, obstacles(world)) * _avoid_weight()
        return finalize(force, vehicle.max_speed)

    def __repr__(self) -> str:
        return f"Flocking(radius={self.radius})"


register_strategy("path", PathFollowing)
register_strategy("seek", SeekPoint)
register_strategy("flee", FleePoint)
register_strategy("pursue", Pursuit)
register_strategy("evade", Evasion)
register_strategy("wander", Wandering)
register_strategy("flock", Flocking)

"""logic/movement.py — Force integration / per-agent update.

Once per tick, for every active steering agent:

    1. ground-clamp: ``position.y = terrain.height(x, z)``
    2. ask the strategy for the ultimate force and ``apply_force`` it
    3. ``velocity += acceleration * dt``; ``position += velocity * dt``;
       ``facing = normalize(velocity)`` (held while velocity is zero)
    4. reset acceleration
    5. write the render ``Transform`` and point it at ``position + facing``

Velocity is not clamped after integration unless the
``integrator.clamp_velocity`` tuning switch is on: only the applied
force is clamped, so the speed can overshoot ``max_speed`` while a
force keeps pushing the same way.
"""

from __future__ import annotations
import traceback

from pygame.math import Vector3

from core.ecs import World
from core.events import AvoidanceChanged, SteeringFailed
from core.terrain import Terrain
from core.tuning import get as _tun
from core.constants import EPSILON
from components import Vehicle, Steering, Transform
from logic.diagnostics import log, emit


def ground(vehicle: Vehicle, terrain: Terrain | None) -> None:
    """Snap the vehicle's height to the terrain under it."""
    if terrain is None:
        return
    vehicle.position.y = terrain.height(vehicle.position.x, vehicle.position.z)


def integrate(vehicle: Vehicle, dt: float, clamp_velocity: bool = False) -> None:
    """Semi-implicit Euler step, then clear the force accumulator."""
    vehicle.velocity += vehicle.acceleration * dt
    if clamp_velocity and vehicle.velocity.length() > vehicle.max_speed:
        if vehicle.max_speed <= 0.0:
            vehicle.velocity = Vector3()
        else:
            vehicle.velocity = vehicle.velocity.clamp_magnitude(vehicle.max_speed)
    vehicle.position += vehicle.velocity * dt
    if vehicle.velocity.length_squared() > EPSILON:
        vehicle.facing = vehicle.velocity.normalize()
    vehicle.acceleration = Vector3()


def sync_transform(vehicle: Vehicle, transform: Transform | None) -> None:
    """Push position / facing out to the render transform."""
    if transform is None:
        return
    transform.position = Vector3(vehicle.position)
    transform.look_at(vehicle.position + vehicle.facing)


def _report(world: World, eid: int, steering: Steering, stage: str,
            exc: Exception) -> None:
    print(f"[STEER] {steering.kind or 'strategy'} {stage} crash on e{eid}: {exc}")
    traceback.print_exc()
    log(world, eid, "error", f"steering '{steering.kind}' {stage} crash: {exc}")
    emit(world, SteeringFailed(eid=eid, error=str(exc)))


def _ultimate_force(world: World, eid: int, vehicle: Vehicle,
                    steering: Steering) -> Vector3:
    """Ask the strategy for this tick's force; contain any failure.

    A crashing strategy is reported and contributes no force, so the
    agent coasts on its current velocity while the rest of the world
    keeps running.
    """
    if steering.strategy is None:
        return Vector3()
    try:
        return Vector3(steering.strategy.compute_steering_force(world, eid, vehicle))
    except Exception as exc:
        _report(world, eid, steering, "force", exc)
        return Vector3()


def tick_vehicle(world: World, eid: int, vehicle: Vehicle, steering: Steering,
                 dt: float) -> Vector3:
    """Run one agent through the full update.  Returns the applied force."""
    ground(vehicle, world.res(Terrain))

    was_avoiding = vehicle.obstacle_avoid
    vehicle.acceleration = Vector3()
    force = _ultimate_force(world, eid, vehicle, steering)
    vehicle.apply_force(force)
    steering.last_force = force

    if vehicle.obstacle_avoid != was_avoiding:
        log(world, eid, "avoid",
            "avoiding obstacle" if vehicle.obstacle_avoid else "path clear")
        emit(world, AvoidanceChanged(eid=eid, avoiding=vehicle.obstacle_avoid))

    integrate(vehicle, dt, bool(_tun("integrator", "clamp_velocity", False)))
    sync_transform(vehicle, world.get(eid, Transform))
    return force


def steering_system(world: World, dt: float) -> int:
    """Tick every active steering agent in spawn order.

    An agent whose update raises outside its strategy (terrain lookup,
    integration, transform sync) is reported and skipped for this tick
    with its acceleration cleared.  Returns the number of agents that
    completed the update.
    """
    updated = 0
    for eid, vehicle, steering in world.query(Vehicle, Steering):
        if not steering.active:
            continue
        try:
            tick_vehicle(world, eid, vehicle, steering, dt)
        except Exception as exc:
            vehicle.acceleration = Vector3()
            _report(world, eid, steering, "update", exc)
            continue
        updated += 1
    return updated

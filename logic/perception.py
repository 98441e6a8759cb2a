"""logic/perception.py — Tick snapshots and neighbour / obstacle queries.

Every cross-agent read during a tick goes through a ``Snapshot`` taken
before any vehicle moves.  Agents therefore see each other exactly as
they were at the start of the tick, whatever order the steering
system visits them in.
"""

from __future__ import annotations
from pygame.math import Vector3

from core.ecs import World
from components import Vehicle, Obstacle, Snapshot, AgentSnapshot, GameClock


def take_snapshot(world: World) -> Snapshot:
    """Copy every live vehicle's position / velocity / radius."""
    clock = world.res(GameClock)
    agents = {
        eid: AgentSnapshot(
            eid=eid,
            position=Vector3(v.position),
            velocity=Vector3(v.velocity),
            radius=v.radius,
        )
        for eid, v in world.all_of(Vehicle)
    }
    return Snapshot(agents=agents, time=clock.time if clock else 0.0)


def current_snapshot(world: World) -> Snapshot:
    """The snapshot published for this tick, or a fresh one outside a tick."""
    snap = world.res(Snapshot)
    if snap is None:
        snap = take_snapshot(world)
    return snap


def neighbors_of(world: World, eid: int, vehicle: Vehicle,
                 radius: float) -> list[AgentSnapshot]:
    """Snapshot agents within *radius* of *vehicle*, excluding *eid* itself."""
    return current_snapshot(world).neighbors(eid, vehicle.position, radius)


def target_of(world: World, target_eid: int) -> AgentSnapshot:
    """Snapshot of a tracked agent.

    Raises ``KeyError`` when the target has left the world; the steering
    system logs that and skips the pursuer's force for the tick.
    """
    snap = current_snapshot(world).get(target_eid)
    if snap is None:
        raise KeyError(f"target {target_eid} is not in the tick snapshot")
    return snap


def obstacles(world: World) -> list[Obstacle]:
    """All static obstacles (read-only for the steering code)."""
    return [obs for _, obs in world.all_of(Obstacle)]

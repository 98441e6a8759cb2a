"""logic/tick.py — Per-frame system orchestration.

Usage::

    from logic.tick import tick_systems
    tick_systems(world, dt)

Order within one tick:

    1. advance ``GameClock``
    2. publish a fresh ``Snapshot`` of every vehicle
    3. ``steering_system`` — strategies, integration, transforms
    4. purge entities killed during the tick
    5. drain the ``EventBus``
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from components import GameClock
from core.events import EventBus
from logic.movement import steering_system
from logic.perception import take_snapshot

if TYPE_CHECKING:
    from core.ecs import World


def ensure_resources(world: "World") -> None:
    """Install a clock and an event bus if the host didn't provide them."""
    if world.res(GameClock) is None:
        world.set_res(GameClock())
    if world.res(EventBus) is None:
        world.set_res(EventBus())


def tick_systems(world: "World", dt: float) -> int:
    """Run one simulation tick.  Returns the number of agents updated."""
    if dt < 0:
        raise ValueError(f"dt must be non-negative, got {dt}")
    ensure_resources(world)

    clock = world.res(GameClock)
    clock.time += dt
    clock.ticks += 1

    world.set_res(take_snapshot(world))
    updated = steering_system(world, dt)
    world.purge()

    world.res(EventBus).drain()
    return updated


def run(world: "World", dt: float, ticks: int) -> None:
    """Convenience driver: *ticks* fixed steps of *dt* seconds."""
    for _ in range(ticks):
        tick_systems(world, dt)

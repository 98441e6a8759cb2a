"""logic/diagnostics.py — DevLog / EventBus helpers shared by systems.

Both sinks are optional world resources: a headless run with neither
installed pays nothing for diagnostics.
"""

from __future__ import annotations
from core.ecs import World
from core.events import EventBus
from components import DevLog, GameClock, Identity


def entity_name(world: World, eid: int) -> str:
    ident = world.get(eid, Identity)
    return ident.name if ident else f"e{eid}"


def log(world: World, eid: int, cat: str, msg: str, **details) -> None:
    """Write to DevLog if available, stamped with the current clock time."""
    dev_log = world.res(DevLog)
    if dev_log is None:
        return
    clock = world.res(GameClock)
    dev_log.record(eid, cat, msg,
                   name=entity_name(world, eid),
                   t=clock.time if clock else 0.0,
                   details=details or None)


def emit(world: World, event) -> None:
    """Queue *event* on the EventBus if one is installed."""
    bus = world.res(EventBus)
    if bus is not None:
        bus.emit(event)

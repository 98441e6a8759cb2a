"""core/events.py — Lightweight event bus.

Lets steering code *signal* things (a waypoint was reached, an agent
started dodging an obstacle, an agent's tick crashed) without knowing
who listens.  The bus lives as an ECS resource::

    from core.events import EventBus, WaypointReached
    bus = world.res(EventBus)
    bus.emit(WaypointReached(eid=3, index=0, next_index=1))

Consumers subscribe by event class name::

    bus.subscribe("WaypointReached", on_waypoint)

and the tick pipeline drains once per frame with ``bus.drain()``.

Design rules:
  - Events are plain dataclasses — no behaviour.
  - ``emit()`` only appends; handlers never run inside a steering call.
  - ``drain()`` is FIFO; events emitted by handlers run in the same drain.
"""

from __future__ import annotations
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Any, Callable


# ═══════════════════════════════════════════════════════════════════
#  Event definitions
# ═══════════════════════════════════════════════════════════════════

@dataclass
class WaypointReached:
    """A path-following agent arrived at ``index`` and now seeks ``next_index``."""
    eid: int
    index: int
    next_index: int


@dataclass
class AvoidanceChanged:
    """An agent's obstacle-avoidance flag flipped."""
    eid: int
    avoiding: bool


@dataclass
class SteeringFailed:
    """An agent's tick raised; its force was skipped for this frame."""
    eid: int
    error: str


# ═══════════════════════════════════════════════════════════════════
#  Event Bus
# ═══════════════════════════════════════════════════════════════════

_MAX_EVENTS_PER_DRAIN = 65536  # runaway guard for handlers that re-emit


class EventBus:
    """Fire-and-forget event bus stored as an ECS resource."""

    def __init__(self):
        self._queue: deque[Any] = deque()
        self._subs: dict[str, list[Callable]] = defaultdict(list)
        self._stats: dict[str, int] = defaultdict(int)

    def emit(self, event) -> None:
        """Queue an event for processing on next ``drain()``."""
        self._queue.append(event)

    def subscribe(self, event_type: str, handler: Callable) -> None:
        self._subs[event_type].append(handler)

    def drain(self) -> int:
        """Deliver every queued event.  Returns the number delivered."""
        processed = 0
        while self._queue and processed < _MAX_EVENTS_PER_DRAIN:
            event = self._queue.popleft()
            name = type(event).__name__
            self._stats[name] += 1
            processed += 1
            for handler in self._subs.get(name, ()):
                try:
                    handler(event)
                except Exception as exc:
                    print(f"[EVENT] handler error for {name}: {exc}")
                    import traceback; traceback.print_exc()
        return processed

    def clear(self) -> None:
        """Discard all pending events."""
        self._queue.clear()

    def pending(self) -> list[Any]:
        """Snapshot of the events waiting to be drained."""
        return list(self._queue)

    def stats(self) -> dict[str, int]:
        """Cumulative delivered-event counts by type."""
        return dict(self._stats)

    def __repr__(self) -> str:
        return f"EventBus(pending={len(self._queue)}, subs={len(self._subs)})"

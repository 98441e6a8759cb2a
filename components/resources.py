"""components.resources — World-level singletons (not per-entity)."""

from __future__ import annotations
from dataclasses import dataclass, field

from pygame.math import Vector3


@dataclass
class GameClock:
    """Monotonic simulation time — accumulated ``dt`` since start.

    Advanced once per tick by ``logic.tick.tick_systems``; used to
    timestamp DevLog entries.
    """
    time: float = 0.0
    ticks: int = 0


@dataclass(frozen=True)
class AgentSnapshot:
    """Read-only copy of one vehicle's state at the start of a tick."""
    eid: int
    position: Vector3
    velocity: Vector3
    radius: float = 0.0


@dataclass
class Snapshot:
    """Every vehicle's state as it was when the tick began.

    Neighbour and target lookups read from here, never from live
    ``Vehicle`` components, so the order agents are updated in cannot
    change the outcome of a tick.
    """
    agents: dict[int, AgentSnapshot] = field(default_factory=dict)
    time: float = 0.0

    def get(self, eid: int) -> AgentSnapshot | None:
        return self.agents.get(eid)

    def neighbors(self, eid: int, position: Vector3,
                  radius: float) -> list[AgentSnapshot]:
        """Agents within *radius* of *position* on the x/z plane, minus *eid*."""
        r_sq = radius * radius
        found = []
        for other in self.agents.values():
            if other.eid == eid:
                continue
            dx = other.position.x - position.x
            dz = other.position.z - position.z
            if dx * dx + dz * dz <= r_sq:
                found.append(other)
        return found

    def __len__(self) -> int:
        return len(self.agents)


@dataclass
class Bounds:
    """Square play area ``[lo, hi]`` on both x and z."""
    lo: float = 0.0
    hi: float = 100.0

    @property
    def center(self) -> Vector3:
        mid = (self.lo + self.hi) * 0.5
        return Vector3(mid, 0.0, mid)

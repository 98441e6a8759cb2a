"""components.dev_log — Structured steering event log.

A ring-buffer resource that records timestamped diagnostics per agent:
waypoint arrivals, obstacle-avoidance transitions, spawn summaries and
tick failures.  Read by the viewer's overlay and by tests.

Usage:
    log = world.res(DevLog)
    log.record(eid, "path", "reached waypoint 2", t=clock.time,
               details={"next": 3})

Each entry is a dict:
    {"t": float, "eid": int, "name": str, "cat": str,
     "msg": str, "details": dict | None}
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field


@dataclass
class DevLog:
    """Ring-buffer of steering events, oldest dropped first."""

    entries: list[dict] = field(default_factory=list)
    max_entries: int = 500

    def record(self, eid: int, cat: str, msg: str, *,
               name: str = "", t: float = 0.0,
               details: dict | None = None) -> None:
        self.entries.append({"t": t, "eid": eid, "name": name,
                             "cat": cat, "msg": msg, "details": details})
        overflow = len(self.entries) - self.max_entries
        if overflow > 0:
            del self.entries[:overflow]

    def recent(self, n: int = 50) -> list[dict]:
        """Return the *n* most recent entries (newest last)."""
        return self.entries[-n:]

    def for_cat(self, cat: str, n: int = 50) -> list[dict]:
        return [e for e in self.entries if e["cat"] == cat][-n:]

    def counts(self) -> dict[str, int]:
        """Number of buffered entries per category."""
        return dict(Counter(e["cat"] for e in self.entries))

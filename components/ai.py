"""components.ai — Steering controller component."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any


@dataclass
class Steering:
    """Holds the agent's behaviour strategy.

    ``strategy`` is any object with
    ``compute_steering_force(world, eid, vehicle) -> Vector3`` (see
    ``logic.steering.strategies``).  One strategy instance per agent:
    strategies may keep per-agent state such as a path cursor.

    ``kind`` is the registry name the strategy was built from, kept for
    logging and the debug overlay.  ``active`` must be True for the
    steering system to tick the agent.  ``last_force`` is the finalized
    force applied on the most recent tick.
    """
    strategy: Any = None
    kind: str = ""
    active: bool = True
    last_force: Any = None


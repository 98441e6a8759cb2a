"""components — ECS component dataclasses, organised by domain.

Submodules
----------
spatial        Vehicle, Obstacle, Waypoint, Transform
ai             Steering
rendering      Identity, Sprite
resources      GameClock, Snapshot, AgentSnapshot, Bounds
dev_log        DevLog

All public names are re-exported here so callers can write
``from components import Vehicle``.
"""

# ── Spatial ──────────────────────────────────────────────────────────
from components.spatial import Vehicle, Obstacle, Waypoint, Transform

# ── AI ───────────────────────────────────────────────────────────────
from components.ai import Steering

# ── Rendering ────────────────────────────────────────────────────────
from components.rendering import Identity, Sprite

# ── World resources / singletons ─────────────────────────────────────
from components.resources import GameClock, Snapshot, AgentSnapshot, Bounds

# ── Diagnostics ──────────────────────────────────────────────────────
from components.dev_log import DevLog

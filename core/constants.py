"""core/constants.py — Shared constants used across the codebase.

Centralises magic numbers so there's exactly one place to change them.
Values that designers tune live in ``data/tuning.toml``; the numbers
below are the built-in defaults ``core.tuning`` falls back to.

Unit System
-----------
All distances are world units (1 unit = 1 m) on a y-up, left-handed
frame: +z is forward, +x is right, +y is up.

    Distance / position     m       (metres)
    Speed                   m/s     (metres per second)
    Force                   m/s²·kg (applied through ``Vehicle.mass``)
    Time                    s       (seconds)
    Angles                  °       (degrees)

Steering runs on the horizontal x/z plane.  The y component of every
position is owned by the terrain sampler.
"""

from pygame.math import Vector3

# ── Axes ─────────────────────────────────────────────────────────────

FORWARD = Vector3(0.0, 0.0, 1.0)

# ── Spawn defaults ───────────────────────────────────────────────────

DEFAULT_VELOCITY = (5.0, 0.0, 5.0)     # m/s
DEFAULT_MASS = 1.0                     # kg
DEFAULT_MAX_SPEED = 5.0                # m/s
DEFAULT_RADIUS = 0.5                   # m
DEFAULT_SAFE_DISTANCE = 8.0            # m

# ── Force library ────────────────────────────────────────────────────

PREDICTION_SCALE = 0.5                 # s   (pursue / evade lookahead)
WANDER_RADIUS = 2.0                    # m
WANDER_JITTER = 10.0                   # °   per call
WANDER_BASE_ANGLE = -90.0              # °   circle offset from heading
ARRIVAL_MARGIN = 2.0                   # m   path-following arrival slack
AVOID_WEIGHT = 3.0                     #     obstacle dodge vs. goal seeking

# ── Flocking weights ─────────────────────────────────────────────────

FLOCK_RADIUS = 6.0                     # m
FLOCK_SEPARATION_DISTANCE = 1.5        # m
FLOCK_COHESION_WEIGHT = 1.0
FLOCK_ALIGNMENT_WEIGHT = 1.0
FLOCK_SEPARATION_WEIGHT = 1.5

# ── Numerics ─────────────────────────────────────────────────────────

EPSILON = 1e-9

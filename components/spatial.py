"""components.spatial — Kinematic state, obstacles, waypoints, transform.

All coordinates are metres on a y-up frame (see ``core.constants``).
Vectors are ``pygame.math.Vector3`` and are owned by the component;
callers that keep a reference across ticks should ``copy()`` it.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from pygame.math import Vector3

from core.constants import FORWARD, DEFAULT_MASS, DEFAULT_MAX_SPEED, \
    DEFAULT_RADIUS, DEFAULT_SAFE_DISTANCE, EPSILON


def _vec(v=None) -> Vector3:
    return Vector3() if v is None else Vector3(v)


@dataclass
class Vehicle:
    """Per-agent kinematic state plus the force accumulator.

    ``acceleration`` is transient: it is zero before the first force of
    a tick and is reset by the integrator once velocity has been
    updated.  ``wander_angle`` stays ``None`` until the first wander
    call seeds it.  ``obstacle_avoid`` is a diagnostic flag that is
    true while the agent is steering around an obstacle.
    """
    position: Vector3 = field(default_factory=Vector3)
    velocity: Vector3 = field(default_factory=Vector3)
    acceleration: Vector3 = field(default_factory=Vector3)
    facing: Vector3 = field(default_factory=lambda: Vector3(FORWARD))
    mass: float = DEFAULT_MASS                 # kg
    max_speed: float = DEFAULT_MAX_SPEED       # m/s
    radius: float = DEFAULT_RADIUS             # m
    safe_distance: float = DEFAULT_SAFE_DISTANCE  # m
    wander_angle: float | None = None          # °
    obstacle_avoid: bool = False

    def __post_init__(self):
        self.position = _vec(self.position)
        self.velocity = _vec(self.velocity)
        self.acceleration = _vec(self.acceleration)
        self.facing = _vec(self.facing)
        if self.velocity.length_squared() > EPSILON:
            self.facing = self.velocity.normalize()

    def apply_force(self, force: Vector3) -> bool:
        """Accumulate ``force / mass`` into acceleration.

        A massless vehicle cannot be accelerated; the force is dropped
        and ``False`` is returned instead of dividing by zero.
        """
        if self.mass <= 0.0:
            return False
        self.acceleration += Vector3(force) / self.mass
        return True

    @property
    def forward(self) -> Vector3:
        """Horizontal unit heading derived from ``facing``."""
        flat = Vector3(self.facing.x, 0.0, self.facing.z)
        if flat.length_squared() <= EPSILON:
            return Vector3(FORWARD)
        return flat.normalize()

    @property
    def right(self) -> Vector3:
        """Horizontal unit vector 90° clockwise of ``forward`` seen from above."""
        return self.forward.rotate_y(90.0)


@dataclass
class Obstacle:
    """Static circular obstacle on the x/z plane."""
    position: Vector3 = field(default_factory=Vector3)
    radius: float = 1.0     # m

    def __post_init__(self):
        self.position = _vec(self.position)


@dataclass
class Waypoint:
    """One stop on a path.  ``radius`` widens the arrival circle."""
    position: Vector3 = field(default_factory=Vector3)
    radius: float = 0.0     # m

    def __post_init__(self):
        self.position = _vec(self.position)


@dataclass
class Transform:
    """Render-side transform written by the integrator each tick.

    Stands in for the host engine's scene transform: the core only
    writes ``position`` and re-orients ``forward``; nothing in the
    steering code reads it back.
    """
    position: Vector3 = field(default_factory=Vector3)
    forward: Vector3 = field(default_factory=lambda: Vector3(FORWARD))

    def __post_init__(self):
        self.position = _vec(self.position)
        self.forward = _vec(self.forward)

    def look_at(self, point: Vector3) -> None:
        """Point ``forward`` at *point*; looking at yourself is a no-op."""
        delta = Vector3(point) - self.position
        if delta.length_squared() > EPSILON:
            self.forward = delta.normalize()

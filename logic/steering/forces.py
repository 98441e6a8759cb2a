"""logic/steering/forces.py — Reynolds steering force library.

Every function here takes a ``Vehicle`` (plus a target, obstacle or
neighbour list) and returns a steering force as a ``Vector3``.  None of
them apply the force: strategies sum, weight and clamp the outputs and
the integrator applies the result once per tick.

Targets only need ``.position`` and ``.velocity`` attributes, so a live
``Vehicle`` and a tick ``AgentSnapshot`` are interchangeable.

Degenerate inputs never raise: normalising a zero vector yields zero,
and an empty neighbour set yields no force.
"""

from __future__ import annotations
import random
from typing import Iterable

from pygame.math import Vector3

from components import Vehicle, Obstacle
from core.constants import EPSILON
from core.tuning import get as _tun


def _unit(v: Vector3) -> Vector3:
    """``v.normalize()`` that maps the zero vector to zero."""
    if v.length_squared() <= EPSILON:
        return Vector3()
    return v.normalize()


def _flat(v: Vector3) -> Vector3:
    return Vector3(v.x, 0.0, v.z)


# ── Seek / flee ──────────────────────────────────────────────────────

def seek_desired(vehicle: Vehicle, target: Vector3) -> Vector3:
    """Full-speed velocity pointing from the vehicle at *target*."""
    return _unit(Vector3(target) - vehicle.position) * vehicle.max_speed


def flee_desired(vehicle: Vehicle, target: Vector3) -> Vector3:
    """Full-speed velocity pointing from *target* through the vehicle."""
    return _unit(vehicle.position - Vector3(target)) * vehicle.max_speed


def seek(vehicle: Vehicle, target: Vector3) -> Vector3:
    """Steer toward *target*: desired velocity minus current velocity."""
    return seek_desired(vehicle, target) - vehicle.velocity


def flee(vehicle: Vehicle, target: Vector3) -> Vector3:
    """Steer directly away from *target*."""
    return flee_desired(vehicle, target) - vehicle.velocity


# ── Pursue / evade ───────────────────────────────────────────────────

def predict(position: Vector3, velocity: Vector3,
            scale: float | None = None) -> Vector3:
    """Where a target will be after a fixed lookahead.

    The lookahead is constant (``steering.pursuit.prediction_scale``,
    half a second by default) rather than scaled by distance.
    """
    if scale is None:
        scale = _tun("steering.pursuit", "prediction_scale", 0.5)
    return Vector3(position) + Vector3(velocity) * scale


def pursue(vehicle: Vehicle, target) -> Vector3:
    """Seek the predicted position of a moving *target*."""
    return seek(vehicle, predict(target.position, target.velocity))


def evade(vehicle: Vehicle, target) -> Vector3:
    """Flee the predicted position of a moving *target*."""
    return flee(vehicle, predict(target.position, target.velocity))


# ── Obstacle avoidance ───────────────────────────────────────────────

def obstacle_avoidance(vehicle: Vehicle, obstacle: Obstacle) -> Vector3:
    """Lateral dodge around one circular obstacle.

    The obstacle centre is projected onto the vehicle's horizontal
    forward/right basis.  Steering is needed only when the obstacle
    is ahead, no farther than ``safe_distance``, and its lateral offset
    is inside the combined radii.  The desired velocity is full speed
    along ``right`` when the obstacle sits to the left and along
    ``-right`` otherwise.

    Sets ``vehicle.obstacle_avoid`` when the obstacle forces a dodge and
    clears it when the obstacle is behind or out of range.  A laterally
    clear obstacle leaves the flag as the caller had it;
    ``avoid_obstacles`` owns the aggregate.
    """
    to_center = _flat(obstacle.position - vehicle.position)
    forward = vehicle.forward
    right = vehicle.right
    dot_forward = to_center.dot(forward)
    dot_right = to_center.dot(right)

    if dot_forward < 0:
        vehicle.obstacle_avoid = False
        return Vector3()

    if to_center.length() > vehicle.safe_distance:
        vehicle.obstacle_avoid = False
        return Vector3()

    if abs(dot_right) > obstacle.radius + vehicle.radius:
        return Vector3()

    vehicle.obstacle_avoid = True
    if dot_right < 0:
        desired = right * vehicle.max_speed
    else:
        desired = -right * vehicle.max_speed
    return desired - vehicle.velocity


def avoid_obstacles(vehicle: Vehicle, obstacles: Iterable[Obstacle]) -> Vector3:
    """Sum of ``obstacle_avoidance`` over *obstacles*.

    Afterwards ``vehicle.obstacle_avoid`` is True if any obstacle
    required a dodge.
    """
    total = Vector3()
    avoiding = False
    for obstacle in obstacles:
        vehicle.obstacle_avoid = False
        total += obstacle_avoidance(vehicle, obstacle)
        avoiding = avoiding or vehicle.obstacle_avoid
    vehicle.obstacle_avoid = avoiding
    return total


# ── Wander ───────────────────────────────────────────────────────────

def wander(vehicle: Vehicle, rng: random.Random | None = None) -> Vector3:
    """Seek a point on a circle projected ahead of the vehicle.

    The circle is centred one velocity-length ahead.  The point on it is
    a fixed-radius offset, turned ``base_angle`` degrees from the
    heading, then turned again by ``vehicle.wander_angle``.  The angle
    is seeded uniformly in [0, 360) on first use and nudged by at most
    ``jitter`` degrees per call after that, so the heading drifts
    smoothly instead of jittering.
    """
    rng = rng or random
    radius = _tun("steering.wander", "radius", 2.0)
    jitter = _tun("steering.wander", "jitter", 10.0)
    base_angle = _tun("steering.wander", "base_angle", -90.0)

    heading = _unit(vehicle.velocity)
    if heading.length_squared() <= EPSILON:
        heading = vehicle.forward
    offset = heading.rotate_y(base_angle) * radius

    if vehicle.wander_angle is None:
        vehicle.wander_angle = rng.random() * 360.0
    else:
        vehicle.wander_angle += rng.uniform(-jitter, jitter)

    offset = offset.rotate_y(vehicle.wander_angle)
    target = vehicle.position + vehicle.velocity + offset
    return seek(vehicle, target)


# ── Flocking ─────────────────────────────────────────────────────────

def alignment(vehicle: Vehicle, neighbors) -> Vector3:
    """Match the neighbours' average heading at full speed.

    No neighbours, or neighbours whose velocities cancel out, give no
    heading to match and therefore no force.
    """
    neighbors = list(neighbors)
    if not neighbors:
        return Vector3()
    total = Vector3()
    for other in neighbors:
        total += other.velocity
    heading = _unit(total / len(neighbors))
    if heading.length_squared() <= EPSILON:
        return Vector3()
    return heading * vehicle.max_speed - vehicle.velocity


def cohesion(vehicle: Vehicle, neighbors) -> Vector3:
    """Seek the neighbours' centroid on the horizontal plane."""
    neighbors = list(neighbors)
    if not neighbors:
        return Vector3()
    total = Vector3()
    for other in neighbors:
        total += other.position
    total.y = 0.0
    return seek(vehicle, total / len(neighbors))


def separation(vehicle: Vehicle, neighbors, desired: float) -> Vector3:
    """Flee every neighbour closer than *desired*, weighted by 1/distance."""
    total = Vector3()
    for other in neighbors:
        offset = _flat(vehicle.position - other.position)
        dist = offset.length()
        if dist <= EPSILON or dist >= desired:
            continue
        total += flee(vehicle, other.position) / dist
    return total


# ── Geometry helpers ─────────────────────────────────────────────────

def circle_collision(pos_a: Vector3, radius_a: float,
                     pos_b: Vector3, radius_b: float,
                     margin: float = 0.0) -> bool:
    """True if two circles on the x/z plane overlap.

    *margin* is added to the combined radii, so ``margin=2`` reports a
    hit two metres before the circles actually touch.
    """
    dx = pos_a.x - pos_b.x
    dz = pos_a.z - pos_b.z
    reach = radius_a + radius_b + margin
    return dx * dx + dz * dz < reach * reach


def out_of_bounds(position: Vector3, lo: float, hi: float) -> bool:
    """True if *position* has left the square ``[lo, hi]`` on x or z."""
    return not (lo <= position.x <= hi and lo <= position.z <= hi)

"""test_integrator.py — Force application, Euler integration, ground clamp.

Checks the per-agent update in ``logic.movement`` in isolation: mass
scaling and accumulation, the semi-implicit step, facing hold at rest,
the optional velocity clamp, terrain grounding, transform sync, and
that the result does not depend on the frame rate.

Run:  pytest test_integrator.py
"""
from __future__ import annotations
import sys

import pytest
from pygame.math import Vector3

from core import tuning
from core.ecs import World
from core.events import EventBus
from core.terrain import FlatTerrain, HeightmapTerrain, FunctionTerrain
from components import Vehicle, Steering, Transform, DevLog
from logic.movement import ground, integrate, sync_transform, tick_vehicle
from logic.steering.strategies import SteeringStrategy
from logic.tick import tick_systems


DT = 1.0 / 60.0


class ConstantForce(SteeringStrategy):
    """Test double: the same force every tick."""

    kind = "constant"

    def __init__(self, force=(0.0, 0.0, 0.0)):
        self.force = Vector3(force)

    def compute_steering_force(self, world, eid, vehicle):
        return Vector3(self.force)


def _close(a, b, tol: float = 1e-6) -> bool:
    return (Vector3(a) - Vector3(b)).length() <= tol


def _world_with(vehicle: Vehicle, strategy, terrain=None) -> tuple[World, int]:
    w = World()
    w.set_res(terrain or FlatTerrain(0.0))
    eid = w.spawn()
    w.add(eid, vehicle)
    w.add(eid, Transform(position=Vector3(vehicle.position)))
    w.add(eid, Steering(strategy=strategy, kind=strategy.kind))
    return w, eid


@pytest.fixture(autouse=True)
def _fresh_tuning():
    tuning.clear_overrides()
    yield
    tuning.clear_overrides()


# ═══════════════════════════════════════════════════════════════════════
#  1. apply_force
# ═══════════════════════════════════════════════════════════════════════

def test_apply_force_scales_by_mass_and_accumulates():
    print("\n=== 1a: apply_force ===")
    v = Vehicle(mass=2.0)
    assert v.apply_force(Vector3(4, 0, 0)) is True
    assert _close(v.acceleration, (2, 0, 0))
    v.apply_force(Vector3(0, 0, 2))
    assert _close(v.acceleration, (2, 0, 1))


def test_apply_force_on_massless_vehicle_is_dropped():
    print("\n=== 1b: Massless vehicle ===")
    v = Vehicle(mass=0.0)
    assert v.apply_force(Vector3(4, 0, 0)) is False
    assert v.acceleration == Vector3()


# ═══════════════════════════════════════════════════════════════════════
#  2. integrate
# ═══════════════════════════════════════════════════════════════════════

def test_semi_implicit_euler_step():
    print("\n=== 2a: Euler step ===")
    v = Vehicle(velocity=Vector3(1, 0, 0))
    v.apply_force(Vector3(2, 0, 0))
    integrate(v, 0.5)
    # Velocity first, then position with the new velocity.
    assert _close(v.velocity, (2, 0, 0))
    assert _close(v.position, (1, 0, 0))
    assert _close(v.facing, (1, 0, 0))
    assert v.acceleration == Vector3()


def test_facing_held_at_rest():
    print("\n=== 2b: Facing at rest ===")
    v = Vehicle(velocity=Vector3(0, 0, 3))
    v.apply_force(Vector3(0, 0, -3))
    integrate(v, 1.0)
    assert v.velocity == Vector3()
    assert _close(v.facing, (0, 0, 1))


def test_velocity_can_overshoot_unless_clamped():
    print("\n=== 2c: Velocity clamp switch ===")
    loose = Vehicle(velocity=Vector3(5, 0, 0), max_speed=5.0)
    loose.apply_force(Vector3(5, 0, 0))
    integrate(loose, 1.0)
    assert loose.velocity.length() == pytest.approx(10.0)

    tight = Vehicle(velocity=Vector3(5, 0, 0), max_speed=5.0)
    tight.apply_force(Vector3(5, 0, 0))
    integrate(tight, 1.0, clamp_velocity=True)
    assert tight.velocity.length() == pytest.approx(5.0)
    assert _close(tight.position, (5, 0, 0))


def test_zero_dt_changes_nothing():
    print("\n=== 2d: dt = 0 ===")
    v = Vehicle(position=Vector3(1, 0, 1), velocity=Vector3(2, 0, 0))
    v.apply_force(Vector3(3, 0, 0))
    integrate(v, 0.0)
    assert _close(v.position, (1, 0, 1))
    assert _close(v.velocity, (2, 0, 0))


# ═══════════════════════════════════════════════════════════════════════
#  3. Ground clamp and transform
# ═══════════════════════════════════════════════════════════════════════

def test_ground_clamps_to_terrain():
    print("\n=== 3a: Ground clamp ===")
    v = Vehicle(position=Vector3(0.5, 10.0, 0.5))
    ground(v, HeightmapTerrain([[0, 2], [4, 6]]))
    assert v.position.y == pytest.approx(3.0)

    ground(v, FunctionTerrain(lambda x, z: x + z))
    assert v.position.y == pytest.approx(1.0)

    ground(v, None)
    assert v.position.y == pytest.approx(1.0)


def test_tick_grounds_before_moving():
    print("\n=== 3b: Tick on sloped terrain ===")
    slope = FunctionTerrain(lambda x, z: 0.5 * x)
    v = Vehicle(position=Vector3(4, 0, 0), velocity=Vector3(0, 0, 1))
    w, eid = _world_with(v, ConstantForce(), terrain=slope)
    tick_systems(w, 1.0)
    # Height was sampled at x = 4 before the step.
    assert v.position.y == pytest.approx(2.0)
    assert _close(v.position, (4, 2, 1))


def test_transform_follows_vehicle():
    print("\n=== 3c: Transform sync ===")
    v = Vehicle(velocity=Vector3(3, 0, 4))
    t = Transform()
    integrate(v, 1.0)
    sync_transform(v, t)
    assert _close(t.position, v.position)
    assert _close(t.forward, (0.6, 0, 0.8))

    sync_transform(v, None)  # no transform attached is fine


# ═══════════════════════════════════════════════════════════════════════
#  4. tick_vehicle
# ═══════════════════════════════════════════════════════════════════════

def test_tick_vehicle_applies_strategy_force():
    print("\n=== 4a: tick_vehicle ===")
    v = Vehicle(mass=2.0)
    w, eid = _world_with(v, ConstantForce((4, 0, 0)))
    steering = w.get(eid, Steering)

    applied = tick_vehicle(w, eid, v, steering, 0.5)
    assert _close(applied, (4, 0, 0))
    assert _close(steering.last_force, (4, 0, 0))
    assert _close(v.velocity, (1, 0, 0))
    assert _close(v.position, (0.5, 0, 0))
    assert v.acceleration == Vector3()


def test_inactive_agent_is_not_ticked():
    print("\n=== 4b: Inactive agent ===")
    v = Vehicle(velocity=Vector3(1, 0, 0))
    w, eid = _world_with(v, ConstantForce((4, 0, 0)))
    w.get(eid, Steering).active = False
    assert tick_systems(w, 1.0) == 0
    assert v.position == Vector3()


def test_strategy_crash_is_contained():
    print("\n=== 4c: Crashing strategy ===")

    class Broken(SteeringStrategy):
        kind = "broken"

        def compute_steering_force(self, world, eid, vehicle):
            raise RuntimeError("boom")

    v = Vehicle(velocity=Vector3(1, 0, 0))
    w, eid = _world_with(v, Broken())
    w.set_res(DevLog())

    other = Vehicle(velocity=Vector3(0, 0, 0))
    oid = w.spawn()
    w.add(oid, other)
    w.add(oid, Steering(strategy=ConstantForce((0, 0, 2)), kind="constant"))

    assert tick_systems(w, 1.0) == 2
    # The broken agent coasts, the healthy one still accelerates.
    assert _close(v.position, (1, 0, 0))
    assert _close(other.velocity, (0, 0, 2))
    errors = w.res(DevLog).for_cat("error")
    assert errors and errors[-1]["eid"] == eid


def test_terrain_failure_skips_only_that_agent():
    print("\n=== 4d: Terrain raises for one agent ===")

    def cliff(x, z):
        if x > 5:
            raise ValueError("off the heightmap")
        return 0.0

    w = World()
    w.set_res(FunctionTerrain(cliff))
    w.set_res(DevLog())
    failed = []

    bad = Vehicle(position=Vector3(10, 0, 0), velocity=Vector3(1, 0, 0))
    bid = w.spawn()
    w.add(bid, bad)
    w.add(bid, Steering(strategy=ConstantForce((0, 0, 3)), kind="constant"))

    good = Vehicle(velocity=Vector3(0, 0, 0))
    gid = w.spawn()
    w.add(gid, good)
    w.add(gid, Steering(strategy=ConstantForce((0, 0, 2)), kind="constant"))

    w.set_res(EventBus())
    w.res(EventBus).subscribe("SteeringFailed", failed.append)

    assert tick_systems(w, 0.1) == 1
    # Skipped entirely: no move, no leftover acceleration.
    assert bad.position == Vector3(10, 0, 0)
    assert bad.acceleration == Vector3()
    # Later agents in spawn order still run.
    assert _close(good.velocity, (0, 0, 0.2))
    # Bus drained after the failure.
    assert [e.eid for e in failed] == [bid]
    assert w.res(EventBus).pending() == []
    errors = w.res(DevLog).for_cat("error")
    assert errors and errors[-1]["eid"] == bid


# ═══════════════════════════════════════════════════════════════════════
#  5. Frame-rate consistency
# ═══════════════════════════════════════════════════════════════════════

def _simulate(strategy_force, velocity, dt: float, seconds: float) -> Vehicle:
    v = Vehicle(velocity=Vector3(velocity))
    w, _ = _world_with(v, ConstantForce(strategy_force))
    for _ in range(round(seconds / dt)):
        tick_systems(w, dt)
    return v


def test_constant_velocity_is_frame_rate_independent():
    print("\n=== 5a: Constant velocity at 30 / 60 / 120 Hz ===")
    runs = [_simulate((0, 0, 0), (3, 0, 4), dt, 2.0)
            for dt in (1 / 30, 1 / 60, 1 / 120)]
    for v in runs:
        assert _close(v.position, (6, 0, 8), tol=1e-6)


def test_constant_force_converges_across_frame_rates():
    print("\n=== 5b: Constant force at 30 / 60 / 120 Hz ===")
    # x(t) = ½·a·t² = 1 m after 1 s with a = 2.
    # Semi-implicit Euler overshoots by ½·a·t·dt under constant force, so
    # runs at different dt agree to first order in dt, not to float
    # tolerance.  Checked here: small error, shrinking as dt halves,
    # and exact velocity.
    runs = [_simulate((2, 0, 0), (0, 0, 0), dt, 1.0)
            for dt in (1 / 30, 1 / 60, 1 / 120)]
    errors = [abs(v.position.x - 1.0) for v in runs]
    assert all(e < 0.05 for e in errors)
    assert errors[0] > errors[1] > errors[2]
    for v in runs:
        assert v.velocity.x == pytest.approx(2.0, abs=1e-6)


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-q"]))

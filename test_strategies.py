"""test_strategies.py — Behaviour strategies and the strategy registry.

Path cursor advance / wrap, fixed-point seek and flee, pursuit read
from the tick snapshot, wander bounds, flocking, obstacle weighting,
and the spawn-time validation every strategy runs.

Run:  pytest test_strategies.py
"""
from __future__ import annotations
import sys

import pytest
from pygame.math import Vector3

from core import tuning
from core.ecs import World
from core.events import EventBus, WaypointReached
from core.terrain import FlatTerrain
from components import (
    Vehicle, Obstacle, Waypoint, Snapshot, AgentSnapshot, Bounds, DevLog,
    GameClock,
)
from logic.steering import (
    build_strategy, registered_names, get_strategy, register_strategy,
    PathFollowing, SeekPoint, FleePoint, Pursuit, Evasion, Wandering, Flocking,
)
from logic.steering import forces


def _close(a, b, tol: float = 1e-6) -> bool:
    return (Vector3(a) - Vector3(b)).length() <= tol


def _world() -> World:
    w = World()
    w.set_res(FlatTerrain(0.0))
    w.set_res(GameClock())
    w.set_res(EventBus())
    w.set_res(DevLog())
    return w


def _add_vehicle(w: World, pos=(0, 0, 0), vel=(0, 0, 0), **kw) -> tuple[int, Vehicle]:
    eid = w.spawn()
    v = Vehicle(position=Vector3(pos), velocity=Vector3(vel), **kw)
    w.add(eid, v)
    return eid, v


@pytest.fixture(autouse=True)
def _fresh_tuning():
    tuning.clear_overrides()
    yield
    tuning.clear_overrides()


# ═══════════════════════════════════════════════════════════════════════
#  1. Registry
# ═══════════════════════════════════════════════════════════════════════

def test_registry_knows_every_behaviour():
    print("\n=== 1a: Registry ===")
    for name in ("path", "seek", "flee", "pursue", "evade", "wander", "flock"):
        assert name in registered_names()
    assert get_strategy("path") is PathFollowing
    assert get_strategy("teleport") is None


def test_build_strategy_errors_are_value_errors():
    print("\n=== 1b: build_strategy errors ===")
    with pytest.raises(ValueError, match="unknown steering strategy"):
        build_strategy("teleport")
    with pytest.raises(ValueError, match="bad parameters"):
        build_strategy("seek", target=(0, 0, 0), speed=3)
    with pytest.raises(ValueError):
        build_strategy("path", path=[])


def test_register_custom_strategy():
    print("\n=== 1c: Custom strategy ===")
    register_strategy("idle_test", lambda: SeekPoint((0, 0, 0), avoid=False))
    try:
        assert isinstance(build_strategy("idle_test"), SeekPoint)
    finally:
        from logic.steering import registry
        registry._registry.pop("idle_test", None)


# ═══════════════════════════════════════════════════════════════════════
#  2. Path following
# ═══════════════════════════════════════════════════════════════════════

def test_path_advances_inside_arrival_circle():
    print("\n=== 2a: Waypoint arrival ===")
    w = _world()
    eid, v = _add_vehicle(w, max_speed=5.0)
    path = PathFollowing([(1, 0, 0), (20, 0, 0)])

    force = path.compute_steering_force(w, eid, v)
    assert path.current_index == 1
    # This tick's force still aims at the waypoint just reached.
    assert _close(force, (5, 0, 0))

    bus = w.res(EventBus)
    reached = [e for e in bus.pending() if isinstance(e, WaypointReached)]
    assert reached == [WaypointReached(eid=eid, index=0, next_index=1)]
    assert w.res(DevLog).for_cat("path")


def test_path_wraps_to_start():
    print("\n=== 2b: Cyclic path ===")
    w = _world()
    eid, v = _add_vehicle(w, pos=(20, 0, 0))
    path = PathFollowing([(0, 0, 0), (20, 0, 0)], current_index=1)
    path.compute_steering_force(w, eid, v)
    assert path.current_index == 0

    single = PathFollowing([(20, 0, 0)])
    single.compute_steering_force(w, eid, v)
    assert single.current_index == 0


def test_arrival_boundary_is_exclusive():
    print("\n=== 2c: Arrival boundary ===")
    w = _world()
    eid, v = _add_vehicle(w)

    path = PathFollowing([(2, 0, 0), (9, 0, 9)])
    path.compute_steering_force(w, eid, v)
    assert path.current_index == 0          # exactly margin away

    wide = PathFollowing([Waypoint(position=Vector3(2.5, 0, 0), radius=1.0),
                          (9, 0, 9)])
    wide.compute_steering_force(w, eid, v)
    assert wide.current_index == 1          # 2.5 < 1 + 2

    tuning.override("steering.path", "arrival_margin", 0.0)
    tight = PathFollowing([(1, 0, 0), (9, 0, 9)])
    tight.compute_steering_force(w, eid, v)
    assert tight.current_index == 0


def test_path_ignores_height_for_arrival():
    print("\n=== 2d: Arrival on the x/z plane ===")
    w = _world()
    eid, v = _add_vehicle(w)
    path = PathFollowing([{"position": Vector3(1, 30, 0), "radius": 0.0}, (9, 0, 9)])
    force = path.compute_steering_force(w, eid, v)
    assert path.current_index == 1
    assert force.y == 0.0


# ═══════════════════════════════════════════════════════════════════════
#  3. Fixed targets
# ═══════════════════════════════════════════════════════════════════════

def test_seek_point_dodges_obstacles():
    print("\n=== 3a: Seek with avoidance ===")
    w = _world()
    eid, v = _add_vehicle(w, vel=(0, 0, 5), max_speed=5.0)
    oid = w.spawn()
    w.add(oid, Obstacle(position=Vector3(0, 0, 4), radius=1.0))

    plain = SeekPoint((0, 0, 20), avoid=False).compute_steering_force(w, eid, v)
    assert plain == Vector3()
    assert v.obstacle_avoid is False

    dodging = SeekPoint((0, 0, 20)).compute_steering_force(w, eid, v)
    assert v.obstacle_avoid is True
    assert abs(dodging.x) > 0
    assert dodging.length() <= 5.0 + 1e-9


def test_flee_point_panic_distance():
    print("\n=== 3b: Flee with panic distance ===")
    w = _world()
    eid, v = _add_vehicle(w, max_speed=4.0)
    near = FleePoint((3, 0, 0), panic_distance=5.0, avoid=False)
    assert _close(near.compute_steering_force(w, eid, v), (-4, 0, 0))

    far = FleePoint((30, 0, 0), panic_distance=5.0, avoid=False)
    assert far.compute_steering_force(w, eid, v) == Vector3()

    always = FleePoint((30, 0, 0), avoid=False)
    assert _close(always.compute_steering_force(w, eid, v), (-4, 0, 0))


# ═══════════════════════════════════════════════════════════════════════
#  4. Pursuit / evasion
# ═══════════════════════════════════════════════════════════════════════

def test_pursuit_validation():
    print("\n=== 4a: Pursuit validation ===")
    w = _world()
    eid, _ = _add_vehicle(w)
    tid, _ = _add_vehicle(w, pos=(10, 0, 0))
    rock = w.spawn()
    w.add(rock, Obstacle())

    Pursuit(tid).validate(w, eid)
    with pytest.raises(ValueError, match="itself"):
        Pursuit(eid).validate(w, eid)
    with pytest.raises(ValueError, match="not a vehicle"):
        Evasion(rock).validate(w, eid)
    with pytest.raises(ValueError, match="not a vehicle"):
        Pursuit(999).validate(w, eid)


def test_pursuit_reads_tick_snapshot():
    print("\n=== 4b: Pursuit uses the snapshot ===")
    w = _world()
    eid, v = _add_vehicle(w, max_speed=5.0)
    tid, target = _add_vehicle(w, pos=(10, 0, 0), vel=(0, 0, 4))

    w.set_res(Snapshot(agents={
        eid: AgentSnapshot(eid, Vector3(v.position), Vector3(v.velocity)),
        tid: AgentSnapshot(tid, Vector3(-10, 0, 0), Vector3(0, 0, 0)),
    }))
    # The live target has moved on; the pursuer still sees the snapshot.
    force = Pursuit(tid, avoid=False).compute_steering_force(w, eid, v)
    assert _close(force, (-5, 0, 0))

    flee = Evasion(tid, avoid=False).compute_steering_force(w, eid, v)
    assert _close(flee, (5, 0, 0))


def test_pursuit_of_vanished_target_raises_key_error():
    print("\n=== 4c: Target left the world ===")
    w = _world()
    eid, v = _add_vehicle(w)
    w.set_res(Snapshot(agents={}))
    with pytest.raises(KeyError):
        Pursuit(42, avoid=False).compute_steering_force(w, eid, v)


# ═══════════════════════════════════════════════════════════════════════
#  5. Wander and flock
# ═══════════════════════════════════════════════════════════════════════

def test_wander_returns_to_bounds():
    print("\n=== 5a: Wander bounds ===")
    w = _world()
    eid, v = _add_vehicle(w, pos=(200, 0, 200), max_speed=3.0)
    strategy = Wandering(bounds=(0.0, 100.0), seed=5, avoid=False)
    force = strategy.compute_steering_force(w, eid, v)
    expected = Vector3(-150, 0, -150).normalize() * 3.0
    assert _close(force, expected)
    assert v.wander_angle is None

    inside = Wandering(bounds=Bounds(0.0, 100.0), seed=5, avoid=False)
    eid2, v2 = _add_vehicle(w, pos=(50, 0, 50), vel=(1, 0, 0), max_speed=3.0)
    out = inside.compute_steering_force(w, eid2, v2)
    assert v2.wander_angle is not None
    assert out.length() <= 3.0 + 1e-9
    assert out.y == 0.0


def test_wander_seed_is_reproducible():
    print("\n=== 5b: Seeded wander strategy ===")
    w = _world()
    a_eid, a = _add_vehicle(w, vel=(1, 0, 1))
    b_eid, b = _add_vehicle(w, vel=(1, 0, 1))
    sa, sb = Wandering(seed=11, avoid=False), Wandering(seed=11, avoid=False)
    for _ in range(10):
        assert _close(sa.compute_steering_force(w, a_eid, a),
                      sb.compute_steering_force(w, b_eid, b))


def test_flocking_combines_rules():
    print("\n=== 5c: Flocking ===")
    w = _world()
    eid, v = _add_vehicle(w, max_speed=5.0)
    lone = Flocking(avoid=False)
    assert lone.compute_steering_force(w, eid, v) == Vector3()

    _add_vehicle(w, pos=(4, 0, 0), vel=(0, 0, 2))
    _add_vehicle(w, pos=(40, 0, 0), vel=(0, 0, -2))      # out of radius

    flock = Flocking(radius=6.0, cohesion_weight=1.0, alignment_weight=0.0,
                     separation_weight=0.0, avoid=False)
    assert _close(flock.compute_steering_force(w, eid, v), (5, 0, 0))

    align = Flocking(radius=6.0, cohesion_weight=0.0, alignment_weight=1.0,
                     separation_weight=0.0, avoid=False)
    assert _close(align.compute_steering_force(w, eid, v), (0, 0, 5))


def test_flocking_weights_default_from_tuning():
    print("\n=== 5d: Flock tuning ===")
    tuning.override("steering.flock", "radius", 12.5)
    f = Flocking()
    assert f.radius == 12.5
    assert f.separation_weight == pytest.approx(1.5)
    assert Flocking(radius=3.0).radius == 3.0


# ═══════════════════════════════════════════════════════════════════════
#  6. Output contract
# ═══════════════════════════════════════════════════════════════════════

def test_every_strategy_output_is_flat_and_clamped():
    print("\n=== 6: Clamp + flatten for every strategy ===")
    w = _world()
    eid, v = _add_vehicle(w, pos=(5, 3, 5), vel=(9, 4, -9), max_speed=2.0)
    tid, _ = _add_vehicle(w, pos=(6, -2, 4), vel=(0, 7, 3))
    oid = w.spawn()
    w.add(oid, Obstacle(position=Vector3(7, 0, 3), radius=2.0))

    strategies = [
        PathFollowing([(50, 9, 50), (0, 0, 0)]),
        SeekPoint((50, 20, -50)),
        FleePoint((5, 0, 6)),
        Pursuit(tid),
        Evasion(tid),
        Wandering(bounds=(0, 100), seed=3),
        Flocking(wander_weight=1.0, seed=3),
    ]
    for s in strategies:
        force = s.compute_steering_force(w, eid, v)
        assert force.y == 0.0, s
        assert force.length() <= 2.0 + 1e-9, s


def test_obstacle_avoidance_weight_from_tuning():
    print("\n=== 7: Avoidance weight ===")
    w = _world()
    eid, v = _add_vehicle(w, vel=(0, 0, 5), max_speed=5.0)
    oid = w.spawn()
    obstacle = Obstacle(position=Vector3(0, 0, 4), radius=1.0)
    w.add(oid, obstacle)
    seek_only = forces.seek(v, Vector3(0, 0, 20))
    dodge = forces.obstacle_avoidance(Vehicle(velocity=Vector3(0, 0, 5),
                                              max_speed=5.0), obstacle)

    tuning.override("steering.avoid", "weight", 0.5)
    force = SeekPoint((0, 0, 20)).compute_steering_force(w, eid, v)
    assert _close(force, seek_only + dodge * 0.5)


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-q"]))

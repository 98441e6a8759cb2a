"""scenes/steering_scene.py — Top-down viewer for a steering scenario.

Loads a scenario TOML into ``app.world``, ticks ``tick_systems`` every
frame and draws the x/z plane seen from above (+z points up the
screen):

    * obstacles            grey discs
    * path waypoints       small diamonds, the current target ringed
    * agents               triangles along ``Transform.forward``
    * avoidance            agents currently dodging turn red
    * last force           thin line from each agent

Controls: [Space] pause / resume   [R] reload scenario   [L] toggle log
"""

from __future__ import annotations
from pathlib import Path

import pygame
from pygame.math import Vector3

from core.app import App
from core.data import load_scenario
from core.ecs import World
from core.scene import Scene
from components import (
    Vehicle, Steering, Transform, Obstacle, Identity, Sprite, Bounds, DevLog,
    GameClock,
)
from logic.steering import PathFollowing
from logic.tick import tick_systems, ensure_resources


_BG = (24, 26, 30)
_OBSTACLE = (110, 110, 120)
_WAYPOINT = (90, 160, 220)
_AGENT = (230, 230, 230)
_AVOIDING = (235, 80, 70)
_FORCE = (250, 200, 60)
_MARGIN = 24


class SteeringScene(Scene):
    def __init__(self, scenario: str | Path):
        self.scenario = Path(scenario)
        self.paused = False
        self.show_log = True
        self._scale = 1.0
        self._origin = (0.0, 0.0)

    # -- Lifecycle --

    def on_enter(self, app: App):
        self._load(app)

    def _load(self, app: App):
        app.world = World()
        app.world.set_res(DevLog())
        ensure_resources(app.world)
        load_scenario(app.world, self.scenario, {"sprite": Sprite})

    def handle_event(self, event: pygame.event.Event, app: App):
        if event.type != pygame.KEYDOWN:
            return
        if event.key == pygame.K_SPACE:
            self.paused = not self.paused
        elif event.key == pygame.K_r:
            self._load(app)
        elif event.key == pygame.K_l:
            self.show_log = not self.show_log

    def update(self, dt: float, app: App):
        if not self.paused:
            tick_systems(app.world, dt)

    # -- Drawing --

    def _fit(self, surface: pygame.Surface, world: World):
        bounds = world.res(Bounds) or Bounds()
        span = max(bounds.hi - bounds.lo, 1.0)
        w, h = surface.get_size()
        self._scale = (min(w, h) - 2 * _MARGIN) / span
        self._origin = (bounds.lo, bounds.lo)

    def _px(self, p: Vector3, surface: pygame.Surface) -> tuple[int, int]:
        h = surface.get_height()
        x = _MARGIN + (p.x - self._origin[0]) * self._scale
        y = h - _MARGIN - (p.z - self._origin[1]) * self._scale
        return int(x), int(y)

    def draw(self, surface: pygame.Surface, app: App):
        world = app.world
        surface.fill(_BG)
        self._fit(surface, world)

        for _, obs in world.all_of(Obstacle):
            pygame.draw.circle(surface, _OBSTACLE, self._px(obs.position, surface),
                               max(2, int(obs.radius * self._scale)))

        for eid, vehicle, steering in world.query(Vehicle, Steering):
            if isinstance(steering.strategy, PathFollowing):
                self._draw_path(surface, steering.strategy)
            self._draw_agent(surface, app, eid, vehicle, steering)

        clock = world.res(GameClock)
        status = "PAUSED" if self.paused else "running"
        app.draw_text(surface, f"t={clock.time:6.1f}s  {status}  "
                      f"[Space] pause  [R] reload  [L] log", 8, 6)
        log = world.res(DevLog)
        if log is not None:
            tally = "  ".join(f"{cat}:{n}" for cat, n in sorted(log.counts().items()))
            app.draw_text(surface, tally, 8, 22, color=(160, 160, 160), font=app.font_sm)
        if self.show_log:
            self._draw_log(surface, app)

    def _draw_path(self, surface, path: PathFollowing):
        for i, wp in enumerate(path.path):
            cx, cy = self._px(wp.position, surface)
            pts = [(cx, cy - 4), (cx + 4, cy), (cx, cy + 4), (cx - 4, cy)]
            pygame.draw.polygon(surface, _WAYPOINT, pts, 1)
            if i == path.current_index:
                pygame.draw.circle(surface, _WAYPOINT, (cx, cy), 8, 1)

    def _draw_agent(self, surface, app: App, eid, vehicle: Vehicle, steering: Steering):
        world = app.world
        transform = world.get(eid, Transform)
        forward = transform.forward if transform else vehicle.facing
        sprite = world.get(eid, Sprite)
        color = _AVOIDING if vehicle.obstacle_avoid else (
            tuple(sprite.color) if sprite else _AGENT)

        size = max(0.6, vehicle.radius * 2)
        flat = Vector3(forward.x, 0.0, forward.z)
        if flat.length_squared() == 0:
            flat = Vector3(0.0, 0.0, 1.0)
        flat.normalize_ip()
        side = flat.rotate_y(90.0) * (size * 0.5)
        tip = vehicle.position + flat * size
        left = vehicle.position - flat * (size * 0.5) - side
        right = vehicle.position - flat * (size * 0.5) + side
        pygame.draw.polygon(surface, color,
                            [self._px(tip, surface), self._px(left, surface),
                             self._px(right, surface)])

        if steering.last_force is not None:
            end = vehicle.position + steering.last_force * 0.25
            pygame.draw.line(surface, _FORCE, self._px(vehicle.position, surface),
                             self._px(end, surface), 1)

        ident = world.get(eid, Identity)
        label = (sprite.label if sprite and sprite.label else
                 ident.name if ident else "")
        if label:
            x, y = self._px(vehicle.position, surface)
            app.draw_text(surface, label, x + 6, y - 14, color=color, font=app.font_sm)

    def _draw_log(self, surface, app: App):
        log = app.world.res(DevLog)
        if log is None:
            return
        y = surface.get_height() - 14
        for entry in reversed(log.recent(8)):
            app.draw_text(surface, f"{entry['t']:6.1f} {entry['name']:>10} "
                          f"[{entry['cat']}] {entry['msg']}", 8, y,
                          color=(180, 180, 180), font=app.font_sm)
            y -= 13

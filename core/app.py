"""
core/app.py — Pygame host shell

Owns the window, the frame clock and a scene stack, and feeds the top
scene fixed simulation steps.  It stands in for the host engine the
steering core is embedded in; the simulation never imports this module
and headless runs drive ``logic.tick.tick_systems`` directly.

    app = App(title="Steering", width=960, height=720)
    app.push_scene(SteeringScene("data/scenario.toml"))
    app.run()
"""

from __future__ import annotations
import pygame
from core.scene import Scene
from core.ecs import World


class App:
    def __init__(self, title: str = "Steering", width: int = 960, height: int = 720,
                 fps: int = 60, step: float | None = 1.0 / 60.0):
        pygame.init()
        self.screen = pygame.display.set_mode((width, height), pygame.RESIZABLE)
        pygame.display.set_caption(title)
        self.clock = pygame.time.Clock()
        self.running = True
        self.fps = fps
        self.dt = 0.0
        self.max_dt = 0.1           # s, cap on one frame's wall-clock time
        # Fixed simulation step; None passes the frame time straight through.
        self.step = step
        self._accum = 0.0

        self._scenes: list[Scene] = []
        self.world = World()

        self.font = pygame.font.SysFont("monospace", 14)
        self.font_sm = pygame.font.SysFont("monospace", 11)

    # -- Scene management --

    @property
    def scene(self) -> Scene | None:
        return self._scenes[-1] if self._scenes else None

    def push_scene(self, scene: Scene):
        if self._scenes:
            self._scenes[-1].on_exit(self)
        self._scenes.append(scene)
        scene.on_enter(self)

    def pop_scene(self):
        if self._scenes:
            self._scenes[-1].on_exit(self)
            self._scenes.pop()
        if self._scenes:
            self._scenes[-1].on_enter(self)
        else:
            self.running = False

    # -- Main loop --

    def run(self):
        while self.running:
            self.dt = min(self.clock.tick(self.fps) / 1000.0, self.max_dt)

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.running = False
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    self.pop_scene()
                elif self.scene:
                    self.scene.handle_event(event, self)

            if self.scene:
                for dt in self._steps(self.dt):
                    self.scene.update(dt, self)
                self.scene.draw(self.screen, self)
            pygame.display.flip()

        pygame.quit()

    def _steps(self, frame_dt: float):
        """Split *frame_dt* into fixed steps, carrying the remainder."""
        if not self.step:
            yield frame_dt
            return
        self._accum += frame_dt
        while self._accum >= self.step:
            self._accum -= self.step
            yield self.step

    # -- Convenience --

    def draw_text(self, surface: pygame.Surface, text: str, x: int, y: int,
                  color=(255, 255, 255), font=None):
        """Quick text draw. Returns the rect for layout chaining."""
        img = (font or self.font).render(text, True, color)
        return surface.blit(img, (x, y))

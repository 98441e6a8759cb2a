"""
core/scene.py — Scene interface

A scene is one screen of the host shell.  ``App`` keeps a stack and
only the top scene receives events, updates and draws.  The steering
viewer is a scene; a headless driver needs none of this.

    class MyScene(Scene):
        def update(self, dt, app):
            tick_systems(app.world, dt)

        def draw(self, surface, app):
            ...
"""

from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import pygame
    from core.app import App


class Scene:
    def on_enter(self, app: App):
        """Called when this scene becomes the top of the stack."""

    def on_exit(self, app: App):
        """Called when this scene is popped or covered."""

    def handle_event(self, event: pygame.event.Event, app: App):
        """Process a single pygame event."""

    def update(self, dt: float, app: App):
        """Advance the simulation by *dt* seconds."""

    def draw(self, surface: pygame.Surface, app: App):
        """Render the current world state."""

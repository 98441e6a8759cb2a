"""components.rendering — Names and display hints for the viewer."""

from __future__ import annotations
from dataclasses import dataclass


@dataclass
class Identity:
    name: str = "unnamed"
    kind: str = "vehicle"      # "vehicle", "obstacle"


@dataclass
class Sprite:
    """Top-down marker drawn by the viewer.  Ignored by the simulation."""
    color: tuple = (230, 230, 230)
    label: str = ""

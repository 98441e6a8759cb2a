"""core/terrain.py — Terrain-height collaborators.

The integrator ground-clamps every vehicle once per tick by asking the
world's ``Terrain`` resource for ``height(x, z)``.  Install one with::

    world.set_res(FlatTerrain(0.0))

``World.res(Terrain)`` resolves any subclass, so systems never care
which sampler is installed.  Every sampler here is O(1) per query.
"""

from __future__ import annotations
import math
from typing import Callable, Sequence


class Terrain:
    """Base sampler.  Subclasses override :meth:`height`."""

    def height(self, x: float, z: float) -> float:
        raise NotImplementedError


class FlatTerrain(Terrain):
    """A level plane at ``level`` metres."""

    def __init__(self, level: float = 0.0):
        self.level = float(level)

    def height(self, x: float, z: float) -> float:
        return self.level

    def __repr__(self) -> str:
        return f"FlatTerrain(level={self.level})"


class FunctionTerrain(Terrain):
    """Wrap any ``fn(x, z) -> y`` callable (e.g. a host engine's sampler)."""

    def __init__(self, fn: Callable[[float, float], float]):
        self.fn = fn

    def height(self, x: float, z: float) -> float:
        return float(self.fn(x, z))


class HeightmapTerrain(Terrain):
    """Regular grid of heights sampled with bilinear interpolation.

    ``rows[r][c]`` is the height at world point
    ``(origin_x + c * cell_size, origin_z + r * cell_size)``.  Queries
    outside the grid are clamped to the nearest edge.
    """

    def __init__(self, rows: Sequence[Sequence[float]], cell_size: float = 1.0,
                 origin: tuple[float, float] = (0.0, 0.0)):
        if not rows or not rows[0]:
            raise ValueError("heightmap needs at least one sample")
        width = len(rows[0])
        if any(len(r) != width for r in rows):
            raise ValueError("heightmap rows must all be the same length")
        if cell_size <= 0:
            raise ValueError("cell_size must be positive")
        self.rows = [[float(h) for h in r] for r in rows]
        self.cell_size = float(cell_size)
        self.origin = (float(origin[0]), float(origin[1]))
        self._n_rows = len(self.rows)
        self._n_cols = width

    def height(self, x: float, z: float) -> float:
        gx = (x - self.origin[0]) / self.cell_size
        gz = (z - self.origin[1]) / self.cell_size
        gx = min(max(gx, 0.0), self._n_cols - 1)
        gz = min(max(gz, 0.0), self._n_rows - 1)

        c0 = int(math.floor(gx))
        r0 = int(math.floor(gz))
        c1 = min(c0 + 1, self._n_cols - 1)
        r1 = min(r0 + 1, self._n_rows - 1)
        tx = gx - c0
        tz = gz - r0

        h00 = self.rows[r0][c0]
        h01 = self.rows[r0][c1]
        h10 = self.rows[r1][c0]
        h11 = self.rows[r1][c1]
        near = h00 + (h01 - h00) * tx
        far = h10 + (h11 - h10) * tx
        return near + (far - near) * tz

    def __repr__(self) -> str:
        return (f"HeightmapTerrain({self._n_rows}x{self._n_cols}, "
                f"cell={self.cell_size})")

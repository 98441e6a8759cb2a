"""
core/data.py — Scenario TOML → ECS loader

Reads a scenario file and spawns the terrain, obstacles and agents it
describes.  The steering-specific tables (``vehicle``, ``steering``)
are handled by ``logic.entity_factory``; any other sub-table is mapped
to a component class through ``register()``, so a host can attach its
own data (sprites, colours, tags) without touching the loader.

Usage:
    loader = DataLoader(world)
    loader.register("tint", Tint)          # [agents.x.tint] → Tint(...)
    names = loader.load("data/scenario.toml")   # {name: entity_id}

    # or, in one call:
    names = load_scenario(world, "data/scenario.toml", {"tint": Tint})

Scenario layout::

    [terrain]               kind = "flat" | "heightmap"
    [bounds]                lo / hi of the square play area
    [[obstacles]]           name, position, radius
    [agents.<name>]         position + vehicle / steering / registered tables
"""

from __future__ import annotations
try:
    import tomllib
except ModuleNotFoundError:  # Python < 3.11
    import tomli as tomllib
from pathlib import Path
from dataclasses import fields

from core.ecs import World
from core.terrain import Terrain, FlatTerrain, HeightmapTerrain
from components import Bounds


_AGENT_KEYS = {"name", "position", "vehicle", "steering"}


class DataLoader:
    def __init__(self, world: World):
        self.world = world
        self._registry: dict[str, type] = {}

    def register(self, key: str, comp_type: type):
        """Map an agent sub-table name to a component class.

        In the TOML file:
            [agents.courier.tint]
            color = [200, 80, 80]

        With register("tint", Tint), this creates
        Tint(color=[200, 80, 80]) on the courier's entity.
        """
        self._registry[key] = comp_type

    def load(self, path: str | Path) -> dict[str, int]:
        """Load a scenario file.  Returns {name: entity_id}."""
        path = Path(path)
        with open(path, "rb") as f:
            data = tomllib.load(f)
        names = self.load_dict(data)
        print(f"[DATA] Loaded {len(names)} entities from {path}")
        return names

    def load_dict(self, data: dict) -> dict[str, int]:
        """Spawn everything in an already-parsed scenario mapping.

        Agents are spawned in two passes: every vehicle first, then every
        strategy, so ``target = "<name>"`` may refer to any agent in the
        file regardless of declaration order.
        """
        from logic.entity_factory import spawn_vehicle, spawn_obstacle, attach_steering

        if "terrain" in data or self.world.res(Terrain) is None:
            self.world.set_res(build_terrain(data.get("terrain", {})))
        if "bounds" in data:
            b = data["bounds"]
            self.world.set_res(Bounds(lo=float(b.get("lo", 0.0)),
                                      hi=float(b.get("hi", 100.0))))

        names: dict[str, int] = {}
        for desc in data.get("obstacles", []):
            eid = spawn_obstacle(self.world, desc)
            if "name" in desc:
                names[str(desc["name"])] = eid

        agents = data.get("agents", {})
        for name, section in agents.items():
            if not isinstance(section, dict):
                continue
            desc = {k: v for k, v in section.items() if k != "steering"}
            desc["name"] = name
            eid = spawn_vehicle(self.world, desc, names)
            for key, value in section.items():
                if key in _AGENT_KEYS or key not in self._registry:
                    continue
                self.world.add(eid, _build_component(self._registry[key], value))

        for name, section in agents.items():
            if isinstance(section, dict) and "steering" in section:
                attach_steering(self.world, names[name], section["steering"], names)

        return names


def build_terrain(table: dict) -> Terrain:
    """``[terrain]`` table → sampler.  Missing table means flat ground at 0."""
    kind = table.get("kind", "flat")
    if kind == "flat":
        return FlatTerrain(float(table.get("level", 0.0)))
    if kind == "heightmap":
        origin = table.get("origin", (0.0, 0.0))
        return HeightmapTerrain(table["rows"],
                                cell_size=float(table.get("cell_size", 1.0)),
                                origin=(float(origin[0]), float(origin[1])))
    raise ValueError(f"unknown terrain kind {kind!r}")


def _build_component(comp_type: type, value):
    """Build a dataclass instance, skipping unknown fields."""
    if not isinstance(value, dict):
        return comp_type(value)
    valid = {f.name for f in fields(comp_type)} if hasattr(comp_type, '__dataclass_fields__') else set()
    if valid:
        return comp_type(**{k: v for k, v in value.items() if k in valid})
    return comp_type(**value)


def load_scenario(world: World, path: str | Path,
                  components: dict[str, type] | None = None) -> dict[str, int]:
    """One-shot helper: register *components* and load *path* into *world*."""
    loader = DataLoader(world)
    for key, comp_type in (components or {}).items():
        loader.register(key, comp_type)
    return loader.load(path)

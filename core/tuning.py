"""core/tuning.py — Data-driven steering constants.

Every tunable number lives in ``data/tuning.toml`` and is loaded once
at startup.  Any system can read a value with::

    from core.tuning import get
    radius = get("steering.wander", "radius", 2.0)

Values missing from the file fall back to ``DEFAULTS`` (mirrors of
``core.constants``) before the caller's own default, so the engine
behaves identically with or without a tuning file.

Hot-reload: call ``reload()`` to re-read the file.  Tests pin values
with ``override()`` and undo them with ``clear_overrides()``.
"""

from __future__ import annotations
import os
from pathlib import Path

try:
    import tomllib                         # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib                # pip install tomli

from core import constants as C


ENV_VAR = "STEERING_TUNING"

DEFAULTS: dict[str, dict] = {
    "steering.wander": {
        "radius": C.WANDER_RADIUS,
        "jitter": C.WANDER_JITTER,
        "base_angle": C.WANDER_BASE_ANGLE,
    },
    "steering.path": {
        "arrival_margin": C.ARRIVAL_MARGIN,
    },
    "steering.pursuit": {
        "prediction_scale": C.PREDICTION_SCALE,
    },
    "steering.avoid": {
        "weight": C.AVOID_WEIGHT,
    },
    "steering.flock": {
        "radius": C.FLOCK_RADIUS,
        "separation_distance": C.FLOCK_SEPARATION_DISTANCE,
        "cohesion_weight": C.FLOCK_COHESION_WEIGHT,
        "alignment_weight": C.FLOCK_ALIGNMENT_WEIGHT,
        "separation_weight": C.FLOCK_SEPARATION_WEIGHT,
    },
    "integrator": {
        "clamp_velocity": False,
    },
}

_data: dict = {}
_path: Path | None = None
_overrides: dict[tuple[str, str], object] = {}


def default_path() -> Path:
    """``$STEERING_TUNING`` if set, else ``data/tuning.toml`` at the repo root."""
    env = os.environ.get(ENV_VAR)
    if env:
        return Path(env)
    return Path(__file__).resolve().parent.parent / "data" / "tuning.toml"


def load(path: str | Path | None = None) -> None:
    """Load (or reload) tuning constants from *path*."""
    global _data, _path

    path = default_path() if path is None else Path(path)
    _path = path

    if not path.exists():
        print(f"[TUNING] {path} not found — using built-in defaults")
        _data = {}
        return

    with open(path, "rb") as f:
        _data = tomllib.load(f)

    print(f"[TUNING] Loaded {_count_leaves(_data)} values from {path}")


def reload() -> None:
    """Re-read the tuning file from disk (hot-reload)."""
    load(_path)


def get(section: str, key: str, default=None):
    """Read a tuning value.

    Lookup order: ``override()`` pins, the loaded file, ``DEFAULTS``,
    then *default*.  *section* uses dot-notation to traverse nested
    tables, e.g. ``"steering.wander"`` looks up ``[steering.wander]``.

    >>> get("steering.path", "arrival_margin")
    2.0
    """
    pinned = _overrides.get((section, key), _MISSING)
    if pinned is not _MISSING:
        return pinned
    node = _walk(_data, section)
    if isinstance(node, dict) and key in node:
        return node[key]
    return DEFAULTS.get(section, {}).get(key, default)


def section(section_path: str) -> dict:
    """Return an entire section merged over its defaults (a fresh dict)."""
    merged = dict(DEFAULTS.get(section_path, {}))
    node = _walk(_data, section_path)
    if isinstance(node, dict):
        merged.update({k: v for k, v in node.items() if not isinstance(v, dict)})
    for (sec, key), value in _overrides.items():
        if sec == section_path:
            merged[key] = value
    return merged


def override(section: str, key: str, value) -> None:
    """Pin *section.key* to *value* until ``clear_overrides()``."""
    _overrides[(section, key)] = value


def clear_overrides() -> None:
    _overrides.clear()


# ── Internals ────────────────────────────────────────────────────────

_MISSING = object()


def _walk(root: dict, section_path: str):
    node = root
    for part in section_path.split("."):
        if not isinstance(node, dict):
            return None
        node = node.get(part)
        if node is None:
            return None
    return node


def _count_leaves(d: dict, _n: int = 0) -> int:
    for v in d.values():
        if isinstance(v, dict):
            _n = _count_leaves(v, _n)
        else:
            _n += 1
    return _n

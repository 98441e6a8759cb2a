"""logic/steering/registry.py — Strategy name → factory mapping.

Kept separate from the strategy implementations so they can import
``register_strategy`` without pulling each other in (avoids cycles).
Scenario files name strategies by these keys (``kind = "path"``).
"""

from __future__ import annotations
from typing import Callable


_registry: dict[str, Callable] = {}


def register_strategy(name: str, factory: Callable) -> None:
    """Register *factory* as the constructor for strategy *name*."""
    _registry[name] = factory


def get_strategy(name: str) -> Callable | None:
    """Return the factory for *name*, or ``None``."""
    return _registry.get(name)


def registered_names() -> list[str]:
    """Return a sorted list of all registered strategy names."""
    return sorted(_registry.keys())


def build_strategy(name: str, **params):
    """Instantiate strategy *name* with *params*.

    Raises ``ValueError`` for an unknown name or for parameters the
    factory rejects, so a bad scenario fails at spawn time.
    """
    factory = get_strategy(name)
    if factory is None:
        raise ValueError(
            f"unknown steering strategy {name!r} "
            f"(known: {', '.join(registered_names())})")
    try:
        return factory(**params)
    except TypeError as exc:
        raise ValueError(f"bad parameters for strategy {name!r}: {exc}") from exc

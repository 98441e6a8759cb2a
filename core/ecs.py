"""
core/ecs.py — Entity-Component-System

Entities are ints. Components are any object, stored by type.
Query by component types to get matching entities.

    w = World()
    e = w.spawn()
    w.add(e, Vehicle(position=Vector3(5, 0, 3)))
    w.add(e, Steering(strategy=SeekPoint(Vector3(0, 0, 0))))

    for eid, vehicle, steering in w.query(Vehicle, Steering):
        ...

Singletons (terrain, clock, snapshot, logs) are stored as *resources*
under the reserved id ``-1``.
"""

from __future__ import annotations
from typing import Any, Iterator


class World:
    def __init__(self):
        self._next_id = 0
        self._stores: dict[type, dict[int, Any]] = {}
        self._dead: set[int] = set()

    # -- Entities --

    def spawn(self) -> int:
        self._next_id += 1
        return self._next_id

    def kill(self, eid: int):
        """Mark *eid* for removal.  Components stay until ``purge()``."""
        self._dead.add(eid)

    def purge(self):
        """Remove dead entities from all stores. Call once per frame."""
        for store in self._stores.values():
            for eid in self._dead:
                store.pop(eid, None)
        self._dead.clear()

    # -- Components --

    def add(self, eid: int, comp: Any):
        self._stores.setdefault(type(comp), {})[eid] = comp

    def get(self, eid: int, comp_type: type) -> Any | None:
        return self._stores.get(comp_type, {}).get(eid)

    def require(self, eid: int, comp_type: type) -> Any:
        """Like ``get`` but raise ``KeyError`` if the component is missing.

        Used when resolving collaborators at spawn time, where a missing
        component is a configuration error rather than a runtime state.
        """
        comp = self.get(eid, comp_type)
        if comp is None or eid in self._dead:
            raise KeyError(f"entity {eid} has no {comp_type.__name__}")
        return comp

    # -- Queries --

    def query(self, *types: type) -> Iterator[tuple]:
        """Yield (eid, comp1, comp2, ...) for entities that have ALL types.

        Entities are yielded in spawn order so a frame is reproducible.
        """
        if not types:
            return
        buckets = [self._stores.get(t, {}) for t in types]
        smallest = min(buckets, key=len)
        for eid in sorted(smallest):
            if eid < 0 or eid in self._dead:
                continue
            if all(eid in b for b in buckets):
                yield (eid, *(b[eid] for b in buckets))

    def all_of(self, comp_type: type) -> Iterator[tuple[int, Any]]:
        """Yield (eid, component) for every entity with this type."""
        for eid, comp in sorted(self._stores.get(comp_type, {}).items(),
                                key=lambda kv: kv[0]):
            if eid >= 0 and eid not in self._dead:
                yield eid, comp

    def count(self, comp_type: type) -> int:
        return sum(1 for _ in self.all_of(comp_type))

    # -- Resources (singletons, not tied to entities) --

    def set_res(self, resource: Any):
        self._stores.setdefault(type(resource), {})[-1] = resource

    def res(self, res_type: type) -> Any | None:
        """Return the resource of exactly *res_type*, or a subclass instance.

        Subclass lookup lets callers ask for ``Terrain`` and receive
        whichever concrete terrain was installed.
        """
        found = self._stores.get(res_type, {}).get(-1)
        if found is not None:
            return found
        for t, store in self._stores.items():
            if -1 in store and isinstance(t, type) and issubclass(t, res_type):
                return store[-1]
        return None

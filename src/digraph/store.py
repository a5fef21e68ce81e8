"""Entity storage protocol and immutable ordered implementation.

The EntityStore protocol defines the id-keyed mapping a graph snapshot keeps
for its nodes and for its edges. Stores are values: every update returns a
new store and leaves the receiver untouched, so snapshots can share the
stores they did not change.

FrozenEntityStore is the default backend. It copies its dict on write, which
keeps iteration in insertion order at the cost of O(n) updates.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import Generic, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")
U = TypeVar("U")


@runtime_checkable
class EntityStore(Protocol[T]):
    """Immutable, insertion-ordered mapping of id -> entity."""

    def get(self, entity_id: str) -> T | None:
        """Get an entity by ID, or None if not found."""
        ...

    def has(self, entity_id: str) -> bool:
        """Check whether an entity exists."""
        ...

    def set(self, entity_id: str, entity: T) -> EntityStore[T]:
        """Return a store with *entity* inserted or replaced under *entity_id*."""
        ...

    def filter(self, keep: Callable[[T], bool]) -> EntityStore[T]:
        """Return a store holding only the entities *keep* accepts."""
        ...

    def map(self, fn: Callable[[T], U]) -> EntityStore[U]:
        """Return a store with every entity replaced by ``fn(entity)``."""
        ...

    def ids(self) -> list[str]:
        """Return all IDs in storage order."""
        ...

    def values(self) -> list[T]:
        """Return all entities in storage order."""
        ...

    def items(self) -> list[tuple[str, T]]:
        """Return (id, entity) pairs in storage order."""
        ...

    def __len__(self) -> int: ...

    def __iter__(self) -> Iterator[T]: ...


class FrozenEntityStore(Generic[T]):
    """Copy-on-write store backed by a private dict."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Iterable[tuple[str, T]] = ()) -> None:
        self._entries: dict[str, T] = dict(entries)

    @classmethod
    def empty(cls) -> FrozenEntityStore[T]:
        return cls()

    def get(self, entity_id: str) -> T | None:
        return self._entries.get(entity_id)

    def has(self, entity_id: str) -> bool:
        return entity_id in self._entries

    def set(self, entity_id: str, entity: T) -> FrozenEntityStore[T]:
        entries = dict(self._entries)
        entries[entity_id] = entity
        return self._adopt(entries)

    @classmethod
    def _adopt(cls, entries: dict[str, T]) -> FrozenEntityStore[T]:
        # Takes ownership of *entries*; callers must not keep a reference.
        store = cls.__new__(cls)
        store._entries = entries
        return store

    def filter(self, keep: Callable[[T], bool]) -> FrozenEntityStore[T]:
        return FrozenEntityStore((eid, e) for eid, e in self._entries.items() if keep(e))

    def map(self, fn: Callable[[T], U]) -> FrozenEntityStore[U]:
        return FrozenEntityStore((eid, fn(e)) for eid, e in self._entries.items())

    def ids(self) -> list[str]:
        return list(self._entries)

    def values(self) -> list[T]:
        return list(self._entries.values())

    def items(self) -> list[tuple[str, T]]:
        return list(self._entries.items())

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._entries.values()))

    def __repr__(self) -> str:
        return f"FrozenEntityStore(size={len(self._entries)})"

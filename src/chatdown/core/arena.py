"""Per-conversion node arena.

BeautifulSoup nodes compare by value, so two distinct ``<p>x</p>`` elements
are equal and cannot key a cache. The arena assigns every node a stable
integer id during a single preprocessing pass, and the per-conversion caches
(rule resolutions, converted markdown) are plain dictionaries keyed by those
ids. An arena belongs to exactly one ``parse()`` call.
"""

from __future__ import annotations

from collections.abc import Iterable
from itertools import chain, islice
from typing import Any, Generic, TypeVar


T = TypeVar("T")

MISSING: Any = object()


class NodeArena:
    """Stable integer ids for the nodes of one tree."""

    __slots__ = ("_ids", "_nodes")

    def __init__(self) -> None:
        self._ids: dict[int, int] = {}
        self._nodes: list[Any] = []

    @classmethod
    def build(cls, root: Any, *, limit: int | None = None) -> NodeArena:
        """Index ``root`` and its descendants in document order.

        ``limit`` caps the preprocessing pass so an oversized tree does not
        get fully indexed before the node budget has a chance to fire; nodes
        beyond the cap receive ids lazily on first lookup.
        """
        arena = cls()
        descendants: Iterable[Any] = getattr(root, "descendants", ())
        nodes = chain((root,), descendants)
        if limit is not None:
            nodes = islice(nodes, limit)
        for node in nodes:
            arena.index_of(node)
        return arena

    def index_of(self, node: Any) -> int:
        """Return the id of ``node``, assigning the next free id when unseen."""
        key = id(node)
        index = self._ids.get(key)
        if index is None:
            index = len(self._nodes)
            self._ids[key] = index
            self._nodes.append(node)
        return index

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node: object) -> bool:
        return id(node) in self._ids


class ArenaCache(Generic[T]):
    """Mapping from arena ids to values, scoped to a single conversion."""

    __slots__ = ("_arena", "_values")

    def __init__(self, arena: NodeArena) -> None:
        self._arena = arena
        self._values: dict[int, T] = {}

    def lookup(self, node: Any) -> T:
        """Return the cached value for ``node`` or :data:`MISSING`."""
        return self._values.get(self._arena.index_of(node), MISSING)

    def store(self, node: Any, value: T) -> T:
        self._values[self._arena.index_of(node)] = value
        return value

    def __len__(self) -> int:
        return len(self._values)


__all__ = ["MISSING", "ArenaCache", "NodeArena"]

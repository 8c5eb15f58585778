"""
Insertion-ordered, re-indexable collection keyed by entity id.

Code definitions, themes and files all need constant-time lookup by id and a
user-controlled display order that supports move, swap and sort by position.
``OrderedRegistry`` pairs a dict for lookup with a list holding the order.
"""

from typing import Callable, Generic, Hashable, Iterator, Optional, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class RegistryView(Generic[V]):
    """
    Read-only, order-preserving view over a registry's values.

    Iterating starts over every time, so the view can be walked repeatedly
    and always reflects the registry's current state.
    """

    def __init__(self, registry: "OrderedRegistry"):
        self._registry = registry

    def __iter__(self) -> Iterator[V]:
        return self._registry.iter_values()

    def __len__(self) -> int:
        return len(self._registry)

    def __getitem__(self, index: int) -> V:
        return self._registry.value_at(index)

    def __repr__(self) -> str:
        return f"RegistryView({list(self)!r})"


class OrderedRegistry(Generic[K, V]):
    """Id-keyed mapping whose iteration order can be rearranged by position."""

    def __init__(self):
        self._items: dict[K, V] = {}
        self._order: list[K] = []

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def insert(self, key: K, value: V) -> None:
        """Insert at the end, or replace in place if ``key`` already exists."""
        if key not in self._items:
            self._order.append(key)
        self._items[key] = value

    def get(self, key: K) -> Optional[V]:
        return self._items.get(key)

    def remove(self, key: K) -> Optional[V]:
        """
        Remove an entry, shifting later entries up by one position.

        Returns:
            The removed value, or None if ``key`` was not present.
        """
        value = self._items.pop(key, None)
        if value is not None:
            self._order.remove(key)
        return value

    def index_of(self, key: K) -> Optional[int]:
        if key not in self._items:
            return None
        return self._order.index(key)

    def max_index(self) -> int:
        """Largest valid position; 0 for an empty registry."""
        return max(len(self._order) - 1, 0)

    def is_valid_index(self, index: int) -> bool:
        return 0 <= index < len(self._order)

    def value_at(self, index: int) -> V:
        return self._items[self._order[index]]

    def move_index(self, from_index: int, to_index: int) -> None:
        """Relocate one entry; the others keep their relative order."""
        key = self._order.pop(from_index)
        self._order.insert(to_index, key)

    def swap_indices(self, index_a: int, index_b: int) -> None:
        self._order[index_a], self._order[index_b] = self._order[index_b], self._order[index_a]

    def sort_by(self, key: Callable[[V], str]) -> None:
        """Stable sort of the display order by a key computed from each value."""
        self._order.sort(key=lambda k: key(self._items[k]))

    def iter_values(self) -> Iterator[V]:
        for key in self._order:
            yield self._items[key]

    def values(self) -> RegistryView[V]:
        return RegistryView(self)

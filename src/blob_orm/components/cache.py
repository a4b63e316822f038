"""Bounded LRU cache implementation.

Uses collections.OrderedDict to keep entries in recency order.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import Any, Hashable


class _Missing:
    """Sentinel type returned by LRUCache.get on a miss."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


class LRUCache:
    """Fixed-capacity key-value store evicting the least recently used entry.

    Args:
        capacity: Maximum number of entries

    Invariants:
        - len(cache) <= capacity
        - Entries are ordered least to most recently used
        - Every get hit and every set moves the entry to the MRU end
    """

    def __init__(self, capacity: int = 50):
        if capacity < 1:
            raise ValueError(f"Cache capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        self._data: OrderedDict[Hashable, Any] = OrderedDict()

    @property
    def capacity(self) -> int:
        return self._capacity

    def get(self, key: Hashable) -> Any:
        """Return the value for key, or MISSING if absent."""
        if key not in self._data:
            return MISSING
        self._data.move_to_end(key)
        return self._data[key]

    def set(self, key: Hashable, value: Any) -> None:
        """Insert or replace key, evicting the LRU entry if full."""
        if key in self._data:
            self._data.move_to_end(key)
        elif len(self._data) >= self._capacity:
            self._data.popitem(last=False)
        self._data[key] = value

    def delete(self, key: Hashable) -> bool:
        """Drop key; return True if it was present."""
        return self._data.pop(key, MISSING) is not MISSING

    def clear(self) -> None:
        """Drop all entries."""
        self._data.clear()

    def keys(self) -> list[Hashable]:
        """Return keys from least to most recently used."""
        return list(self._data.keys())

    def __contains__(self, key: Hashable) -> bool:
        # Membership does not touch recency
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

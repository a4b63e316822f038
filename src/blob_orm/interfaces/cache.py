"""Protocol definition for the record cache."""

from __future__ import annotations

from typing import Any, Hashable, Protocol


class RecordCache(Protocol):
    """Fixed-capacity key-value store with recency-based eviction."""

    def get(self, key: Hashable) -> Any:
        """Return the cached value, or the MISSING sentinel.

        A hit marks the entry as most recently used.
        """
        ...

    def set(self, key: Hashable, value: Any) -> None:
        """Insert or replace a value, evicting the LRU entry when full."""
        ...

    def delete(self, key: Hashable) -> bool:
        """Drop an entry; return True if it was present."""
        ...

    def clear(self) -> None:
        """Drop all entries."""
        ...

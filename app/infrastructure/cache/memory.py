"""Request-local LRU cache layer."""

import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Generic, List, Optional

from infrastructure.cache.base import CacheEntry, CacheLayer, T


class RequestLRUCache(CacheLayer[T], Generic[T]):
    """Bounded in-process LRU cache owned by a single request.

    Reading a key marks it most recently used; inserting a new key into a
    full cache evicts the least recently used one. Not thread-safe: an
    instance belongs to exactly one request.

    Example:
        >>> cache = RequestLRUCache(max_size=2)
        >>> cache.set("a", 1, 60); cache.set("b", 2, 60)
        >>> cache.get("a")
        1
        >>> cache.set("c", 3, 60)  # evicts "b"
        >>> cache.keys()
        ['a', 'c']
    """

    def __init__(
        self, max_size: int = 100, clock: Callable[[], float] = time.time
    ):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry[T]]" = OrderedDict()

    def get_entry(self, key: str) -> Optional[CacheEntry[T]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return entry

    def set(self, key: str, value: T, ttl_seconds: int) -> None:
        entry = CacheEntry(
            key=key, value=value, expires_at=self._clock() + ttl_seconds
        )
        if key in self._entries:
            self._entries.move_to_end(key)
        elif len(self._entries) >= self.max_size:
            self._entries.popitem(last=False)
        self._entries[key] = entry

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> int:
        """Drop every entry and return how many were held."""
        count = len(self._entries)
        self._entries.clear()
        return count

    def keys(self) -> List[str]:
        """Keys ordered from least to most recently used."""
        return list(self._entries.keys())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get_stats(self) -> Dict[str, Any]:
        return {
            "backend": "memory",
            "size": len(self._entries),
            "max_size": self.max_size,
        }

"""Three-layer cache composed of request, shared and persistent layers."""

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional

from infrastructure.cache.base import (
    CacheEntry,
    CacheLayer,
    PersistentCacheLayer,
    T,
)
from infrastructure.cache.memory import RequestLRUCache
from infrastructure.logging import get_module_logger

logger = get_module_logger()


@dataclass(frozen=True)
class PurgeCounts:
    """Entries removed from each layer by an administrative purge."""

    persistent: int
    object_cache: int
    memory: int


class MultiLayerCache(Generic[T]):
    """Read-through cache over three layers checked in order.

    1. Request-local LRU, owned by one request and cleared when it ends.
    2. Shared object cache (Redis), namespaced, TTL given at write time.
    3. Persistent store (DynamoDB), survives restarts.

    A hit in a lower layer is copied into the layers above it with the
    entry's remaining TTL, so a promoted copy never outlives its source.
    TTL values are chosen by the caller; the success/error durations held
    here are only reported in statistics.
    """

    def __init__(
        self,
        request_cache: RequestLRUCache[T],
        object_cache: CacheLayer[T],
        persistent_store: PersistentCacheLayer[T],
        success_ttl: int = 86400,
        error_ttl: int = 3600,
        clock: Callable[[], float] = time.time,
    ):
        self.request_cache = request_cache
        self.object_cache = object_cache
        self.persistent_store = persistent_store
        self.success_ttl = success_ttl
        self.error_ttl = error_ttl
        self._clock = clock

    def _remaining(self, entry: CacheEntry[T]) -> int:
        remaining = entry.remaining_ttl(self._clock())
        return self.error_ttl if remaining is None else remaining

    def get(self, key: str) -> Optional[T]:
        """Look a key up layer by layer.

        Returns:
            The cached value, or None when no layer holds a live entry.
        """
        entry = self.request_cache.get_entry(key)
        if entry is not None:
            logger.debug("cache_hit", layer="memory", key=key)
            return entry.value

        entry = self.object_cache.get_entry(key)
        if entry is not None:
            remaining = self._remaining(entry)
            if remaining > 0:
                self.request_cache.set(key, entry.value, remaining)
                logger.debug("cache_hit", layer="object_cache", key=key)
                return entry.value

        entry = self.persistent_store.get_entry(key)
        if entry is not None:
            remaining = self._remaining(entry)
            if remaining > 0:
                self.request_cache.set(key, entry.value, remaining)
                self.object_cache.set(key, entry.value, remaining)
                logger.debug(
                    "cache_hit",
                    layer="persistent",
                    key=key,
                    remaining_ttl=remaining,
                )
                return entry.value

        logger.debug("cache_miss", key=key)
        return None

    def put(self, key: str, value: T, ttl_seconds: int) -> None:
        """Write a value through every layer with the same TTL."""
        self.request_cache.set(key, value, ttl_seconds)
        self.object_cache.set(key, value, ttl_seconds)
        self.persistent_store.set(key, value, ttl_seconds)

    def clear(self) -> int:
        """Empty the request-local layer only.

        Returns:
            Number of request-local entries dropped.
        """
        return self.request_cache.clear()

    def purge(self) -> PurgeCounts:
        """Administrative clear of all three layers.

        Deletes every persistent entry under the key prefix, then the
        object-cache entries of the addresses currently held in the request
        cache, then empties the request cache.
        """
        persistent = self.persistent_store.clear()
        object_cache = sum(
            1 for key in self.request_cache.keys() if self.object_cache.delete(key)
        )
        memory = self.request_cache.clear()

        counts = PurgeCounts(
            persistent=persistent, object_cache=object_cache, memory=memory
        )
        logger.info(
            "cache_purged",
            persistent_cleared=persistent,
            object_cache_cleared=object_cache,
            memory_cache_cleared=memory,
        )
        return counts

    def get_stats(self) -> Dict[str, Any]:
        return {
            "memory_cache_size": len(self.request_cache),
            "memory_cache_max": self.request_cache.max_size,
            "persistent_cache_count": self.persistent_store.count(),
            "success_cache_duration": self.success_ttl,
            "error_cache_duration": self.error_ttl,
        }

"""Cache layer abstract base class."""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A value held by one cache layer.

    Attributes:
        key: Key the value is stored under (the IP address).
        value: The cached value.
        expires_at: Epoch seconds after which the entry is stale, or None
            when the layer does not track expiry.
    """

    key: str
    value: T
    expires_at: Optional[float] = None

    def is_expired(self, now: Optional[float] = None) -> bool:
        if self.expires_at is None:
            return False
        now = time.time() if now is None else now
        return now >= self.expires_at

    def remaining_ttl(self, now: Optional[float] = None) -> Optional[int]:
        """Whole seconds left before expiry, None when unbounded."""
        if self.expires_at is None:
            return None
        now = time.time() if now is None else now
        return max(0, int(self.expires_at - now))


class CacheLayer(ABC, Generic[T]):
    """Abstract base class for a single cache layer.

    Layers are keyed by the raw IP string; each implementation derives its
    own storage key. Implementations must never raise on backend failures:
    a failed read is a miss and a failed write is a no-op.
    """

    @abstractmethod
    def get_entry(self, key: str) -> Optional[CacheEntry[T]]:
        """Get the live entry for a key.

        Args:
            key: Cache key (IP address).

        Returns:
            CacheEntry or None if missing or expired.
        """
        pass

    def get(self, key: str) -> Optional[T]:
        entry = self.get_entry(key)
        return entry.value if entry is not None else None

    @abstractmethod
    def set(self, key: str, value: T, ttl_seconds: int) -> None:
        """Store a value.

        Args:
            key: Cache key (IP address).
            value: Value to cache.
            ttl_seconds: Time-to-live in seconds.
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove a key.

        Returns:
            True if an entry was removed.
        """
        pass

    @abstractmethod
    def get_stats(self) -> Dict[str, Any]:
        """Get layer statistics (implementation-specific)."""
        pass


class PersistentCacheLayer(CacheLayer[T], Generic[T]):
    """Cache layer whose contents can be enumerated for administration."""

    @abstractmethod
    def clear(self) -> int:
        """Delete every entry owned by this layer.

        Returns:
            Number of entries deleted.
        """
        pass

    @abstractmethod
    def count(self) -> int:
        """Number of live entries held by this layer."""
        pass

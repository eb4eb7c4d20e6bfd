"""In-memory stand-ins for the geolocation cache backends and ipstack."""

from typing import Any, Dict, List, Optional

from infrastructure.cache import CacheEntry, CacheLayer, PersistentCacheLayer
from infrastructure.operations import OperationResult


class FakeClock:
    """Manually advanced epoch clock."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class InMemoryObjectCache(CacheLayer):
    """Shared object cache layer kept in a dict, honouring TTLs."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.entries: Dict[str, CacheEntry] = {}
        self.set_calls: List[tuple] = []

    def get_entry(self, key: str) -> Optional[CacheEntry]:
        entry = self.entries.get(key)
        if entry is None or entry.is_expired(self.clock()):
            return None
        return entry

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        self.set_calls.append((key, ttl_seconds))
        self.entries[key] = CacheEntry(
            key=key, value=value, expires_at=self.clock() + ttl_seconds
        )

    def delete(self, key: str) -> bool:
        return self.entries.pop(key, None) is not None

    def get_stats(self) -> Dict[str, Any]:
        return {"backend": "fake", "size": len(self.entries)}


class InMemoryPersistentStore(InMemoryObjectCache, PersistentCacheLayer):
    """Persistent layer kept in a dict."""

    def clear(self) -> int:
        count = len(self.entries)
        self.entries.clear()
        return count

    def count(self) -> int:
        return sum(
            1 for entry in self.entries.values() if not entry.is_expired(self.clock())
        )


class FakeIPStackClient:
    """ipstack client returning queued results and recording calls."""

    def __init__(self, *results: OperationResult):
        self.results = list(results)
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def respond_with(self, payload: Optional[Dict[str, Any]]) -> None:
        """Queue a successful HTTP exchange returning ``payload``."""
        self.results.append(
            OperationResult.success(data=payload, message="ipstack responded 200")
        )

    def lookup(
        self, ip_address: str, access_key: str, secure: bool = True
    ) -> OperationResult:
        self.calls.append(
            {"ip_address": ip_address, "access_key": access_key, "secure": secure}
        )
        if len(self.results) > 1:
            return self.results.pop(0)
        if self.results:
            return self.results[0]
        raise AssertionError(f"unexpected ipstack lookup for {ip_address}")

    def close(self) -> None:
        self.closed = True


class FakePaginator:
    """boto3 paginator yielding canned pages."""

    def __init__(self, pages: List[dict]):
        self.pages = list(pages)
        self.calls: List[Dict[str, Any]] = []

    def paginate(self, **kwargs):
        self.calls.append(kwargs)
        yield from self.pages

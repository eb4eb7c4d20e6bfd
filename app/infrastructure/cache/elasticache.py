"""Shared object cache layer backed by ElastiCache (Redis/Valkey).

Values are pydantic models stored as JSON under namespaced keys
(``<namespace>:ipstack_<ip>``) with ``SETEX``. Redis enforces expiry, so the
remaining TTL is read back alongside the value to support promotion into
the request-local layer.
"""

import time
from typing import Any, Callable, Dict, Generic, Optional, Type

from pydantic import BaseModel, ValidationError
from redis import Redis, RedisError  # type: ignore

from infrastructure.cache.base import CacheEntry, CacheLayer, T
from infrastructure.cache.key_builder import CacheKeyBuilder
from infrastructure.logging import get_module_logger
from infrastructure.operations.classifiers import classify_redis_error

logger = get_module_logger()


class RedisObjectCache(CacheLayer[T], Generic[T]):
    """Redis-backed cache layer shared by every request and process.

    Connection and command errors are logged and reported as a miss (reads)
    or ignored (writes); the shared layer is an optimisation, never a
    dependency of a lookup.
    """

    def __init__(
        self,
        client: Redis,
        record_type: Type[BaseModel],
        namespace: str = "gf_iplocation",
        key_builder: Optional[CacheKeyBuilder] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.client = client
        self.record_type = record_type
        self.namespace = namespace
        self.key_builder = key_builder or CacheKeyBuilder()
        self._clock = clock

    def _key(self, ip: str) -> str:
        return f"{self.namespace}:{self.key_builder.object_key(ip)}"

    def get_entry(self, key: str) -> Optional[CacheEntry[T]]:
        redis_key = self._key(key)
        try:
            pipeline = self.client.pipeline()
            pipeline.get(redis_key)
            pipeline.ttl(redis_key)
            raw, ttl = pipeline.execute()
        except RedisError as e:
            logger.warning(
                "object_cache_get_failed",
                key=redis_key,
                **classify_redis_error(e).log_fields(),
            )
            return None

        if raw is None:
            logger.debug("object_cache_miss", key=redis_key)
            return None

        try:
            value = self.record_type.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(
                "object_cache_invalid_value", key=redis_key, error=str(e)
            )
            return None

        # ttl is -1 for keys without expiry and -2 if the key vanished
        expires_at = self._clock() + ttl if ttl is not None and ttl > 0 else None
        logger.debug("object_cache_hit", key=redis_key)
        return CacheEntry(key=key, value=value, expires_at=expires_at)

    def set(self, key: str, value: T, ttl_seconds: int) -> None:
        redis_key = self._key(key)
        try:
            self.client.setex(redis_key, ttl_seconds, value.model_dump_json())
            logger.debug(
                "object_cache_set", key=redis_key, ttl_seconds=ttl_seconds
            )
        except RedisError as e:
            logger.warning(
                "object_cache_set_failed",
                key=redis_key,
                **classify_redis_error(e).log_fields(),
            )

    def delete(self, key: str) -> bool:
        redis_key = self._key(key)
        try:
            deleted = self.client.delete(redis_key)
        except RedisError as e:
            logger.warning(
                "object_cache_delete_failed",
                key=redis_key,
                **classify_redis_error(e).log_fields(),
            )
            return False
        return bool(deleted)

    def get_stats(self) -> Dict[str, Any]:
        return {"backend": "redis", "namespace": self.namespace}

"""Infrastructure multi-layer cache.

Three cache layers keyed by IP address, composed by MultiLayerCache:

1. RequestLRUCache - bounded, request-local, cleared when the request ends
2. RedisObjectCache - ElastiCache shared by all instances, namespaced keys
3. DynamoDBLocationStore - persistent, survives restarts

Usage:

    from infrastructure.cache import (
        DynamoDBLocationStore,
        MultiLayerCache,
        RedisObjectCache,
        RequestLRUCache,
    )

    cache = MultiLayerCache(
        request_cache=RequestLRUCache(max_size=100),
        object_cache=RedisObjectCache(redis_client, record_type=LocationRecord),
        persistent_store=DynamoDBLocationStore(
            dynamodb_client, record_type=LocationRecord
        ),
    )

    record = cache.get("8.8.8.8")
    if record is None:
        record = lookup(...)
        cache.put("8.8.8.8", record, ttl_seconds=86400)
"""

from infrastructure.cache.base import CacheEntry, CacheLayer, PersistentCacheLayer
from infrastructure.cache.dynamodb import DynamoDBLocationStore
from infrastructure.cache.elasticache import RedisObjectCache
from infrastructure.cache.factory import build_dynamodb_client, build_redis_client
from infrastructure.cache.key_builder import CacheKeyBuilder
from infrastructure.cache.memory import RequestLRUCache
from infrastructure.cache.multilayer import MultiLayerCache, PurgeCounts

__all__ = [
    "CacheEntry",
    "CacheLayer",
    "PersistentCacheLayer",
    "CacheKeyBuilder",
    "RequestLRUCache",
    "RedisObjectCache",
    "DynamoDBLocationStore",
    "MultiLayerCache",
    "PurgeCounts",
    "build_redis_client",
    "build_dynamodb_client",
]

"""DynamoDB persistent cache layer."""

import time
from typing import Any, Callable, Dict, Generic, Optional, Type

from botocore.client import BaseClient  # type: ignore
from botocore.exceptions import BotoCoreError, ClientError  # type: ignore
from pydantic import BaseModel, ValidationError

from infrastructure.cache.base import CacheEntry, PersistentCacheLayer, T
from infrastructure.cache.key_builder import CacheKeyBuilder
from infrastructure.logging import get_module_logger
from infrastructure.operations.classifiers import classify_dynamodb_error

logger = get_module_logger()

PARTITION_KEY = "cache_key"


class DynamoDBLocationStore(PersistentCacheLayer[T], Generic[T]):
    """DynamoDB-backed persistent cache layer.

    Uses a dedicated table with:
    - PK: cache_key (string, escaped IP with the key prefix)
    - Attributes: record_json, ttl (DynamoDB TTL attribute), created_at, ip

    DynamoDB deletes expired items lazily, so reads compare ``ttl`` with the
    clock and treat stale items as misses.
    """

    def __init__(
        self,
        client: BaseClient,
        record_type: Type[BaseModel],
        table_name: str = "geolocation_cache",
        key_builder: Optional[CacheKeyBuilder] = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize DynamoDB store.

        Args:
            client: boto3 DynamoDB client.
            record_type: Pydantic model class of the stored values.
            table_name: DynamoDB table name.
            key_builder: Builds persistent keys from IP addresses.
            clock: Returns the current epoch time in seconds.
        """
        self.client = client
        self.record_type = record_type
        self.table_name = table_name
        self.key_builder = key_builder or CacheKeyBuilder()
        self._clock = clock

    def _log_failure(self, event: str, error: Exception, **kwargs: Any) -> None:
        logger.warning(
            event,
            table_name=self.table_name,
            **classify_dynamodb_error(error).log_fields(),
            **kwargs,
        )

    def get_entry(self, key: str) -> Optional[CacheEntry[T]]:
        cache_key = self.key_builder.persistent_key(key)
        try:
            response = self.client.get_item(
                TableName=self.table_name,
                Key={PARTITION_KEY: {"S": cache_key}},
            )
        except (ClientError, BotoCoreError) as e:
            self._log_failure("persistent_cache_get_failed", e, key=cache_key)
            return None

        item = response.get("Item")
        if not item:
            logger.debug("persistent_cache_miss", key=cache_key)
            return None

        try:
            expires_at = float(item["ttl"]["N"])
            value = self.record_type.model_validate_json(item["record_json"]["S"])
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            logger.warning(
                "persistent_cache_invalid_item", key=cache_key, error=str(e)
            )
            return None

        if expires_at <= self._clock():
            logger.debug("persistent_cache_expired", key=cache_key)
            return None

        logger.debug("persistent_cache_hit", key=cache_key)
        return CacheEntry(key=key, value=value, expires_at=expires_at)

    def set(self, key: str, value: T, ttl_seconds: int) -> None:
        cache_key = self.key_builder.persistent_key(key)
        now = int(self._clock())
        try:
            self.client.put_item(
                TableName=self.table_name,
                Item={
                    PARTITION_KEY: {"S": cache_key},
                    "record_json": {"S": value.model_dump_json()},
                    "ttl": {"N": str(now + ttl_seconds)},
                    "created_at": {"N": str(now)},
                    "ip": {"S": key},
                },
            )
            logger.debug(
                "persistent_cache_set", key=cache_key, ttl_seconds=ttl_seconds
            )
        except (ClientError, BotoCoreError) as e:
            self._log_failure("persistent_cache_set_failed", e, key=cache_key)

    def delete(self, key: str) -> bool:
        cache_key = self.key_builder.persistent_key(key)
        try:
            response = self.client.delete_item(
                TableName=self.table_name,
                Key={PARTITION_KEY: {"S": cache_key}},
                ReturnValues="ALL_OLD",
            )
        except (ClientError, BotoCoreError) as e:
            self._log_failure("persistent_cache_delete_failed", e, key=cache_key)
            return False
        return bool(response.get("Attributes"))

    def _scan_pages(self, filter_expression: str, **kwargs: Any):
        paginator = self.client.get_paginator("scan")
        return paginator.paginate(
            TableName=self.table_name,
            FilterExpression=filter_expression,
            **kwargs,
        )

    def clear(self) -> int:
        """Delete every item under the key prefix.

        Returns:
            Number of items deleted.
        """
        deleted = 0
        try:
            pages = self._scan_pages(
                "begins_with(#pk, :prefix)",
                ProjectionExpression="#pk",
                ExpressionAttributeNames={"#pk": PARTITION_KEY},
                ExpressionAttributeValues={
                    ":prefix": {"S": self.key_builder.prefix}
                },
            )
            for page in pages:
                for item in page.get("Items", []):
                    self.client.delete_item(
                        TableName=self.table_name,
                        Key={PARTITION_KEY: item[PARTITION_KEY]},
                    )
                    deleted += 1
        except (ClientError, BotoCoreError) as e:
            self._log_failure("persistent_cache_clear_failed", e, deleted=deleted)
            return deleted

        logger.info("persistent_cache_cleared", items_deleted=deleted)
        return deleted

    def count(self) -> int:
        """Count live (unexpired) items under the key prefix."""
        total = 0
        try:
            pages = self._scan_pages(
                "begins_with(#pk, :prefix) AND #ttl > :now",
                Select="COUNT",
                ExpressionAttributeNames={"#pk": PARTITION_KEY, "#ttl": "ttl"},
                ExpressionAttributeValues={
                    ":prefix": {"S": self.key_builder.prefix},
                    ":now": {"N": str(int(self._clock()))},
                },
            )
            for page in pages:
                total += page.get("Count", 0)
        except (ClientError, BotoCoreError) as e:
            self._log_failure("persistent_cache_count_failed", e)
        return total

    def get_stats(self) -> Dict[str, Any]:
        return {
            "backend": "dynamodb",
            "table_name": self.table_name,
            "partition_key": PARTITION_KEY,
            "entry_count": self.count(),
        }

"""Factories for the shared cache backends.

Clients are built once per process (in the application lifespan) and
injected into the cache layers; nothing here keeps module-level state.
"""

from typing import TYPE_CHECKING, Any, Dict

import boto3  # type: ignore
from botocore.client import BaseClient  # type: ignore
from redis import ConnectionPool, Redis  # type: ignore

from infrastructure.logging import get_module_logger

if TYPE_CHECKING:
    from infrastructure.configuration import Settings

logger = get_module_logger()


def build_redis_client(settings: "Settings") -> Redis:
    """Create an ElastiCache (Redis) client with connection pooling.

    The pool connects lazily, so a missing cache does not prevent startup;
    failed commands are handled by the cache layer.
    """
    elasticache = settings.elasticache
    pool = ConnectionPool(
        host=elasticache.ELASTICACHE_ENDPOINT,
        port=elasticache.ELASTICACHE_PORT,
        db=elasticache.ELASTICACHE_DB,
        decode_responses=True,
        max_connections=10,
        socket_timeout=elasticache.ELASTICACHE_SOCKET_TIMEOUT,
        socket_connect_timeout=elasticache.ELASTICACHE_SOCKET_TIMEOUT,
        retry_on_timeout=True,
        health_check_interval=30,
    )
    logger.info(
        "elasticache_connection_pool_created",
        host=elasticache.ELASTICACHE_ENDPOINT,
        port=elasticache.ELASTICACHE_PORT,
    )
    return Redis(connection_pool=pool)


def build_dynamodb_client(settings: "Settings") -> BaseClient:
    """Create a boto3 DynamoDB client for the configured region.

    ``DYNAMODB_ENDPOINT_URL`` points the client at a local DynamoDB when set.
    """
    client_config: Dict[str, Any] = {}
    if settings.aws.DYNAMODB_ENDPOINT_URL:
        client_config["endpoint_url"] = settings.aws.DYNAMODB_ENDPOINT_URL

    session = boto3.Session(region_name=settings.aws.AWS_REGION)
    logger.info(
        "dynamodb_client_created",
        region=settings.aws.AWS_REGION,
        endpoint_url=client_config.get("endpoint_url"),
    )
    return session.client("dynamodb", **client_config)

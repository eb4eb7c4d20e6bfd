"""ElastiCache (Redis/Valkey) integration settings."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class ElastiCacheSettings(IntegrationSettings):
    """Shared object cache connection settings.

    Environment Variables:
        ELASTICACHE_ENDPOINT: Redis host name (default: localhost)
        ELASTICACHE_PORT: Redis port (default: 6379)
        ELASTICACHE_DB: Redis logical database (default: 0)
        ELASTICACHE_SOCKET_TIMEOUT: Socket timeout in seconds (default: 5)
    """

    ELASTICACHE_ENDPOINT: str = Field(default="localhost", alias="ELASTICACHE_ENDPOINT")
    ELASTICACHE_PORT: int = Field(default=6379, alias="ELASTICACHE_PORT")
    ELASTICACHE_DB: int = Field(default=0, alias="ELASTICACHE_DB")
    ELASTICACHE_SOCKET_TIMEOUT: int = Field(
        default=5, alias="ELASTICACHE_SOCKET_TIMEOUT"
    )

"""Geolocation cache infrastructure settings."""

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class GeolocationCacheSettings(InfrastructureSettings):
    """Cache layer sizing and lifetimes for IP geolocation lookups, plus the
    table that stores accepted entries and their notes.

    Successful lookups are kept for a day; error records are kept for an
    hour so a provider outage is remembered only briefly.

    Environment Variables:
        GEOLOCATION_REQUEST_CACHE_MAX_SIZE: Request-local LRU size (default: 100)
        GEOLOCATION_SUCCESS_TTL_SECONDS: TTL for successful lookups (default: 86400)
        GEOLOCATION_ERROR_TTL_SECONDS: TTL for error records (default: 3600)
        GEOLOCATION_CACHE_NAMESPACE: Shared object cache namespace (default: gf_iplocation)
        GEOLOCATION_CACHE_TABLE: DynamoDB table for persisted lookups
            (default: geolocation_cache)
        GEOLOCATION_ENTRIES_TABLE: DynamoDB table for stored entries and notes
            (default: geolocation_entries)

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        ttl = settings.geolocation_cache.GEOLOCATION_SUCCESS_TTL_SECONDS
        ```
    """

    GEOLOCATION_REQUEST_CACHE_MAX_SIZE: int = Field(
        default=100, ge=1, alias="GEOLOCATION_REQUEST_CACHE_MAX_SIZE"
    )
    GEOLOCATION_SUCCESS_TTL_SECONDS: int = Field(
        default=24 * 3600, ge=1, alias="GEOLOCATION_SUCCESS_TTL_SECONDS"
    )
    GEOLOCATION_ERROR_TTL_SECONDS: int = Field(
        default=3600, ge=1, alias="GEOLOCATION_ERROR_TTL_SECONDS"
    )
    GEOLOCATION_CACHE_NAMESPACE: str = Field(
        default="gf_iplocation", alias="GEOLOCATION_CACHE_NAMESPACE"
    )
    GEOLOCATION_CACHE_TABLE: str = Field(
        default="geolocation_cache", alias="GEOLOCATION_CACHE_TABLE"
    )
    GEOLOCATION_ENTRIES_TABLE: str = Field(
        default="geolocation_entries", alias="GEOLOCATION_ENTRIES_TABLE"
    )

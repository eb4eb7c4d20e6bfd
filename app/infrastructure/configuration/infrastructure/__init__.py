"""Infrastructure settings __init__ - exports all infrastructure settings."""

from infrastructure.configuration.infrastructure.geolocation_cache import (
    GeolocationCacheSettings,
)
from infrastructure.configuration.infrastructure.server import ServerSettings

__all__ = [
    "GeolocationCacheSettings",
    "ServerSettings",
]

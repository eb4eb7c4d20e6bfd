"""Settings for the geolocate service, grouped by concern.

Load them through the cached provider rather than instantiating ``Settings``:

    from infrastructure.services import get_settings

    settings = get_settings()
    success_ttl = settings.geolocation_cache.GEOLOCATION_SUCCESS_TTL_SECONDS
"""

from infrastructure.configuration.settings import Settings

__all__ = ["Settings"]

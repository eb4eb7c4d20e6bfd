"""Process-wide providers for infrastructure services."""

from functools import lru_cache

from infrastructure.configuration import Settings


@lru_cache
def get_settings() -> Settings:
    """Load settings from the environment once per process.

    The lifespan, the cache backend factories and the rate limiter call this
    directly. Route handlers take ``SettingsDep`` instead so tests can swap
    the instance through ``app.dependency_overrides[get_settings]``:

        @router.get("/version")
        def get_version(request: Request, settings: SettingsDep):
            return {"version": settings.GIT_SHA}

    Tests that change the environment call ``get_settings.cache_clear()``.
    """
    return Settings()

"""Top-level settings for the geolocate service."""

from typing import Any, Dict, Type

from pydantic_settings import BaseSettings, SettingsConfigDict

from infrastructure.configuration.features import CountryValidationSettings
from infrastructure.configuration.infrastructure import (
    GeolocationCacheSettings,
    ServerSettings,
)
from infrastructure.configuration.integrations import (
    AwsSettings,
    ElastiCacheSettings,
    IPStackSettings,
)

# Section attribute -> settings class; each section reads its own variables
SECTIONS: Dict[str, Type[BaseSettings]] = {
    "ipstack": IPStackSettings,
    "elasticache": ElastiCacheSettings,
    "aws": AwsSettings,
    "country_validation": CountryValidationSettings,
    "geolocation_cache": GeolocationCacheSettings,
    "server": ServerSettings,
}


class Settings(BaseSettings):
    """All settings, one attribute per section.

    Environment Variables:
        PREFIX: Environment prefix; empty in production
        LOG_LEVEL: Logging level (default: INFO)
        GIT_SHA: Deployed commit, reported by ``GET /version``

    Sections not passed explicitly are loaded from the environment, so tests
    can override just the one they care about:

        settings = Settings(server=ServerSettings(ADMIN_JWT_SECRET="secret"))
        settings.ipstack.IPSTACK_ACCESS_KEY  # still read from the environment
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    PREFIX: str = ""
    LOG_LEVEL: str = "INFO"
    GIT_SHA: str = "Unknown"

    ipstack: IPStackSettings
    elasticache: ElastiCacheSettings
    aws: AwsSettings
    country_validation: CountryValidationSettings
    geolocation_cache: GeolocationCacheSettings
    server: ServerSettings

    def __init__(self, **kwargs: Any):
        for name, section in SECTIONS.items():
            if name not in kwargs:
                kwargs[name] = section()
        super().__init__(**kwargs)

    @property
    def is_production(self) -> bool:
        return not self.PREFIX

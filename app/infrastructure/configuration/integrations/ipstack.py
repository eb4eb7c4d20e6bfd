"""ipstack integration settings."""

from pydantic import Field, field_validator

from infrastructure.configuration.base import IntegrationSettings


class IPStackSettings(IntegrationSettings):
    """ipstack geolocation API configuration.

    Environment Variables:
        IPSTACK_ACCESS_KEY: ipstack API access key (required for lookups)
        IPSTACK_API_HOST: API host name (default: api.ipstack.com)
        IPSTACK_TIMEOUT_SECONDS: Request timeout in seconds (default: 5)

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        access_key = settings.ipstack.IPSTACK_ACCESS_KEY
        ```
    """

    IPSTACK_ACCESS_KEY: str = Field(default="", alias="IPSTACK_ACCESS_KEY")
    IPSTACK_API_HOST: str = Field(default="api.ipstack.com", alias="IPSTACK_API_HOST")
    IPSTACK_TIMEOUT_SECONDS: int = Field(default=5, alias="IPSTACK_TIMEOUT_SECONDS")

    @field_validator("IPSTACK_ACCESS_KEY", mode="before")
    @classmethod
    def strip_access_key(cls, v: object) -> str:
        """Treat a whitespace-only key as missing."""
        if v is None:
            return ""
        return str(v).strip()

    @property
    def has_access_key(self) -> bool:
        return bool(self.IPSTACK_ACCESS_KEY)

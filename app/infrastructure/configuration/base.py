"""Base classes for settings sections.

Every section reads the process environment and the optional ``.env`` file
with case-sensitive variable names and ignores variables it does not declare.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_CONFIG = SettingsConfigDict(
    env_file=".env",
    case_sensitive=True,
    extra="ignore",
)


class IntegrationSettings(BaseSettings):
    """Connection settings for an outbound service (ipstack, Redis, AWS)."""

    model_config = ENV_CONFIG


class FeatureSettings(BaseSettings):
    """Service-wide defaults a form may override (country validation)."""

    model_config = ENV_CONFIG


class InfrastructureSettings(BaseSettings):
    """Settings for the service's own runtime (cache layers, HTTP server)."""

    model_config = ENV_CONFIG

"""Country validation feature settings."""

from typing import Any, Union

from pydantic import Field, field_validator

from infrastructure.configuration.base import FeatureSettings

DEFAULT_REJECTION_MESSAGE = (
    "Sorry, this form is only available to users from allowed countries."
)


class CountryValidationSettings(FeatureSettings):
    """Default country restriction applied to submissions.

    Forms may carry their own restriction; these values apply when they
    don't.

    Environment Variables:
        COUNTRY_VALIDATION_ENABLED: Enable country restriction (default: false)
        ALLOWED_COUNTRIES: JSON list of allowed country names, or a single name
        COUNTRY_VALIDATION_MESSAGE: Message shown when a submission is rejected

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        if settings.country_validation.COUNTRY_VALIDATION_ENABLED:
            allowed = settings.country_validation.ALLOWED_COUNTRIES
        ```
    """

    COUNTRY_VALIDATION_ENABLED: bool = Field(
        default=False, alias="COUNTRY_VALIDATION_ENABLED"
    )
    ALLOWED_COUNTRIES: Union[list[str], str] = Field(
        default_factory=list, alias="ALLOWED_COUNTRIES"
    )
    COUNTRY_VALIDATION_MESSAGE: str = Field(
        default=DEFAULT_REJECTION_MESSAGE, alias="COUNTRY_VALIDATION_MESSAGE"
    )

    @field_validator("ALLOWED_COUNTRIES", mode="before")
    @classmethod
    def validate_allowed_countries(cls, v: Any) -> list[str]:
        """Always hand back a list, a lone country name becomes a one-item list."""
        if v is None:
            return []
        if isinstance(v, str):
            v = v.strip()
            return [v] if v else []
        return [str(country) for country in v if str(country).strip()]

"""Feature settings __init__ - exports all feature settings."""

from infrastructure.configuration.features.country_validation import (
    DEFAULT_REJECTION_MESSAGE,
    CountryValidationSettings,
)

__all__ = [
    "CountryValidationSettings",
    "DEFAULT_REJECTION_MESSAGE",
]

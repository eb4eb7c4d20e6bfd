"""Pydantic schemas for geolocate package."""

import uuid
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from infrastructure.configuration.features import DEFAULT_REJECTION_MESSAGE


class LookupErrorKind(str, Enum):
    """Why a lookup produced an error record instead of a location."""

    EMPTY_INPUT = "empty_input"
    INVALID_FORMAT = "invalid_format"
    CONFIG_MISSING = "config_missing"
    TRANSPORT_ERROR = "transport_error"
    PROVIDER_ERROR = "provider_error"
    DATA_ERROR = "data_error"


class LocationRecord(BaseModel):
    """Normalized geolocation result, or the placeholder for a failed lookup.

    Records are immutable. Every cache layer stores its own copy and an
    update replaces the cached entry rather than mutating it.
    """

    model_config = ConfigDict(frozen=True)

    ip: str
    country_name: Optional[str] = None
    country_code: Optional[str] = None
    city: Optional[str] = None
    region_name: Optional[str] = None
    continent_name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    zip: Optional[str] = None
    is_error: bool = False
    error_message: Optional[str] = None
    error_kind: Optional[LookupErrorKind] = None

    @model_validator(mode="after")
    def check_outcome(self) -> "LocationRecord":
        if self.is_error:
            if not self.error_message:
                raise ValueError("error records require an error_message")
            if self.error_kind is None:
                raise ValueError("error records require an error_kind")
        elif not self.country_name:
            raise ValueError("location records require a country_name")
        return self

    @classmethod
    def failure(
        cls,
        ip: str,
        kind: LookupErrorKind,
        message: str,
        country_name: Optional[str] = None,
    ) -> "LocationRecord":
        """Build an error record.

        Args:
            ip: Address the lookup was made for
            kind: Error classification
            message: Operator-facing error text
            country_name: Placeholder shown where a country would be
                ("Invalid IP", "API Error", ...)
        """
        return cls(
            ip=ip,
            country_name=country_name,
            is_error=True,
            error_message=message,
            error_kind=kind,
        )


class GeolocateRequest(BaseModel):
    """Request to geolocate an IP address."""

    ip_address: str = Field(
        ...,
        description="IPv4 or IPv6 address to geolocate",
        examples=["8.8.8.8", "2001:4860:4860::8888"],
    )


class GeolocateResponse(BaseModel):
    """Response from IP geolocation."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "ip_address": "8.8.8.8",
                "city": "Mountain View",
                "country": "United States",
                "country_code": "US",
                "region": "California",
                "continent": "North America",
                "latitude": 37.386,
                "longitude": -122.0838,
                "zip": "94035",
            }
        }
    )

    ip_address: str = Field(..., description="Queried IP address")
    country: Optional[str] = Field(None, description="Country name")
    country_code: Optional[str] = Field(None, description="ISO country code")
    city: Optional[str] = Field(None, description="City name")
    region: Optional[str] = Field(None, description="Region/state name")
    continent: Optional[str] = Field(None, description="Continent name")
    latitude: Optional[float] = Field(None, description="Latitude")
    longitude: Optional[float] = Field(None, description="Longitude")
    zip: Optional[str] = Field(None, description="Postal/ZIP code")

    @classmethod
    def from_record(cls, record: LocationRecord) -> "GeolocateResponse":
        return cls(
            ip_address=record.ip,
            country=record.country_name,
            country_code=record.country_code,
            city=record.city,
            region=record.region_name,
            continent=record.continent_name,
            latitude=record.latitude,
            longitude=record.longitude,
            zip=record.zip,
        )


class GeolocationConfig(BaseModel):
    """Typed geolocation configuration resolved once per process."""

    model_config = ConfigDict(frozen=True)

    access_key: Optional[str] = None
    allowed_countries: frozenset[str] = frozenset()
    validation_enabled: bool = False
    rejection_message: str = DEFAULT_REJECTION_MESSAGE
    request_cache_max_size: int = Field(100, gt=0)
    success_ttl: int = Field(86400, gt=0)
    error_ttl: int = Field(3600, gt=0)

    @property
    def has_access_key(self) -> bool:
        return bool(self.access_key)


class CountryRestriction(BaseModel):
    """Country allow-list applied to a form."""

    validation_enabled: bool = False
    allowed_countries: set[str] = Field(default_factory=set)
    rejection_message: str = DEFAULT_REJECTION_MESSAGE


class FormField(BaseModel):
    """A form field as far as location population is concerned."""

    id: int
    type: str = "text"
    label: Optional[str] = None
    default_value: Optional[str] = None


class Form(BaseModel):
    """Form definition submitted alongside an entry."""

    id: int
    title: Optional[str] = None
    fields: list[FormField] = Field(default_factory=list)
    restriction: Optional[CountryRestriction] = Field(
        None, description="Overrides the configured country restriction"
    )
    confirmation_message: Optional[str] = Field(
        None, description="Confirmation text, may contain {user:*} merge tags"
    )


class Submission(BaseModel):
    """One form submission to be validated, enriched and stored.

    The HTTP surface replaces ``submission_id`` with a server-generated id
    and, unless the caller holds a relay token, ``ip_address`` with the
    caller address.
    """

    submission_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    form: Form
    ip_address: str = ""
    values: dict[str, str] = Field(default_factory=dict)


class SubmissionResult(BaseModel):
    """Outcome of processing a submission."""

    submission_id: str
    accepted: bool
    message: Optional[str] = None
    entry_id: Optional[str] = None
    populated_values: dict[str, str] = Field(default_factory=dict)
    confirmation_message: Optional[str] = None


class NoteType(str, Enum):
    """Severity of an entry note."""

    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class EntryNote(BaseModel):
    """Human-readable note attached to a stored entry."""

    model_config = ConfigDict(frozen=True)

    entry_id: str
    text: str
    note_type: NoteType
    user_name: str = "IP Location Add-on"


class EntryNotesResponse(BaseModel):
    """Notes attached to a stored entry."""

    entry_id: str
    notes: list[EntryNote]


class CacheStatsResponse(BaseModel):
    """Current state of the geolocation cache layers."""

    memory_cache_size: int
    memory_cache_max: int
    persistent_cache_count: int
    success_cache_duration: int
    error_cache_duration: int


class CacheClearResponse(BaseModel):
    """Counts of entries removed by an administrative cache clear."""

    persistent_cleared: int
    object_cache_cleared: int
    memory_cache_cleared: int

"""Geolocate package - IP geolocation via ipstack with multi-layer caching."""

from packages.geolocate.annotator import SubmissionAnnotator
from packages.geolocate.gate import CountryGate, GateDecision
from packages.geolocate.pipeline import InMemoryEntryStore, SubmissionPipeline
from packages.geolocate.population import (
    FieldPopulator,
    available_merge_tags,
    replace_merge_tags,
)
from packages.geolocate.routes import router as geolocate_router
from packages.geolocate.schemas import (
    GeolocateRequest,
    GeolocateResponse,
    LocationRecord,
    LookupErrorKind,
)
from packages.geolocate.service import GeoResolver, get_country_from_ip

__all__ = [
    "geolocate_router",
    "GeoResolver",
    "get_country_from_ip",
    "CountryGate",
    "GateDecision",
    "SubmissionAnnotator",
    "FieldPopulator",
    "available_merge_tags",
    "replace_merge_tags",
    "SubmissionPipeline",
    "InMemoryEntryStore",
    "LocationRecord",
    "LookupErrorKind",
    "GeolocateRequest",
    "GeolocateResponse",
]

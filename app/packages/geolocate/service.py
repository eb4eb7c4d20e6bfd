"""
Business logic for geolocating IP addresses.

GeoResolver turns an IP address into a LocationRecord using the multi-layer
cache first and the ipstack API second. Every outcome, including failures,
is classified once and cached as a record, so callers never see exceptions
and never re-derive error state from raw provider data.
"""

import ipaddress
import re
from typing import Any, Dict, Optional

from pydantic import ValidationError

from infrastructure.cache import MultiLayerCache
from infrastructure.clients.ipstack import IPStackClient
from infrastructure.logging import get_module_logger
from packages.geolocate.schemas import (
    GeolocationConfig,
    LocationRecord,
    LookupErrorKind,
)

logger = get_module_logger()

# Provider fields kept on success records; everything else is dropped
TEXT_FIELDS = (
    "country_name",
    "city",
    "region_name",
    "continent_name",
    "country_code",
    "zip",
)
NUMERIC_FIELDS = ("latitude", "longitude")

_TAG_PATTERN = re.compile(r"<[^>]*>?")
_WHITESPACE_PATTERN = re.compile(r"\s+")


def sanitize_text(value: Any) -> str:
    """Strip markup and control whitespace from a text value.

    Removes tags, collapses runs of whitespace (including line breaks and
    tabs) to a single space and trims the result.
    """
    text = _TAG_PATTERN.sub("", str(value))
    return _WHITESPACE_PATTERN.sub(" ", text).strip()


def normalize_ip(value: str) -> str:
    """Sanitize an address and canonicalise it when it parses as an IP.

    Equivalent IPv6 spellings (``2001:DB8::0:1`` and ``2001:db8::1``)
    collapse to one form so they share a cache key. Unparseable input is
    returned sanitized but otherwise untouched.
    """
    cleaned = sanitize_text(value)
    try:
        return str(ipaddress.ip_address(cleaned))
    except ValueError:
        return cleaned


def is_valid_ip(value: str) -> bool:
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


class GeoResolver:
    """Resolve IP addresses to LocationRecords through the cache layers.

    A resolver is built per request: it owns the request-local cache layer
    inside ``cache`` while sharing the object cache, the persistent store and
    the ipstack client with every other request.

    Args:
        cache: Multi-layer cache holding LocationRecords
        client: ipstack API client
        config: Access key and TTL policy
        secure: Call the provider over HTTPS (inbound request was secure)
    """

    def __init__(
        self,
        cache: MultiLayerCache[LocationRecord],
        client: IPStackClient,
        config: GeolocationConfig,
        secure: bool = True,
    ) -> None:
        self.cache = cache
        self.client = client
        self.config = config
        self.secure = secure

    def _is_stale_config_error(self, record: LocationRecord) -> bool:
        return (
            record.error_kind == LookupErrorKind.CONFIG_MISSING
            and self.config.has_access_key
        )

    def resolve(self, ip: Optional[str]) -> LocationRecord:
        """Resolve an IP address to a location record.

        Never raises; every failure is returned as an error record.

        Args:
            ip: IPv4 or IPv6 address as received from the client

        Returns:
            LocationRecord, either a location or a classified error
        """
        if not ip or not ip.strip():
            logger.warning("empty_ip_address")
            return LocationRecord.failure(
                ip="",
                kind=LookupErrorKind.EMPTY_INPUT,
                message="Empty IP address provided",
                country_name="Invalid IP",
            )

        ip = normalize_ip(ip)
        if not ip:
            logger.warning("empty_ip_address")
            return LocationRecord.failure(
                ip="",
                kind=LookupErrorKind.EMPTY_INPUT,
                message="Empty IP address provided",
                country_name="Invalid IP",
            )

        log = logger.bind(ip_address=ip)

        cached = self.cache.get(ip)
        if cached is not None and self._is_stale_config_error(cached):
            # Cached while the key was missing; the key is configured now
            log.info("stale_config_missing_record_ignored")
            cached = None
        if cached is not None:
            log.debug("using_cached_location", is_error=cached.is_error)
            return cached

        if not is_valid_ip(ip):
            log.warning("invalid_ip_format")
            return self._store_error(
                ip,
                LookupErrorKind.INVALID_FORMAT,
                f"Invalid IP format: {ip}",
                country_name="Invalid IP",
            )

        if not self.config.has_access_key:
            log.error("missing_ipstack_access_key")
            return self._store_error(
                ip,
                LookupErrorKind.CONFIG_MISSING,
                "IPStack API key is missing",
                country_name="API Key Missing",
            )

        log.debug("fetching_location", secure=self.secure)
        try:
            result = self.client.lookup(
                ip, access_key=self.config.access_key, secure=self.secure
            )
        except Exception as e:  # pylint: disable=broad-except
            log.exception("ipstack_lookup_unexpected_error", error=str(e))
            return self._store_error(
                ip,
                LookupErrorKind.TRANSPORT_ERROR,
                f"Unexpected error during lookup: {e}",
                country_name="API Error",
            )

        if not result.is_success:
            log.error(
                "ipstack_api_error",
                error=result.message,
                transient=result.is_transient,
            )
            return self._store_error(
                ip,
                LookupErrorKind.TRANSPORT_ERROR,
                result.message,
                country_name="API Error",
            )

        return self._classify_payload(ip, result.data)

    def _classify_payload(
        self, ip: str, payload: Optional[Dict[str, Any]]
    ) -> LocationRecord:
        log = logger.bind(ip_address=ip)

        if payload and payload.get("error"):
            error = payload["error"]
            info = error.get("info") if isinstance(error, dict) else None
            message = info or "Unknown API Error"
            log.error("ipstack_provider_error", error=message)
            return self._store_error(
                ip,
                LookupErrorKind.PROVIDER_ERROR,
                sanitize_text(message),
                country_name="API Error",
            )

        if not payload or payload.get("country_name") is None:
            log.error("ipstack_invalid_response")
            return self._store_error(
                ip,
                LookupErrorKind.DATA_ERROR,
                "Invalid or empty API response",
                country_name="Data Error",
            )

        try:
            record = LocationRecord(ip=ip, **self._clean_payload(payload))
        except ValidationError as e:
            log.error("ipstack_invalid_response", error=str(e))
            return self._store_error(
                ip,
                LookupErrorKind.DATA_ERROR,
                "Invalid or empty API response",
                country_name="Data Error",
            )

        self.cache.put(ip, record, self.config.success_ttl)
        log.info(
            "location_resolved",
            country=record.country_name,
            city=record.city,
        )
        return record

    @staticmethod
    def _clean_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
        cleaned: Dict[str, Any] = {}
        for field in TEXT_FIELDS:
            value = payload.get(field)
            if value is None:
                continue
            text = sanitize_text(value)
            cleaned[field] = text or None
        for field in NUMERIC_FIELDS:
            value = payload.get(field)
            if isinstance(value, bool) or value is None:
                continue
            try:
                cleaned[field] = float(value)
            except (TypeError, ValueError):
                continue
        return cleaned

    def _store_error(
        self,
        ip: str,
        kind: LookupErrorKind,
        message: str,
        country_name: str,
    ) -> LocationRecord:
        record = LocationRecord.failure(
            ip=ip, kind=kind, message=message, country_name=country_name
        )
        self.cache.put(ip, record, self.config.error_ttl)
        return record

    def release(self) -> int:
        """Drop the request-local cache layer at the end of a request."""
        return self.cache.clear()


def get_country_from_ip(resolver: GeoResolver, ip: Optional[str]) -> str:
    """Country name for an address, or ``"Not Found"``.

    Error records carry a placeholder country ("API Error", "Invalid IP")
    which is returned as-is.
    """
    record = resolver.resolve(ip)
    return record.country_name or "Not Found"

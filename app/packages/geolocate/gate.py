"""Country allow-list gate for form submissions."""

from dataclasses import dataclass
from typing import AbstractSet, Optional

from infrastructure.logging import get_module_logger
from packages.geolocate.schemas import LocationRecord
from packages.geolocate.service import GeoResolver

logger = get_module_logger()

MISSING_KEY_MESSAGE = "Configuration error: Missing API key"


@dataclass(frozen=True)
class GateDecision:
    """Outcome of a country check.

    Attributes:
        passed: Submission may proceed.
        reason: Message shown to the submitter when it may not.
        record: Location the decision was based on, if one was resolved.
        evaluated: A country comparison was made (validation facts apply).
        api_error: Resolution failed and the gate failed open.
    """

    passed: bool
    reason: Optional[str] = None
    record: Optional[LocationRecord] = None
    evaluated: bool = False
    api_error: bool = False


class CountryGate:
    """Approve or reject a submission by the country of its IP address.

    Lookup errors fail open, including a missing-key record cached before
    the key was configured. Only a key missing from the current
    configuration blocks the submission, so the mistake gets noticed.
    """

    def __init__(
        self,
        resolver: GeoResolver,
        rejection_message: Optional[str] = None,
    ) -> None:
        self.resolver = resolver
        self.rejection_message = (
            rejection_message or resolver.config.rejection_message
        )

    def check(
        self,
        ip: Optional[str],
        allowed_countries: AbstractSet[str],
        validation_enabled: bool,
        rejection_message: Optional[str] = None,
    ) -> GateDecision:
        """Check an address against an allow-list.

        Args:
            ip: Submitter IP address
            allowed_countries: Country names, compared exactly and case-sensitively
            validation_enabled: Whether the restriction is switched on
            rejection_message: Overrides the gate's default rejection message

        Returns:
            GateDecision
        """
        if not validation_enabled:
            return GateDecision(passed=True)

        if not allowed_countries:
            return GateDecision(passed=True)

        if not self.resolver.config.has_access_key:
            logger.error("country_validation_missing_api_key")
            return GateDecision(passed=False, reason=MISSING_KEY_MESSAGE)

        record = self.resolver.resolve(ip)
        log = logger.bind(ip_address=record.ip)

        if record.is_error:
            log.warning(
                "country_validation_failed_open",
                error=record.error_message,
                error_kind=record.error_kind.value if record.error_kind else None,
            )
            return GateDecision(
                passed=True, record=record, evaluated=True, api_error=True
            )

        if record.country_name in allowed_countries:
            log.info("country_validation_passed", country=record.country_name)
            return GateDecision(passed=True, record=record, evaluated=True)

        log.info(
            "country_validation_rejected",
            country=record.country_name,
            allowed_countries=sorted(allowed_countries),
        )
        return GateDecision(
            passed=False,
            reason=rejection_message or self.rejection_message,
            record=record,
            evaluated=True,
        )

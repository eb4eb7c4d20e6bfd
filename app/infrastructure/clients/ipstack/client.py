"""ipstack HTTP client for IP geolocation lookups.

Issues a single ``GET {scheme}://api.ipstack.com/{ip}?access_key=...`` per
lookup. Transport failures are classified into OperationResult values;
interpreting the response body (provider error payloads, missing fields)
is left to the caller.
"""

from typing import TYPE_CHECKING, Any, Dict, Optional

import requests

from infrastructure.logging import get_module_logger, mask_secret
from infrastructure.operations import OperationResult, classify_requests_error

if TYPE_CHECKING:
    from infrastructure.configuration import Settings

logger = get_module_logger()


class IPStackClient:
    """Client for the ipstack geolocation API.

    Lookups are never retried: a failed call is reported once and the
    caller decides how long to remember the failure.

    Args:
        settings: Settings instance with ipstack.IPSTACK_API_HOST and
            ipstack.IPSTACK_TIMEOUT_SECONDS
        session: Optional requests session (one is created when omitted)
    """

    def __init__(
        self,
        settings: "Settings",
        session: Optional[requests.Session] = None,
    ) -> None:
        self.host = settings.ipstack.IPSTACK_API_HOST
        self.timeout = settings.ipstack.IPSTACK_TIMEOUT_SECONDS
        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})
        self._logger = logger.bind(component="ipstack_client")

    def build_url(self, ip_address: str, secure: bool = True) -> str:
        scheme = "https" if secure else "http"
        return f"{scheme}://{self.host}/{ip_address}"

    def lookup(
        self, ip_address: str, access_key: str, secure: bool = True
    ) -> OperationResult:
        """Look up an IP address.

        Args:
            ip_address: Validated IPv4 or IPv6 address
            access_key: ipstack API access key
            secure: Use HTTPS (the inbound request was secure) or plain HTTP

        Returns:
            OperationResult whose data is the decoded JSON object, or None when
            the body is not a JSON object. Transport failures are returned as
            errors carrying the library's error text.
        """
        url = self.build_url(ip_address, secure)
        log = self._logger.bind(
            ip_address=ip_address,
            url=url,
            key_hint=mask_secret(access_key),
        )
        log.debug("ipstack_lookup_started")

        try:
            response = self._session.get(
                url,
                params={"access_key": access_key},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            result = classify_requests_error(e)
            log.warning("ipstack_transport_error", **result.log_fields())
            return result

        log = log.bind(status_code=response.status_code)
        payload: Optional[Dict[str, Any]] = None
        try:
            decoded = response.json()
        except ValueError:
            log.warning("ipstack_non_json_response", content=response.text[:200])
        else:
            if isinstance(decoded, dict):
                payload = decoded

        if not response.ok:
            log.warning("ipstack_unexpected_status")
        else:
            log.debug("ipstack_lookup_completed")

        return OperationResult.success(
            data=payload, message=f"ipstack responded {response.status_code}"
        )

    def close(self) -> None:
        """Release pooled connections."""
        self._session.close()

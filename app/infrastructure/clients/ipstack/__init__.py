"""ipstack geolocation API client for infrastructure layer.

Public API (Package Level):
- IPStackClient: HTTP client for ipstack lookups

Usage:
    from infrastructure.clients.ipstack import IPStackClient

    client = IPStackClient(settings)
    result = client.lookup("8.8.8.8", access_key=key, secure=True)
    if result.is_success and result.data:
        country = result.data.get("country_name")
"""

from infrastructure.clients.ipstack.client import IPStackClient

__all__ = ["IPStackClient"]

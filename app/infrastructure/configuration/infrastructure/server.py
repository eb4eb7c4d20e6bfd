"""Server infrastructure settings."""

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class ServerSettings(InfrastructureSettings):
    """HTTP server, bearer token and client address settings.

    Environment Variables:
        ADMIN_JWT_SECRET: Shared secret used to sign admin and relay tokens
        ADMIN_JWT_SCOPE: Scope required for cache administration
            (default: geolocate:admin)
        RELAY_JWT_SCOPE: Scope allowing a trusted backend to submit on behalf
            of another address (default: geolocate:relay)
        FORWARDED_PROXY_COUNT: Number of proxies in front of the service that
            append to X-Forwarded-For (default: 1, the load balancer); 0
            ignores the header

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        secret = settings.server.ADMIN_JWT_SECRET
        ```
    """

    ADMIN_JWT_SECRET: str | None = Field(default=None, alias="ADMIN_JWT_SECRET")
    ADMIN_JWT_SCOPE: str = Field(default="geolocate:admin", alias="ADMIN_JWT_SCOPE")
    ADMIN_JWT_ALGORITHMS: list[str] = ["HS256"]
    RELAY_JWT_SCOPE: str = Field(default="geolocate:relay", alias="RELAY_JWT_SCOPE")
    FORWARDED_PROXY_COUNT: int = Field(default=1, ge=0, alias="FORWARDED_PROXY_COUNT")

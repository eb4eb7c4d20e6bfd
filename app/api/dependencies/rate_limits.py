"""Rate limiting and submitter address detection.

Limits are counted per caller address, the same address the submission
route attributes anonymous submissions to.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from infrastructure.logging import get_module_logger
from infrastructure.services import get_settings

logger = get_module_logger()

FORWARDED_FOR_HEADER = "X-Forwarded-For"

GEOLOCATE_LIMIT = "60/minute"
SUBMISSION_LIMIT = "30/minute"
# Load balancer health checks poll the system routes every few seconds
SYSTEM_LIMIT = "50/minute"


def get_client_ip(request: Request) -> str:
    """Return the address of the caller.

    Each trusted proxy appends the address it received the request from to
    ``X-Forwarded-For``, so with N proxies the caller is the N-th entry from
    the right. Entries further left are whatever the client sent and are
    ignored. Falls back to the socket peer when the header is missing or
    shorter than the proxy chain.
    """
    proxy_count = get_settings().server.FORWARDED_PROXY_COUNT
    if proxy_count > 0:
        forwarded = request.headers.get(FORWARDED_FOR_HEADER, "")
        hops = [hop.strip() for hop in forwarded.split(",") if hop.strip()]
        if len(hops) >= proxy_count:
            return hops[-proxy_count]
    return get_remote_address(request)


limiter = Limiter(key_func=get_client_ip)


async def rate_limit_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return a 429 status code with a short error message."""
    limit = getattr(exc, "detail", None)
    logger.warning(
        "rate_limit_exceeded",
        client_ip=get_client_ip(request),
        path=request.url.path,
        limit=str(limit) if limit is not None else None,
    )
    return JSONResponse(
        status_code=429,
        content={"message": "Rate limit exceeded"},
    )


def setup_rate_limiter(app: FastAPI) -> None:
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)


def get_limiter() -> Limiter:
    return limiter

"""Structured logging for the geolocate service (structlog).

Call ``configure_logging()`` once at startup, then take a module logger with
``get_module_logger()`` and log snake_case events with keyword context:

    logger = get_module_logger()
    logger.info("geolocation_lookup_started", ip_address=ip)

Request and submission ids are attached with ``bind_request_context`` and
``bind_submission_context``. Secrets such as the ipstack access key are
masked by the ``mask_sensitive_data`` processor.
"""

from infrastructure.logging.context import (
    bind_request_context,
    bind_submission_context,
    clear_request_context,
    get_correlation_id,
)
from infrastructure.logging.formatters import (
    SENSITIVE_PATTERNS,
    mask_secret,
    mask_sensitive_data,
    truncate_large_values,
)
from infrastructure.logging.setup import (
    build_processors,
    configure_logging,
    get_module_logger,
)

__all__ = [
    "configure_logging",
    "build_processors",
    "get_module_logger",
    "bind_request_context",
    "bind_submission_context",
    "get_correlation_id",
    "clear_request_context",
    "mask_secret",
    "mask_sensitive_data",
    "truncate_large_values",
    "SENSITIVE_PATTERNS",
]

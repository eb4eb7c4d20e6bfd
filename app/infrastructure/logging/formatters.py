"""Structlog processors that keep secrets and oversized values out of logs.

Usage:
    from infrastructure.logging.formatters import mask_sensitive_data, mask_secret
"""

import re
from typing import Any

# Keys whose values are never logged
SENSITIVE_PATTERNS = frozenset(
    {
        "access_key",
        "api_key",
        "apikey",
        "authorization",
        "credential",
        "jwt",
        "password",
        "secret",
        "token",
    }
)

# requests exceptions quote the full URL, query string included
QUERY_SECRET_PATTERN = re.compile(
    r"((?:access_key|api_key|apikey|token)=)[^&\s'\"]+", re.IGNORECASE
)


def mask_secret(value: str, visible: int = 4) -> str:
    """Shorten a secret to its first and last characters.

    Lets an operator tell which ipstack key was used without the log line
    revealing it. Values too short to shorten are masked entirely.

    >>> mask_secret("0123456789abcdef")
    '0123...cdef'
    """
    if not value:
        return ""
    if len(value) <= visible * 2:
        return "*" * len(value)
    return f"{value[:visible]}...{value[-visible:]}"


def redact_query_secrets(text: str, mask_value: str = "***REDACTED***") -> str:
    """Replace secret query parameter values embedded in free text."""
    return QUERY_SECRET_PATTERN.sub(lambda match: match.group(1) + mask_value, text)


def mask_sensitive_data(
    mask_value: str = "***REDACTED***",
    additional_patterns: frozenset[str] | None = None,
):
    """Create a processor that masks secrets in log entries.

    A value is replaced by ``mask_value`` when its key contains one of the
    sensitive patterns (case-insensitive). String values under other keys
    have secret query parameters redacted, which covers URLs quoted in
    transport error messages.

    Args:
        mask_value: Replacement text.
        additional_patterns: Extra key patterns to treat as sensitive.
    """
    patterns = SENSITIVE_PATTERNS | (additional_patterns or frozenset())

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        masked: dict[str, Any] = {}
        for key, value in event_dict.items():
            if value is not None and any(p in key.lower() for p in patterns):
                masked[key] = mask_value
            elif isinstance(value, str):
                masked[key] = redact_query_secrets(value, mask_value)
            else:
                masked[key] = value
        return masked

    return processor


def truncate_large_values(max_length: int = 500):
    """Create a processor that shortens long string values.

    Provider error bodies and non-JSON responses can be long; this keeps
    log lines bounded.
    """

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        for key, value in event_dict.items():
            if isinstance(value, str) and len(value) > max_length:
                event_dict[key] = (
                    value[:max_length] + f"...[truncated, {len(value)} chars total]"
                )
        return event_dict

    return processor

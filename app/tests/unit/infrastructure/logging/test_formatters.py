"""Unit tests for infrastructure.logging.formatters module.

Tests cover:
- mask_secret helper
- mask_sensitive_data processor
- truncate_large_values processor
"""

import pytest

from infrastructure.logging.formatters import (
    SENSITIVE_PATTERNS,
    mask_secret,
    mask_sensitive_data,
    redact_query_secrets,
    truncate_large_values,
)

pytestmark = pytest.mark.unit


class TestMaskSecret:
    """Test suite for mask_secret."""

    def test_long_value_keeps_ends(self):
        assert mask_secret("0123456789abcdef") == "0123...cdef"

    def test_short_value_fully_masked(self):
        assert mask_secret("short") == "*****"

    def test_empty_value(self):
        assert mask_secret("") == ""


class TestMaskSensitiveData:
    """Test suite for mask_sensitive_data processor factory."""

    def test_access_key_is_redacted(self):
        """ipstack access keys never reach log output."""
        processor = mask_sensitive_data()

        result = processor(None, "info", {"event": "x", "access_key": "abc"})

        assert result["access_key"] == "***REDACTED***"
        assert result["event"] == "x"

    def test_key_hint_is_kept(self):
        """Masked hints are not matched by the sensitive patterns."""
        processor = mask_sensitive_data()

        result = processor(None, "info", {"key_hint": "0123...cdef"})

        assert result["key_hint"] == "0123...cdef"

    def test_none_values_untouched(self):
        processor = mask_sensitive_data()

        assert processor(None, "info", {"token": None})["token"] is None

    def test_additional_patterns(self):
        processor = mask_sensitive_data(additional_patterns=frozenset({"ip_address"}))

        result = processor(None, "info", {"ip_address": "8.8.8.8"})

        assert result["ip_address"] == "***REDACTED***"

    def test_access_key_in_quoted_url_is_redacted(self):
        processor = mask_sensitive_data()
        error = (
            "HTTPSConnectionPool(host='api.ipstack.com', port=443): Max retries "
            "exceeded with url: /8.8.8.8?access_key=abc123&fields=main"
        )

        result = processor(None, "warning", {"error": error})

        assert "abc123" not in result["error"]
        assert "access_key=***REDACTED***&fields=main" in result["error"]

    def test_patterns_include_access_key(self):
        assert "access_key" in SENSITIVE_PATTERNS


class TestRedactQuerySecrets:
    """Test suite for redact_query_secrets."""

    def test_text_without_secrets_unchanged(self):
        assert redact_query_secrets("Read timed out") == "Read timed out"

    def test_case_insensitive(self):
        assert redact_query_secrets("?ACCESS_KEY=abc", "x") == "?ACCESS_KEY=x"


class TestTruncateLargeValues:
    """Test suite for truncate_large_values processor factory."""

    def test_long_strings_truncated(self):
        processor = truncate_large_values(max_length=10)

        result = processor(None, "info", {"content": "x" * 25})

        assert result["content"].startswith("x" * 10)
        assert "25 chars total" in result["content"]

    def test_short_strings_untouched(self):
        processor = truncate_large_values(max_length=10)

        assert processor(None, "info", {"content": "short"})["content"] == "short"

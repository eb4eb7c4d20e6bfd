"""Unit tests for CacheKeyBuilder."""

import pytest

from infrastructure.cache import CacheKeyBuilder

pytestmark = pytest.mark.unit


class TestCacheKeyBuilder:
    """Storage keys derived from IP addresses."""

    def test_object_key_keeps_address_verbatim(self):
        """Object-cache keys are the prefix plus the raw address."""
        builder = CacheKeyBuilder()

        assert builder.object_key("8.8.8.8") == "ipstack_8.8.8.8"
        assert builder.object_key("2001:db8::1") == "ipstack_2001:db8::1"

    def test_persistent_key_substitutes_separators(self):
        """Dots and colons map to underscore and dash."""
        builder = CacheKeyBuilder()

        assert builder.persistent_key("8.8.8.8") == "ipstack_8_8_8_8"
        assert builder.persistent_key("2001:db8::1") == "ipstack_2001-db8--1"

    def test_persistent_key_escapes_other_characters(self):
        """Characters outside the safe set are escaped byte by byte."""
        builder = CacheKeyBuilder()

        assert builder.persistent_key("fe80::1%eth0") == "ipstack_fe80--1~25eth0"

    def test_escape_characters_in_input_are_escaped_themselves(self):
        """Addresses containing the substitute characters never collide."""
        builder = CacheKeyBuilder()

        assert builder.persistent_key("1.2") != builder.persistent_key("1_2")
        assert builder.persistent_key("a:b") != builder.persistent_key("a-b")
        assert builder.persistent_key("1_2") == "ipstack_1~5F2"

    def test_custom_prefix(self):
        """The prefix is configurable."""
        builder = CacheKeyBuilder(prefix="geo_")

        assert builder.object_key("1.1.1.1") == "geo_1.1.1.1"
        assert builder.persistent_key("1.1.1.1") == "geo_1_1_1_1"

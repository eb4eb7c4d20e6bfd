"""Unit tests for the three-layer cache."""

import pytest

from tests.factories import make_error_record, make_location_record

pytestmark = pytest.mark.unit


class TestMultiLayerCacheGet:
    """Read-through lookups and promotion between layers."""

    def test_miss_everywhere(self, multilayer_cache):
        assert multilayer_cache.get("8.8.8.8") is None

    def test_put_writes_every_layer(
        self, multilayer_cache, request_cache, object_cache, persistent_store
    ):
        """put stores the same value with the same TTL in all layers."""
        record = make_location_record()

        multilayer_cache.put("8.8.8.8", record, 86400)

        assert request_cache.get("8.8.8.8") == record
        assert object_cache.get("8.8.8.8") == record
        assert persistent_store.get("8.8.8.8") == record
        assert object_cache.set_calls == [("8.8.8.8", 86400)]
        assert persistent_store.set_calls == [("8.8.8.8", 86400)]

    def test_object_cache_hit_promotes_into_request_layer(
        self, multilayer_cache, request_cache, object_cache, clock
    ):
        """A layer 2 hit is copied into layer 1 with its remaining TTL."""
        record = make_location_record()
        object_cache.set("8.8.8.8", record, 600)
        clock.advance(100)

        assert multilayer_cache.get("8.8.8.8") == record
        assert request_cache.get_entry("8.8.8.8").remaining_ttl(clock()) == 500

    def test_persistent_hit_promotes_into_upper_layers(
        self, multilayer_cache, request_cache, object_cache, persistent_store, clock
    ):
        """A layer 3 hit fills layers 1 and 2 without outliving its source."""
        record = make_location_record()
        persistent_store.set("8.8.8.8", record, 1000)
        clock.advance(400)

        assert multilayer_cache.get("8.8.8.8") == record
        assert request_cache.get("8.8.8.8") == record
        assert object_cache.set_calls == [("8.8.8.8", 600)]

    def test_request_layer_is_checked_first(
        self, multilayer_cache, request_cache, object_cache
    ):
        """Lower layers are not consulted on a layer 1 hit."""
        layer_one = make_location_record(city="Layer One")
        layer_two = make_location_record(city="Layer Two")
        request_cache.set("8.8.8.8", layer_one, 60)
        object_cache.set("8.8.8.8", layer_two, 60)

        assert multilayer_cache.get("8.8.8.8").city == "Layer One"

    def test_expired_entries_are_misses_in_every_layer(
        self, multilayer_cache, clock
    ):
        """After the TTL elapses no layer serves the value."""
        multilayer_cache.put("1.2.3.4", make_error_record(), 3600)

        clock.advance(3601)

        assert multilayer_cache.get("1.2.3.4") is None


class TestMultiLayerCacheAdministration:
    """Clearing, purging and statistics."""

    def test_clear_only_empties_request_layer(
        self, multilayer_cache, object_cache, persistent_store
    ):
        """clear is the end-of-request release of layer 1."""
        multilayer_cache.put("8.8.8.8", make_location_record(), 60)

        assert multilayer_cache.clear() == 1
        assert object_cache.get("8.8.8.8") is not None
        assert persistent_store.get("8.8.8.8") is not None

    def test_purge_reports_counts_per_layer(
        self, multilayer_cache, object_cache, persistent_store
    ):
        """purge removes persistent items and request-known object keys."""
        multilayer_cache.put("8.8.8.8", make_location_record(), 60)
        multilayer_cache.put("1.1.1.1", make_location_record(ip="1.1.1.1"), 60)
        object_cache.set("9.9.9.9", make_location_record(ip="9.9.9.9"), 60)

        counts = multilayer_cache.purge()

        assert counts.persistent == 2
        assert counts.object_cache == 2
        assert counts.memory == 2
        assert persistent_store.count() == 0
        assert object_cache.get("8.8.8.8") is None
        assert object_cache.get("9.9.9.9") is not None

    def test_get_stats(self, multilayer_cache):
        multilayer_cache.put("8.8.8.8", make_location_record(), 60)

        assert multilayer_cache.get_stats() == {
            "memory_cache_size": 1,
            "memory_cache_max": 100,
            "persistent_cache_count": 1,
            "success_cache_duration": 86400,
            "error_cache_duration": 3600,
        }

"""Shared fixtures for geolocate service tests."""

import pytest

from infrastructure.cache import MultiLayerCache, RequestLRUCache
from infrastructure.logging import configure_logging
from packages.geolocate.annotator import SubmissionAnnotator
from packages.geolocate.pipeline import InMemoryEntryStore, SubmissionPipeline
from packages.geolocate.schemas import GeolocationConfig
from packages.geolocate.service import GeoResolver
from tests.fixtures.geolocation import (
    FakeClock,
    FakeIPStackClient,
    InMemoryObjectCache,
    InMemoryPersistentStore,
)

configure_logging()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def object_cache(clock):
    return InMemoryObjectCache(clock)


@pytest.fixture
def persistent_store(clock):
    return InMemoryPersistentStore(clock)


@pytest.fixture
def request_cache(clock):
    return RequestLRUCache(max_size=100, clock=clock)


@pytest.fixture
def multilayer_cache(request_cache, object_cache, persistent_store, clock):
    return MultiLayerCache(
        request_cache=request_cache,
        object_cache=object_cache,
        persistent_store=persistent_store,
        success_ttl=86400,
        error_ttl=3600,
        clock=clock,
    )


@pytest.fixture
def geo_config():
    return GeolocationConfig(access_key="test-access-key")


@pytest.fixture
def ipstack_client():
    """Fake ipstack client; tests queue results on ``.results``."""
    return FakeIPStackClient()


@pytest.fixture
def resolver(multilayer_cache, ipstack_client, geo_config):
    return GeoResolver(
        cache=multilayer_cache, client=ipstack_client, config=geo_config
    )


@pytest.fixture
def make_resolver(multilayer_cache, ipstack_client):
    """Build a resolver over the shared fakes with a custom config."""

    def _make(**config_overrides):
        config = GeolocationConfig(
            **{"access_key": "test-access-key", **config_overrides}
        )
        return GeoResolver(
            cache=multilayer_cache, client=ipstack_client, config=config
        )

    return _make


@pytest.fixture
def entry_store():
    return InMemoryEntryStore()


@pytest.fixture
def annotator(entry_store):
    return SubmissionAnnotator(note_writer=entry_store)


@pytest.fixture
def pipeline(resolver, annotator, entry_store):
    return SubmissionPipeline(
        resolver=resolver, annotator=annotator, entry_store=entry_store
    )

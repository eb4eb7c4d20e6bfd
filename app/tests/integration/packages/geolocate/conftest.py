"""Test fixtures for geolocate integration tests."""

import time

import jwt
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.dependencies.rate_limits import get_limiter, setup_rate_limiter
from infrastructure.configuration import Settings
from infrastructure.configuration.infrastructure import ServerSettings
from infrastructure.services import get_settings
from packages.geolocate import geolocate_router
from packages.geolocate.dependencies import (
    GeolocationServices,
    get_geolocation_services,
)

ADMIN_SECRET = "integration-admin-secret-with-enough-length"


@pytest.fixture
def services(
    geo_config, ipstack_client, object_cache, persistent_store, annotator, entry_store, clock
):
    return GeolocationServices(
        config=geo_config,
        client=ipstack_client,
        object_cache=object_cache,
        persistent_store=persistent_store,
        annotator=annotator,
        entry_store=entry_store,
        clock=clock,
    )


@pytest.fixture
def settings():
    return Settings(server=ServerSettings(ADMIN_JWT_SECRET=ADMIN_SECRET))


@pytest.fixture
def app(services, settings):
    """Create FastAPI app with the geolocate router and fake services."""
    app = FastAPI()
    setup_rate_limiter(app)
    app.include_router(geolocate_router)
    app.dependency_overrides[get_geolocation_services] = lambda: services
    app.dependency_overrides[get_settings] = lambda: settings
    return app


@pytest.fixture
def client(app):
    """Create test client."""
    get_limiter().reset()
    with TestClient(app) as client:
        yield client


def _bearer(subject, scope):
    token = jwt.encode(
        {"sub": subject, "scope": scope, "exp": int(time.time()) + 300},
        ADMIN_SECRET,
        algorithm="HS256",
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers():
    return _bearer("ops@example.com", "geolocate:admin")


@pytest.fixture
def relay_headers():
    return _bearer("forms-frontend", "geolocate:relay")

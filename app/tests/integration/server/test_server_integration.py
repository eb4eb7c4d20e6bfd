"""Integration tests for the assembled FastAPI application."""

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from api.dependencies.rate_limits import get_limiter
from server import server

pytestmark = pytest.mark.integration


@pytest.fixture
def client():
    get_limiter().reset()
    return TestClient(server.handler)


class TestSystemRoutes:
    """Health and version endpoints."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_version(self, client):
        response = client.get("/version")

        assert response.status_code == 200
        assert "version" in response.json()


class TestCorrelationId:
    """Request correlation ids."""

    def test_given_id_is_echoed(self, client):
        response = client.get("/health", headers={"X-Correlation-ID": "req-123"})

        assert response.headers["X-Correlation-ID"] == "req-123"

    def test_id_is_generated(self, client):
        response = client.get("/health")

        assert len(response.headers["X-Correlation-ID"]) == 36


class TestLifespan:
    """Startup and shutdown of the geolocation services."""

    def test_services_built_and_closed(self):
        services = MagicMock()

        with patch(
            "server.lifespan.build_geolocation_services", return_value=services
        ) as build:
            with TestClient(server.handler):
                assert server.handler.state.geolocation is services

        build.assert_called_once()
        services.close.assert_called_once()

    def test_geolocate_routes_are_versioned(self):
        paths = server.handler.openapi()["paths"]

        assert "/api/v1/geolocate" in paths
        assert "/api/v1/geolocate/submissions" in paths
        assert "/api/v1/geolocate/cache/clear" in paths

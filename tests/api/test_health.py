"""
Tests for health and readiness endpoints.
"""
import pytest
from fastapi.testclient import TestClient

from src.api.main import app


@pytest.fixture
def client():
    """Create test client with the application lifespan running."""
    with TestClient(app) as test_client:
        yield test_client


class TestHealthEndpoint:
    """Tests for /health endpoint."""

    def test_health_returns_200(self, client):
        """Health endpoint returns 200 OK."""
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "delivery-pipeline-sim"
        assert data["version"] == "0.1.0"


class TestReadinessEndpoint:
    """Tests for /ready endpoint."""

    def test_ready_when_runner_started(self, client):
        response = client.get("/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["channels"] == ["email", "inApp", "push"]

    def test_not_ready_without_runner(self):
        """Without the lifespan there is no runner."""
        app.state.runner = None
        client = TestClient(app)

        response = client.get("/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"


class TestRootEndpoint:
    def test_root_lists_endpoints(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert "snapshot" in response.json()["endpoints"]

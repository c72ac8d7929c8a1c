"""Tests for health check endpoints."""

import pytest
from fastapi.testclient import TestClient

from api.app import app


@pytest.fixture
def client(container):
    return TestClient(app)


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_health_check(self, client):
        """Health endpoint should return 200 with status."""
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "version": "0.1.0"}

    def test_readiness_in_memory(self, client):
        response = client.get("/api/ready")
        assert response.status_code == 200
        assert response.json() == {"status": "ready", "storage": "memory", "auth": "configured"}

    def test_readiness_unconfigured(self, container, client):
        container._settings = container.settings.model_copy(
            update={"storage_backend": "supabase", "supabase_url": "", "supabase_jwt_secret": ""}
        )
        data = client.get("/api/ready").json()
        assert data == {"status": "not_ready", "storage": "unconfigured", "auth": "unconfigured"}

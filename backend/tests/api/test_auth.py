"""
Tests for JWT authentication middleware and the /me endpoint.
"""

import pytest
from fastapi.testclient import TestClient

from api.app import app


@pytest.fixture
def client(container):
    return TestClient(app)


class TestAuthentication:
    def test_missing_header(self, client):
        response = client.get("/api/users/me")
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        body = response.json()
        assert body["status"] == "unauthenticated"
        assert body["error"] == "MISSING_TOKEN"

    def test_expired_token(self, client, make_token):
        response = client.get(
            "/api/users/me",
            headers={"Authorization": f"Bearer {make_token(expired=True)}"},
        )
        assert response.status_code == 401
        assert response.json()["error"] == "TOKEN_EXPIRED"

    def test_invalid_token(self, client):
        response = client.get("/api/users/me", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401
        assert response.json()["error"] == "INVALID_TOKEN"


class TestCurrentUser:
    def test_returns_claims(self, client, seed_therapist, auth_headers_for):
        uid = seed_therapist()

        response = client.get("/api/users/me", headers=auth_headers_for(uid))

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == uid
        assert data["role"] == "THERAPIST"
        assert data["tenant_id"] == f"tenant_{uid}"
        assert data["is_verified"] is True
        assert data["claims_pending"] is False

    def test_stale_token_reads_current_claims(self, client, container, seed_patient, make_token):
        uid = seed_patient(therapist_id="t1")
        token = make_token(user_id=uid, email="patient@example.com")

        data = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"}).json()

        assert data["role"] == "PATIENT"
        assert data["therapist_ids"] == ["t1"]
        assert data["claims_pending"] is False

    def test_claims_not_yet_propagated(self, client, container, make_token):
        principal = container.directory.create_principal("new@example.com", "secret1", "New")
        token = make_token(user_id=principal.id, email="new@example.com")

        data = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"}).json()

        assert data["role"] is None
        assert data["claims_pending"] is True

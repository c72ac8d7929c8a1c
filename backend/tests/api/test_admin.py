"""Tests for admin, claims, hook, and patient management endpoints."""

import pytest
from fastapi.testclient import TestClient

from api.app import app
from modules.profiles.models import UserProfile
from shared.models import Role


@pytest.fixture
def client(container):
    return TestClient(app)


@pytest.fixture
def admin_headers(container, auth_headers_for):
    principal = container.directory.create_principal("ops@example.com", "opspass1", "Ops")
    container.claims_writer.merge(principal.id, {"role": "ADMIN", "is_verified": True})
    return auth_headers_for(principal.id)


class TestTherapistAccounts:
    def test_create_therapist(self, client, container, admin_headers):
        response = client.post(
            "/api/admin/therapists",
            json={
                "email": "dr.lopez@example.com",
                "password": "longpassword",
                "display_name": "Dr. Lopez",
                "cedula": "enc:9",
                "specialization": ["CBT"],
            },
            headers=admin_headers,
        )
        assert response.status_code == 201
        uid = response.json()["therapist_id"]
        assert container.therapists.get(uid).is_verified is True

    def test_update_user(self, client, container, admin_headers, seed_therapist):
        uid = seed_therapist()
        response = client.put(
            f"/api/admin/users/{uid}",
            json={"display_name": "Dra. Rivera", "email": "rivera@example.com"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["success"] is True
        assert container.users.get(uid).display_name == "Dra. Rivera"


class TestClaimsEndpoint:
    def test_verify_therapist(self, client, container, admin_headers, seed_therapist):
        uid = seed_therapist(verified=False)

        response = client.put(
            f"/api/admin/users/{uid}/claims",
            json={"claims": {"isVerified": True}},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["claims"]["isVerified"] is True
        assert container.therapists.get(uid).is_verified is True

    def test_non_admin(self, client, seed_therapist, auth_headers_for):
        uid = seed_therapist()
        response = client.put(
            f"/api/admin/users/{uid}/claims",
            json={"claims": {"isVerified": True}},
            headers=auth_headers_for(uid),
        )
        assert response.status_code == 403


class TestPrincipalCreatedHook:
    def test_rejects_bad_secret(self, client):
        response = client.post(
            "/api/hooks/principal-created",
            json={"uid": "u1"},
            headers={"X-Hook-Secret": "wrong"},
        )
        assert response.status_code == 401
        assert response.json()["error"] == "INVALID_HOOK_SECRET"

    def test_rejects_missing_secret(self, client):
        response = client.post("/api/hooks/principal-created", json={"uid": "u1"})
        assert response.status_code == 401

    def test_seeds_claims(self, client, container):
        uid = container.directory.create_principal("p@example.com", "secret1", "P").id
        container.users.create(UserProfile(uid=uid, email="p@example.com", role=Role.PATIENT))

        response = client.post(
            "/api/hooks/principal-created",
            json={"uid": uid},
            headers={"X-Hook-Secret": container.settings.hook_secret},
        )

        assert response.status_code == 200
        assert response.json()["claims"] == {"role": "PATIENT", "therapistIds": []}


class TestReconcile:
    def test_report(self, client, admin_headers):
        response = client.post("/api/admin/reconcile", json={"delete": False}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == {"orphans": [], "deleted": 0}


class TestPatientTransfer:
    def test_transfer(self, client, container, seed_therapist, seed_patient, auth_headers_for):
        old_id = seed_therapist("old@example.com")
        new_id = seed_therapist("new@example.com")
        patient_id = seed_patient()
        old_headers = auth_headers_for(old_id)

        added = client.post(f"/api/patients/{patient_id}/relationships", headers=old_headers)
        assert added.status_code == 201

        response = client.post(
            f"/api/patients/{patient_id}/transfer",
            json={"old_therapist_id": old_id, "new_therapist_id": new_id},
            headers=old_headers,
        )

        assert response.status_code == 200
        assert response.json()["therapist_ids"] == [new_id]
        statuses = {
            r["therapist_id"]: r["status"]
            for r in client.get(
                f"/api/patients/{patient_id}/relationships", headers=auth_headers_for(patient_id)
            ).json()["relationships"]
        }
        assert statuses == {old_id: "INACTIVE", new_id: "ACTIVE"}

    def test_transfer_unknown_relationship(self, client, seed_therapist, seed_patient, auth_headers_for):
        old_id = seed_therapist("old@example.com")
        new_id = seed_therapist("new@example.com")
        patient_id = seed_patient()

        response = client.post(
            f"/api/patients/{patient_id}/transfer",
            json={"old_therapist_id": old_id, "new_therapist_id": new_id},
            headers=auth_headers_for(old_id),
        )

        assert response.status_code == 404
        assert response.json()["status"] == "not-found"

"""Tests for profile repositories."""

import pytest

from modules.profiles.models import PatientProfile, TherapistProfile, UserProfile
from modules.profiles.repository import (
    PatientProfileRepository,
    TherapistProfileRepository,
    UserProfileRepository,
)
from shared.document_store import DocumentAlreadyExistsError, InMemoryDocumentStore
from shared.models import Role


@pytest.fixture
def store():
    return InMemoryDocumentStore()


class TestUserProfileRepository:
    def test_create_and_get(self, store):
        repo = UserProfileRepository(store)
        repo.create(UserProfile(uid="u1", email="a@example.com", role=Role.PATIENT))

        profile = repo.get("u1")
        assert profile.role == Role.PATIENT
        assert profile.is_deleted is False

    def test_create_twice_fails(self, store):
        repo = UserProfileRepository(store)
        repo.create(UserProfile(uid="u1", email="a@example.com", role=Role.PATIENT))
        with pytest.raises(DocumentAlreadyExistsError):
            repo.create(UserProfile(uid="u1", email="b@example.com", role=Role.ADMIN))

    def test_update(self, store):
        repo = UserProfileRepository(store)
        repo.create(UserProfile(uid="u1", email="a@example.com", role=Role.PATIENT))
        updated = repo.update("u1", display_name="Ana")
        assert updated.display_name == "Ana"

    def test_update_missing(self, store):
        assert UserProfileRepository(store).update("nope", display_name="x") is None

    def test_list_uids(self, store):
        repo = UserProfileRepository(store)
        repo.create(UserProfile(uid="u1", email="a@example.com", role=Role.PATIENT))
        repo.create(UserProfile(uid="u2", email="b@example.com", role=Role.THERAPIST))
        assert repo.list_uids() == {"u1", "u2"}


class TestTherapistProfileRepository:
    def test_round_trip(self, store):
        repo = TherapistProfileRepository(store)
        repo.create(
            TherapistProfile(
                uid="t1", cedula="enc", specialization=["CBT", "DBT"], tenant_id="tenant_t1"
            )
        )
        profile = repo.get("t1")
        assert profile.specialization == ["CBT", "DBT"]
        assert profile.is_verified is False
        assert profile.verified_at is None

    def test_update_verification(self, store):
        repo = TherapistProfileRepository(store)
        repo.create(TherapistProfile(uid="t1", cedula="enc", tenant_id="tenant_t1"))
        updated = repo.update(
            "t1", is_verified=True, verified_by="admin-1", verified_at="2025-01-01T00:00:00Z"
        )
        assert updated.is_verified is True
        assert updated.verified_by == "admin-1"
        assert updated.verified_at.year == 2025


class TestPatientProfileRepository:
    def test_create_minimal(self, store):
        repo = PatientProfileRepository(store)
        repo.create(PatientProfile(uid="p1"))
        profile = repo.get("p1")
        assert profile.phone is None
        assert profile.emergency_contact is None

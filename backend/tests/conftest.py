"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules:
in-memory backends, a service container wired to them, and helpers to seed
accounts and mint access tokens.
"""

import pytest
from datetime import datetime, timezone, timedelta
from typing import Optional
import jwt  # PyJWT

from api.dependencies import ServiceContainer, reset_container, set_container
from modules.identity.service import InMemoryIdentityDirectory
from modules.profiles.models import PatientProfile, TherapistProfile, UserProfile
from shared.config import Settings
from shared.document_store import InMemoryDocumentStore
from shared.models import AuthenticatedUser, Role, tenant_id_for


# Test secrets (only for testing)
TEST_JWT_SECRET = "test-secret-key-for-testing-only"
TEST_HOOK_SECRET = "test-hook-secret"


def create_test_token(
    user_id: str = "test-user-123",
    email: str = "test@example.com",
    app_metadata: Optional[dict] = None,
    expired: bool = False,
    email_verified: bool = True,
    secret: str = TEST_JWT_SECRET,
) -> str:
    """
    Create a test JWT token for authentication.

    Args:
        user_id: User ID to include in the token
        email: Email to include in the token
        app_metadata: Claims embedded in the token
        expired: If True, creates an expired token
        email_verified: Whether the email should be marked as verified
        secret: Signing secret

    Returns:
        JWT token string
    """
    now = datetime.now(timezone.utc)
    exp = now - timedelta(hours=1) if expired else now + timedelta(hours=1)

    payload = {
        "sub": user_id,
        "email": email,
        "aud": "authenticated",
        "role": "authenticated",
        "exp": int(exp.timestamp()),
        "iat": int(now.timestamp()),
        "app_metadata": app_metadata or {},
        "user_metadata": {"email_verified": email_verified},
    }
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.fixture
def settings() -> Settings:
    """Settings for in-memory backends with known secrets."""
    return Settings(
        storage_backend="memory",
        supabase_jwt_secret=TEST_JWT_SECRET,
        hook_secret=TEST_HOOK_SECRET,
        invitation_base_url="https://app.example.com/register",
    )


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def directory() -> InMemoryIdentityDirectory:
    return InMemoryIdentityDirectory()


@pytest.fixture
def container(store, directory, settings):
    """Service container over the in-memory backends, installed globally."""
    container = ServiceContainer(store=store, directory=directory, settings=settings)
    set_container(container)
    yield container
    reset_container()


@pytest.fixture
def admin() -> AuthenticatedUser:
    return AuthenticatedUser(
        id="admin-1",
        email="admin@example.com",
        email_verified=True,
        role=Role.ADMIN,
        is_verified=True,
    )


def caller_for(container: ServiceContainer, uid: str) -> AuthenticatedUser:
    """Build the caller a fresh token for ``uid`` would resolve to."""
    principal = container.directory.get_principal(uid)
    claims = principal.claims
    return AuthenticatedUser(
        id=uid,
        email=principal.email,
        email_verified=principal.email_verified,
        role=claims.role,
        tenant_id=claims.tenant_id,
        is_verified=bool(claims.is_verified),
        therapist_ids=claims.therapist_ids or [],
    )


@pytest.fixture
def as_caller(container):
    """Factory returning the AuthenticatedUser of a seeded principal."""
    return lambda uid: caller_for(container, uid)


@pytest.fixture
def seed_therapist(container):
    """Factory creating a therapist account directly in the backends."""

    def _seed(email: str = "therapist@example.com", verified: bool = True) -> str:
        principal = container.directory.create_principal(email, "therapist-pass", "Dr. Rivera")
        uid = principal.id
        container.users.create(
            UserProfile(uid=uid, email=email, display_name="Dr. Rivera", role=Role.THERAPIST)
        )
        container.therapists.create(
            TherapistProfile(
                uid=uid,
                cedula="enc:12345678",
                specialization=["CBT"],
                tenant_id=tenant_id_for(uid),
                is_verified=verified,
            )
        )
        container.claims_writer.merge(
            uid,
            {"role": Role.THERAPIST, "tenant_id": tenant_id_for(uid), "is_verified": verified},
        )
        return uid

    return _seed


@pytest.fixture
def seed_patient(container):
    """Factory creating a patient account, optionally under a therapist."""

    def _seed(email: str = "patient@example.com", therapist_id: Optional[str] = None) -> str:
        principal = container.directory.create_principal(email, "patient-pass", "Ana")
        uid = principal.id
        container.users.create(
            UserProfile(uid=uid, email=email, display_name="Ana", role=Role.PATIENT)
        )
        container.patients.create(PatientProfile(uid=uid))
        container.claims_writer.merge(
            uid,
            {"role": Role.PATIENT, "therapist_ids": [therapist_id] if therapist_id else []},
        )
        return uid

    return _seed


@pytest.fixture
def auth_headers_for(container):
    """Factory returning bearer headers for a seeded principal."""

    def _headers(uid: str) -> dict[str, str]:
        principal = container.directory.get_principal(uid)
        token = create_test_token(
            user_id=uid,
            email=principal.email,
            app_metadata=principal.claims.to_claims(),
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def make_token():
    """Factory for signed access tokens; see create_test_token."""
    return create_test_token

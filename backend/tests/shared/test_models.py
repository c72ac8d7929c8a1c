"""Tests for shared/models.py."""

import pytest
from pydantic import ValidationError

from shared.models import AuthenticatedUser, Role, tenant_id_for, therapist_id_from_tenant


class TestTenantIds:
    def test_tenant_id_for(self):
        assert tenant_id_for("abc123") == "tenant_abc123"

    def test_round_trip(self):
        assert therapist_id_from_tenant(tenant_id_for("abc123")) == "abc123"

    def test_only_strips_prefix_once(self):
        assert therapist_id_from_tenant("tenant_tenant_x") == "tenant_x"


class TestAuthenticatedUser:
    def test_defaults(self):
        user = AuthenticatedUser(id="u1", email="user@example.com")
        assert user.role is None
        assert user.is_verified is False
        assert user.therapist_ids == []
        assert not user.is_admin
        assert not user.is_verified_therapist

    def test_verified_therapist(self):
        user = AuthenticatedUser(
            id="t1", email="t@example.com", role=Role.THERAPIST, is_verified=True
        )
        assert user.is_verified_therapist

    def test_unverified_therapist(self):
        user = AuthenticatedUser(id="t1", email="t@example.com", role=Role.THERAPIST)
        assert not user.is_verified_therapist

    def test_admin(self):
        user = AuthenticatedUser(id="a1", email="a@example.com", role=Role.ADMIN)
        assert user.is_admin

    def test_frozen(self):
        user = AuthenticatedUser(id="u1", email="user@example.com")
        with pytest.raises(ValidationError):
            user.role = Role.ADMIN

    def test_rejects_invalid_email(self):
        with pytest.raises(ValidationError):
            AuthenticatedUser(id="u1", email="not-an-email")

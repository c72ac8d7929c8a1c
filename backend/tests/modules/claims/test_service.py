"""Tests for the claims service."""

import pytest
from unittest.mock import MagicMock, patch

from modules.claims.interfaces import IClaimsService
from modules.claims.service import ClaimsService
from modules.identity.models import ClaimSet
from modules.profiles.models import UserProfile
from modules.profiles.repository import TherapistProfileRepository, UserProfileRepository
from shared.document_store import DocumentStoreError
from shared.exceptions import (
    InternalError,
    InvalidArgumentError,
    NotFoundError,
    PermissionDeniedError,
)
from shared.models import AuthenticatedUser, Role, tenant_id_for


class TestOnPrincipalCreated:
    @pytest.mark.asyncio
    async def test_patient_gets_empty_therapist_list(self, container):
        uid = container.directory.create_principal("p@example.com", "secret1", "P").id
        container.users.create(UserProfile(uid=uid, email="p@example.com", role=Role.PATIENT))

        claims = await container.claims.on_principal_created(uid)

        assert claims == ClaimSet(role=Role.PATIENT, therapist_ids=[])
        assert container.directory.force_claims_refresh(uid) == claims

    @pytest.mark.asyncio
    async def test_therapist_verification_follows_profile(self, container, seed_therapist):
        uid = seed_therapist(verified=False)
        container.directory.set_claims(uid, ClaimSet())

        claims = await container.claims.on_principal_created(uid)

        assert claims.role == Role.THERAPIST
        assert claims.tenant_id == tenant_id_for(uid)
        assert claims.is_verified is False

    @pytest.mark.asyncio
    async def test_no_profile_is_a_no_op(self, container):
        uid = container.directory.create_principal("x@example.com", "secret1", "X").id

        assert await container.claims.on_principal_created(uid) is None
        assert container.directory.force_claims_refresh(uid) == ClaimSet()

    @pytest.mark.asyncio
    async def test_does_not_clobber_existing_claims(self, container, seed_patient):
        uid = seed_patient(therapist_id="t1")

        assert await container.claims.on_principal_created(uid) is None
        assert container.directory.force_claims_refresh(uid).therapist_ids == ["t1"]

    @pytest.mark.asyncio
    async def test_directory_failure_is_internal(self, container):
        uid = container.directory.create_principal("p@example.com", "secret1", "P").id
        container.users.create(UserProfile(uid=uid, email="p@example.com", role=Role.PATIENT))
        writer = MagicMock()
        writer.seed.side_effect = RuntimeError("directory down")
        service = ClaimsService(container.directory, container.users, container.therapists, writer)

        with pytest.raises(InternalError):
            await service.on_principal_created(uid)

    @pytest.mark.asyncio
    async def test_profile_store_failure_is_internal(self, container):
        with patch.object(
            UserProfileRepository, "get", side_effect=DocumentStoreError("store down")
        ):
            with pytest.raises(InternalError) as exc_info:
                await container.claims.on_principal_created("u1")

        assert exc_info.value.details == {"step": "read_user_profile"}

    @pytest.mark.asyncio
    async def test_therapist_store_failure_is_internal(self, container, seed_therapist):
        uid = seed_therapist()
        container.directory.set_claims(uid, ClaimSet())

        with patch.object(
            TherapistProfileRepository, "get", side_effect=DocumentStoreError("store down")
        ):
            with pytest.raises(InternalError) as exc_info:
                await container.claims.on_principal_created(uid)

        assert exc_info.value.details == {"step": "read_therapist_profile"}


class TestSetCustomClaims:
    def test_implements_interface(self, container):
        assert isinstance(container.claims, IClaimsService)

    @pytest.mark.asyncio
    async def test_requires_admin(self, container, seed_therapist, as_caller):
        uid = seed_therapist()
        with pytest.raises(PermissionDeniedError, match="Only admins can set custom claims"):
            await container.claims.set_custom_claims(as_caller(uid), uid, ClaimSet(is_verified=True))

    @pytest.mark.asyncio
    async def test_requires_claims(self, container, admin, seed_therapist):
        uid = seed_therapist()
        with pytest.raises(InvalidArgumentError, match="Missing uid or claims"):
            await container.claims.set_custom_claims(admin, uid, ClaimSet())

    @pytest.mark.asyncio
    async def test_merges_and_keeps_other_claims(self, container, admin, seed_patient):
        uid = seed_patient(therapist_id="t1")

        claims = await container.claims.set_custom_claims(
            admin, uid, ClaimSet(therapist_ids=["t1", "t2"])
        )

        assert claims.role == Role.PATIENT
        assert claims.therapist_ids == ["t1", "t2"]

    @pytest.mark.asyncio
    async def test_verifying_therapist_updates_profile(self, container, admin, seed_therapist):
        uid = seed_therapist(verified=False)

        claims = await container.claims.set_custom_claims(admin, uid, ClaimSet(is_verified=True))

        assert claims.is_verified is True
        assert claims.tenant_id == tenant_id_for(uid)
        profile = container.therapists.get(uid)
        assert profile.is_verified is True
        assert profile.verified_by == admin.id
        assert profile.verified_at is not None

    @pytest.mark.asyncio
    async def test_unverifying_therapist_updates_profile(self, container, admin, seed_therapist):
        uid = seed_therapist(verified=True)

        await container.claims.set_custom_claims(admin, uid, ClaimSet(is_verified=False))

        profile = container.therapists.get(uid)
        assert profile.is_verified is False
        assert profile.verified_by is None
        assert profile.verified_at is None

    @pytest.mark.asyncio
    async def test_verifying_without_profile(self, container, admin):
        uid = container.directory.create_principal("t@example.com", "secret12", "T").id

        with pytest.raises(NotFoundError):
            await container.claims.set_custom_claims(
                admin, uid, ClaimSet(role=Role.THERAPIST, is_verified=True)
            )
        assert container.directory.force_claims_refresh(uid) == ClaimSet()

    @pytest.mark.asyncio
    async def test_profile_store_failure_is_internal(self, container, admin, seed_therapist):
        uid = seed_therapist(verified=False)

        with patch.object(
            TherapistProfileRepository, "get", side_effect=DocumentStoreError("store down")
        ):
            with pytest.raises(InternalError):
                await container.claims.set_custom_claims(admin, uid, ClaimSet(is_verified=True))

        assert container.directory.force_claims_refresh(uid).is_verified is False

    @pytest.mark.asyncio
    async def test_tenant_cannot_be_reassigned(self, container, admin, seed_therapist):
        uid = seed_therapist()
        with pytest.raises(InvalidArgumentError):
            await container.claims.set_custom_claims(
                admin, uid, ClaimSet(tenant_id="tenant_someone_else")
            )


class TestResolveClaims:
    @pytest.mark.asyncio
    async def test_token_with_role_is_trusted(self, container):
        token_claims = ClaimSet(role=Role.PATIENT, therapist_ids=["t1"])
        assert await container.claims.resolve_claims("anyone", token_claims) is token_claims

    @pytest.mark.asyncio
    async def test_token_without_role_refreshes(self, container, seed_patient):
        uid = seed_patient(therapist_id="t1")

        claims = await container.claims.resolve_claims(uid, ClaimSet())

        assert claims.role == Role.PATIENT
        assert claims.therapist_ids == ["t1"]

    @pytest.mark.asyncio
    async def test_refresh_reads_directory_once(self, container):
        directory = MagicMock()
        directory.force_claims_refresh.return_value = ClaimSet()
        service = ClaimsService(directory, container.users, container.therapists)

        claims = await service.resolve_claims("u1", ClaimSet())

        assert claims.role is None
        directory.force_claims_refresh.assert_called_once_with("u1")

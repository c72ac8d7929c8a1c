import pytest
from unittest.mock import AsyncMock, MagicMock

from modules.auth.exceptions import (
    AuthNotConfiguredError,
    ExpiredTokenError,
    InvalidTokenError,
    MissingTokenError,
)
from modules.auth.service import AuthService
from modules.identity.models import ClaimSet
from shared.config import Settings
from shared.models import Role


class TestAuthService:
    @pytest.fixture
    def claims(self):
        """Claims service that trusts whatever the token carries."""
        claims = MagicMock()
        claims.resolve_claims = AsyncMock(side_effect=lambda uid, token_claims: token_claims)
        return claims

    @pytest.fixture
    def service(self, claims, settings):
        return AuthService(claims, settings)

    @pytest.mark.asyncio
    async def test_validate_valid_token(self, service, make_token):
        """Should validate a valid token and return the caller with claims."""
        token = make_token(
            user_id="ther-1",
            email="dr@example.com",
            app_metadata={"role": "THERAPIST", "tenantId": "tenant_ther-1", "isVerified": True},
        )

        user = await service.validate_token(token)

        assert user.id == "ther-1"
        assert user.email == "dr@example.com"
        assert user.role == Role.THERAPIST
        assert user.tenant_id == "tenant_ther-1"
        assert user.is_verified_therapist
        assert user.email_verified is True

    @pytest.mark.asyncio
    async def test_patient_claims(self, service, make_token):
        token = make_token(app_metadata={"role": "PATIENT", "therapistIds": ["t1", "t2"]})
        user = await service.validate_token(token)
        assert user.therapist_ids == ["t1", "t2"]

    @pytest.mark.asyncio
    async def test_token_without_role_resolves_claims(self, claims, settings, make_token):
        claims.resolve_claims = AsyncMock(return_value=ClaimSet(role=Role.PATIENT, therapist_ids=["t1"]))
        service = AuthService(claims, settings)

        user = await service.validate_token(make_token(user_id="new-user"))

        assert user.role == Role.PATIENT
        claims.resolve_claims.assert_awaited_once_with("new-user", ClaimSet())

    @pytest.mark.asyncio
    async def test_validate_expired_token(self, service, make_token):
        """Should raise ExpiredTokenError for expired token."""
        with pytest.raises(ExpiredTokenError):
            await service.validate_token(make_token(expired=True))

    @pytest.mark.asyncio
    async def test_validate_invalid_token(self, service):
        """Should raise InvalidTokenError for malformed token."""
        with pytest.raises(InvalidTokenError):
            await service.validate_token("not-a-valid-token")

    @pytest.mark.asyncio
    async def test_validate_missing_token(self, service):
        with pytest.raises(MissingTokenError):
            await service.validate_token("")

    @pytest.mark.asyncio
    async def test_validate_wrong_secret(self, service, make_token):
        """Should raise InvalidTokenError for token signed with wrong secret."""
        with pytest.raises(InvalidTokenError):
            await service.validate_token(make_token(secret="wrong-secret"))

    @pytest.mark.asyncio
    async def test_token_without_email(self, service, make_token):
        with pytest.raises(InvalidTokenError):
            await service.validate_token(make_token(email=""))

    @pytest.mark.asyncio
    async def test_not_configured(self, claims, make_token):
        service = AuthService(claims, Settings(supabase_jwt_secret=""))
        with pytest.raises(AuthNotConfiguredError):
            await service.validate_token(make_token())

"""
Authentication service implementation.

Validates Supabase JWT tokens and resolves the caller's claims.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

import jwt

from shared.config import Settings, get_settings
from shared.models import AuthenticatedUser
from modules.claims.interfaces import IClaimsService
from modules.identity.models import ClaimSet

from .models import JWTPayload
from .exceptions import (
    AuthNotConfiguredError,
    ExpiredTokenError,
    InvalidTokenError,
    MissingTokenError,
)

logger = logging.getLogger(__name__)


class AuthService:
    """
    Implementation of the authentication service.

    Tokens are verified locally with the shared JWT secret. Claims come
    from the token, falling back to the identity directory when the
    token predates claims propagation.
    """

    def __init__(self, claims: IClaimsService, settings: Optional[Settings] = None):
        self._claims = claims
        self._settings = settings or get_settings()

    def decode(self, token: str) -> JWTPayload:
        """Verify a token's signature, audience, and expiry."""
        if not token:
            raise MissingTokenError()
        if not self._settings.supabase_jwt_secret:
            raise AuthNotConfiguredError()

        try:
            payload = jwt.decode(
                token,
                self._settings.supabase_jwt_secret,
                algorithms=["HS256"],
                audience="authenticated",
            )
            return JWTPayload(**payload)
        except jwt.ExpiredSignatureError:
            raise ExpiredTokenError()
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(str(e))

    async def validate_token(self, token: str) -> AuthenticatedUser:
        payload = self.decode(token)
        if not payload.email:
            raise InvalidTokenError("Token carries no email")
        claims = await self._claims.resolve_claims(
            payload.sub, ClaimSet.from_claims(payload.app_metadata)
        )

        return AuthenticatedUser(
            id=payload.sub,
            email=payload.email,
            email_verified=payload.email_verified,
            last_sign_in=datetime.fromtimestamp(payload.iat, tz=timezone.utc),
            role=claims.role,
            tenant_id=claims.tenant_id,
            is_verified=bool(claims.is_verified),
            therapist_ids=claims.therapist_ids or [],
        )

"""
Bearer token authentication.

Routes that act on behalf of a caller depend on ``get_current_user``.
Public routes (invitation preview and redemption, health) and the
principal-created hook do not.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from shared.models import AuthenticatedUser
from modules.auth.exceptions import MissingTokenError
from modules.auth.interfaces import IAuthService

from ..dependencies import get_auth_service

# auto_error is off so a missing header is reported in the error taxonomy
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: IAuthService = Depends(get_auth_service),
) -> AuthenticatedUser:
    """
    Dependency that requires a valid access token.

    The returned user carries the caller's claims (role, tenant,
    verification, therapist assignments). Authorization against those
    claims is left to the services.

    Usage:
        @router.get("/protected")
        async def protected_route(user: AuthenticatedUser = Depends(get_current_user)):
            return {"user_id": user.id}
    """
    if credentials is None:
        raise MissingTokenError("Missing authorization header")

    return await auth.validate_token(credentials.credentials)

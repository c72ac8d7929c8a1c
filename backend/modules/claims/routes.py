"""
Claims API endpoints.

Admin claim edits and the principal-created webhook fired by the
identity directory after every sign-up.
"""

import hmac
from typing import Optional

from fastapi import APIRouter, Depends, Header

from api.dependencies import get_claims_service, get_container
from api.middleware.auth import get_current_user
from shared.exceptions import UnauthenticatedError
from shared.models import AuthenticatedUser

from .interfaces import IClaimsService
from .models import ClaimsResponse, PrincipalCreatedEvent, SetCustomClaimsRequest

router = APIRouter()
hooks_router = APIRouter()


@router.put("/{uid}/claims", response_model=ClaimsResponse)
async def set_custom_claims(
    uid: str,
    request: SetCustomClaimsRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IClaimsService = Depends(get_claims_service),
) -> ClaimsResponse:
    """
    Merge claims into a user's claims. Admin only.

    Changing ``isVerified`` of a therapist also updates its profile.
    """
    claims = await service.set_custom_claims(user, uid, request.claims)
    return ClaimsResponse(uid=uid, claims=claims.to_claims())


@hooks_router.post("/principal-created", response_model=ClaimsResponse)
async def principal_created(
    event: PrincipalCreatedEvent,
    x_hook_secret: Optional[str] = Header(default=None),
    service: IClaimsService = Depends(get_claims_service),
) -> ClaimsResponse:
    """
    Derive initial claims for a newly created principal.

    Called by the identity directory; authenticated with a shared secret.
    """
    secret = get_container().settings.hook_secret
    if not secret or not x_hook_secret or not hmac.compare_digest(secret, x_hook_secret):
        raise UnauthenticatedError("Invalid hook secret", code="INVALID_HOOK_SECRET")

    claims = await service.on_principal_created(event.uid)
    return ClaimsResponse(uid=event.uid, claims=claims.to_claims() if claims else {})

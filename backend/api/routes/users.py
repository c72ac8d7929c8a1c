"""
User-related endpoints.

Provides the current caller's identity and claims.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr

from shared.models import AuthenticatedUser, Role
from ..middleware.auth import get_current_user

router = APIRouter()


class UserProfileResponse(BaseModel):
    """Current user response model."""

    id: str
    email: EmailStr
    email_verified: bool
    role: Optional[Role] = None
    tenant_id: Optional[str] = None
    is_verified: bool = False
    therapist_ids: list[str] = []
    claims_pending: bool = False


@router.get("/me", response_model=UserProfileResponse)
async def get_current_user_profile(
    user: AuthenticatedUser = Depends(get_current_user),
) -> UserProfileResponse:
    """
    Get the current user's identity and claims.

    ``claims_pending`` is true when the account's claims have not been
    propagated yet; clients should refresh their token and retry.
    """
    return UserProfileResponse(
        id=user.id,
        email=user.email,
        email_verified=user.email_verified,
        role=user.role,
        tenant_id=user.tenant_id,
        is_verified=user.is_verified,
        therapist_ids=user.therapist_ids,
        claims_pending=user.role is None,
    )

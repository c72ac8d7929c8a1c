"""
Invitation API endpoints.

Issuance, public preview, cancellation, and listing. Redemption lives
with the provisioning endpoints because it creates accounts.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_invitation_ledger
from api.middleware.auth import get_current_user
from shared.exceptions import PermissionDeniedError
from shared.models import AuthenticatedUser, Role

from .interfaces import IInvitationLedger
from .models import (
    CreatePatientInvitationRequest,
    CreateUserInvitationRequest,
    InvitationListResponse,
    InvitationStatus,
    InvitationSummary,
    InvitationView,
    IssuedInvitation,
)

router = APIRouter()
admin_router = APIRouter()


@admin_router.post("/invitations", response_model=IssuedInvitation, status_code=201)
async def create_user_invitation(
    request: CreateUserInvitationRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    ledger: IInvitationLedger = Depends(get_invitation_ledger),
) -> IssuedInvitation:
    """
    Invite a therapist or a patient. Admin only.

    Patient invitations must name the tenant of the assigned therapist.
    """
    if not user.is_admin:
        raise PermissionDeniedError("Only admins can create user invitations")
    return await ledger.issue(
        user,
        request.role,
        request.target_email,
        target_name=request.target_name,
        tenant_id=request.tenant_id,
        therapist_data=request.therapist_data,
    )


@router.post("/patients", response_model=IssuedInvitation, status_code=201)
async def create_patient_invitation(
    request: CreatePatientInvitationRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    ledger: IInvitationLedger = Depends(get_invitation_ledger),
) -> IssuedInvitation:
    """
    Invite a patient into the calling therapist's practice.

    Requires a verified therapist.
    """
    if not user.is_verified_therapist:
        raise PermissionDeniedError("Only verified therapists can create patient invitations")
    return await ledger.issue(
        user,
        Role.PATIENT,
        request.patient_email,
        target_name=request.patient_name,
    )


@router.get("", response_model=InvitationListResponse)
async def list_invitations(
    status: Optional[InvitationStatus] = Query(default=None, description="Filter by status"),
    user: AuthenticatedUser = Depends(get_current_user),
    ledger: IInvitationLedger = Depends(get_invitation_ledger),
) -> InvitationListResponse:
    """
    List invitations, newest first.

    Admins see every invitation; therapists see the ones they issued.
    """
    invitations = await ledger.list_invitations(user, status)
    return InvitationListResponse(
        invitations=[InvitationSummary.from_invitation(i) for i in invitations],
        total=len(invitations),
    )


@router.get("/{token}", response_model=InvitationView)
async def validate_invitation(
    token: str,
    ledger: IInvitationLedger = Depends(get_invitation_ledger),
) -> InvitationView:
    """
    Preview an invitation before registering. Public.
    """
    return await ledger.validate(token)


@router.post("/{token}/cancel", response_model=InvitationSummary)
async def cancel_invitation(
    token: str,
    user: AuthenticatedUser = Depends(get_current_user),
    ledger: IInvitationLedger = Depends(get_invitation_ledger),
) -> InvitationSummary:
    """
    Cancel a pending invitation. Issuer or admin only.
    """
    invitation = await ledger.cancel(user, token)
    return InvitationSummary.from_invitation(invitation)

"""
Provisioning API endpoints.

Admin account management and the token-gated registration endpoints
that redeem invitations.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_provisioning_service
from api.middleware.auth import get_current_user
from shared.models import AuthenticatedUser

from .interfaces import IProvisioningService
from .models import (
    AdminUpdateUserRequest,
    CreatePatientFromInvitationRequest,
    CreatePatientResponse,
    CreateTherapistFromInvitationRequest,
    CreateTherapistFromInvitationResponse,
    CreateTherapistRequest,
    CreateTherapistResponse,
    OperationResponse,
    OrphanReport,
    ReconcileRequest,
)

admin_router = APIRouter()
registration_router = APIRouter()


@admin_router.post("/therapists", response_model=CreateTherapistResponse, status_code=201)
async def create_therapist_user(
    request: CreateTherapistRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IProvisioningService = Depends(get_provisioning_service),
) -> CreateTherapistResponse:
    """
    Create a pre-verified therapist account. Admin only.
    """
    return await service.create_therapist_user(user, request)


@admin_router.put("/users/{uid}", response_model=OperationResponse)
async def admin_update_user(
    uid: str,
    request: AdminUpdateUserRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IProvisioningService = Depends(get_provisioning_service),
) -> OperationResponse:
    """
    Update a user's email, display name, and (therapists) specialization.
    Admin only.
    """
    return await service.admin_update_user(user, uid, request)


@admin_router.post("/reconcile", response_model=OrphanReport)
async def reconcile_orphans(
    request: ReconcileRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IProvisioningService = Depends(get_provisioning_service),
) -> OrphanReport:
    """
    Report accounts left without a profile by failed provisioning.

    With ``delete`` set, the orphaned principals are deleted. Admin only.
    """
    return await service.reconcile_orphans(user, delete=request.delete)


@registration_router.post(
    "/{token}/patient",
    response_model=CreatePatientResponse,
    status_code=201,
)
async def create_patient_from_invitation(
    token: str,
    request: CreatePatientFromInvitationRequest,
    service: IProvisioningService = Depends(get_provisioning_service),
) -> CreatePatientResponse:
    """
    Register a patient with an invitation token. Public.
    """
    return await service.create_patient_from_invitation(token, request)


@registration_router.post(
    "/{token}/therapist",
    response_model=CreateTherapistFromInvitationResponse,
    status_code=201,
)
async def create_therapist_from_invitation(
    token: str,
    request: CreateTherapistFromInvitationRequest,
    service: IProvisioningService = Depends(get_provisioning_service),
) -> CreateTherapistFromInvitationResponse:
    """
    Register a therapist with an admin invitation token. Public.
    """
    return await service.create_therapist_from_invitation(token, request)

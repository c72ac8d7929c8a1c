"""
Patient relationship API endpoints.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_relationship_manager
from api.middleware.auth import get_current_user
from shared.models import AuthenticatedUser

from .interfaces import IRelationshipManager
from .models import (
    Relationship,
    RelationshipListResponse,
    TransferRequest,
    TransferResult,
)

router = APIRouter()


@router.post("/{patient_id}/transfer", response_model=TransferResult)
async def transfer_patient(
    patient_id: str,
    request: TransferRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    manager: IRelationshipManager = Depends(get_relationship_manager),
) -> TransferResult:
    """
    Transfer a patient to another therapist.

    Allowed for the patient's current therapist and for admins. A transfer
    that failed part way can be retried with the same request.
    """
    return await manager.transfer(
        user,
        patient_id,
        request.old_therapist_id,
        request.new_therapist_id,
    )


@router.post("/{patient_id}/relationships", response_model=Relationship, status_code=201)
async def add_patient_relationship(
    patient_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    manager: IRelationshipManager = Depends(get_relationship_manager),
) -> Relationship:
    """
    Attach an existing patient to the calling verified therapist.
    """
    return await manager.add_patient_relationship(user, patient_id)


@router.get("/{patient_id}/relationships", response_model=RelationshipListResponse)
async def list_patient_relationships(
    patient_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    manager: IRelationshipManager = Depends(get_relationship_manager),
) -> RelationshipListResponse:
    """
    List a patient's current and past relationships.
    """
    relationships = await manager.list_patient_relationships(user, patient_id)
    return RelationshipListResponse(relationships=relationships, total=len(relationships))

"""
Provisioning module.

The account-creation flows: admin-created therapists, invitation
redemption for both roles, admin account edits, and the orphaned
principal reconciliation sweep.

Public API:
- IProvisioningService: Interface for provisioning operations
- OrphanReconciler: Finds principals left without a profile
"""

from .interfaces import IProvisioningService
from .models import (
    AdminUpdateUserRequest,
    CreatePatientFromInvitationRequest,
    CreatePatientResponse,
    CreateTherapistFromInvitationRequest,
    CreateTherapistFromInvitationResponse,
    CreateTherapistRequest,
    CreateTherapistResponse,
    OrphanPrincipal,
    OrphanReport,
)
from .reconciliation import OrphanReconciler

__all__ = [
    # Interface
    "IProvisioningService",
    "OrphanReconciler",
    # Models
    "AdminUpdateUserRequest",
    "CreatePatientFromInvitationRequest",
    "CreatePatientResponse",
    "CreateTherapistFromInvitationRequest",
    "CreateTherapistFromInvitationResponse",
    "CreateTherapistRequest",
    "CreateTherapistResponse",
    "OrphanPrincipal",
    "OrphanReport",
]

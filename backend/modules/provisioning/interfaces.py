"""
Provisioning module interface.

Other modules should depend on IProvisioningService, not the concrete implementation.
"""

from typing import Protocol, runtime_checkable

from shared.models import AuthenticatedUser

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
)


@runtime_checkable
class IProvisioningService(Protocol):
    """
    Interface for the account-creation flows.

    Each flow creates the principal first, then the profile documents,
    relationships, and claims. A failure after the principal exists
    leaves an orphaned principal for the reconciliation sweep.
    """

    async def create_therapist_user(
        self,
        caller: AuthenticatedUser,
        request: CreateTherapistRequest,
    ) -> CreateTherapistResponse:
        """
        Create a pre-verified therapist account (admin only).

        Raises:
            PermissionDeniedError: Caller is not an admin
            InvalidArgumentError: Missing fields, short password, no specialization
            AlreadyExistsError: Email already in use
        """
        ...

    async def create_patient_from_invitation(
        self,
        token: str,
        request: CreatePatientFromInvitationRequest,
    ) -> CreatePatientResponse:
        """Redeem a patient invitation of either kind."""
        ...

    async def create_therapist_from_invitation(
        self,
        token: str,
        request: CreateTherapistFromInvitationRequest,
    ) -> CreateTherapistFromInvitationResponse:
        """Redeem an admin therapist invitation."""
        ...

    async def admin_update_user(
        self,
        caller: AuthenticatedUser,
        uid: str,
        request: AdminUpdateUserRequest,
    ) -> OperationResponse:
        """Change an account's email and display name (admin only)."""
        ...

    async def reconcile_orphans(
        self,
        caller: AuthenticatedUser,
        delete: bool = False,
    ) -> OrphanReport:
        """Report or delete principals left without a profile (admin only)."""
        ...

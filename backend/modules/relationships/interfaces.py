"""
Relationship module interface.

Other modules should depend on IRelationshipManager, not the concrete implementation.
"""

from typing import Optional, Protocol, runtime_checkable

from shared.models import AuthenticatedUser
from modules.identity.models import ClaimSet

from .models import Relationship, TransferResult


@runtime_checkable
class IRelationshipManager(Protocol):
    """
    Interface for the therapist-patient relationship lifecycle.
    """

    async def create_relationship(
        self,
        therapist_id: str,
        patient_id: str,
        tenant_id: str,
        performed_by: Optional[str] = None,
        created_via_invitation: Optional[str] = None,
        transferred_from: Optional[str] = None,
    ) -> Relationship:
        """
        Create an ACTIVE relationship if the pair has none.

        An existing ACTIVE relationship is returned unchanged. An existing
        INACTIVE one is reactivated; callers that must not reactivate
        should check its status first.
        """
        ...

    async def add_therapist_to_patient_claims(
        self,
        patient_id: str,
        therapist_id: str,
    ) -> ClaimSet:
        """Add a therapist to a patient's therapistIds if absent."""
        ...

    async def transfer(
        self,
        caller: AuthenticatedUser,
        patient_id: str,
        old_therapist_id: str,
        new_therapist_id: str,
    ) -> TransferResult:
        """
        Move a patient to another therapist.

        Steps are individually durable and not atomic as a whole; a
        failed transfer can be re-run with the same arguments.

        Raises:
            InvalidArgumentError: Missing ids, or old and new are the same
            PermissionDeniedError: Caller is neither an admin nor the old therapist
            NotFoundError: New therapist or old relationship missing
        """
        ...

    async def add_patient_relationship(
        self,
        caller: AuthenticatedUser,
        patient_id: str,
    ) -> Relationship:
        """Attach an existing patient to the calling verified therapist."""
        ...

    async def list_patient_relationships(
        self,
        caller: AuthenticatedUser,
        patient_id: str,
    ) -> list[Relationship]:
        """List a patient's relationships, newest first."""
        ...

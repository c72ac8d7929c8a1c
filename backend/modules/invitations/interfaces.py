"""
Invitation module interface.

Other modules should depend on IInvitationLedger, not the concrete implementation.
"""

from datetime import datetime
from typing import Awaitable, Callable, Optional, Protocol, runtime_checkable

from shared.models import AuthenticatedUser, Role

from .models import InvitationStatus, InvitationView, IssuedInvitation, TherapistData
from .repository import AnyInvitation

# Creates the account for a validated invitation and returns the new uid
Provisioner = Callable[[AnyInvitation], Awaitable[str]]


@runtime_checkable
class IInvitationLedger(Protocol):
    """
    Interface for issuing, validating, and redeeming invitations.
    """

    async def issue(
        self,
        issuer: AuthenticatedUser,
        role: Role,
        target_email: str,
        target_name: Optional[str] = None,
        tenant_id: Optional[str] = None,
        therapist_data: Optional[TherapistData] = None,
    ) -> IssuedInvitation:
        """
        Issue a PENDING invitation.

        Admins may invite either role. Verified therapists may invite
        patients into their own tenant.

        Raises:
            PermissionDeniedError: If the issuer may not invite this role
            InvalidArgumentError: If required fields are missing
            AlreadyExistsError: If an account already uses the email
        """
        ...

    async def validate(self, token: str) -> InvitationView:
        """
        Check that a token is redeemable and return its preview.

        Raises:
            NotFoundError: Unknown token
            FailedPreconditionError: Invitation is not PENDING
            DeadlineExceededError: Invitation expired (now marked EXPIRED)
        """
        ...

    async def redeem(self, token: str, role: Role, provision: Provisioner) -> str:
        """
        Redeem a token: re-validate, run ``provision``, then mark USED.

        The USED write is the last step, so a failed ``provision`` leaves
        the invitation redeemable.

        Returns:
            The uid returned by ``provision``
        """
        ...

    async def cancel(self, caller: AuthenticatedUser, token: str) -> AnyInvitation:
        """Cancel a PENDING invitation (issuer or admin)."""
        ...

    async def list_invitations(
        self,
        caller: AuthenticatedUser,
        status: Optional[InvitationStatus] = None,
    ) -> list[AnyInvitation]:
        """List invitations visible to the caller, newest first."""
        ...

    async def expire_stale(self, now: Optional[datetime] = None) -> int:
        """Mark every PENDING invitation past its expiry as EXPIRED."""
        ...

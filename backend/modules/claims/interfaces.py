"""
Claims module interface.

Other modules should depend on IClaimsService, not the concrete implementation.
"""

from typing import Optional, Protocol, runtime_checkable

from shared.models import AuthenticatedUser
from modules.identity.models import ClaimSet


@runtime_checkable
class IClaimsService(Protocol):
    """
    Interface for deriving, changing, and reading authorization claims.
    """

    async def on_principal_created(self, uid: str) -> Optional[ClaimSet]:
        """
        Derive initial claims for a newly created principal.

        Runs asynchronously after principal creation, so it may race with
        profile creation and with explicit provisioning writes.

        Args:
            uid: Principal ID

        Returns:
            The claims written, or None if nothing was written (no profile
            yet, or the principal already carries a role)
        """
        ...

    async def set_custom_claims(
        self,
        caller: AuthenticatedUser,
        uid: str,
        claims: ClaimSet,
    ) -> ClaimSet:
        """
        Merge claims into a principal's claims (admin only).

        Keeps TherapistProfile.is_verified in sync when a therapist's
        verification changes, in both directions.

        Raises:
            PermissionDeniedError: If the caller is not an admin
            InvalidArgumentError: If uid or claims are missing or invalid
            NotFoundError: If the principal or therapist profile is missing
        """
        ...

    async def resolve_claims(self, uid: str, token_claims: ClaimSet) -> ClaimSet:
        """
        Return usable claims for a caller.

        A token without a role claim may predate propagation; the claims
        are then re-read from the directory once.
        """
        ...

    async def get_claims(self, uid: str) -> ClaimSet:
        """Return a principal's current claims."""
        ...

"""
Identity module interface.

Other modules should depend on IIdentityDirectory, not the concrete
implementation. This enables testing with the in-memory directory and
swapping the identity provider without touching business logic.
"""

from typing import Optional, Protocol, runtime_checkable

from .models import ClaimSet, Principal


@runtime_checkable
class IIdentityDirectory(Protocol):
    """
    Interface for the identity directory.

    The directory owns principals and their claims. It is not jointly
    transactional with the document store.
    """

    def create_principal(
        self,
        email: str,
        password: str,
        display_name: str,
        email_verified: bool = False,
    ) -> Principal:
        """
        Create a principal.

        Raises:
            EmailAlreadyExistsError: If the email is taken
        """
        ...

    def get_principal(self, uid: str) -> Principal:
        """
        Look a principal up by ID.

        Raises:
            PrincipalNotFoundError: If no principal has this ID
        """
        ...

    def get_principal_by_email(self, email: str) -> Principal:
        """
        Look a principal up by email (case-insensitive).

        Raises:
            PrincipalNotFoundError: If no principal has this email
        """
        ...

    def update_principal(
        self,
        uid: str,
        email: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> Principal:
        """
        Update login email and/or display name.

        Raises:
            PrincipalNotFoundError: If no principal has this ID
            EmailAlreadyExistsError: If the new email is taken
        """
        ...

    def set_claims(self, uid: str, claims: ClaimSet) -> None:
        """Replace the principal's claims with ``claims``."""
        ...

    def force_claims_refresh(self, uid: str) -> ClaimSet:
        """
        Return the principal's current claims straight from the directory.

        Access tokens carry a snapshot of the claims taken when they were
        issued; this bypasses that snapshot.
        """
        ...

    def list_principals(self) -> list[Principal]:
        """Return every principal."""
        ...

    def delete_principal(self, uid: str) -> None:
        """Delete a principal."""
        ...

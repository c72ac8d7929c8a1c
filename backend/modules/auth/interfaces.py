"""
Authentication module interface.

Other modules should depend on IAuthService, not the concrete implementation.
"""

from typing import Protocol, runtime_checkable

from shared.models import AuthenticatedUser


@runtime_checkable
class IAuthService(Protocol):
    """
    Interface for authenticating API callers.
    """

    async def validate_token(self, token: str) -> AuthenticatedUser:
        """
        Validate an access token and return the caller with its claims.

        A token minted before claims propagation carries no role; the
        claims are then re-read once from the identity directory.

        Args:
            token: JWT access token from the identity directory

        Returns:
            AuthenticatedUser with ID, email, and claims

        Raises:
            UnauthenticatedError: If the token is missing, invalid, or expired
        """
        ...

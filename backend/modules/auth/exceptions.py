"""
Authentication module exceptions.

These exceptions are raised by the auth module and rendered as 401
responses by the API error handler.
"""

from shared.exceptions import UnauthenticatedError


class InvalidTokenError(UnauthenticatedError):
    """Raised when a JWT token is invalid or malformed."""

    def __init__(self, message: str = "Invalid authentication token"):
        super().__init__(message, code="INVALID_TOKEN")


class ExpiredTokenError(UnauthenticatedError):
    """Raised when a JWT token has expired."""

    def __init__(self, message: str = "Authentication token has expired"):
        super().__init__(message, code="TOKEN_EXPIRED")


class MissingTokenError(UnauthenticatedError):
    """Raised when no authentication token is provided."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="MISSING_TOKEN")


class AuthNotConfiguredError(UnauthenticatedError):
    """Raised when the server has no JWT secret to verify tokens with."""

    def __init__(self) -> None:
        super().__init__("Server authentication not configured", code="AUTH_NOT_CONFIGURED")

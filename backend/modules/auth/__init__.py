"""
Authentication module.

Handles JWT validation and resolves the caller's authorization claims.

Public API:
- IAuthService: Interface for auth operations
- JWTPayload: Decoded access token
- Auth exceptions: InvalidTokenError, ExpiredTokenError, etc.
"""

from .interfaces import IAuthService
from .models import JWTPayload
from .exceptions import (
    AuthNotConfiguredError,
    InvalidTokenError,
    ExpiredTokenError,
    MissingTokenError,
)

__all__ = [
    # Interface
    "IAuthService",
    # Models
    "JWTPayload",
    # Exceptions
    "AuthNotConfiguredError",
    "InvalidTokenError",
    "ExpiredTokenError",
    "MissingTokenError",
]

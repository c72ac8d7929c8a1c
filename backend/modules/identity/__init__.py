"""
Identity module.

Adapters for the identity directory that holds authentication principals
and their authorization claims.

Public API:
- IIdentityDirectory: Interface for directory operations
- Principal, ClaimSet: Directory records
- Directory exceptions: EmailAlreadyExistsError, PrincipalNotFoundError
"""

from .interfaces import IIdentityDirectory
from .models import CLAIM_KEYS, ClaimSet, Principal
from .exceptions import (
    IdentityDirectoryError,
    EmailAlreadyExistsError,
    PrincipalNotFoundError,
)

__all__ = [
    # Interface
    "IIdentityDirectory",
    # Models
    "CLAIM_KEYS",
    "ClaimSet",
    "Principal",
    # Exceptions
    "IdentityDirectoryError",
    "EmailAlreadyExistsError",
    "PrincipalNotFoundError",
]

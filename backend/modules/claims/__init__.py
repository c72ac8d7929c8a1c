"""
Claims module.

Derives, changes, and resolves the authorization claims embedded in
every access token.

Public API:
- IClaimsService: Interface for claims operations
- ClaimsWriter: The single read-merge-write path for claim changes
"""

from .interfaces import IClaimsService
from .models import ClaimsResponse, PrincipalCreatedEvent, SetCustomClaimsRequest
from .writer import ClaimsWriter

__all__ = [
    "IClaimsService",
    "ClaimsWriter",
    "ClaimsResponse",
    "PrincipalCreatedEvent",
    "SetCustomClaimsRequest",
]

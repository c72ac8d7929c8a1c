"""
Claims module request/response models.
"""

from pydantic import BaseModel, Field

from modules.identity.models import ClaimSet


class SetCustomClaimsRequest(BaseModel):
    """Admin request to change a principal's claims."""

    claims: ClaimSet = Field(..., description="Claims to merge into the current set")


class ClaimsResponse(BaseModel):
    """Claims of a principal after a change."""

    uid: str
    claims: dict = Field(..., description="Claims in token representation")


class PrincipalCreatedEvent(BaseModel):
    """Payload of the principal-created database webhook."""

    uid: str = Field(..., min_length=1, description="ID of the new principal")

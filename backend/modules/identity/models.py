"""
Identity module data models.

A Principal is the authentication identity held by the identity directory.
Its ClaimSet is the small map of authorization attributes embedded in every
access token the directory issues.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from shared.models import Role

# Claim keys as they appear inside access tokens
CLAIM_KEYS = ("role", "tenantId", "isVerified", "therapistIds")


class ClaimSet(BaseModel):
    """
    Authorization claims attached to a principal.

    Serialized with camelCase keys because the claims are read by every
    client of the platform, not only by this service.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    role: Optional[Role] = Field(None, description="Platform role")
    tenant_id: Optional[str] = Field(None, alias="tenantId", description="Therapists only")
    is_verified: Optional[bool] = Field(None, alias="isVerified", description="Therapists only")
    therapist_ids: Optional[list[str]] = Field(
        None,
        alias="therapistIds",
        description="Patients only: authorized therapists",
    )

    @classmethod
    def from_claims(cls, claims: Optional[dict[str, Any]]) -> "ClaimSet":
        """Build a ClaimSet from a raw claims map, ignoring foreign keys."""
        return cls.model_validate({k: v for k, v in (claims or {}).items() if k in CLAIM_KEYS})

    def to_claims(self) -> dict[str, Any]:
        """Return the token representation, omitting unset claims."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Principal(BaseModel):
    """An authentication identity record."""

    id: str = Field(..., description="Principal ID")
    email: str = Field(..., description="Login email")
    display_name: Optional[str] = Field(None, description="Display name")
    email_verified: bool = Field(default=False, description="Whether email is verified")
    claims: ClaimSet = Field(default_factory=ClaimSet, description="Authorization claims")
    created_at: Optional[datetime] = Field(None, description="Creation time")

"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class Role(str, Enum):
    """Platform roles carried in every access token."""

    THERAPIST = "THERAPIST"
    PATIENT = "PATIENT"
    ADMIN = "ADMIN"


def tenant_id_for(therapist_id: str) -> str:
    """Return the tenant partition key owned by a therapist."""
    return f"tenant_{therapist_id}"


def therapist_id_from_tenant(tenant_id: str) -> str:
    """Inverse of tenant_id_for()."""
    return tenant_id.replace("tenant_", "", 1)


class AuthenticatedUser(BaseModel):
    """
    Represents an authenticated caller.

    This model is populated from the access token's claims and made
    available to route handlers via dependency injection. A missing
    ``role`` means the claims have not been propagated yet.
    """

    id: str = Field(..., description="Principal ID")
    email: EmailStr = Field(..., description="User's email address")
    email_verified: bool = Field(default=False, description="Whether email is verified")
    last_sign_in: Optional[datetime] = Field(None, description="Last sign-in time")

    role: Optional[Role] = Field(None, description="Role claim")
    tenant_id: Optional[str] = Field(None, description="Tenant claim (therapists)")
    is_verified: bool = Field(default=False, description="Verification claim (therapists)")
    therapist_ids: list[str] = Field(
        default_factory=list,
        description="Authorized therapists (patients)",
    )

    model_config = {
        "frozen": True,  # Make immutable for safety
        "extra": "ignore",  # Ignore extra fields from JWT
    }

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_verified_therapist(self) -> bool:
        return self.role == Role.THERAPIST and self.is_verified

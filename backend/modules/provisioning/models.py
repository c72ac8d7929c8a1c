"""
Provisioning module request/response models.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class CreateTherapistRequest(BaseModel):
    """Admin request to create a pre-verified therapist account."""

    email: EmailStr
    password: str = Field(..., description="At least 8 characters")
    display_name: str = Field(..., max_length=200)
    cedula: str = Field(..., description="Professional license, encrypted client-side")
    specialization: list[str] = Field(default_factory=list)
    license_number: Optional[str] = None


class CreateTherapistResponse(BaseModel):
    therapist_id: str
    email: str
    message: str = "Therapist account created successfully"


class CreatePatientFromInvitationRequest(BaseModel):
    """Registration form submitted with a patient invitation."""

    display_name: str = Field(..., max_length=200)
    password: str = Field(..., description="At least 6 characters")


class CreatePatientResponse(BaseModel):
    patient_id: str
    message: str = "Patient account created successfully"


class CreateTherapistFromInvitationRequest(BaseModel):
    """
    Registration form submitted with a therapist invitation.

    Professional fields left empty fall back to the invitation's pre-fill.
    """

    display_name: str = Field(..., max_length=200)
    password: str = Field(..., description="At least 8 characters")
    cedula: Optional[str] = None
    specialization: Optional[list[str]] = None
    license_number: Optional[str] = None


class CreateTherapistFromInvitationResponse(BaseModel):
    therapist_id: str
    message: str = "Therapist account created successfully"


class AdminUpdateUserRequest(BaseModel):
    """Admin edit of an account's login email and names."""

    display_name: str = Field(..., max_length=200)
    email: EmailStr
    specialization: Optional[list[str]] = Field(None, description="Therapists only")


class OperationResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None


class ReconcileRequest(BaseModel):
    delete: bool = Field(default=False, description="Delete orphans instead of only reporting them")


class OrphanPrincipal(BaseModel):
    """A principal with no user profile."""

    uid: str
    email: str
    created_at: Optional[datetime] = None


class OrphanReport(BaseModel):
    """Result of an orphan reconciliation sweep."""

    orphans: list[OrphanPrincipal] = Field(default_factory=list)
    deleted: int = 0

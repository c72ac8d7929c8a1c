"""
Profile module data models.

Profiles are the document-store side of an account. A UserProfile exists for
every principal; therapists and patients additionally get a role profile
keyed by the same uid.
"""

from datetime import date, datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from shared.models import Role


def _now() -> datetime:
    return datetime.now(timezone.utc)


class UserProfile(BaseModel):
    """
    Base profile of any account.

    Created once and never deleted; ``is_deleted`` is a soft-delete flag.
    """

    uid: str = Field(..., description="Principal ID")
    email: str = Field(..., description="Email address")
    display_name: Optional[str] = Field(None, description="Display name")
    role: Role = Field(..., description="Account role")
    created_at: datetime = Field(default_factory=_now)
    created_by: Optional[str] = Field(None, description="Admin who created the account")
    invited_by: Optional[str] = Field(None, description="Issuer of the redeemed invitation")
    is_deleted: bool = Field(default=False)
    deleted_at: Optional[datetime] = None


class BankInfo(BaseModel):
    """Payout details shown to patients for transfers."""

    bank_name: str
    clabe: str
    account_holder: str


class TherapistProfile(BaseModel):
    """
    Professional profile of a therapist.

    ``tenant_id`` is derived from the uid at creation and never changes;
    it partitions all of the therapist's data.
    """

    uid: str = Field(..., description="Principal ID")
    cedula: str = Field(..., description="Professional license (encrypted client-side)")
    specialization: list[str] = Field(default_factory=list)
    license_number: str = Field(default="")
    tenant_id: str = Field(..., description="Tenant partition key")
    is_verified: bool = Field(default=False)
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    bank_info: Optional[BankInfo] = None
    created_at: datetime = Field(default_factory=_now)


class EmergencyContact(BaseModel):
    name: str
    phone: str
    relationship: str


class PatientProfile(BaseModel):
    """Clinical contact profile of a patient; filled in after sign-up."""

    uid: str = Field(..., description="Principal ID")
    date_of_birth: Optional[date] = None
    phone: Optional[str] = None
    emergency_contact: Optional[EmergencyContact] = None
    created_at: datetime = Field(default_factory=_now)

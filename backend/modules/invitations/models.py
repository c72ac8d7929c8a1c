"""
Invitation module data models.

An invitation is a time-boxed, single-use token that authorizes account
creation. Admins and verified therapists issue them; the two issuer kinds
are stored in separate collections and modelled as a tagged union on
``source``.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, EmailStr, Field

from shared.models import Role


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InvitationStatus(str, Enum):
    """Lifecycle of an invitation. Only PENDING has outgoing transitions."""

    PENDING = "PENDING"
    USED = "USED"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"


class InvitationSource(str, Enum):
    """Which kind of issuer created the invitation."""

    ADMIN = "admin"
    THERAPIST = "therapist"


class TherapistData(BaseModel):
    """Optional pre-fill for a therapist invitation's registration form."""

    cedula: Optional[str] = None
    specialization: Optional[list[str]] = None
    license_number: Optional[str] = None


class InvitationBase(BaseModel):
    """Fields shared by both invitation variants."""

    token: str = Field(..., description="Unique single-use token")
    status: InvitationStatus = Field(default=InvitationStatus.PENDING)
    expires_at: datetime = Field(..., description="Redeemable until this time")
    created_at: datetime = Field(default_factory=_now)
    used_at: Optional[datetime] = None
    used_by: Optional[str] = Field(None, description="Principal created on redemption")
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[str] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or _now()) > self.expires_at


class AdminInvitation(InvitationBase):
    """Invitation issued by an administrator, for either role."""

    source: Literal["admin"] = "admin"
    role: Role = Field(..., description="THERAPIST or PATIENT")
    invited_by: str
    invited_by_email: str = ""
    invited_by_name: str = "Admin"
    target_email: str
    target_name: Optional[str] = None
    tenant_id: Optional[str] = Field(None, description="Required for PATIENT invitations")
    therapist_data: Optional[TherapistData] = Field(None, description="THERAPIST only")

    @property
    def issuer_id(self) -> str:
        return self.invited_by

    @property
    def inviter_name(self) -> str:
        return self.invited_by_name


class TherapistInvitation(InvitationBase):
    """Invitation issued by a verified therapist; always for a patient."""

    source: Literal["therapist"] = "therapist"
    therapist_id: str
    therapist_email: str = ""
    therapist_name: str = "Unknown"
    patient_email: str
    patient_name: Optional[str] = None
    tenant_id: str

    @property
    def role(self) -> Role:
        return Role.PATIENT

    @property
    def issuer_id(self) -> str:
        return self.therapist_id

    @property
    def inviter_name(self) -> str:
        return self.therapist_name

    @property
    def target_email(self) -> str:
        return self.patient_email

    @property
    def target_name(self) -> Optional[str]:
        return self.patient_name


Invitation = Annotated[
    Union[AdminInvitation, TherapistInvitation],
    Field(discriminator="source"),
]


class InvitationView(BaseModel):
    """Normalized, public preview of a redeemable invitation."""

    valid: bool = True
    status: InvitationStatus = InvitationStatus.PENDING
    source: InvitationSource
    role: Role
    inviter_name: str
    target_email: str
    target_name: str = ""
    tenant_id: Optional[str] = None
    therapist_data: Optional[TherapistData] = None
    expires_at: datetime

    @classmethod
    def from_invitation(cls, invitation: Union[AdminInvitation, TherapistInvitation]) -> "InvitationView":
        return cls(
            status=invitation.status,
            source=invitation.source,
            role=invitation.role,
            inviter_name=invitation.inviter_name,
            target_email=invitation.target_email,
            target_name=invitation.target_name or "",
            tenant_id=invitation.tenant_id,
            therapist_data=getattr(invitation, "therapist_data", None),
            expires_at=invitation.expires_at,
        )


class IssuedInvitation(BaseModel):
    """Response after issuing an invitation."""

    token: str
    invitation_url: str = Field(..., description="Registration link carrying the token")
    expires_in: str = Field(..., description="Human readable validity, e.g. '7 days'")
    role: Role


class InvitationSummary(BaseModel):
    """Invitation as listed to its issuer or an admin."""

    token: str
    source: InvitationSource
    role: Role
    status: InvitationStatus
    issuer_id: str
    target_email: str
    target_name: Optional[str] = None
    tenant_id: Optional[str] = None
    expires_at: datetime
    created_at: datetime
    used_by: Optional[str] = None

    @classmethod
    def from_invitation(cls, invitation: Union[AdminInvitation, TherapistInvitation]) -> "InvitationSummary":
        return cls(
            token=invitation.token,
            source=invitation.source,
            role=invitation.role,
            status=invitation.status,
            issuer_id=invitation.issuer_id,
            target_email=invitation.target_email,
            target_name=invitation.target_name,
            tenant_id=invitation.tenant_id,
            expires_at=invitation.expires_at,
            created_at=invitation.created_at,
            used_by=invitation.used_by,
        )


class InvitationListResponse(BaseModel):
    invitations: list[InvitationSummary]
    total: int


class CreateUserInvitationRequest(BaseModel):
    """Admin request to invite a therapist or a patient."""

    role: Role = Field(..., description="THERAPIST or PATIENT")
    target_email: EmailStr
    target_name: Optional[str] = Field(None, max_length=200)
    tenant_id: Optional[str] = Field(None, description="Assigned therapist's tenant (PATIENT)")
    therapist_data: Optional[TherapistData] = None


class CreatePatientInvitationRequest(BaseModel):
    """Therapist request to invite a patient into its own practice."""

    patient_email: EmailStr
    patient_name: Optional[str] = Field(None, max_length=200)

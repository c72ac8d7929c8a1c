"""
Relationship module data models.

A Relationship asserts that a therapist cares (or cared) for a patient.
Its key is ``therapistId_patientId``, so a pair has at most one record;
history lives in the record's append-only audit log.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


def _now() -> datetime:
    return datetime.now(timezone.utc)


def relationship_id(therapist_id: str, patient_id: str) -> str:
    """Key of the relationship between a therapist and a patient."""
    return f"{therapist_id}_{patient_id}"


class RelationshipStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class AuditAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class AppointmentStatus(str, Enum):
    """Appointment states; only SCHEDULED appointments follow a transfer."""

    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"


class RelationshipAuditEntry(BaseModel):
    """One mutation of a relationship."""

    timestamp: datetime = Field(default_factory=_now)
    user_id: str = Field(..., description="Who made the change")
    action: AuditAction
    changes: Optional[dict[str, Any]] = None


class Relationship(BaseModel):
    """A therapist-patient care assignment."""

    id: str
    therapist_id: str
    patient_id: str
    tenant_id: str = Field(..., description="Tenant of the therapist")
    status: RelationshipStatus = RelationshipStatus.ACTIVE
    relationship_start: datetime = Field(default_factory=_now)
    relationship_end: Optional[datetime] = None
    created_via_invitation: Optional[str] = Field(None, description="Redeemed invitation token")
    transferred_from: Optional[str] = Field(None, description="Previous therapist on transfer")
    audit_log: list[RelationshipAuditEntry] = Field(default_factory=list)


class Appointment(BaseModel):
    """
    Boundary view of an appointment.

    Appointments are owned by the scheduling feature; only the fields a
    transfer touches are modelled here.
    """

    id: str
    therapist_id: str
    patient_id: str
    tenant_id: str
    status: AppointmentStatus


class TransferRequest(BaseModel):
    """Move a patient from one therapist to another."""

    old_therapist_id: str = Field(..., description="Current therapist")
    new_therapist_id: str = Field(..., description="Receiving therapist")


class TransferResult(BaseModel):
    """Outcome of a completed transfer."""

    patient_id: str
    old_therapist_id: str
    new_therapist_id: str
    tenant_id: str = Field(..., description="Tenant of the receiving therapist")
    appointments_reassigned: int = 0
    therapist_ids: list[str] = Field(default_factory=list, description="Patient's claims after transfer")


class RelationshipListResponse(BaseModel):
    relationships: list[Relationship]
    total: int

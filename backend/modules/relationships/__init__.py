"""
Relationships module.

The therapist-patient assignment lifecycle, including cross-tenant
patient transfer.

Public API:
- IRelationshipManager: Interface for relationship operations
- Relationship, RelationshipStatus, TransferResult: Relationship records
"""

from .interfaces import IRelationshipManager
from .models import (
    AppointmentStatus,
    AuditAction,
    Relationship,
    RelationshipAuditEntry,
    RelationshipStatus,
    TransferResult,
    relationship_id,
)
from .exceptions import (
    PatientNotFoundError,
    RelationshipNotFoundError,
    TherapistNotFoundError,
)

__all__ = [
    # Interface
    "IRelationshipManager",
    # Models
    "AppointmentStatus",
    "AuditAction",
    "Relationship",
    "RelationshipAuditEntry",
    "RelationshipStatus",
    "TransferResult",
    "relationship_id",
    # Exceptions
    "PatientNotFoundError",
    "RelationshipNotFoundError",
    "TherapistNotFoundError",
]

"""
Relationship and appointment repositories.

Encapsulates document access for:
- therapist_patients (relationships, keyed by therapistId_patientId)
- appointments (only the transfer-time reassignment)

Note: These repositories do NOT perform authorization checks.
"""

from typing import Any, Optional

from shared.repository import BaseRepository
from .models import (
    Appointment,
    AppointmentStatus,
    Relationship,
    RelationshipAuditEntry,
    RelationshipStatus,
)


class RelationshipRepository(BaseRepository[Relationship]):
    """Repository for therapist-patient relationships."""

    model = Relationship
    collection = "therapist_patients"

    def get(self, relationship_id: str) -> Optional[Relationship]:
        return self._get(relationship_id)

    def create(self, relationship: Relationship) -> Relationship:
        """
        Create a relationship if the pair has none.

        Raises:
            DocumentAlreadyExistsError: If the pair already has a record
        """
        document = self._store.create(
            self.collection, relationship.id, self._to_document(relationship)
        )
        return self._from_document(document)

    def apply_change(
        self,
        relationship: Relationship,
        entry: RelationshipAuditEntry,
        **changes: Any,
    ) -> Optional[Relationship]:
        """
        Update a relationship and append an audit entry in one write.

        Conditional on the stored status still matching ``relationship``.

        Returns:
            The updated relationship, or None if it changed concurrently
        """
        audit_log = [e.model_dump(mode="json") for e in relationship.audit_log]
        audit_log.append(entry.model_dump(mode="json"))
        document = self._store.update(
            self.collection,
            relationship.id,
            {**changes, "audit_log": audit_log},
            expected={"status": relationship.status.value},
        )
        return self._from_document(document) if document else None

    def list_for_patient(
        self,
        patient_id: str,
        status: Optional[RelationshipStatus] = None,
    ) -> list[Relationship]:
        filters: dict[str, Any] = {"patient_id": patient_id}
        if status:
            filters["status"] = status.value
        documents = self._store.query(
            self.collection,
            filters=filters,
            order_by="relationship_start",
            descending=True,
        )
        return [self._from_document(d) for d in documents]


class AppointmentRepository(BaseRepository[Appointment]):
    """Repository for the appointment fields a transfer rewrites."""

    model = Appointment
    collection = "appointments"

    def list_for(self, patient_id: str, therapist_id: str) -> list[Appointment]:
        documents = self._store.query(
            self.collection,
            filters={"patient_id": patient_id, "therapist_id": therapist_id},
        )
        return [self._from_document(d) for d in documents]

    def reassign_scheduled(
        self,
        patient_id: str,
        old_therapist_id: str,
        new_therapist_id: str,
        new_tenant_id: str,
    ) -> int:
        """Move every SCHEDULED appointment of a pair to a new therapist."""
        return self._store.update_where(
            self.collection,
            filters={
                "patient_id": patient_id,
                "therapist_id": old_therapist_id,
                "status": AppointmentStatus.SCHEDULED.value,
            },
            changes={"therapist_id": new_therapist_id, "tenant_id": new_tenant_id},
        )

"""
Relationship manager implementation.

Owns the therapist-patient assignment lifecycle. The document store only
offers single-document atomicity, so a transfer is a sequence of
independently durable steps ordered to be re-runnable: once the old
relationship is INACTIVE, running the transfer again completes the
remaining steps.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from shared.audit import SYSTEM_SCOPE, AuditLogRepository
from shared.document_store import DocumentAlreadyExistsError
from shared.exceptions import (
    InvalidArgumentError,
    PermissionDeniedError,
    downstream,
)
from shared.models import AuthenticatedUser, Role, tenant_id_for
from modules.claims.writer import ClaimsWriter
from modules.identity.models import ClaimSet
from modules.profiles.repository import TherapistProfileRepository, UserProfileRepository

from .exceptions import (
    PatientNotFoundError,
    RelationshipNotFoundError,
    TherapistNotFoundError,
)
from .models import (
    AuditAction,
    Relationship,
    RelationshipAuditEntry,
    RelationshipStatus,
    TransferResult,
    relationship_id,
)
from .repository import AppointmentRepository, RelationshipRepository

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class RelationshipManager:
    """Implementation of IRelationshipManager."""

    def __init__(
        self,
        relationships: RelationshipRepository,
        appointments: AppointmentRepository,
        users: UserProfileRepository,
        therapists: TherapistProfileRepository,
        writer: ClaimsWriter,
        audit: AuditLogRepository,
    ):
        self._relationships = relationships
        self._appointments = appointments
        self._users = users
        self._therapists = therapists
        self._writer = writer
        self._audit = audit

    async def create_relationship(
        self,
        therapist_id: str,
        patient_id: str,
        tenant_id: str,
        performed_by: Optional[str] = None,
        created_via_invitation: Optional[str] = None,
        transferred_from: Optional[str] = None,
    ) -> Relationship:
        key = relationship_id(therapist_id, patient_id)
        actor = performed_by or therapist_id
        changes = {"transferredFrom": transferred_from} if transferred_from else None

        with downstream("create_relationship"):
            existing = self._relationships.get(key)
            if existing is None:
                relationship = Relationship(
                    id=key,
                    therapist_id=therapist_id,
                    patient_id=patient_id,
                    tenant_id=tenant_id,
                    created_via_invitation=created_via_invitation,
                    transferred_from=transferred_from,
                    audit_log=[
                        RelationshipAuditEntry(
                            user_id=actor,
                            action=AuditAction.CREATE,
                            changes=changes,
                        )
                    ],
                )
                try:
                    created = self._relationships.create(relationship)
                    logger.info("Relationship %s created", key)
                    return created
                except DocumentAlreadyExistsError:
                    existing = self._relationships.get(key)

            if existing.status == RelationshipStatus.ACTIVE:
                return existing

            reactivated = self._relationships.apply_change(
                existing,
                RelationshipAuditEntry(
                    user_id=actor,
                    action=AuditAction.UPDATE,
                    changes={
                        "status": {"from": existing.status.value, "to": RelationshipStatus.ACTIVE.value},
                        **(changes or {}),
                    },
                ),
                status=RelationshipStatus.ACTIVE.value,
                tenant_id=tenant_id,
                relationship_start=_now().isoformat(),
                relationship_end=None,
                transferred_from=transferred_from,
            )
            if reactivated is None:
                return self._relationships.get(key)

        logger.info("Relationship %s reactivated", key)
        return reactivated

    async def add_therapist_to_patient_claims(
        self,
        patient_id: str,
        therapist_id: str,
    ) -> ClaimSet:
        with downstream("update_patient_claims"):
            return self._writer.add_therapist(patient_id, therapist_id)

    async def transfer(
        self,
        caller: AuthenticatedUser,
        patient_id: str,
        old_therapist_id: str,
        new_therapist_id: str,
    ) -> TransferResult:
        if not patient_id or not old_therapist_id or not new_therapist_id:
            raise InvalidArgumentError(
                "Missing required fields: patientId, oldTherapistId, newTherapistId"
            )
        if old_therapist_id == new_therapist_id:
            raise InvalidArgumentError("The new therapist must differ from the current one")

        if caller.role not in (Role.THERAPIST, Role.ADMIN):
            raise PermissionDeniedError("Only therapists or admins can transfer patients")
        if caller.role == Role.THERAPIST and caller.id != old_therapist_id:
            raise PermissionDeniedError("You can only transfer your own patients")

        with downstream("read_transfer_state"):
            new_therapist = self._therapists.get(new_therapist_id)
            old_relationship = self._relationships.get(
                relationship_id(old_therapist_id, patient_id)
            )
        if new_therapist is None:
            raise TherapistNotFoundError(new_therapist_id)
        if old_relationship is None:
            raise RelationshipNotFoundError(old_therapist_id, patient_id)

        # 1. End the old relationship
        if old_relationship.status == RelationshipStatus.ACTIVE:
            with downstream("deactivate_relationship"):
                self._relationships.apply_change(
                    old_relationship,
                    RelationshipAuditEntry(
                        user_id=caller.id,
                        action=AuditAction.UPDATE,
                        changes={
                            "status": {"from": "ACTIVE", "to": "INACTIVE"},
                            "transferredTo": new_therapist_id,
                        },
                    ),
                    status=RelationshipStatus.INACTIVE.value,
                    relationship_end=_now().isoformat(),
                )

        # 2. Start the new one under the receiving tenant
        await self.create_relationship(
            new_therapist_id,
            patient_id,
            new_therapist.tenant_id,
            performed_by=caller.id,
            transferred_from=old_therapist_id,
        )

        # 3. Scheduled appointments follow the patient
        with downstream("reassign_appointments"):
            reassigned = self._appointments.reassign_scheduled(
                patient_id, old_therapist_id, new_therapist_id, new_therapist.tenant_id
            )

        # 4. Claims
        with downstream("update_patient_claims"):
            claims = self._writer.replace_therapist(patient_id, old_therapist_id, new_therapist_id)

        with downstream("audit_log"):
            self._audit.record(
                SYSTEM_SCOPE,
                "PATIENT_TRANSFER",
                performed_by=caller.id,
                patient_id=patient_id,
                old_therapist_id=old_therapist_id,
                new_therapist_id=new_therapist_id,
                appointments_reassigned=reassigned,
            )

        logger.info(
            "Patient %s transferred from %s to %s (%d appointments)",
            patient_id, old_therapist_id, new_therapist_id, reassigned,
        )
        return TransferResult(
            patient_id=patient_id,
            old_therapist_id=old_therapist_id,
            new_therapist_id=new_therapist_id,
            tenant_id=new_therapist.tenant_id,
            appointments_reassigned=reassigned,
            therapist_ids=claims.therapist_ids or [],
        )

    async def add_patient_relationship(
        self,
        caller: AuthenticatedUser,
        patient_id: str,
    ) -> Relationship:
        if not caller.is_verified_therapist:
            raise PermissionDeniedError("Only verified therapists can add patient relationships")
        if not patient_id:
            raise InvalidArgumentError("Missing patientId")

        with downstream("read_patient_profile"):
            patient = self._users.get(patient_id)
        if patient is None or patient.is_deleted or patient.role != Role.PATIENT:
            raise PatientNotFoundError(patient_id)

        tenant_id = caller.tenant_id or tenant_id_for(caller.id)
        relationship = await self.create_relationship(
            caller.id, patient_id, tenant_id, performed_by=caller.id
        )
        await self.add_therapist_to_patient_claims(patient_id, caller.id)

        with downstream("audit_log"):
            self._audit.record(
                tenant_id,
                "ADD_PATIENT_RELATIONSHIP",
                performed_by=caller.id,
                patient_id=patient_id,
            )
        return relationship

    async def list_patient_relationships(
        self,
        caller: AuthenticatedUser,
        patient_id: str,
    ) -> list[Relationship]:
        with downstream("list_relationships"):
            relationships = self._relationships.list_for_patient(patient_id)

        allowed = (
            caller.is_admin
            or caller.id == patient_id
            or (
                caller.role == Role.THERAPIST
                and any(r.therapist_id == caller.id for r in relationships)
            )
        )
        if not allowed:
            raise PermissionDeniedError("You cannot view this patient's relationships")
        return relationships

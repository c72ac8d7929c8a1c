"""
Provisioning service implementation.

Composes the identity directory, profile repositories, invitation ledger,
relationship manager, and claims writer into the account-creation flows.

Write order is fixed: principal, then profiles, then relationships, then
claims, then (for invitations) the USED mark, then the audit entry. The
principal comes first because it is the hardest step to undo; anything
that fails after it leaves an orphaned principal that OrphanReconciler
reports. Claims are written explicitly rather than left to the
principal-created hook, so a new therapist is verified from its first
token.
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator, Optional

from shared.audit import ADMIN_SCOPE, AuditLogRepository
from shared.config import Settings, get_settings
from shared.exceptions import (
    AlreadyExistsError,
    InvalidArgumentError,
    MindcareError,
    NotFoundError,
    PermissionDeniedError,
    downstream,
)
from shared.models import (
    AuthenticatedUser,
    Role,
    tenant_id_for,
    therapist_id_from_tenant,
)
from modules.claims.writer import ClaimsWriter
from modules.identity.interfaces import IIdentityDirectory
from modules.identity.models import Principal
from modules.invitations.interfaces import IInvitationLedger
from modules.invitations.models import AdminInvitation, TherapistData
from modules.invitations.repository import AnyInvitation
from modules.profiles.models import PatientProfile, TherapistProfile, UserProfile
from modules.profiles.repository import (
    PatientProfileRepository,
    TherapistProfileRepository,
    UserProfileRepository,
)
from modules.relationships.interfaces import IRelationshipManager

from .models import (
    AdminUpdateUserRequest,
    CreatePatientFromInvitationRequest,
    CreatePatientResponse,
    CreateTherapistFromInvitationRequest,
    CreateTherapistFromInvitationResponse,
    CreateTherapistRequest,
    CreateTherapistResponse,
    OperationResponse,
    OrphanReport,
)
from .reconciliation import OrphanReconciler

logger = logging.getLogger(__name__)


@contextmanager
def _orphan_on_failure(uid: str) -> Iterator[None]:
    """Log the principal left behind when a later step fails."""
    try:
        yield
    except MindcareError:
        logger.warning(
            "Provisioning failed after principal %s was created; it is now orphaned",
            uid,
        )
        raise


class ProvisioningService:
    """Implementation of IProvisioningService."""

    def __init__(
        self,
        directory: IIdentityDirectory,
        users: UserProfileRepository,
        therapists: TherapistProfileRepository,
        patients: PatientProfileRepository,
        writer: ClaimsWriter,
        ledger: IInvitationLedger,
        relationships: IRelationshipManager,
        audit: AuditLogRepository,
        reconciler: Optional[OrphanReconciler] = None,
        settings: Optional[Settings] = None,
    ):
        self._directory = directory
        self._users = users
        self._therapists = therapists
        self._patients = patients
        self._writer = writer
        self._ledger = ledger
        self._relationships = relationships
        self._audit = audit
        self._settings = settings or get_settings()
        self._reconciler = reconciler or OrphanReconciler(directory, users, self._settings)

    # Shared steps

    def _create_principal(
        self,
        email: str,
        password: str,
        display_name: str,
        email_verified: bool = False,
    ) -> Principal:
        with downstream("create_principal"):
            principal = self._directory.create_principal(
                email, password, display_name, email_verified=email_verified
            )
        logger.info("Principal %s created for %s", principal.id, email)
        return principal

    def _require_password(self, password: str, minimum: int) -> None:
        if len(password) < minimum:
            raise InvalidArgumentError(f"Password must be at least {minimum} characters")

    def _provision_therapist(
        self,
        email: str,
        password: str,
        display_name: str,
        cedula: str,
        specialization: list[str],
        license_number: str,
        verified_by: str,
        created_by: Optional[str] = None,
        invited_by: Optional[str] = None,
    ) -> Principal:
        principal = self._create_principal(email, password, display_name)
        uid = principal.id
        tenant_id = tenant_id_for(uid)

        with _orphan_on_failure(uid):
            with downstream("create_user_profile"):
                self._users.create(
                    UserProfile(
                        uid=uid,
                        email=email,
                        display_name=display_name,
                        role=Role.THERAPIST,
                        created_by=created_by,
                        invited_by=invited_by,
                    )
                )
            with downstream("create_therapist_profile"):
                self._therapists.create(
                    TherapistProfile(
                        uid=uid,
                        cedula=cedula,
                        specialization=specialization,
                        license_number=license_number,
                        tenant_id=tenant_id,
                        is_verified=True,
                        verified_by=verified_by,
                        verified_at=datetime.now(timezone.utc),
                    )
                )
            with downstream("set_claims"):
                self._writer.merge(
                    uid,
                    {"role": Role.THERAPIST, "tenant_id": tenant_id, "is_verified": True},
                )
        return principal

    # Admin flows

    async def create_therapist_user(
        self,
        caller: AuthenticatedUser,
        request: CreateTherapistRequest,
    ) -> CreateTherapistResponse:
        if not caller.is_admin:
            raise PermissionDeniedError("Only admins can create therapist accounts")
        if not (request.email and request.password and request.display_name and request.cedula):
            raise InvalidArgumentError(
                "Missing required fields: email, password, displayName, cedula"
            )
        self._require_password(request.password, self._settings.therapist_min_password_length)
        if not request.specialization:
            raise InvalidArgumentError("At least one specialization is required")

        email = str(request.email)
        principal = self._provision_therapist(
            email,
            request.password,
            request.display_name,
            request.cedula,
            request.specialization,
            request.license_number or "",
            verified_by=caller.id,
            created_by=caller.id,
        )

        with downstream("audit_log"):
            self._audit.record(
                ADMIN_SCOPE,
                "CREATE_THERAPIST",
                performed_by=caller.id,
                performed_by_email=caller.email,
                target_user_id=principal.id,
                target_email=email,
            )
        return CreateTherapistResponse(therapist_id=principal.id, email=email)

    async def admin_update_user(
        self,
        caller: AuthenticatedUser,
        uid: str,
        request: AdminUpdateUserRequest,
    ) -> OperationResponse:
        if not caller.is_admin:
            raise PermissionDeniedError("Only admins can update user details")
        if not (uid and request.display_name and request.email):
            raise InvalidArgumentError("Missing required fields: uid, displayName, email")

        # Both profiles must exist before the principal is touched
        with downstream("read_profiles"):
            profile = self._users.get(uid)
            therapist = (
                self._therapists.get(uid) if request.specialization is not None else None
            )
        if profile is None:
            raise NotFoundError(f"User profile not found: {uid}", details={"uid": uid})
        if request.specialization is not None and therapist is None:
            raise NotFoundError(f"Therapist profile not found: {uid}", details={"uid": uid})

        email = str(request.email)
        with downstream("update_principal"):
            self._directory.update_principal(uid, email=email, display_name=request.display_name)
        with downstream("update_user_profile"):
            self._users.update(uid, display_name=request.display_name, email=email)

        if request.specialization is not None:
            with downstream("update_therapist_profile"):
                self._therapists.update(uid, specialization=request.specialization)

        with downstream("audit_log"):
            self._audit.record(
                ADMIN_SCOPE,
                "UPDATE_USER",
                performed_by=caller.id,
                target_user_id=uid,
                target_email=email,
            )
        logger.info("User %s updated by %s", uid, caller.id)
        return OperationResponse(message="User updated successfully")

    async def create_admin(
        self,
        email: str,
        password: str,
        display_name: str,
    ) -> tuple[str, bool]:
        """
        Create an admin account, or promote an existing account to admin.

        Operator-only; not exposed over HTTP.

        Returns:
            The admin's uid and whether a new principal was created
        """
        if "@" not in (email or ""):
            raise InvalidArgumentError("Valid email is required")
        self._require_password(password, self._settings.patient_min_password_length)

        created = True
        try:
            principal = self._create_principal(email, password, display_name, email_verified=True)
        except AlreadyExistsError:
            with downstream("lookup_principal"):
                principal = self._directory.get_principal_by_email(email)
            created = False

        uid = principal.id
        with downstream("set_claims"):
            self._writer.merge(uid, {"role": Role.ADMIN, "is_verified": True})
        with downstream("write_user_profile"):
            if self._users.get(uid) is None:
                self._users.create(
                    UserProfile(uid=uid, email=email, display_name=display_name, role=Role.ADMIN)
                )
            else:
                self._users.update(uid, role=Role.ADMIN.value, display_name=display_name)

        logger.info("Admin %s %s", uid, "created" if created else "promoted")
        return uid, created

    async def reconcile_orphans(
        self,
        caller: AuthenticatedUser,
        delete: bool = False,
    ) -> OrphanReport:
        if not caller.is_admin:
            raise PermissionDeniedError("Only admins can reconcile accounts")
        report = self._reconciler.sweep(delete=delete)
        with downstream("audit_log"):
            self._audit.record(
                ADMIN_SCOPE,
                "RECONCILE_ORPHANS",
                performed_by=caller.id,
                orphans=[o.uid for o in report.orphans],
                deleted=report.deleted,
            )
        return report

    # Invitation redemption

    async def create_patient_from_invitation(
        self,
        token: str,
        request: CreatePatientFromInvitationRequest,
    ) -> CreatePatientResponse:
        if not (token and request.display_name and request.password):
            raise InvalidArgumentError("Missing required fields: token, displayName, password")
        self._require_password(request.password, self._settings.patient_min_password_length)

        assignment: dict[str, Any] = {}

        async def provision(invitation: AnyInvitation) -> str:
            if isinstance(invitation, AdminInvitation):
                if not invitation.tenant_id:
                    raise InvalidArgumentError("Invitation has no therapist assignment")
                therapist_id = therapist_id_from_tenant(invitation.tenant_id)
                invited_by = invitation.invited_by
            else:
                therapist_id = invitation.therapist_id
                invited_by = therapist_id
            tenant_id = invitation.tenant_id
            assignment.update(therapist_id=therapist_id, tenant_id=tenant_id)

            principal = self._create_principal(
                invitation.target_email, request.password, request.display_name
            )
            uid = principal.id
            with _orphan_on_failure(uid):
                with downstream("create_user_profile"):
                    self._users.create(
                        UserProfile(
                            uid=uid,
                            email=invitation.target_email,
                            display_name=request.display_name,
                            role=Role.PATIENT,
                            invited_by=invited_by,
                        )
                    )
                with downstream("create_patient_profile"):
                    self._patients.create(PatientProfile(uid=uid))
                await self._relationships.create_relationship(
                    therapist_id,
                    uid,
                    tenant_id,
                    performed_by=therapist_id,
                    created_via_invitation=invitation.token,
                )
                with downstream("set_claims"):
                    self._writer.merge(uid, {"role": Role.PATIENT, "therapist_ids": [therapist_id]})
            return uid

        uid = await self._ledger.redeem(token, Role.PATIENT, provision)

        with downstream("audit_log"):
            self._audit.record(
                assignment["tenant_id"],
                "CREATE_PATIENT_VIA_INVITATION",
                performed_by=assignment["therapist_id"],
                patient_id=uid,
                invitation_token=token,
            )
        return CreatePatientResponse(patient_id=uid)

    async def create_therapist_from_invitation(
        self,
        token: str,
        request: CreateTherapistFromInvitationRequest,
    ) -> CreateTherapistFromInvitationResponse:
        if not (token and request.display_name and request.password):
            raise InvalidArgumentError("Missing required fields")
        self._require_password(request.password, self._settings.therapist_min_password_length)

        inviter: dict[str, str] = {}

        async def provision(invitation: AnyInvitation) -> str:
            prefill = getattr(invitation, "therapist_data", None) or TherapistData()
            cedula = request.cedula or prefill.cedula
            specialization = request.specialization or prefill.specialization
            if not cedula or not specialization:
                raise InvalidArgumentError("Missing required fields: cedula, specialization")

            inviter["id"] = invitation.issuer_id
            principal = self._provision_therapist(
                invitation.target_email,
                request.password,
                request.display_name,
                cedula,
                specialization,
                request.license_number or prefill.license_number or "",
                verified_by=invitation.issuer_id,
                invited_by=invitation.issuer_id,
            )
            return principal.id

        uid = await self._ledger.redeem(token, Role.THERAPIST, provision)

        with downstream("audit_log"):
            self._audit.record(
                tenant_id_for(uid),
                "CREATE_THERAPIST_VIA_INVITATION",
                performed_by=inviter["id"],
                therapist_id=uid,
                invitation_token=token,
            )
        return CreateTherapistFromInvitationResponse(therapist_id=uid)

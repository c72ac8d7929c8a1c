"""
Invitation ledger implementation.

Issues, validates, and redeems the single-use tokens that authorize
account creation. Expiry is applied lazily: a PENDING invitation found
past its ``expires_at`` is marked EXPIRED by whichever read sees it first,
or by the expire_stale() sweep.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from shared.audit import ADMIN_SCOPE, AuditLogRepository
from shared.config import Settings, get_settings
from shared.exceptions import (
    AlreadyExistsError,
    InvalidArgumentError,
    PermissionDeniedError,
    downstream,
)
from shared.models import AuthenticatedUser, Role, tenant_id_for
from modules.identity.exceptions import PrincipalNotFoundError
from modules.identity.interfaces import IIdentityDirectory
from modules.profiles.repository import UserProfileRepository

from .exceptions import (
    InvitationExpiredError,
    InvitationNotFoundError,
    InvitationNotPendingError,
    InvitationRoleMismatchError,
)
from .interfaces import Provisioner
from .models import (
    AdminInvitation,
    InvitationStatus,
    InvitationView,
    IssuedInvitation,
    TherapistData,
    TherapistInvitation,
)
from .repository import AnyInvitation, InvitationRepository

logger = logging.getLogger(__name__)

INVITABLE_ROLES = (Role.THERAPIST, Role.PATIENT)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InvitationLedger:
    """Implementation of IInvitationLedger."""

    def __init__(
        self,
        directory: IIdentityDirectory,
        invitations: InvitationRepository,
        users: UserProfileRepository,
        audit: AuditLogRepository,
        settings: Optional[Settings] = None,
    ):
        self._directory = directory
        self._invitations = invitations
        self._users = users
        self._audit = audit
        self._settings = settings or get_settings()

    # Issuance

    async def issue(
        self,
        issuer: AuthenticatedUser,
        role: Role,
        target_email: str,
        target_name: Optional[str] = None,
        tenant_id: Optional[str] = None,
        therapist_data: Optional[TherapistData] = None,
    ) -> IssuedInvitation:
        if issuer.is_admin:
            if role not in INVITABLE_ROLES:
                raise InvalidArgumentError("Role must be THERAPIST or PATIENT")
            if role == Role.PATIENT and not tenant_id:
                raise InvalidArgumentError(
                    "Therapist assignment (tenantId) is required for patient invitations"
                )
        elif issuer.is_verified_therapist:
            if role != Role.PATIENT:
                raise PermissionDeniedError("Therapists can only invite patients")
            tenant_id = issuer.tenant_id or tenant_id_for(issuer.id)
        else:
            raise PermissionDeniedError(
                "Only admins and verified therapists can create invitations"
            )

        target_email = (target_email or "").strip()
        if "@" not in target_email:
            raise InvalidArgumentError("Valid email is required")

        self._ensure_email_unused(target_email)

        with downstream("read_issuer_profile"):
            profile = self._users.get(issuer.id)
        display_name = profile.display_name if profile else None

        now = _now()
        ttl_days = self._settings.invitation_ttl_days
        token = str(uuid.uuid4())
        invitation: AnyInvitation
        if issuer.is_admin:
            invitation = AdminInvitation(
                token=token,
                role=role,
                invited_by=issuer.id,
                invited_by_email=issuer.email,
                invited_by_name=display_name or "Admin",
                target_email=target_email,
                target_name=target_name,
                tenant_id=tenant_id if role == Role.PATIENT else None,
                therapist_data=therapist_data if role == Role.THERAPIST else None,
                expires_at=now + timedelta(days=ttl_days),
                created_at=now,
            )
        else:
            invitation = TherapistInvitation(
                token=token,
                therapist_id=issuer.id,
                therapist_email=issuer.email,
                therapist_name=display_name or "Unknown",
                patient_email=target_email,
                patient_name=target_name,
                tenant_id=tenant_id,
                expires_at=now + timedelta(days=ttl_days),
                created_at=now,
            )

        with downstream("create_invitation"):
            self._invitations.create(invitation)
            self._audit.record(
                ADMIN_SCOPE if issuer.is_admin else tenant_id,
                "CREATE_USER_INVITATION" if issuer.is_admin else "CREATE_PATIENT_INVITATION",
                performed_by=issuer.id,
                target_role=role.value,
                target_email=target_email,
                invitation_token=token,
            )

        logger.info(
            "Invitation %s issued by %s for %s (%s)",
            token, issuer.id, target_email, role.value,
        )
        return IssuedInvitation(
            token=token,
            invitation_url=f"{self._settings.invitation_base_url}?invite={token}",
            expires_in=f"{ttl_days} day" if ttl_days == 1 else f"{ttl_days} days",
            role=role,
        )

    def _ensure_email_unused(self, email: str) -> None:
        """Existence probe: only "not found" lets issuance continue."""
        with downstream("probe_email"):
            try:
                self._directory.get_principal_by_email(email)
            except PrincipalNotFoundError:
                return
        raise AlreadyExistsError(
            "A user with this email already exists",
            code="EMAIL_ALREADY_EXISTS",
            details={"email": email},
        )

    # Validation and redemption

    def _load_redeemable(self, token: str, role: Optional[Role] = None) -> AnyInvitation:
        if not token:
            raise InvalidArgumentError("Invitation token is required")

        with downstream("read_invitation"):
            invitation = self._invitations.find(token)
        if invitation is None:
            raise InvitationNotFoundError(token)
        if invitation.status != InvitationStatus.PENDING:
            raise InvitationNotPendingError(token, invitation.status.value)
        if role is not None and invitation.role != role:
            raise InvitationRoleMismatchError(token, role.value, invitation.role.value)
        if invitation.is_expired():
            with downstream("expire_invitation"):
                self._invitations.transition(invitation, InvitationStatus.EXPIRED)
            logger.info("Invitation %s expired at %s", token, invitation.expires_at.isoformat())
            raise InvitationExpiredError(token)
        return invitation

    async def validate(self, token: str) -> InvitationView:
        return InvitationView.from_invitation(self._load_redeemable(token))

    async def redeem(self, token: str, role: Role, provision: Provisioner) -> str:
        # Checked again here; a preview may be stale or raced.
        invitation = self._load_redeemable(token, role)

        uid = await provision(invitation)

        with downstream("mark_invitation_used"):
            used = self._invitations.transition(
                invitation,
                InvitationStatus.USED,
                used_at=_now().isoformat(),
                used_by=uid,
            )
        if used is None:
            with downstream("read_invitation"):
                current = self._invitations.find(token)
            status = current.status.value if current else "UNKNOWN"
            logger.warning(
                "Invitation %s became %s during redemption; principal %s is orphaned",
                token, status, uid,
            )
            raise InvitationNotPendingError(token, status)

        logger.info("Invitation %s redeemed by %s", token, uid)
        return uid

    # Administration

    async def cancel(self, caller: AuthenticatedUser, token: str) -> AnyInvitation:
        with downstream("read_invitation"):
            invitation = self._invitations.find(token)
        if invitation is None:
            raise InvitationNotFoundError(token)
        if not (caller.is_admin or caller.id == invitation.issuer_id):
            raise PermissionDeniedError("Only the issuer or an admin can cancel an invitation")
        if invitation.status != InvitationStatus.PENDING:
            raise InvitationNotPendingError(token, invitation.status.value)

        with downstream("cancel_invitation"):
            cancelled = self._invitations.transition(
                invitation,
                InvitationStatus.CANCELLED,
                cancelled_at=_now().isoformat(),
                cancelled_by=caller.id,
            )
            if cancelled is None:
                current = self._invitations.find(token)
        if cancelled is None:
            raise InvitationNotPendingError(
                token, current.status.value if current else "UNKNOWN"
            )

        logger.info("Invitation %s cancelled by %s", token, caller.id)
        return cancelled

    async def list_invitations(
        self,
        caller: AuthenticatedUser,
        status: Optional[InvitationStatus] = None,
    ) -> list[AnyInvitation]:
        with downstream("list_invitations"):
            if caller.is_admin:
                return self._invitations.list_all(status)
            if caller.role == Role.THERAPIST:
                return self._invitations.list_issued_by(caller.id, status)
        raise PermissionDeniedError("Only admins and therapists can list invitations")

    async def expire_stale(self, now: Optional[datetime] = None) -> int:
        now = now or _now()
        expired = 0
        with downstream("expire_invitations"):
            for invitation in self._invitations.list_expired_pending(now):
                if self._invitations.transition(invitation, InvitationStatus.EXPIRED):
                    expired += 1
        if expired:
            logger.info("Expired %d stale invitations", expired)
        return expired

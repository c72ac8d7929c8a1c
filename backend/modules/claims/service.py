"""
Claims propagation service.

Derives the claims of new principals from their profiles, applies admin
claim edits, and resolves the claims of callers whose tokens predate
propagation. Every write goes through ClaimsWriter.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from shared.exceptions import (
    InvalidArgumentError,
    NotFoundError,
    PermissionDeniedError,
    downstream,
)
from shared.models import AuthenticatedUser, Role, tenant_id_for
from modules.identity.interfaces import IIdentityDirectory
from modules.identity.models import ClaimSet
from modules.profiles.repository import TherapistProfileRepository, UserProfileRepository

from .writer import ClaimsWriter

logger = logging.getLogger(__name__)


class ClaimsService:
    """Implementation of IClaimsService."""

    def __init__(
        self,
        directory: IIdentityDirectory,
        users: UserProfileRepository,
        therapists: TherapistProfileRepository,
        writer: Optional[ClaimsWriter] = None,
    ):
        self._directory = directory
        self._users = users
        self._therapists = therapists
        self._writer = writer or ClaimsWriter(directory)

    @property
    def writer(self) -> ClaimsWriter:
        return self._writer

    async def on_principal_created(self, uid: str) -> Optional[ClaimSet]:
        """Derive and write initial claims from the user's profile."""
        with downstream("read_user_profile"):
            profile = self._users.get(uid)
        if profile is None:
            logger.info("No profile for new principal %s yet; skipping claims", uid)
            return None

        if profile.role == Role.PATIENT:
            claims = ClaimSet(role=Role.PATIENT, therapist_ids=[])
        elif profile.role == Role.THERAPIST:
            with downstream("read_therapist_profile"):
                therapist = self._therapists.get(uid)
            claims = ClaimSet(
                role=Role.THERAPIST,
                tenant_id=tenant_id_for(uid),
                is_verified=bool(therapist and therapist.is_verified),
            )
        else:
            claims = ClaimSet(role=profile.role)

        with downstream("seed_claims"):
            written = self._writer.seed(uid, claims)
        if written is not None:
            logger.info("Initial claims set for %s: %s", uid, written.to_claims())
        return written

    async def set_custom_claims(
        self,
        caller: AuthenticatedUser,
        uid: str,
        claims: ClaimSet,
    ) -> ClaimSet:
        """Merge admin-supplied claims and sync therapist verification."""
        if not caller.is_admin:
            raise PermissionDeniedError("Only admins can set custom claims")

        updates = claims.model_dump(exclude_unset=True)
        if not uid or not updates:
            raise InvalidArgumentError("Missing uid or claims")

        with downstream("read_claims"):
            current = self._writer.read(uid)

        merged = ClaimSet.model_validate({**current.model_dump(), **updates})
        if merged.role == Role.THERAPIST and merged.tenant_id not in (None, tenant_id_for(uid)):
            raise InvalidArgumentError(
                "A therapist's tenantId is derived from its uid and cannot be changed",
                details={"tenant_id": merged.tenant_id},
            )

        sync_profile = merged.role == Role.THERAPIST and "is_verified" in updates
        if sync_profile:
            with downstream("read_therapist_profile"):
                therapist = self._therapists.get(uid)
            if therapist is None:
                raise NotFoundError(
                    f"Therapist profile not found: {uid}",
                    details={"uid": uid},
                )

        with downstream("write_claims"):
            written = self._writer.merge(uid, updates, current=current)

        if sync_profile:
            verified = bool(merged.is_verified)
            with downstream("sync_therapist_profile"):
                self._therapists.update(
                    uid,
                    is_verified=verified,
                    verified_by=caller.id if verified else None,
                    verified_at=datetime.now(timezone.utc).isoformat() if verified else None,
                )
            logger.info("Therapist %s verification set to %s by %s", uid, verified, caller.id)

        return written

    async def resolve_claims(self, uid: str, token_claims: ClaimSet) -> ClaimSet:
        """Re-read claims once when the token has no role yet."""
        if token_claims.role is not None:
            return token_claims
        with downstream("refresh_claims"):
            refreshed = self._directory.force_claims_refresh(uid)
        if refreshed.role is None:
            logger.info("Claims for %s not propagated yet", uid)
        return refreshed

    async def get_claims(self, uid: str) -> ClaimSet:
        with downstream("read_claims"):
            return self._writer.read(uid)

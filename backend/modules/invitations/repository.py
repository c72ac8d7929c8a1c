"""
Invitation repositories.

Admin-issued and therapist-issued invitations live in two collections,
``user_invitations`` and ``patient_invitations``, both keyed by token.
InvitationRepository presents them as one ledger.

Note: These repositories do NOT perform authorization checks.
"""

from datetime import datetime
from typing import Any, Optional, Union

from shared.repository import BaseRepository
from .models import (
    AdminInvitation,
    InvitationSource,
    InvitationStatus,
    TherapistInvitation,
)

AnyInvitation = Union[AdminInvitation, TherapistInvitation]


class _InvitationCollection:
    """Status transitions and queries shared by both collections."""

    def get(self, token: str):
        return self._get(token)

    def create(self, invitation):
        """
        Persist a new invitation.

        Raises:
            DocumentAlreadyExistsError: If the token is already taken
        """
        document = self._store.create(self.collection, invitation.token, self._to_document(invitation))
        return self._from_document(document)

    def transition(
        self,
        token: str,
        status: InvitationStatus,
        **changes: Any,
    ):
        """
        Move a PENDING invitation to another status.

        Conditional on the stored status still being PENDING.

        Returns:
            The updated invitation, or None if it was no longer PENDING
        """
        document = self._store.update(
            self.collection,
            token,
            {"status": status.value, **changes},
            expected={"status": InvitationStatus.PENDING.value},
        )
        return self._from_document(document) if document else None

    def list_matching(self, filters: Optional[dict[str, Any]] = None) -> list:
        documents = self._store.query(
            self.collection,
            filters=filters,
            order_by="created_at",
            descending=True,
        )
        return [self._from_document(d) for d in documents]

    def list_expired_pending(self, now: datetime) -> list:
        documents = self._store.query(
            self.collection,
            filters={"status": InvitationStatus.PENDING.value},
            less_than={"expires_at": now.isoformat()},
        )
        return [self._from_document(d) for d in documents]


class AdminInvitationRepository(_InvitationCollection, BaseRepository[AdminInvitation]):
    model = AdminInvitation
    collection = "user_invitations"


class TherapistInvitationRepository(_InvitationCollection, BaseRepository[TherapistInvitation]):
    model = TherapistInvitation
    collection = "patient_invitations"


class InvitationRepository:
    """Both invitation collections behind one token-keyed lookup."""

    def __init__(self, store):
        self.admin = AdminInvitationRepository(store)
        self.therapist = TherapistInvitationRepository(store)

    def _collection(self, invitation: AnyInvitation) -> _InvitationCollection:
        if invitation.source == InvitationSource.ADMIN:
            return self.admin
        return self.therapist

    def find(self, token: str) -> Optional[AnyInvitation]:
        """Look up a token, admin invitations first."""
        return self.admin.get(token) or self.therapist.get(token)

    def create(self, invitation: AnyInvitation) -> AnyInvitation:
        return self._collection(invitation).create(invitation)

    def transition(
        self,
        invitation: AnyInvitation,
        status: InvitationStatus,
        **changes: Any,
    ) -> Optional[AnyInvitation]:
        return self._collection(invitation).transition(invitation.token, status, **changes)

    def list_all(self, status: Optional[InvitationStatus] = None) -> list[AnyInvitation]:
        filters = {"status": status.value} if status else None
        return self._newest_first(self.admin.list_matching(filters) + self.therapist.list_matching(filters))

    def list_issued_by(
        self,
        issuer_id: str,
        status: Optional[InvitationStatus] = None,
    ) -> list[AnyInvitation]:
        admin_filters: dict[str, Any] = {"invited_by": issuer_id}
        therapist_filters: dict[str, Any] = {"therapist_id": issuer_id}
        if status:
            admin_filters["status"] = therapist_filters["status"] = status.value
        return self._newest_first(
            self.admin.list_matching(admin_filters) + self.therapist.list_matching(therapist_filters)
        )

    def list_expired_pending(self, now: datetime) -> list[AnyInvitation]:
        return self.admin.list_expired_pending(now) + self.therapist.list_expired_pending(now)

    @staticmethod
    def _newest_first(invitations: list[AnyInvitation]) -> list[AnyInvitation]:
        return sorted(invitations, key=lambda i: i.created_at, reverse=True)

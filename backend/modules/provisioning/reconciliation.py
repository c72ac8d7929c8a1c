"""
Orphaned principal reconciliation.

Account creation makes the principal first and the profile documents
after it. When a later step fails, the principal is left without a
UserProfile: it can sign in but has no role. Rather than rolling back in
band, this sweep finds such principals once they are older than a grace
period (so in-flight provisioning is not mistaken for failure) and
reports or deletes them.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from shared.config import Settings, get_settings
from shared.exceptions import downstream
from shared.models import Role
from modules.identity.interfaces import IIdentityDirectory
from modules.profiles.repository import UserProfileRepository

from .models import OrphanPrincipal, OrphanReport

logger = logging.getLogger(__name__)


class OrphanReconciler:
    """Finds and optionally deletes principals that have no profile."""

    def __init__(
        self,
        directory: IIdentityDirectory,
        users: UserProfileRepository,
        settings: Optional[Settings] = None,
    ):
        self._directory = directory
        self._users = users
        self._settings = settings or get_settings()

    def find_orphans(self, now: Optional[datetime] = None) -> list[OrphanPrincipal]:
        """
        List principals without a UserProfile older than the grace period.

        Admin principals and principals of unknown age are never reported.
        """
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(minutes=self._settings.orphan_grace_period_minutes)

        with downstream("list_principals"):
            principals = self._directory.list_principals()
            profiled = self._users.list_uids()

        return [
            OrphanPrincipal(uid=p.id, email=p.email, created_at=p.created_at)
            for p in principals
            if p.id not in profiled
            and p.claims.role != Role.ADMIN
            and p.created_at is not None
            and p.created_at < cutoff
        ]

    def sweep(self, delete: bool = False, now: Optional[datetime] = None) -> OrphanReport:
        """Report orphans, deleting them when ``delete`` is set."""
        orphans = self.find_orphans(now)
        for orphan in orphans:
            logger.warning("Orphaned principal %s (%s)", orphan.uid, orphan.email)

        deleted = 0
        if delete:
            for orphan in orphans:
                with downstream("delete_principal"):
                    self._directory.delete_principal(orphan.uid)
                deleted += 1
            logger.info("Deleted %d orphaned principals", deleted)

        return OrphanReport(orphans=orphans, deleted=deleted)

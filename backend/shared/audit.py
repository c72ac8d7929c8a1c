"""
Platform audit trail.

Every provisioning action appends an entry to the ``audit_logs``
collection. Entries are scoped: ``admin`` for administrator actions,
``system`` for cross-tenant operations, or a tenant id for actions inside
one therapist's practice.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field

from .repository import BaseRepository

ADMIN_SCOPE = "admin"
SYSTEM_SCOPE = "system"


class AuditLogEntry(BaseModel):
    """A single platform audit record."""

    scope: str = Field(..., description="admin, system, or a tenant id")
    action: str = Field(..., description="Action name, e.g. CREATE_THERAPIST")
    performed_by: Optional[str] = Field(None, description="Acting principal")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    fields: dict[str, Any] = Field(default_factory=dict, description="Action specific data")


class AuditLogRepository(BaseRepository[AuditLogEntry]):
    """Append-only access to the audit trail."""

    model = AuditLogEntry
    collection = "audit_logs"

    def record(
        self,
        scope: str,
        action: str,
        performed_by: Optional[str] = None,
        **fields: Any,
    ) -> str:
        """Append an entry and return its key."""
        entry = AuditLogEntry(
            scope=scope,
            action=action,
            performed_by=performed_by,
            fields=fields,
        )
        return self._store.add(self.collection, self._to_document(entry))

    def list_for_scope(self, scope: str, limit: int = 100) -> list[AuditLogEntry]:
        documents = self._store.query(
            self.collection,
            filters={"scope": scope},
            order_by="timestamp",
            descending=True,
            limit=limit,
        )
        return [self._from_document(d) for d in documents]

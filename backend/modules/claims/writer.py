"""
The single writer of authorization claims.

Claims are global mutable state keyed by uid and touched from several
call paths (the creation trigger, admin edits, relationship changes). All
of them go through ClaimsWriter, which always reads the current claims,
merges the change, and writes the full set back. There is no optimistic
locking: concurrent writers for the same uid are last-writer-wins.
"""

import logging
from typing import Any, Optional

from modules.identity.interfaces import IIdentityDirectory
from modules.identity.models import ClaimSet

logger = logging.getLogger(__name__)


class ClaimsWriter:
    """Read-merge-write access to principal claims."""

    def __init__(self, directory: IIdentityDirectory):
        self._directory = directory

    def read(self, uid: str) -> ClaimSet:
        """Return the authoritative current claims of a principal."""
        return self._directory.force_claims_refresh(uid)

    def merge(
        self,
        uid: str,
        updates: dict[str, Any],
        current: Optional[ClaimSet] = None,
    ) -> ClaimSet:
        """
        Merge claim fields into the current claims.

        Args:
            uid: Principal ID
            updates: ClaimSet field names and their new values. A value
                of None removes the claim.
            current: Claims already read by the caller in this operation.
                Read from the directory when omitted.

        Returns:
            The claims as written
        """
        if current is None:
            current = self.read(uid)
        merged = ClaimSet.model_validate({**current.model_dump(), **updates})
        self._directory.set_claims(uid, merged)
        logger.debug("Claims for %s set to %s", uid, merged.to_claims())
        return merged

    def seed(self, uid: str, claims: ClaimSet) -> Optional[ClaimSet]:
        """
        Write initial claims unless the principal already carries a role.

        Returns:
            The claims written, or None if a role was already present
        """
        current = self.read(uid)
        if current.role is not None:
            logger.info("Principal %s already has role %s; not seeding", uid, current.role.value)
            return None
        return self.merge(uid, claims.model_dump(exclude_none=True), current=current)

    def add_therapist(self, patient_id: str, therapist_id: str) -> ClaimSet:
        """Append a therapist to a patient's therapistIds if absent."""
        current = self.read(patient_id)
        therapist_ids = list(current.therapist_ids or [])
        if therapist_id in therapist_ids:
            return current
        therapist_ids.append(therapist_id)
        return self.merge(patient_id, {"therapist_ids": therapist_ids}, current=current)

    def replace_therapist(
        self,
        patient_id: str,
        old_therapist_id: str,
        new_therapist_id: str,
    ) -> ClaimSet:
        """Remove one therapist from a patient's therapistIds and append another."""
        current = self.read(patient_id)
        therapist_ids = [t for t in (current.therapist_ids or []) if t != old_therapist_id]
        if new_therapist_id not in therapist_ids:
            therapist_ids.append(new_therapist_id)
        return self.merge(patient_id, {"therapist_ids": therapist_ids}, current=current)

"""
Profile repositories for document access.

Encapsulates document access and mapping for the profile collections:
- users
- therapists
- patients

Note: These repositories do NOT perform authorization checks.
The service layer is responsible for verifying the caller.
"""

from typing import Any, Optional

from shared.repository import BaseRepository
from .models import PatientProfile, TherapistProfile, UserProfile


class UserProfileRepository(BaseRepository[UserProfile]):
    """Repository for base user profiles."""

    model = UserProfile
    collection = "users"

    def get(self, uid: str) -> Optional[UserProfile]:
        return self._get(uid)

    def create(self, profile: UserProfile) -> UserProfile:
        """
        Create a profile if none exists for the uid.

        Raises:
            DocumentAlreadyExistsError: If a profile already exists
        """
        document = self._store.create(self.collection, profile.uid, self._to_document(profile))
        return self._from_document(document)

    def update(self, uid: str, **changes: Any) -> Optional[UserProfile]:
        document = self._store.update(self.collection, uid, changes)
        return self._from_document(document) if document else None

    def list_uids(self) -> set[str]:
        return {d["id"] for d in self._store.query(self.collection)}


class TherapistProfileRepository(BaseRepository[TherapistProfile]):
    """Repository for therapist profiles."""

    model = TherapistProfile
    collection = "therapists"

    def get(self, uid: str) -> Optional[TherapistProfile]:
        return self._get(uid)

    def create(self, profile: TherapistProfile) -> TherapistProfile:
        document = self._store.create(self.collection, profile.uid, self._to_document(profile))
        return self._from_document(document)

    def update(self, uid: str, **changes: Any) -> Optional[TherapistProfile]:
        document = self._store.update(self.collection, uid, changes)
        return self._from_document(document) if document else None


class PatientProfileRepository(BaseRepository[PatientProfile]):
    """Repository for patient profiles."""

    model = PatientProfile
    collection = "patients"

    def get(self, uid: str) -> Optional[PatientProfile]:
        return self._get(uid)

    def create(self, profile: PatientProfile) -> PatientProfile:
        document = self._store.create(self.collection, profile.uid, self._to_document(profile))
        return self._from_document(document)

"""
Relationship module exceptions.
"""

from shared.exceptions import NotFoundError


class RelationshipNotFoundError(NotFoundError):
    """Raised when a therapist and patient have no relationship record."""

    def __init__(self, therapist_id: str, patient_id: str):
        super().__init__(
            "No relationship between this therapist and patient",
            code="RELATIONSHIP_NOT_FOUND",
            details={"therapist_id": therapist_id, "patient_id": patient_id},
        )


class TherapistNotFoundError(NotFoundError):
    """Raised when a referenced therapist has no profile."""

    def __init__(self, therapist_id: str):
        super().__init__(
            f"Therapist not found: {therapist_id}",
            code="THERAPIST_NOT_FOUND",
            details={"therapist_id": therapist_id},
        )


class PatientNotFoundError(NotFoundError):
    """Raised when a referenced patient does not exist."""

    def __init__(self, patient_id: str):
        super().__init__(
            f"Patient not found: {patient_id}",
            code="PATIENT_NOT_FOUND",
            details={"patient_id": patient_id},
        )

"""
Profiles module.

Document-store records describing each account: the base user profile
plus the therapist or patient profile.
"""

from .models import (
    BankInfo,
    EmergencyContact,
    PatientProfile,
    TherapistProfile,
    UserProfile,
)
from .repository import (
    PatientProfileRepository,
    TherapistProfileRepository,
    UserProfileRepository,
)

__all__ = [
    "BankInfo",
    "EmergencyContact",
    "PatientProfile",
    "TherapistProfile",
    "UserProfile",
    "PatientProfileRepository",
    "TherapistProfileRepository",
    "UserProfileRepository",
]

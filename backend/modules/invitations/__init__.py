"""
Invitations module.

The invitation ledger: time-boxed, single-use tokens that authorize
account creation for a role and, for patients, a tenant.

Public API:
- IInvitationLedger: Interface for ledger operations
- AdminInvitation, TherapistInvitation: The two invitation variants
- Invitation exceptions: InvitationNotFoundError, InvitationExpiredError, etc.
"""

from .interfaces import IInvitationLedger, Provisioner
from .models import (
    AdminInvitation,
    Invitation,
    InvitationSource,
    InvitationStatus,
    InvitationView,
    IssuedInvitation,
    TherapistData,
    TherapistInvitation,
)
from .exceptions import (
    InvitationExpiredError,
    InvitationNotFoundError,
    InvitationNotPendingError,
    InvitationRoleMismatchError,
)

__all__ = [
    # Interface
    "IInvitationLedger",
    "Provisioner",
    # Models
    "AdminInvitation",
    "Invitation",
    "InvitationSource",
    "InvitationStatus",
    "InvitationView",
    "IssuedInvitation",
    "TherapistData",
    "TherapistInvitation",
    # Exceptions
    "InvitationExpiredError",
    "InvitationNotFoundError",
    "InvitationNotPendingError",
    "InvitationRoleMismatchError",
]

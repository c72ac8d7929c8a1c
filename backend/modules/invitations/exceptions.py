"""
Invitation module exceptions.
"""

from shared.exceptions import (
    DeadlineExceededError,
    FailedPreconditionError,
    InvalidArgumentError,
    NotFoundError,
)


class InvitationNotFoundError(NotFoundError):
    """Raised when no invitation of either kind has the token."""

    def __init__(self, token: str):
        super().__init__(
            "Invalid invitation token",
            code="INVITATION_NOT_FOUND",
            details={"token": token},
        )


class InvitationNotPendingError(FailedPreconditionError):
    """Raised when an invitation has left the PENDING state."""

    def __init__(self, token: str, status: str):
        super().__init__(
            f"Invitation has already been {status.lower()}",
            code="INVITATION_NOT_PENDING",
            details={"token": token, "invitation_status": status},
        )
        self.invitation_status = status


class InvitationExpiredError(DeadlineExceededError):
    """Raised when a PENDING invitation is found past its expiry."""

    def __init__(self, token: str):
        super().__init__(
            "Invitation has expired",
            code="INVITATION_EXPIRED",
            details={"token": token},
        )


class InvitationRoleMismatchError(InvalidArgumentError):
    """Raised when redeeming an invitation for a different role."""

    def __init__(self, token: str, expected: str, actual: str):
        super().__init__(
            f"Invitation is for a {actual.lower()} account, not a {expected.lower()} account",
            code="INVITATION_ROLE_MISMATCH",
            details={"token": token, "expected_role": expected, "invitation_role": actual},
        )

"""
Identity module exceptions.

These are native errors of the identity directory. Callers do not surface
them directly; shared.exceptions.downstream() remaps them into the error
taxonomy.
"""

from shared.exceptions import AlreadyExistsError, DownstreamError, NotFoundError


class IdentityDirectoryError(DownstreamError):
    """Base exception for identity directory failures."""

    pass


class EmailAlreadyExistsError(IdentityDirectoryError):
    """Raised when a principal with the email already exists."""

    maps_to = AlreadyExistsError

    def __init__(self, email: str):
        super().__init__("A user with this email already exists")
        self.email = email


class PrincipalNotFoundError(IdentityDirectoryError):
    """Raised when no principal matches the lookup."""

    maps_to = NotFoundError

    def __init__(self, lookup: str):
        super().__init__(f"User not found: {lookup}")
        self.lookup = lookup

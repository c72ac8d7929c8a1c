"""
Base exception classes for the Mindcare backend.

Every error surfaced to a caller belongs to a small fixed taxonomy. Each
taxonomy member carries the wire status reported to clients and the HTTP
status used by the API layer. Modules define their own exceptions by
subclassing one of these.

Errors raised by the identity directory and the document store are *native*
errors: plain exceptions that declare (via ``maps_to``) which taxonomy member
they become. ``downstream()`` performs that remapping at every orchestrated
step.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional, Any

logger = logging.getLogger(__name__)


class MindcareError(Exception):
    """
    Base exception for all Mindcare errors.

    All custom exceptions should inherit from one of the taxonomy
    subclasses below rather than from this class directly.
    """

    status: str = "internal"
    http_status: int = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "status": self.status,
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class UnauthenticatedError(MindcareError):
    """Missing or invalid credentials."""

    status = "unauthenticated"
    http_status = 401


class PermissionDeniedError(MindcareError):
    """The caller's claims do not authorize the action."""

    status = "permission-denied"
    http_status = 403


class InvalidArgumentError(MindcareError):
    """Missing or malformed input, checked before any write."""

    status = "invalid-argument"
    http_status = 400


class AlreadyExistsError(MindcareError):
    """Email or token collision."""

    status = "already-exists"
    http_status = 409


class NotFoundError(MindcareError):
    """Token or referenced record absent."""

    status = "not-found"
    http_status = 404


class FailedPreconditionError(MindcareError):
    """The target is not in a state that allows the operation."""

    status = "failed-precondition"
    http_status = 412


class DeadlineExceededError(MindcareError):
    """A time-boxed resource is past its deadline."""

    status = "deadline-exceeded"
    http_status = 410


class InternalError(MindcareError):
    """Unexpected downstream failure."""

    status = "internal"
    http_status = 500


class DownstreamError(Exception):
    """
    Base class for native errors raised by external collaborators.

    Subclasses set ``maps_to`` to the taxonomy class they should be
    reported as. Anything left at the default is reported as internal.
    """

    maps_to: type[MindcareError] = InternalError


@contextmanager
def downstream(step: str) -> Iterator[None]:
    """
    Remap errors raised inside a provisioning step into the taxonomy.

    Taxonomy errors pass through untouched. Native collaborator errors
    become their declared taxonomy class; anything else becomes
    ``InternalError``. The original exception is chained.
    """
    try:
        yield
    except MindcareError:
        raise
    except DownstreamError as e:
        error_cls = e.maps_to
        if error_cls is InternalError:
            logger.exception("Step '%s' failed", step)
        raise error_cls(str(e), details={"step": step}) from e
    except Exception as e:
        logger.exception("Step '%s' failed unexpectedly", step)
        raise InternalError(str(e) or type(e).__name__, details={"step": step}) from e

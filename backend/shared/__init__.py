"""
Shared infrastructure for the Mindcare backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Supabase client factory
- document_store: Document store protocol and adapters
- repository: Base repository over the document store
- audit: Platform audit trail
- exceptions: Error taxonomy

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .database import get_supabase_client, reset_client_cache
from .exceptions import (
    MindcareError,
    UnauthenticatedError,
    PermissionDeniedError,
    InvalidArgumentError,
    AlreadyExistsError,
    NotFoundError,
    FailedPreconditionError,
    DeadlineExceededError,
    InternalError,
    DownstreamError,
    downstream,
)
from .models import AuthenticatedUser, Role

__all__ = [
    "Settings",
    "get_settings",
    "get_supabase_client",
    "reset_client_cache",
    "MindcareError",
    "UnauthenticatedError",
    "PermissionDeniedError",
    "InvalidArgumentError",
    "AlreadyExistsError",
    "NotFoundError",
    "FailedPreconditionError",
    "DeadlineExceededError",
    "InternalError",
    "DownstreamError",
    "downstream",
    "AuthenticatedUser",
    "Role",
]

"""
Error response models.

Standardized error responses for the API.
"""

from pydantic import BaseModel
from typing import Any, Optional


class ErrorResponse(BaseModel):
    """Standard error response format."""

    status: str
    error: str
    message: str
    details: Optional[dict[str, Any]] = None


class ValidationErrorResponse(BaseModel):
    """Validation error response format."""

    status: str = "invalid-argument"
    error: str = "VALIDATION_ERROR"
    message: str = "Request validation failed"
    details: list[dict]

"""
Health check endpoints.

Provides endpoints for monitoring application health and readiness.
"""

from fastapi import APIRouter
from pydantic import BaseModel

from ..dependencies import get_container

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    status: str
    storage: str
    auth: str


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns 200 if the API is running.
    """
    return HealthResponse(status="healthy", version=get_container().settings.app_version)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check() -> ReadinessResponse:
    """
    Readiness check endpoint.

    Reports whether the backing services and token verification are
    configured.
    """
    settings = get_container().settings
    if settings.storage_backend == "memory":
        storage = "memory"
    elif settings.supabase_url and settings.supabase_service_role_key:
        storage = "supabase"
    else:
        storage = "unconfigured"
    auth = "configured" if settings.supabase_jwt_secret else "unconfigured"

    ready = storage != "unconfigured" and auth == "configured"
    return ReadinessResponse(
        status="ready" if ready else "not_ready",
        storage=storage,
        auth=auth,
    )

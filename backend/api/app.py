"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shared.config import get_settings
from shared.exceptions import MindcareError, UnauthenticatedError
from modules.claims.routes import router as claims_router, hooks_router
from modules.invitations.routes import router as invitations_router, admin_router as invitations_admin_router
from modules.provisioning.routes import admin_router as provisioning_admin_router, registration_router
from modules.relationships.routes import router as relationships_router

from .models.errors import ErrorResponse, ValidationErrorResponse
from .routes import health, users

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs startup and shutdown logic.
    """
    # Startup
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(
        "Starting %s on %s:%s (storage: %s)",
        settings.app_name, settings.host, settings.port, settings.storage_backend,
    )
    yield
    # Shutdown
    logger.info("Shutting down %s", settings.app_name)


async def mindcare_error_handler(request: Request, exc: MindcareError) -> JSONResponse:
    """Render taxonomy errors with their wire status."""
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthenticatedError) else None
    body = ErrorResponse(**exc.to_dict())
    return JSONResponse(
        status_code=exc.http_status,
        content=jsonable_encoder(body),
        headers=headers,
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed requests as invalid-argument."""
    body = ValidationErrorResponse(details=jsonable_encoder(exc.errors()))
    return JSONResponse(status_code=400, content=jsonable_encoder(body))


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Invitation-based identity and relationship provisioning",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    app.add_exception_handler(MindcareError, mindcare_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # Register routes
    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(users.router, prefix="/api/users", tags=["users"])
    app.include_router(provisioning_admin_router, prefix="/api/admin", tags=["admin"])
    app.include_router(invitations_admin_router, prefix="/api/admin", tags=["admin"])
    app.include_router(claims_router, prefix="/api/admin/users", tags=["admin"])
    app.include_router(invitations_router, prefix="/api/invitations", tags=["invitations"])
    app.include_router(registration_router, prefix="/api/invitations", tags=["invitations"])
    app.include_router(relationships_router, prefix="/api/patients", tags=["patients"])
    app.include_router(hooks_router, prefix="/api/hooks", tags=["hooks"])

    return app


# Application instance for uvicorn
app = create_app()

"""FastAPI application factory and configuration.

This module provides the application factory function for creating
and configuring the FastAPI application with middleware, routes,
domain error handlers and lifecycle handlers.
"""

import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from roledesk.core.config import get_settings
from roledesk.core.logging import (
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
)
from roledesk.domain.exceptions import (
    AlreadySaving,
    CatalogUnavailable,
    InvariantViolation,
    RoleNotFound,
    UnknownPermission,
    UnknownTemplate,
    ValidationError,
)
from roledesk.infrastructure.persistence.database import (
    close_database,
    get_db_manager,
    init_database,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Configures logging and initializes the database on startup, and
    disposes of the database engine on shutdown.
    """
    settings = get_settings()
    configure_logging(settings)

    logger.info(
        "Starting RoleDesk",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    try:
        await init_database()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    yield

    logger.info("Shutting down RoleDesk")
    await close_database()
    logger.info("Database connection closed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Role and permission management",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_health_check(app)
    register_routes(app)
    register_exception_handlers(app)
    register_middleware(app)

    return app


def register_health_check(app: FastAPI) -> None:
    """Register health check endpoints.

    Args:
        app: FastAPI application instance.
    """

    @app.get("/health", tags=["health"])
    async def health_check():
        """Basic health check. Does not touch the database."""
        return {
            "status": "healthy",
            "service": "RoleDesk",
            "version": get_settings().app_version,
        }

    @app.get("/ready", tags=["health"])
    async def readiness_check():
        """Readiness check including database connectivity."""
        db_healthy = await get_db_manager().check_connection()

        if db_healthy:
            return {
                "status": "ready",
                "service": "RoleDesk",
                "version": get_settings().app_version,
                "database": "connected",
            }
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "service": "RoleDesk",
                "database": "disconnected",
            },
        )


def register_routes(app: FastAPI) -> None:
    """Register API routes.

    Args:
        app: FastAPI application instance.
    """
    from roledesk.infrastructure.api.routes import access_control_router

    settings = get_settings()

    app.include_router(
        access_control_router,
        prefix=f"{settings.api_prefix}/access-control",
        tags=["access-control"],
    )

    @app.get(settings.api_prefix, tags=["root"])
    async def api_root():
        """API root endpoint."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "api_version": "v1",
        }


def _error_response(status_code: int, error: str, exc: Exception, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "detail": str(exc), **extra},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers mapping domain errors to HTTP responses.

    Args:
        app: FastAPI application instance.
    """

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        status_code = (
            status.HTTP_409_CONFLICT
            if exc.code == "duplicate_name"
            else status.HTTP_400_BAD_REQUEST
        )
        logger.info(
            "Role validation failed",
            path=str(request.url.path),
            field=exc.field,
            code=exc.code,
        )
        return _error_response(
            status_code, "Validation error", exc, field=exc.field, code=exc.code
        )

    @app.exception_handler(RoleNotFound)
    async def role_not_found_handler(request: Request, exc: RoleNotFound):
        logger.info("Role not found", role_id=exc.role_id)
        return _error_response(status.HTTP_404_NOT_FOUND, "Not found", exc)

    @app.exception_handler(UnknownTemplate)
    async def unknown_template_handler(request: Request, exc: UnknownTemplate):
        return _error_response(status.HTTP_404_NOT_FOUND, "Not found", exc)

    @app.exception_handler(UnknownPermission)
    async def unknown_permission_handler(request: Request, exc: UnknownPermission):
        logger.info("Unknown permission ids", permission_ids=sorted(exc.permission_ids))
        return _error_response(
            status.HTTP_400_BAD_REQUEST,
            "Unknown permission",
            exc,
            permission_ids=sorted(exc.permission_ids),
        )

    @app.exception_handler(InvariantViolation)
    async def invariant_violation_handler(request: Request, exc: InvariantViolation):
        return _error_response(status.HTTP_400_BAD_REQUEST, "Invalid operation", exc)

    @app.exception_handler(AlreadySaving)
    async def already_saving_handler(request: Request, exc: AlreadySaving):
        return _error_response(status.HTTP_409_CONFLICT, "Save in progress", exc)

    @app.exception_handler(CatalogUnavailable)
    async def catalog_unavailable_handler(request: Request, exc: CatalogUnavailable):
        logger.warning("Permission catalog unavailable", error=str(exc))
        return _error_response(
            status.HTTP_503_SERVICE_UNAVAILABLE, "Permission catalog unavailable", exc
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        logger.error(
            "Unhandled exception",
            path=str(request.url),
            method=request.method,
            error=str(exc),
            exc_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal server error",
                "detail": str(exc) if get_settings().debug else "An unexpected error occurred",
            },
        )


def register_middleware(app: FastAPI) -> None:
    """Register custom middleware.

    Args:
        app: FastAPI application instance.
    """

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Log every request and propagate the correlation ID."""
        correlation_id = request.headers.get("X-Correlation-ID", f"cid_{uuid.uuid4().hex[:12]}")
        bind_correlation_id(correlation_id)

        logger.info(
            "Request started",
            method=request.method,
            path=str(request.url.path),
        )

        try:
            response = await call_next(request)
            logger.info(
                "Request completed",
                method=request.method,
                path=str(request.url.path),
                status_code=response.status_code,
            )
            response.headers["X-Correlation-ID"] = correlation_id
            return response
        finally:
            clear_context()


app = create_app()

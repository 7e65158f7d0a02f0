"""FastAPI application setup."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from collegeadmin.api.dependencies import close_services, init_services
from collegeadmin.api.models import error_response
from collegeadmin.api.routes import admin, auth, health, students
from collegeadmin.config import Settings
from collegeadmin.errors import CollegeAdminError, ValidationError

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger("collegeadmin.api")

API_PREFIX = "/api"


def _field_name(loc: tuple[int | str, ...]) -> str:
    # Drop the leading "body"/"query"/"path" segment
    parts = [str(p) for p in loc[1:]] if len(loc) > 1 else [str(p) for p in loc]
    return ".".join(parts)


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain and validation errors onto the error envelope.

    The text of unexpected exceptions is hidden when the app runs with
    production settings.
    """

    @app.exception_handler(CollegeAdminError)
    async def domain_error_handler(_request: Request, exc: CollegeAdminError) -> JSONResponse:
        errors = exc.errors if isinstance(exc, ValidationError) else None
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(exc.message, errors),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # Unknown routes and unsupported methods
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = [
            {"field": _field_name(tuple(e.get("loc", ()))), "message": str(e.get("msg", ""))}
            for e in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_response("Validation error", errors),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        settings = getattr(request.app.state, "settings", None)
        production = settings is None or settings.is_production
        message = "Internal server error" if production else str(exc) or "Internal server error"
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_response(message),
        )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    settings = app.state.settings if app.state.settings is not None else Settings.from_env()
    app.state.settings = settings
    init_services(settings)
    logger.info(
        "College Admin API started (env=%s, db=%s)", settings.environment, settings.database_path
    )

    yield
    # Shutdown
    close_services()
    logger.info("College Admin API stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Process settings. Read from the environment at startup if omitted.
    """
    app = FastAPI(
        title="College Admin API",
        description="REST API for college administrators and students",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store config for lifespan manager
    app.state.settings = settings

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url] if settings is not None else ["*"],
        allow_credentials=settings is not None,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(auth.router, prefix=API_PREFIX)
    app.include_router(admin.router, prefix=API_PREFIX)
    app.include_router(students.router, prefix=API_PREFIX)
    app.include_router(health.router, prefix=API_PREFIX)

    return app


# Default app instance
app = create_app()

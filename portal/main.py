"""FastAPI application entry point.

This module creates and configures the FastAPI application, including:
- CSRF middleware (plus session middleware for session-backed CSRF)
- Exception handlers for API errors
- API v1 router mounting
- Health check endpoint
"""

import secrets

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from portal.api.v1.router import router as v1_router
from portal.core.config import Settings
from portal.core.config import settings as default_settings
from portal.core.csrf_middleware import CsrfMiddleware
from portal.core.errors import APIError
from portal.core.logging import setup_logging
from portal.core.responses import ErrorDetail, ErrorResponse

logger = structlog.get_logger()


def api_error_handler(_request: Request, exc: APIError) -> JSONResponse:
    """Handle custom API errors.

    Args:
        request: The incoming request.
        exc: The APIError that was raised.

    Returns:
        JSONResponse with error envelope and appropriate status code.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(
                code=exc.code,
                message=exc.message,
                details=exc.details,
            )
        ).model_dump(),
    )


def validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors from FastAPI.

    Converts FastAPI's validation errors to the standard error envelope.

    Args:
        request: The incoming request.
        exc: The RequestValidationError from Pydantic.

    Returns:
        JSONResponse with VALIDATION_ERROR code and field-level details.
    """
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error=ErrorDetail(
                code="VALIDATION_ERROR",
                message="Request validation failed",
                details=[
                    {"loc": list(e["loc"]), "msg": e["msg"], "type": e["type"]}
                    for e in exc.errors()
                ],
            )
        ).model_dump(),
    )


def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions.

    Returns 500 INTERNAL_ERROR without exposing stack traces.

    Args:
        request: The incoming request.
        exc: The unhandled exception.

    Returns:
        JSONResponse with generic error message (500).
    """
    logger.exception("Unhandled exception", exc_info=exc, path=str(request.url.path))

    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(
                code="INTERNAL_ERROR",
                message="An unexpected error occurred",
            )
        ).model_dump(),
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    WHY FACTORY FUNCTION:
    - Enables testing with different CSRF configurations
    - Clear separation between app creation and startup

    Args:
        settings: Settings override (module settings when None).

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or default_settings

    app = FastAPI(
        title="Portal API",
        version="1.0.0",
        description="Pagination links and CSRF protection for the article portal",
    )

    # Middleware order: Starlette uses LIFO, so the LAST added runs FIRST.
    # The session must be loaded before CSRF reads the hash from it.
    app.add_middleware(CsrfMiddleware, settings=settings)
    if settings.csrf_protection == "session":
        session_secret = settings.session_secret.get_secret_value()
        if not session_secret:
            # Development only; production requires SESSION_SECRET (see Settings)
            session_secret = secrets.token_hex(32)
        app.add_middleware(
            SessionMiddleware,
            secret_key=session_secret,
            session_cookie=settings.session_cookie_name,
            same_site=settings.cookie_samesite,
            https_only=settings.cookie_secure,
        )

    # Register exception handlers
    # Order matters: specific handlers first, then catch-all
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, internal_error_handler)

    app.include_router(v1_router, prefix="/api/v1")

    # Health check endpoint (outside versioned API)
    @app.get("/health")
    def health_check() -> dict:
        """Health check endpoint for monitoring.

        Returns:
            {"status": "healthy"} if service is running.
        """
        return {"status": "healthy"}

    return app


# Create the application instance
# Used by uvicorn: uvicorn portal.main:app
setup_logging()
app = create_app()

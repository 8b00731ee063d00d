"""
FastAPI application entry point.

This module creates and configures the FastAPI application.
Using an application factory pattern (create_app function) because:
- Easier to test with different configurations
- Explicit about initialization order

For local development:
    uvicorn cricketcoach.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.routes import assessments, health, performance, players, videos
from .config.settings import get_settings
from .core.coaching.errors import (
    EntityNotFoundError,
    PlayerHasDependentsError,
    StorageUnavailableError,
    ValidationFailedError,
)
from .infrastructure.storage.client import StorageError

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=get_settings().log_level.upper(),
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup configuration and shutdown."""
    settings = get_settings()

    logger.info(
        "Cricket Coach API starting",
        extra={
            "version": settings.api_version,
            "mock_mode": {
                "snowflake": settings.snowflake_mock_mode,
                "r2": settings.r2_mock_mode,
            }
        }
    )

    missing_fields = settings.validate_required_fields()
    if missing_fields:
        logger.error(
            "Missing required configuration",
            extra={"missing_fields": missing_fields}
        )

    yield

    logger.info("Cricket Coach API shutting down")


def _error_response(status_code: int, detail: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail, **extra})


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map domain errors to HTTP responses.

    Route handlers let coaching errors propagate; this is the only place
    that decides their status codes.
    """

    @app.exception_handler(EntityNotFoundError)
    async def not_found_handler(request: Request, exc: EntityNotFoundError):
        return _error_response(status.HTTP_404_NOT_FOUND, str(exc), kind=exc.kind)

    @app.exception_handler(ValidationFailedError)
    async def validation_handler(request: Request, exc: ValidationFailedError):
        return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc))

    @app.exception_handler(PlayerHasDependentsError)
    async def dependents_handler(request: Request, exc: PlayerHasDependentsError):
        return _error_response(
            status.HTTP_409_CONFLICT,
            str(exc),
            assessments=exc.assessments,
            videos=exc.videos,
        )

    @app.exception_handler(StorageUnavailableError)
    async def unavailable_handler(request: Request, exc: StorageUnavailableError):
        logger.error(
            "Coaching store unavailable",
            extra={"path": request.url.path, "error": str(exc)},
        )
        return _error_response(status.HTTP_503_SERVICE_UNAVAILABLE, "Coaching store unavailable")

    @app.exception_handler(StorageError)
    async def storage_handler(request: Request, exc: StorageError):
        logger.error(
            "Video storage failed",
            extra={"path": request.url.path, "error": str(exc)},
        )
        return _error_response(status.HTTP_502_BAD_GATEWAY, "Video storage failed")

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catch-all exception handler.

        Log the full error server-side but return a generic message.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error. Please contact support if this persists.",
        )


def create_app() -> FastAPI:
    """
    Application factory.

    Called once at startup, or once per test module with overridden
    dependencies.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="""
        Batting assessment records for a cricket coaching academy.

        ## Workflow

        1. **Roster**: `POST /api/v1/players`
        2. **Weekly assessment**: `POST /api/v1/players/{id}/assessments`
           - The newest assessment becomes the player's current one
        3. **Ratings**: `POST /api/v1/assessments/{id}/metrics`,
           `/problem-areas` and `/shot-assessments`
        4. **Videos**: `POST /api/v1/players/{id}/videos/upload`,
           filtered with `GET /api/v1/players/{id}/videos`
        5. **Trends**: `GET /api/v1/players/{id}/performance/chart`
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Configure allowed origins via CORS_ORIGINS environment variable
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(
        health.router,
        prefix="/health",
        tags=["Health"],
    )

    app.include_router(
        players.router,
        prefix="/api/v1/players",
        tags=["Players"],
    )

    app.include_router(
        assessments.router,
        prefix="/api/v1",
        tags=["Assessments"],
    )

    app.include_router(
        videos.router,
        prefix="/api/v1",
        tags=["Videos"],
    )

    app.include_router(
        performance.router,
        prefix="/api/v1",
        tags=["Performance"],
    )

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": "Cricket Coach API",
            "version": settings.api_version,
            "docs": "/docs",
            "health": "/health",
        }

    register_exception_handlers(app)

    logger.info(
        "FastAPI application created",
        extra={
            "title": settings.api_title,
            "version": settings.api_version,
        }
    )

    return app


# This is what uvicorn imports
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "cricketcoach.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )

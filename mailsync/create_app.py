"""
FastAPI application factory.
"""

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi_async_sqlalchemy import SQLAlchemyMiddleware

from mailsync.api.middlewares.auto_commit import AutoCommitMiddleware
from mailsync.api.routes import api_router
from mailsync.environment import EnvironmentName
from mailsync.exceptions import BaseError, ErrorType
from settings import settings

logger = logging.getLogger(__name__)


def setup_error_handlers(app: FastAPI) -> None:
    """Map application errors to ``{"error", "error_description"}`` bodies."""

    @app.exception_handler(HTTPException)
    async def handle_http_error(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code or 400, content={"error": exc.detail})

    @app.exception_handler(BaseError)
    async def handle_app_error(request: Request, exc: BaseError) -> JSONResponse:
        if 400 <= exc.status_code < 500:
            logger.warning(f"A user-related (HTTP 4xx) error occurred; {exc}", extra=exc.extra)
        else:
            logger.exception(f"An unhandled app exception occurred; {exc}", extra=exc.extra)

        return JSONResponse(
            status_code=exc.status_code, content={"error": exc.error_type.value, "error_description": exc.message}
        )

    @app.exception_handler(Exception)
    async def handle_generic_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"An unhandled exception occurred; error: {exc}")
        return JSONResponse(status_code=500, content={"error": ErrorType.UNHANDLED_EXCEPTION.value})


def include_routes(app: FastAPI) -> None:
    app.include_router(api_router, prefix="/api")

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "ok"}


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title="Mailsync API",
        description="Mailbox synchronization API over IMAP and SMTP",
        version="1.0.0",
        debug=settings.environment == EnvironmentName.DEVELOPMENT,
    )

    setup_error_handlers(app)

    # Added first so it runs after the SQLAlchemy middleware has opened the session.
    app.add_middleware(AutoCommitMiddleware)

    database_url = f"{settings.database.async_host}/{settings.database.name}"
    app.add_middleware(
        SQLAlchemyMiddleware,
        db_url=database_url,
        engine_args={
            "pool_size": settings.database.min_pool_size,
            "max_overflow": settings.database.max_pool_size - settings.database.min_pool_size,
            "pool_pre_ping": True,
            "pool_recycle": 300,
        },
    )

    include_routes(app)

    return app

"""
Middleware for automatic database commits at the end of each request.
"""

import logging
from typing import Awaitable, Callable

from fastapi import Request, Response
from fastapi_async_sqlalchemy import db
from fastapi_async_sqlalchemy.exceptions import MissingSessionError
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class AutoCommitMiddleware(BaseHTTPMiddleware):
    """
    Commits the request's database session when the response is successful.

    Application errors are rendered into responses by the exception handlers
    before they reach this middleware, so an error status rolls back as well.
    """

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        try:
            response = await call_next(request)
        except Exception as e:
            await self._rollback(f"Database transaction rolled back due to error: {e}")
            raise

        if response.status_code >= 400:
            await self._rollback(f"Database transaction rolled back for HTTP {response.status_code}")
            return response

        try:
            await db.session.commit()
            logger.debug("Database transaction committed successfully")
        except MissingSessionError:
            logger.debug("No database session found for request - skipping commit")
        except Exception as e:
            logger.warning(f"Failed to commit database transaction: {e}")

        return response

    async def _rollback(self, reason: str) -> None:
        try:
            await db.session.rollback()
            logger.info(reason)
        except MissingSessionError:
            logger.debug("No database session found for rollback - skipping rollback")
        except Exception as e:
            logger.warning(f"Failed to rollback database transaction: {e}")

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi_async_sqlalchemy import SQLAlchemyMiddleware, db
from starlette.applications import Starlette

from settings import settings


@asynccontextmanager
async def database_context(echo: bool = False) -> AsyncGenerator[None, None]:
    """
    Open a fastapi_async_sqlalchemy session outside of a request.

    Used by command line scripts so repositories work the same way they do in
    the API. The session is committed on a clean exit.
    """
    # The middleware initializes the global session factory on construction.
    SQLAlchemyMiddleware(
        Starlette(),
        db_url=f"{settings.database.async_host}/{settings.database.name}",
        engine_args={
            "echo": echo,
            "pool_size": settings.database.min_pool_size,
            "max_overflow": settings.database.max_pool_size - settings.database.min_pool_size,
        },
    )

    async with db(commit_on_exit=True):
        yield

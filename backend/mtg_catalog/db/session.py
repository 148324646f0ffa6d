"""
Database session management.

Provides async session factory and dependency injection for FastAPI.
"""
from collections.abc import AsyncGenerator

import structlog
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from mtg_catalog.core.config import settings

logger = structlog.get_logger()


def _engine_kwargs(url: str) -> dict:
    """Pool and driver options; only the asyncpg driver takes server settings."""
    if not url.startswith("postgresql+asyncpg"):
        return {}
    return {
        "pool_pre_ping": True,
        "pool_size": 20,
        "max_overflow": 30,
        "pool_recycle": 1800,
        "pool_timeout": 20,
        "connect_args": {
            "server_settings": {
                "statement_timeout": "25000",
                "application_name": "mtg_catalog_api",
            },
            "command_timeout": 25,
        },
    }


engine = create_async_engine(
    settings.database_url_computed,
    echo=False,
    **_engine_kwargs(settings.database_url_computed),
)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides an async database session.

    Commits when the request handler returns and rolls back on error.

    Usage:
        @app.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.error(
                "Database session error",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

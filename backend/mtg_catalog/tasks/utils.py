"""
Shared utilities for Celery tasks.

Provides database session management and async execution for tasks.
"""
import asyncio
from typing import Any, Coroutine

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from mtg_catalog.core.config import settings


def create_task_session_maker():
    """
    Create a new async engine and session maker for the current event loop.

    Each task creates its own engine to avoid sharing a connection pool
    across event loops.

    Returns:
        Tuple of (async_sessionmaker, engine). The engine should be disposed
        after use to free resources.
    """
    url = settings.database_url_computed
    kwargs: dict[str, Any] = {}
    if url.startswith("postgresql+asyncpg"):
        kwargs = {
            "pool_pre_ping": True,
            "pool_size": 5,
            "max_overflow": 10,
            "connect_args": {
                "server_settings": {
                    "statement_timeout": "60000",
                    "application_name": "mtg_catalog_worker",
                },
                "command_timeout": 60,
            },
        }
    engine = create_async_engine(url, **kwargs)
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    ), engine


def run_async(coro: Coroutine[Any, Any, Any]) -> Any:
    """
    Run an async function in a sync context (for Celery tasks).

    Args:
        coro: Async coroutine to execute.

    Returns:
        Result of the coroutine execution.
    """
    return asyncio.run(coro)

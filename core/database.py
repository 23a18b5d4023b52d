"""
Async PostgreSQL access (SQLAlchemy Core on asyncpg).

One engine per process, created lazily from DATABASE_URL and shared by the
admin routes and the expiry job. Callers borrow connections through the
two context managers below and never hold them across runs.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from .tables import metadata  # noqa: F401 - exported for schema tooling

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None


def _get_database_url() -> str:
    """DATABASE_URL with the asyncpg driver selected (postgresql:// is rewritten)."""
    database_url = os.environ.get("DATABASE_URL")
    if not database_url:
        raise ValueError("DATABASE_URL environment variable must be set.")

    for prefix in ("postgresql://", "postgres://"):
        if database_url.startswith(prefix):
            return "postgresql+asyncpg://" + database_url[len(prefix):]
    return database_url


def get_engine() -> AsyncEngine:
    """Get or create the async SQLAlchemy engine singleton."""
    global _engine
    if _engine is None:
        _engine = create_async_engine(
            _get_database_url(),
            echo=os.environ.get("SQL_ECHO", "").lower() == "true",
            pool_size=int(os.environ.get("DB_POOL_SIZE", "5")),
            max_overflow=10,
            pool_timeout=30,
            pool_recycle=1800,
            pool_pre_ping=True,  # The daily job can find connections idle for hours
        )
    return _engine


@asynccontextmanager
async def get_connection() -> AsyncGenerator[AsyncConnection, None]:
    """
    Borrow a connection for reads.

    Usage:
        async with get_connection() as conn:
            rows = await get_students_expiring_by(conn, target_date)
    """
    async with get_engine().connect() as conn:
        yield conn


@asynccontextmanager
async def get_transaction() -> AsyncGenerator[AsyncConnection, None]:
    """
    Borrow a connection inside a transaction: commit on exit, roll back on error.

    Usage:
        async with get_transaction() as conn:
            await upsert_setting(conn, "days_before_expiry", "7")
    """
    async with get_engine().begin() as conn:
        yield conn


async def ping_database() -> bool:
    """Run SELECT 1. False (and a warning) if the database is unreachable."""
    if not is_configured():
        return False
    try:
        async with get_connection() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning(f"Database ping failed: {e}")
        return False
    return True


async def close_engine() -> None:
    """Dispose the pool. Called on shutdown and after one-off CLI runs."""
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None


def is_configured() -> bool:
    """Check if database credentials are configured."""
    return bool(os.environ.get("DATABASE_URL"))

"""Async database engine, session factory and unit-of-work helper."""

import asyncio
import logging
from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import TypeVar

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from doccredits.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

T = TypeVar("T")

engine = create_async_engine(
    settings.database_url,
    echo=False,
    pool_size=20,
    max_overflow=10,
    pool_pre_ping=True,
)

async_session_factory = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields an async DB session."""
    async with async_session_factory() as session:
        yield session


async def init_db() -> None:
    """Create all tables. Use Alembic migrations in production."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def run_in_transaction(
    session: AsyncSession,
    work: Callable[[AsyncSession], Awaitable[T]],
) -> T:
    """Run ``work`` as one transaction: commit on success, roll back on error.

    Only a dropped connection (``connection_invalidated``) is retried, with
    exponential backoff. ``work`` must therefore re-read everything it needs
    from the session on each attempt.
    """
    attempts = max(settings.db_retry_attempts, 1)
    for attempt in range(1, attempts + 1):
        try:
            result = await work(session)
            await session.commit()
            return result
        except DBAPIError as exc:
            await session.rollback()
            if not exc.connection_invalidated or attempt == attempts:
                raise
            delay = settings.db_retry_base_delay * 2 ** (attempt - 1)
            logger.warning(
                "Database connection lost (attempt %d/%d), retrying in %.2fs",
                attempt, attempts, delay,
            )
            await asyncio.sleep(delay)
        except Exception:
            await session.rollback()
            raise
    raise RuntimeError("unreachable")  # pragma: no cover

"""Engine and per-request sessions for the parcel database.

The engine (and its connection pool) is created once per process; every
request gets its own session whose transaction is committed when the
request succeeds and rolled back when it raises.
"""

import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from tracker.config import get_settings
from tracker.domain.exceptions import PersistenceError

logger = logging.getLogger(__name__)


def get_async_url(url: str) -> str:
    """Swap a plain ``sqlite://`` / ``postgresql://`` URL for its async driver."""
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


settings = get_settings()

engine = create_async_engine(
    get_async_url(settings.database_url),
    echo=settings.db_echo,
    future=True,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker = async_session_factory,
) -> AsyncIterator[AsyncSession]:
    """One unit of work: commit on success, roll back on any error.

    A failing COMMIT is a storage failure like any other statement and is
    raised as PersistenceError.
    """
    async with factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        try:
            await session.commit()
        except SQLAlchemyError as exc:
            logger.error("Commit failed: %s", exc)
            await session.rollback()
            raise PersistenceError("commit", exc) from exc


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    async with session_scope() as session:
        yield session

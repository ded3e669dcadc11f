"""Database engine and store lifecycle.

The engine is never a module-level singleton: the process entry point (the
FastAPI lifespan, a CLI command, a test fixture) opens it with
:func:`open_store` and disposes it when done.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from backend.config import settings
from backend.models import Base
from backend.srs.store import MemorizationStore

logger = logging.getLogger(__name__)


def create_engine(database_url: str | None = None, echo: bool | None = None) -> AsyncEngine:
    """Create an async engine, preparing the SQLite file location if needed."""
    url = make_url(database_url or settings.database_url)
    is_sqlite = url.get_backend_name() == "sqlite"
    if is_sqlite and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_async_engine(url, echo=settings.debug if echo is None else echo)
    if is_sqlite:
        event.listen(engine.sync_engine, "connect", _set_sqlite_pragmas)
    return engine


def _set_sqlite_pragmas(dbapi_connection, _connection_record) -> None:
    """Enforce foreign keys and allow concurrent readers on SQLite connections."""
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute(f"PRAGMA busy_timeout={int(settings.sqlite_busy_timeout_ms)}")
    finally:
        cursor.close()


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_tables(engine: AsyncEngine) -> None:
    """Create tables if they don't exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def open_store(database_url: str | None = None) -> AsyncIterator[MemorizationStore]:
    """Open an engine, ensure the schema, and yield a store bound to it.

    The engine is disposed on every exit path.
    """
    engine = create_engine(database_url)
    try:
        await create_tables(engine)
        logger.debug("Opened store at %s", engine.url.render_as_string(hide_password=True))
        yield MemorizationStore(create_sessionmaker(engine))
    finally:
        await engine.dispose()


def get_store(request: Request) -> MemorizationStore:
    """Return the application's store for FastAPI dependency injection."""
    return request.app.state.store

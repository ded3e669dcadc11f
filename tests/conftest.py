"""Shared fixtures: a store over a throwaway SQLite file per test."""

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from backend.database import get_store, open_store
from backend.main import app
from backend.srs.store import MemorizationStore


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'memorizer.db'}"


@pytest_asyncio.fixture
async def store(database_url: str) -> AsyncIterator[MemorizationStore]:
    async with open_store(database_url) as store:
        yield store


@pytest_asyncio.fixture
async def client(store: MemorizationStore) -> AsyncIterator[AsyncClient]:
    app.dependency_overrides[get_store] = lambda: store
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()

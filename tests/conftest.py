"""Shared fixtures. The database URL is redirected before the app is imported."""

import os
import tempfile
from pathlib import Path

_test_dir = Path(tempfile.mkdtemp(prefix="memodeck-tests-"))
os.environ["MEMODECK_DATABASE_URL"] = f"sqlite+aiosqlite:///{_test_dir / 'test.db'}"

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from backend.database import async_session, engine  # noqa: E402
from backend.main import app  # noqa: E402
from backend.models import Base  # noqa: E402


@pytest_asyncio.fixture
async def db_ready():
    """Give each test empty tables, and release pooled connections afterwards."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


@pytest_asyncio.fixture
async def db(db_ready):
    async with async_session() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_ready):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

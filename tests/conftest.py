import os

# Must be set before src.config is imported.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("RESOLVER_ENABLED", "false")

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from typing import AsyncGenerator

from src.main import app
from src.database import get_db, Base
from src.resolution.job import ResolverJob, get_resolver_job

# Register every model on Base.metadata
from src.elections.models import ElectionConfig  # noqa: F401
from src.tables.models import ElectoralTable  # noqa: F401
from src.ballots.models import BallotVersion  # noqa: F401
from src.attestations.models import Attestation  # noqa: F401
from src.resolution.models import AttestationCase  # noqa: F401



@pytest_asyncio.fixture(scope="function")
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh SQLite database file per test; every session gets its own connection."""
    test_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    await test_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def resolver_job(session_factory) -> ResolverJob:
    return ResolverJob(session_factory=session_factory, table_timeout=10, concurrency=1)


@pytest_asyncio.fixture(scope="function")
async def async_client(session_factory, resolver_job) -> AsyncGenerator[AsyncClient, None]:
    """Client for testing API endpoints."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_resolver_job] = lambda: resolver_job

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()

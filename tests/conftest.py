"""Global pytest fixtures for projectdesk.

This module provides shared fixtures for testing including:
- A throwaway SQLite database per test (aiosqlite)
- Service settings and an isolated keyed lock table
- An async HTTP client bound to the FastAPI app
"""

from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from projectdesk.config import Settings
from projectdesk.database import create_engine, create_schema, create_session_factory
from projectdesk.services.locks import KeyedLock

# Fixed clock for service-level tests.
NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


# ===========================================
# DATABASE FIXTURES
# ===========================================


@pytest_asyncio.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Fresh SQLite database file with the full schema."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'projectdesk.db'}")
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ===========================================
# SERVICE FIXTURES
# ===========================================


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def settings() -> Settings:
    return Settings(personal_deadline_days=7, enforce_personal_deadline=False)


@pytest.fixture
def strict_settings() -> Settings:
    """Settings with the personal deadline enforced on submit."""
    return Settings(personal_deadline_days=7, enforce_personal_deadline=True)


@pytest.fixture
def locks() -> KeyedLock:
    return KeyedLock()


# ===========================================
# HTTP CLIENT FIXTURES
# ===========================================


@pytest_asyncio.fixture
async def async_client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for the app, backed by the per-test database."""
    from projectdesk.database import get_db
    from projectdesk.main import create_app

    app = create_app()

    async def _get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

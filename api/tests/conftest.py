"""Pytest configuration and shared fixtures.

This module provides:
- A fresh in-memory SQLite database per test (aiosqlite + StaticPool)
- Async session fixtures for repository/service tests
- FastAPI test clients for the main and stats services
- A mocked stats client so no test reaches the network
"""

# Set environment variables BEFORE any imports that trigger Settings validation
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("STATS_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("STATS_SERVICE_URL", "http://stats.test")
os.environ.setdefault("MIGRATE_ON_STARTUP", "false")
os.environ.setdefault("RATELIMIT_ENABLED", "false")

from collections.abc import AsyncGenerator, Generator
from typing import Any
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

import models  # noqa: F401
from core.config import clear_settings_cache
from core.database import Base
from stats.config import clear_stats_settings_cache
from stats.models import StatsBase

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def test_engine() -> AsyncGenerator[AsyncEngine]:
    """Create a fresh in-memory database engine for each test.

    StaticPool keeps a single connection so every session sees the same
    in-memory database.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_connection: Any, connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.run_sync(StatsBase.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    """Provide a database session for each test.

    Repositories and services only flush, so everything a test writes is
    rolled back at the end.
    """
    async with session_maker() as session:
        yield session
        await session.rollback()


# =============================================================================
# External Service Mocks
# =============================================================================


@pytest.fixture(autouse=True)
def mock_stats() -> Generator[AsyncMock]:
    """Replace the stats HTTP client; views default to an empty stats list."""
    with (
        patch("core.stats_client.post_hit", new_callable=AsyncMock) as post_hit,
        patch(
            "core.stats_client.get_stats", new_callable=AsyncMock, return_value=[]
        ) as get_stats,
    ):
        mock = AsyncMock()
        mock.post_hit = post_hit
        mock.get_stats = get_stats
        yield mock


# =============================================================================
# FastAPI Test Client Fixtures
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def app(
    test_engine: AsyncEngine,
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[FastAPI]:
    """Main service app bound to the test database (lifespan not run)."""
    from main import app as fastapi_app

    fastapi_app.state.engine = test_engine
    fastapi_app.state.session_maker = session_maker
    fastapi_app.state.init_done = True

    yield fastapi_app


@pytest_asyncio.fixture(scope="function")
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for testing routes."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def stats_client(
    test_engine: AsyncEngine,
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient]:
    """HTTP client for the statistics service app."""
    from stats.main import app as stats_app

    stats_app.state.engine = test_engine
    stats_app.state.session_maker = session_maker
    stats_app.state.init_done = True

    async with AsyncClient(
        transport=ASGITransport(app=stats_app),
        base_url="http://stats.test",
    ) as ac:
        yield ac


# =============================================================================
# Utility Fixtures
# =============================================================================


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio backend for anyio (required by httpx)."""
    return "asyncio"


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None]:
    """Reset settings cache before each test."""
    clear_settings_cache()
    clear_stats_settings_cache()
    yield
    clear_settings_cache()
    clear_stats_settings_cache()

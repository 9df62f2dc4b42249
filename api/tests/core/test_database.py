"""Tests for core database module."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.pool import QueuePool

from core.config import DatabaseSettings
from core.database import (
    PoolStatus,
    check_db_connection,
    comprehensive_health_check,
    create_engine,
    dispose_engine,
    get_pool_status,
    init_db,
)

pytestmark = pytest.mark.unit


class TestCreateEngine:
    """Tests for create_engine."""

    async def test_sqlite_engine_enforces_foreign_keys(self):
        """SQLite engines get the foreign_keys pragma on connect."""
        engine = create_engine(
            DatabaseSettings(database_url="sqlite+aiosqlite:///:memory:")
        )
        try:
            async with engine.connect() as conn:
                result = await conn.exec_driver_sql("PRAGMA foreign_keys")
                assert result.scalar() == 1
        finally:
            await dispose_engine(engine)

    def test_postgres_engine_uses_queue_pool(self):
        """PostgreSQL engines are pooled with the configured size."""
        engine = create_engine(
            DatabaseSettings(
                database_url="postgresql+asyncpg://u:p@localhost:5432/ewm",
                db_pool_size=7,
            )
        )
        assert isinstance(engine.sync_engine.pool, QueuePool)
        status = get_pool_status(engine)
        assert status is not None
        assert status.pool_size == 7
        assert status.checked_out == 0


class TestHealthChecks:
    """Tests for connectivity checks."""

    async def test_check_db_connection(self, test_engine: AsyncEngine):
        await check_db_connection(test_engine)

    async def test_init_db(self, test_engine: AsyncEngine):
        await init_db(test_engine)

    async def test_comprehensive_health_check_ok(self, test_engine: AsyncEngine):
        result = await comprehensive_health_check(test_engine)
        assert result["database"] is True
        # StaticPool is not a QueuePool
        assert result["pool"] is None

    async def test_comprehensive_health_check_reports_failure(self):
        engine = MagicMock()
        engine.connect.side_effect = ConnectionError("down")
        engine.sync_engine.pool = MagicMock()

        result = await comprehensive_health_check(engine)

        assert result["database"] is False
        assert result["pool"] is None


class TestPoolStatus:
    def test_creates_named_tuple(self):
        status = PoolStatus(pool_size=5, checked_out=2, overflow=1, checked_in=3)
        assert status.pool_size == 5
        assert status.checked_in == 3

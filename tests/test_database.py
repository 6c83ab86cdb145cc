"""Tests for database pool management."""

import pytest
from unittest.mock import AsyncMock, patch

import database
from database import DatabaseUnavailableError, close, get_pool, init_db

@pytest.fixture(autouse=True)
def reset_pool():
    database._pool = None
    yield
    database._pool = None

def test_strip_query_drops_ssl_params():
    url = "postgresql://user:pw@db.example:5432/stage?sslmode=require&application_name=bot"
    assert database._strip_query(url) == (
        "postgresql://user:pw@db.example:5432/stage?application_name=bot"
    )

def test_ssl_context_only_when_required():
    assert "ssl" in database._get_connection_kwargs("postgresql://db/x?sslmode=verify-full")
    assert database._get_connection_kwargs("postgresql://db/x") == {}

@pytest.mark.asyncio
async def test_init_db_creates_pool_once():
    pool = AsyncMock()
    with patch("database.asyncpg.create_pool", AsyncMock(return_value=pool)) as create_pool:
        assert await init_db("postgresql://localhost/db", 5, 30.0) is pool
        assert await init_db("postgresql://localhost/db", 5, 30.0) is pool

    create_pool.assert_awaited_once()
    kwargs = create_pool.call_args.kwargs
    assert kwargs["max_size"] == 5
    assert kwargs["command_timeout"] == 30.0

    await close()
    pool.close.assert_awaited_once()
    assert database._pool is None

@pytest.mark.asyncio
async def test_get_pool_wraps_failures():
    with patch("database.init_db", AsyncMock(side_effect=ValueError("Database URL not provided"))):
        with pytest.raises(DatabaseUnavailableError):
            await get_pool()

"""Tests for the order query layer and the metrics service."""

import asyncpg
import pytest
from datetime import timedelta

from database import DatabaseUnavailableError
from database.queries import OrderQueries
from metrics import MetricsService
from conftest import NOW, make_order, order_row

@pytest.mark.asyncio
async def test_successful_orders_parses_rows(fake_pool, fake_conn):
    """Text amounts from the query become exact integers."""
    fake_conn.rows = [order_row(source_amount="123456789012345678901234567890")]
    orders = await OrderQueries(fake_pool).successful_orders()

    assert len(orders) == 1
    assert orders[0].source_amount == 123456789012345678901234567890
    assert orders[0].destination_amount == 29900000000
    assert "ORDER BY mo.created_at DESC" in fake_conn.calls[0][0]

@pytest.mark.asyncio
async def test_successful_orders_since_passes_timestamp(fake_pool, fake_conn):
    since = NOW - timedelta(hours=1)
    await OrderQueries(fake_pool).successful_orders_since(since)

    query, args = fake_conn.calls[0]
    assert "mo.created_at >= $1" in query
    assert args == (since,)

@pytest.mark.asyncio
async def test_successful_orders_since_hours(fake_pool, fake_conn):
    await OrderQueries(fake_pool).successful_orders_since_hours(24)

    query, args = fake_conn.calls[0]
    assert "make_interval" in query
    assert args == (24,)

@pytest.mark.asyncio
async def test_counts(fake_pool, fake_conn):
    fake_conn.values = [
        ("DISTINCT LOWER", 7),
        ("redeem_tx_hash", 3),
        ("make_interval", 2),
        ("FROM create_orders", 10),
        ("FROM matched_orders", 5),
    ]
    queries = OrderQueries(fake_pool)

    assert await queries.count_users() == 7
    assert await queries.count_successful_orders() == 3
    assert await queries.count_recent_orders(24) == 2
    assert await queries.count_all_orders() == 10
    assert await queries.count_matched_orders() == 5

@pytest.mark.asyncio
async def test_recent_window_bound_matches_order_list(fake_pool, fake_conn):
    """The 24h count and the 24h order list both include the boundary instant."""
    fake_conn.values = [("make_interval", 2)]
    queries = OrderQueries(fake_pool)

    await queries.successful_orders_since_hours(24)
    await queries.count_recent_orders(24)

    bound = "created_at >= NOW() - make_interval(hours => $1)"
    assert bound in fake_conn.calls[0][0]
    assert bound in fake_conn.calls[1][0]

@pytest.mark.asyncio
async def test_null_count_is_zero(fake_pool, fake_conn):
    fake_conn.values = [("FROM matched_orders", None)]
    assert await OrderQueries(fake_pool).count_matched_orders() == 0

@pytest.mark.asyncio
async def test_query_failure_raises_unavailable(fake_pool, fake_conn):
    """Driver errors surface as DatabaseUnavailableError."""
    fake_conn.error = asyncpg.InterfaceError("connection closed")
    queries = OrderQueries(fake_pool)

    with pytest.raises(DatabaseUnavailableError):
        await queries.successful_orders()
    with pytest.raises(DatabaseUnavailableError):
        await queries.count_matched_orders()

@pytest.mark.asyncio
async def test_metrics_service_collect(fake_pool, fake_conn, asset_directory):
    """collect() combines the counts and the order lists."""
    fake_conn.rows = [order_row(order_id="1"), order_row(order_id="2")]
    fake_conn.values = [
        ("DISTINCT LOWER", 2),
        ("redeem_tx_hash", 2),
        ("make_interval", 4),
        ("FROM create_orders", 8),
        ("FROM matched_orders", 4),
    ]

    metrics = await MetricsService(fake_pool, asset_directory).collect()

    assert metrics.all_orders == 8
    assert metrics.total_swaps == 2
    assert metrics.last_24_hours_swaps == 4
    assert metrics.all_time_volume == pytest.approx(2 * 59900.0)
    assert metrics.last_24_hours_volume == pytest.approx(2 * 59900.0)
    assert metrics.completion_rate == pytest.approx(0.5)
    assert metrics.total_users == 2
    assert metrics.top_chain.count == 2

@pytest.mark.asyncio
async def test_metrics_service_propagates_database_errors(fake_pool, fake_conn, asset_directory):
    """No partial metrics when the store is down."""
    fake_conn.error = OSError("connection refused")

    with pytest.raises(DatabaseUnavailableError):
        await MetricsService(fake_pool, asset_directory).collect()

def test_metrics_service_order_value(fake_pool, asset_directory):
    value = MetricsService(fake_pool, asset_directory).order_value(make_order())
    assert value.source_usd == pytest.approx(30000.0)

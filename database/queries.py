"""Read-only query surface over the orderbook tables.

Tables used: matched_orders, create_orders and swaps. An order is successful
when both its source and destination swaps carry a redeem transaction hash.
"""
import logging
from datetime import datetime
from typing import List

import asyncpg
from asyncpg.pool import Pool

from models import OrderRecord
from .exceptions import DatabaseUnavailableError

logger = logging.getLogger(__name__)

SUCCESSFUL_ORDERS_QUERY = '''
    SELECT
        mo.create_order_id AS order_id,
        co.source_chain,
        co.source_asset,
        co.destination_chain,
        co.destination_asset,
        s1.amount::text AS source_amount,
        s2.amount::text AS destination_amount,
        (co.additional_data->>'input_token_price')::float AS input_token_price,
        (co.additional_data->>'output_token_price')::float AS output_token_price,
        mo.created_at,
        s2.updated_at AS completed_at
    FROM matched_orders mo
    JOIN create_orders co ON co.create_id = mo.create_order_id
    JOIN swaps s1 ON s1.swap_id = mo.source_swap_id
    JOIN swaps s2 ON s2.swap_id = mo.destination_swap_id
    WHERE s1.redeem_tx_hash IS NOT NULL AND s1.redeem_tx_hash != ''
      AND s2.redeem_tx_hash IS NOT NULL AND s2.redeem_tx_hash != ''
'''

COUNT_SUCCESSFUL_ORDERS_QUERY = '''
    SELECT COUNT(*)
    FROM matched_orders mo
    JOIN swaps s1 ON s1.swap_id = mo.source_swap_id
    JOIN swaps s2 ON s2.swap_id = mo.destination_swap_id
    WHERE s1.redeem_tx_hash IS NOT NULL AND s1.redeem_tx_hash != ''
      AND s2.redeem_tx_hash IS NOT NULL AND s2.redeem_tx_hash != ''
'''

COUNT_USERS_QUERY = '''
    SELECT COUNT(DISTINCT LOWER(s1.initiator))
    FROM matched_orders mo
    JOIN swaps s1 ON s1.swap_id = mo.source_swap_id
'''

class OrderQueries:
    """Runs the order queries against a connection pool."""

    def __init__(self, pool: Pool) -> None:
        self.pool = pool

    async def _fetch(self, query: str, *args) -> List[asyncpg.Record]:
        try:
            async with self.pool.acquire() as conn:
                return await conn.fetch(query, *args)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            logger.error(f"Database query error: {e}")
            raise DatabaseUnavailableError(f"Order query failed: {e}") from e

    async def _fetchval(self, query: str, *args) -> int:
        try:
            async with self.pool.acquire() as conn:
                value = await conn.fetchval(query, *args)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            logger.error(f"Database query error: {e}")
            raise DatabaseUnavailableError(f"Count query failed: {e}") from e
        return int(value or 0)

    async def _orders(self, where: str = '', *args) -> List[OrderRecord]:
        query = SUCCESSFUL_ORDERS_QUERY + where + '\n    ORDER BY mo.created_at DESC'
        rows = await self._fetch(query, *args)
        return [OrderRecord(**dict(row)) for row in rows]

    async def successful_orders(self) -> List[OrderRecord]:
        """All successful orders, newest first."""
        return await self._orders()

    async def successful_orders_since_hours(self, hours: int) -> List[OrderRecord]:
        """Successful orders matched within the last `hours` hours."""
        return await self._orders(
            "      AND mo.created_at >= NOW() - make_interval(hours => $1)",
            hours
        )

    async def successful_orders_since(self, since: datetime) -> List[OrderRecord]:
        """Successful orders matched at or after `since`."""
        return await self._orders("      AND mo.created_at >= $1", since)

    async def count_matched_orders(self) -> int:
        return await self._fetchval('SELECT COUNT(*) FROM matched_orders')

    async def count_successful_orders(self) -> int:
        return await self._fetchval(COUNT_SUCCESSFUL_ORDERS_QUERY)

    async def count_users(self) -> int:
        """Distinct initiators across matched orders."""
        return await self._fetchval(COUNT_USERS_QUERY)

    async def count_all_orders(self) -> int:
        return await self._fetchval('SELECT COUNT(*) FROM create_orders')

    async def count_recent_orders(self, hours: int = 24) -> int:
        return await self._fetchval(
            'SELECT COUNT(*) FROM create_orders WHERE created_at >= NOW() - make_interval(hours => $1)',
            hours
        )

"""Metrics module for computing swap summary metrics.

This module wires the order queries and the asset metadata into the
aggregator. Metrics are recomputed from the database on every call.
"""
import logging
from typing import Optional

from asyncpg.pool import Pool

from assets import AssetDirectory
from database.queries import OrderQueries
from models import OrderRecord, SwapMetrics
from .aggregator import (
    OrderValue,
    aggregate_metrics,
    group_top,
    summarize_volume,
    to_human_amount,
    value_order,
)

logger = logging.getLogger(__name__)

RECENT_WINDOW_HOURS = 24

class MetricsService:
    """Collects swap metrics from the order database."""

    def __init__(
        self,
        pool: Pool,
        asset_directory: AssetDirectory,
        queries: Optional[OrderQueries] = None
    ) -> None:
        """Initialize the metrics service.

        Args:
            pool: Database connection pool
            asset_directory: Asset metadata used for decimals and display names
            queries: Optional query object, built from the pool if not provided
        """
        self.pool = pool
        self.asset_directory = asset_directory
        self.queries = queries or OrderQueries(pool)

    async def collect(self) -> SwapMetrics:
        """Compute fresh metrics.

        Raises:
            DatabaseUnavailableError: If any query fails; no partial metrics are returned
            AssetServiceError: If asset metadata can't be loaded at all
        """
        logger.info("Fetching swap metrics")

        total_matched = await self.queries.count_matched_orders()
        total_successful = await self.queries.count_successful_orders()
        all_orders = await self.queries.count_all_orders()
        recent_order_count = await self.queries.count_recent_orders(RECENT_WINDOW_HOURS)
        total_users = await self.queries.count_users()
        orders = await self.queries.successful_orders()
        recent_orders = await self.queries.successful_orders_since_hours(RECENT_WINDOW_HOURS)

        self.asset_directory.refresh()

        metrics = aggregate_metrics(
            orders,
            recent_orders,
            total_matched=total_matched,
            total_successful=total_successful,
            resolve=self.asset_directory.decimals,
            chain_name=self.asset_directory.chain_name,
            asset_label=self.asset_directory.asset_label,
            all_orders=all_orders,
            recent_order_count=recent_order_count,
            total_users=total_users,
        )
        logger.info(
            f"Metrics: {metrics.total_swaps}/{metrics.all_orders} swaps, "
            f"24h volume {metrics.last_24_hours_volume:.2f} USD, "
            f"all-time volume {metrics.all_time_volume:.2f} USD"
        )
        return metrics

    def order_value(self, order: OrderRecord) -> OrderValue:
        """USD valuation of a single order using the current asset metadata."""
        if not self.asset_directory.loaded:
            self.asset_directory.refresh()
        return value_order(order, self.asset_directory.decimals)

__all__ = [
    'MetricsService',
    'OrderValue',
    'aggregate_metrics',
    'group_top',
    'summarize_volume',
    'to_human_amount',
    'value_order',
]

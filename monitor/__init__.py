"""Monitor module for the bot's polling loops.

This module provides the two long-running jobs of the bot:
- OrderWatcher: posts newly completed high-value swaps
- MetricsReporter: posts the periodic metrics summary
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import List, Optional

from asyncpg.pool import Pool

from assets import AssetError
from comparison import FeeComparator
from database.queries import OrderQueries
from formatters import format_currency, format_metrics_report, format_order_post
from metrics import MetricsService
from models import OrderRecord, PostResult
from publisher import PublishError, Publisher
from state import BotState

# Configure logging
logger = logging.getLogger(__name__)

SLEEP_SLICE = 1.0  # seconds

class PollingJob:
    """Base for loops that run until stop() is called."""

    name = 'job'

    def __init__(self, interval: float):
        self.interval = interval
        self._stop_requested = False

    def stop(self):
        """Signal the loop to stop after the current tick."""
        logger.info(f"Stopping {self.name}...")
        self._stop_requested = True

    @property
    def stopped(self) -> bool:
        return self._stop_requested

    async def _sleep(self, seconds: float) -> None:
        """Sleep in short slices so stop() takes effect promptly."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + seconds
        while not self._stop_requested:
            remaining = deadline - loop.time()
            if remaining <= 0:
                break
            await asyncio.sleep(min(SLEEP_SLICE, remaining))

    async def tick(self):
        raise NotImplementedError

    async def run(self):
        """Main loop. Errors from a tick are logged and retried next interval."""
        logger.info(f"Starting {self.name} (every {self.interval}s)")
        while not self._stop_requested:
            try:
                await self.tick()
            except Exception as e:
                logger.error(f"Error in {self.name}: {e}")
            await self._sleep(self.interval)
        logger.info(f"{self.name} stopped")

class OrderWatcher(PollingJob):
    """Watches for new successful orders and posts the high-value ones."""

    name = 'order watcher'

    def __init__(
        self,
        pool: Pool,
        metrics_service: MetricsService,
        comparator: FeeComparator,
        publisher: Publisher,
        state: BotState,
        volume_threshold: float = 100,
        poll_interval: float = 10,
        explorer_url: str = '',
        since: Optional[datetime] = None
    ):
        """Initialize the order watcher.

        Args:
            pool: Database connection pool
            metrics_service: Used to value each order in USD
            comparator: Fee/time comparison against other aggregators
            publisher: Where posts go
            state: Processed ids and order log
            volume_threshold: Minimum USD value for an order to be posted
            poll_interval: Seconds between checks
            explorer_url: Base URL of the order explorer
            since: Only orders created after this are considered; defaults to now
        """
        super().__init__(poll_interval)
        self.pool = pool
        self.queries = OrderQueries(pool)
        self.metrics_service = metrics_service
        self.comparator = comparator
        self.publisher = publisher
        self.state = state
        self.volume_threshold = volume_threshold
        self.explorer_url = explorer_url
        self.since = since or datetime.now(timezone.utc)

    async def tick(self):
        await self.check_new_orders()

    async def check_new_orders(self) -> List[str]:
        """Process successful orders not seen before.

        Returns:
            Ids of the orders processed in this call

        Raises:
            DatabaseUnavailableError: If the orders can't be fetched
            StateError: If the state can't be persisted
        """
        orders = await self.queries.successful_orders_since(self.since)
        new_orders = [order for order in orders if not self.state.is_processed(order.order_id)]

        if not new_orders:
            logger.debug("No new unprocessed orders found")
            return []

        logger.info(f"Found {len(new_orders)} new unprocessed orders")

        processed = []
        # Oldest first so posts follow completion order
        for order in reversed(new_orders):
            try:
                value = self.metrics_service.order_value(order)
            except AssetError as e:
                logger.warning(f"Can't value order {order.order_id} yet: {e}")
                continue

            if not value.source_resolved:
                # Left unprocessed; retried once the asset metadata knows the asset
                logger.warning(f"Can't value order {order.order_id} yet, will retry")
                continue

            usd_value = value.source_usd
            try:
                posted = await self.handle_order(order, usd_value)
            except Exception as e:
                logger.error(f"Error handling order {order.order_id}: {e}")
                posted = False

            self.state.add_order(order, usd_value, posted=posted)
            self.state.mark_processed(order.order_id)
            processed.append(order.order_id)

        self.state.persist()
        return processed

    async def handle_order(self, order: OrderRecord, usd_value: float) -> bool:
        """Post an order if it clears the threshold. Returns True if posted."""
        if usd_value < self.volume_threshold:
            logger.info(
                f"Order {order.order_id} volume ({format_currency(usd_value)}) is below "
                f"threshold ({format_currency(self.volume_threshold)}). Skipping post."
            )
            return False

        logger.info(
            f"Order {order.order_id} volume ({format_currency(usd_value)}) exceeds "
            f"threshold ({format_currency(self.volume_threshold)}). Posting."
        )
        comparison = self.comparator.compare(order)
        text = format_order_post(order, usd_value, comparison, self.explorer_url)

        try:
            result = self.publisher.publish(text)
        except PublishError as e:
            logger.error(f"Error posting order {order.order_id}: {e}")
            return False

        self.state.add_post(result)
        return True

class MetricsReporter(PollingJob):
    """Periodically computes and posts the metrics summary."""

    name = 'metrics reporter'

    def __init__(
        self,
        metrics_service: MetricsService,
        publisher: Publisher,
        state: BotState,
        volume_threshold: float = 1000,
        interval: float = 86400
    ):
        super().__init__(interval)
        self.metrics_service = metrics_service
        self.publisher = publisher
        self.state = state
        self.volume_threshold = volume_threshold

    async def tick(self):
        await self.report()

    async def report(self) -> Optional[PostResult]:
        """Collect metrics and post them if the last 24 hours were busy enough.

        Returns:
            The published post, or None if the volume was below the threshold

        Raises:
            DatabaseUnavailableError: If metrics can't be collected
            PublishError: If the post fails
        """
        metrics = await self.metrics_service.collect()
        self.state.cache_metrics(metrics)

        if metrics.last_24_hours_volume < self.volume_threshold:
            logger.info(
                f"24h volume ({format_currency(metrics.last_24_hours_volume)}) is below "
                f"threshold ({format_currency(self.volume_threshold)}). Skipping report."
            )
            self.state.persist()
            return None

        text = format_metrics_report(metrics, datetime.now(timezone.utc).date())
        result = self.publisher.publish(text)
        self.state.add_post(result)
        self.state.persist()
        logger.info(f"Metrics report posted with ID: {result.id}")
        return result

__all__ = [
    'PollingJob',
    'OrderWatcher',
    'MetricsReporter',
]

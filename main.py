"""Entry point running the order watcher and the metrics reporter."""
import asyncio
import logging
import signal

from assets import AssetDirectory
from comparison import FeeComparator
from config import get_settings
from database import init_db, get_pool, close as db_close
from metrics import MetricsService
from monitor import MetricsReporter, OrderWatcher
from publisher import LogPublisher, Publisher, XPublisher
from state import BotState

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Global instances
order_watcher = None
metrics_reporter = None
should_exit = False

def handle_shutdown(signum, frame):
    """Handle shutdown signals gracefully."""
    global should_exit
    logger.info("Shutdown signal received. Cleaning up...")
    should_exit = True

def create_publisher(settings) -> Publisher:
    """Pick the real publisher unless running dry or without a token."""
    if settings['dry_run']:
        logger.info("Dry run enabled, posts will only be logged")
        return LogPublisher()
    if not settings['x_access_token']:
        logger.warning("No x_access_token configured, posts will only be logged")
        return LogPublisher()
    return XPublisher(settings['x_access_token'], settings['x_api_url'])

async def startup():
    """Initialize database, services and both jobs."""
    global order_watcher, metrics_reporter

    settings = get_settings()

    logger.info("Initializing database...")
    await init_db(
        settings['db_url'],
        settings['db_pool_max_size'],
        settings['db_command_timeout']
    )
    pool = await get_pool()

    logger.info("Loading asset metadata...")
    asset_directory = AssetDirectory(settings['assets_url'])
    asset_directory.refresh()

    metrics_service = MetricsService(pool, asset_directory)
    comparator = FeeComparator(asset_directory)
    publisher = create_publisher(settings)
    state = BotState(settings['state_file']).load()

    logger.info("Creating order watcher...")
    order_watcher = OrderWatcher(
        pool,
        metrics_service,
        comparator,
        publisher,
        state,
        volume_threshold=settings['order_volume_threshold'],
        poll_interval=settings['order_poll_interval'],
        explorer_url=settings['explorer_url'],
    )

    logger.info("Creating metrics reporter...")
    metrics_reporter = MetricsReporter(
        metrics_service,
        publisher,
        state,
        volume_threshold=settings['metrics_volume_threshold'],
        interval=settings['metrics_interval'],
    )

    return order_watcher, metrics_reporter

async def main():
    """Run the order watcher and the metrics reporter until shutdown."""
    global should_exit

    try:
        # Register signal handlers in main thread
        signal.signal(signal.SIGINT, handle_shutdown)
        signal.signal(signal.SIGTERM, handle_shutdown)

        watcher, reporter = await startup()

        tasks = [
            asyncio.create_task(watcher.run(), name="orders"),
            asyncio.create_task(reporter.run(), name="metrics"),
        ]

        logger.info("All services started")

        # Wait for shutdown signal
        while not should_exit:
            await asyncio.sleep(1)

            # Check if any tasks failed
            for task in tasks:
                if task.done() and not task.cancelled():
                    exc = task.exception()
                    if exc:
                        logger.error(f"Task {task.get_name()} failed with error: {exc}")
                        should_exit = True
                        break

        logger.info("Starting cleanup...")

    except Exception as e:
        logger.error(f"Fatal error: {e}")
    finally:
        if order_watcher:
            order_watcher.stop()

        if metrics_reporter:
            metrics_reporter.stop()

        # Let the loops finish their current tick
        pending = [
            task for task in asyncio.all_tasks()
            if task is not asyncio.current_task() and not task.done()
        ]
        if pending:
            await asyncio.wait(pending, timeout=30)

        logger.info("Closing database connections...")
        await db_close()

        logger.info("Cleanup complete.")

if __name__ == "__main__":
    asyncio.run(main())

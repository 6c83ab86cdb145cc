"""Database module for managing connections to the orderbook database.

This module handles:
- Database connection pool initialization
- Connection lifecycle

The orderbook tables are owned by another service; the bot only ever reads them.
"""

import logging
import ssl
from typing import Optional, Dict, Any
import backoff
import asyncpg
from urllib.parse import urlparse, parse_qs, urlencode, urlunparse

from .exceptions import DatabaseError, DatabaseUnavailableError

logger = logging.getLogger(__name__)

_pool: Optional[asyncpg.Pool] = None

# sslmode values that require TLS
SSL_MODES = ('require', 'verify-ca', 'verify-full')

def _get_ssl_context() -> ssl.SSLContext:
    """Create SSL context for hosted Postgres connections."""
    ssl_context = ssl.create_default_context()
    ssl_context.verify_mode = ssl.CERT_REQUIRED
    ssl_context.check_hostname = True
    return ssl_context

def _get_connection_kwargs(db_url: str) -> Dict[str, Any]:
    """Get connection kwargs from database URL.

    Args:
        db_url: Database connection URL

    Returns:
        Dict of connection parameters
    """
    parsed = urlparse(db_url)
    params = parse_qs(parsed.query)

    kwargs: Dict[str, Any] = {}

    sslmode = params.get('sslmode', ['disable'])[0]
    if sslmode in SSL_MODES:
        kwargs['ssl'] = _get_ssl_context()

    return kwargs

def _strip_query(db_url: str) -> str:
    """Drop the sslmode parameter, which is handled through the SSL context."""
    parsed = urlparse(db_url)
    params = {
        key: values[0]
        for key, values in parse_qs(parsed.query).items()
        if key not in ('sslmode', 'ssl')
    }
    return urlunparse(parsed._replace(query=urlencode(params)))

@backoff.on_exception(
    backoff.expo,
    (asyncpg.exceptions.PostgresConnectionError, asyncpg.exceptions.CannotConnectNowError, OSError),
    max_tries=5
)
async def init_db(
    db_url: Optional[str] = None,
    max_size: Optional[int] = None,
    command_timeout: Optional[float] = None
) -> asyncpg.Pool:
    """Initialize the database connection pool.

    Args:
        db_url: Optional database URL. If not provided, will use settings.
        max_size: Optional maximum number of pooled connections
        command_timeout: Optional per-query timeout in seconds

    Raises:
        ValueError: If database URL is not provided
        Exception: If initialization fails after retries
    """
    global _pool

    if _pool is not None:
        return _pool

    try:
        # Import here to avoid circular imports
        from config import get_settings

        settings: Dict[str, Any] = {}
        if not (db_url and max_size and command_timeout):
            settings = get_settings()

        # Use provided values or get from settings
        url = db_url or settings.get('db_url')
        if not url:
            raise ValueError("Database URL not provided")

        _pool = await asyncpg.create_pool(
            _strip_query(url),
            min_size=1,
            max_size=max_size or settings.get('db_pool_max_size', 100),
            max_inactive_connection_lifetime=100.0,
            command_timeout=command_timeout or settings.get('db_command_timeout', 100.0),
            **_get_connection_kwargs(url)
        )
        logger.info("Connected to PostgreSQL database")
        return _pool

    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise

async def get_pool() -> asyncpg.Pool:
    """Get the database connection pool.

    Returns:
        The connection pool

    Raises:
        DatabaseUnavailableError: If pool can't be initialized
    """
    if not _pool:
        try:
            await init_db()
        except DatabaseError:
            raise
        except Exception as e:
            raise DatabaseUnavailableError(f"Failed to initialize database pool: {e}") from e
    if not _pool:
        raise DatabaseUnavailableError("Failed to initialize database pool")
    return _pool

async def close() -> None:
    """Close the database connection pool."""
    global _pool

    if _pool:
        await _pool.close()
        _pool = None
        logger.info("Database pool closed")

# Export public interface
__all__ = ['init_db', 'get_pool', 'close', 'DatabaseError', 'DatabaseUnavailableError']

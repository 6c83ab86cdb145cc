"""Shared fixtures: asset metadata, order factory and a fake asyncpg pool."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

import pytest

from assets import AssetDirectory
from models import OrderRecord

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

NETWORKS = {
    "bitcoin_testnet": {
        "name": "Bitcoin Testnet",
        "chainId": "bitcoin_testnet",
        "assetConfig": [
            {
                "name": "Bitcoin",
                "symbol": "BTC",
                "decimals": 8,
                "tokenAddress": "primary",
                "atomicSwapAddress": "primary",
            }
        ],
    },
    "arbitrum_sepolia": {
        "name": "Arbitrum Sepolia",
        "chainId": 421614,
        "assetConfig": [
            {
                "name": "Wrapped Bitcoin",
                "symbol": "WBTC",
                "decimals": 8,
                "tokenAddress": "0xTokenWbtc",
                "atomicSwapAddress": "0xHtlcWbtc",
            },
            {
                "name": "USD Coin",
                "symbol": "USDC",
                "decimals": 6,
                "tokenAddress": "0xTokenUsdc",
                "atomicSwapAddress": "0xHtlcUsdc",
            },
        ],
    },
}

def order_row(**overrides) -> Dict[str, Any]:
    """A successful order row as returned by the orders query.

    Defaults to 0.5 BTC at $60,000 swapped for 29,900 USDC.
    """
    row = {
        "order_id": "order-1",
        "source_chain": "bitcoin_testnet",
        "source_asset": "primary",
        "destination_chain": "arbitrum_sepolia",
        "destination_asset": "0xHtlcUsdc",
        "source_amount": "50000000",
        "destination_amount": "29900000000",
        "input_token_price": 60000.0,
        "output_token_price": 1.0,
        "created_at": NOW - timedelta(minutes=30),
        "completed_at": NOW - timedelta(minutes=10),
    }
    row.update(overrides)
    return row

def make_order(**overrides) -> OrderRecord:
    return OrderRecord(**order_row(**overrides))

class FakeConnection:
    """Stands in for an asyncpg connection.

    fetch() returns `rows`; fetchval() returns the first value in `values`
    whose key is a substring of the query.
    """

    def __init__(self):
        self.rows: List[Dict[str, Any]] = []
        self.values: List[Tuple[str, Any]] = []
        self.error: Optional[Exception] = None
        self.calls: List[Tuple[str, tuple]] = []

    async def fetch(self, query, *args):
        self.calls.append((query, args))
        if self.error:
            raise self.error
        return list(self.rows)

    async def fetchval(self, query, *args):
        self.calls.append((query, args))
        if self.error:
            raise self.error
        for key, value in self.values:
            if key in query:
                return value
        return 0

class _Acquire:
    def __init__(self, conn):
        self.conn = conn

    async def __aenter__(self):
        return self.conn

    async def __aexit__(self, exc_type, exc, tb):
        return False

class FakePool:
    def __init__(self, conn: FakeConnection):
        self.conn = conn

    def acquire(self):
        return _Acquire(self.conn)

@pytest.fixture
def asset_directory():
    """Asset directory preloaded with the test networks."""
    return AssetDirectory(networks=NETWORKS)

@pytest.fixture
def fake_conn():
    return FakeConnection()

@pytest.fixture
def fake_pool(fake_conn):
    return FakePool(fake_conn)

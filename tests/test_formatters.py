"""Tests for report and post formatting."""

from datetime import date, timedelta

import pytest

from formatters import (
    format_chain_name,
    format_currency,
    format_duration,
    format_metrics_report,
    format_number,
    format_order_post,
    format_percentage,
)
from models import ComparisonResult, SwapMetrics, TopAssetPair, TopChain
from conftest import make_order

@pytest.mark.parametrize("value,expected", [
    (0, "0"),
    (7, "7"),
    (1000, "1,000"),
    (1234.5678, "1,234.568"),
    (0.5, "0.5"),
])
def test_format_number(value, expected):
    assert format_number(value) == expected

@pytest.mark.parametrize("value,expected", [
    (0, "$0.00"),
    (999.5, "$999.50"),
    (1000, "$1.00K"),
    (1234.567, "$1.23K"),
    (1_500_000, "$1.50M"),
    (2_000_000_000, "$2.00B"),
    (-5, "-$5.00"),
    (-5000, "-$5.00K"),
    (-2_500_000, "-$2.50M"),
])
def test_format_currency(value, expected):
    assert format_currency(value) == expected

def test_format_percentage():
    assert format_percentage(0.875) == "87.5%"
    assert format_percentage(1) == "100.0%"
    assert format_percentage(0) == "0.0%"

def test_format_chain_name():
    assert format_chain_name("arbitrum_sepolia") == "Arbitrum"
    assert format_chain_name("STARKNET_SEPOLIA") == "StarkNet"
    assert format_chain_name("bitcoin_testnet") == "Bitcoin"
    assert format_chain_name("solana") == "solana"
    assert format_chain_name(None) == "unknown"

@pytest.mark.parametrize("seconds,expected", [
    (59, "0 minutes"),
    (60, "1 minute"),
    (3599, "59 minutes"),
    (3600, "1 hour"),
    (7200, "2 hours"),
])
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected

def test_format_metrics_report():
    metrics = SwapMetrics(
        all_orders=1200,
        total_swaps=1000,
        last_24_hours_swaps=42,
        last_24_hours_volume=1_250_000,
        all_time_volume=98_000_000,
        top_chain=TopChain(name="arbitrum_sepolia", count=600),
        top_asset_pair=TopAssetPair(pair="BTC (Bitcoin)", count=400),
        completion_rate=0.8333,
        total_users=321,
    )
    text = format_metrics_report(metrics, date(2025, 3, 1))

    assert text.startswith("📊 SWAP METRICS REPORT (2025-03-01) 📊")
    assert "Total Orders: 1,200" in text
    assert "Last 24h Orders: 42" in text
    assert "Completion Rate: 83.3%" in text
    assert "Volume: $1.25M" in text
    assert "Most Used Chain: Arbitrum (600 orders)" in text
    assert "Top Asset Pair: BTC (Bitcoin) (400 orders)" in text
    assert text.endswith("#DeFi #CrossChain #Crypto #Blockchain #Garden")

def test_format_order_post_with_savings():
    order = make_order(order_id="abc")
    comparison = ComparisonResult(fee_saved=120.5, time_saved=1500, sources=["relay"])
    text = format_order_post(order, 30000.0, comparison, "https://explorer.example/orders/")

    assert "New high-volume swap: $30.00K" in text
    assert "Bitcoin ➡️ Arbitrum" in text
    assert "Took: 20 minutes" in text
    assert "Saved $120.50 in fees" in text
    assert "25 minutes faster" in text
    assert "https://explorer.example/orders/abc" in text

def test_format_order_post_without_savings():
    """Zero savings produce no savings lines."""
    order = make_order(completed_at=None)
    text = format_order_post(order, 150.0, ComparisonResult())

    assert "Saved" not in text
    assert "faster" not in text
    assert "Took" not in text
    assert "🔗" not in text

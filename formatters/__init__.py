"""Text formatting for metrics reports and high-value swap posts."""
from datetime import date as Date
from typing import Optional

from models import ComparisonResult, OrderRecord, SwapMetrics

CHAIN_NAMES = {
    'arbitrum_sepolia': 'Arbitrum',
    'starknet_sepolia': 'StarkNet',
    'bitcoin_testnet': 'Bitcoin',
    'ethereum': 'Ethereum',
    'polygon': 'Polygon',
    'optimism': 'Optimism',
    'base': 'Base',
}

HASHTAGS = "🌐 #DeFi #CrossChain #Crypto #Blockchain #Garden"

def format_number(value: float) -> str:
    """Thousands separators, at most 3 fraction digits."""
    text = f"{value:,.3f}".rstrip('0').rstrip('.')
    return '0' if text == '-0' else text

def format_currency(value: float) -> str:
    """Dollar amount with a B/M/K suffix for large magnitudes."""
    magnitude = abs(value)
    sign = "-" if value < 0 else ""
    if magnitude >= 1_000_000_000:
        return f"{sign}${magnitude / 1_000_000_000:.2f}B"
    if magnitude >= 1_000_000:
        return f"{sign}${magnitude / 1_000_000:.2f}M"
    if magnitude >= 1_000:
        return f"{sign}${magnitude / 1_000:.2f}K"
    return f"{sign}${magnitude:,.2f}"

def format_percentage(ratio: float) -> str:
    return f"{ratio * 100:.1f}%"

def format_chain_name(chain: Optional[str]) -> str:
    if not chain:
        return 'unknown'
    return CHAIN_NAMES.get(chain.lower(), chain)

def format_duration(seconds: float) -> str:
    """Whole minutes below an hour, whole hours otherwise."""
    seconds = abs(seconds)
    if seconds < 3600:
        minutes = int(seconds // 60)
        return f"{minutes} minute{'' if minutes == 1 else 's'}"
    hours = int(seconds // 3600)
    return f"{hours} hour{'' if hours == 1 else 's'}"

def format_metrics_report(metrics: SwapMetrics, date: Date) -> str:
    """Multi-line daily summary post."""
    lines = [
        f"📊 SWAP METRICS REPORT ({date.isoformat()}) 📊",
        "",
        "📈 ORDER STATISTICS",
        f"   • Total Orders: {format_number(metrics.all_orders)}",
        f"   • Total Successful: {format_number(metrics.total_swaps)}",
        f"   • Last 24h Orders: {format_number(metrics.last_24_hours_swaps)}",
        f"   • Completion Rate: {format_percentage(metrics.completion_rate)}",
        "",
        "💰 VOLUME INFORMATION",
        f"   💫 {format_number(metrics.last_24_hours_swaps)} orders processed",
        f"   💰 Volume: {format_currency(metrics.last_24_hours_volume)}",
        f"   🏦 All-time Volume: {format_currency(metrics.all_time_volume)}",
        f"   👥 Users: {format_number(metrics.total_users)}",
        "",
        "🔝 TOP PERFORMERS",
        f"   • Most Used Chain: {format_chain_name(metrics.top_chain.name)} "
        f"({format_number(metrics.top_chain.count)} orders)",
        f"   • Top Asset Pair: {metrics.top_asset_pair.pair} "
        f"({format_number(metrics.top_asset_pair.count)} orders)",
        "",
        HASHTAGS,
    ]
    return "\n".join(lines)

def format_order_post(
    order: OrderRecord,
    usd_value: float,
    comparison: Optional[ComparisonResult] = None,
    explorer_url: str = ''
) -> str:
    """Post for a single high-value swap.

    The savings lines only appear when the comparison found something to
    report.
    """
    lines = [
        f"🐳 New high-volume swap: {format_currency(usd_value)}",
        f"🔄 {format_chain_name(order.source_chain)} ➡️ {format_chain_name(order.destination_chain)}",
    ]

    if order.completed_at and order.completed_at >= order.created_at:
        took = (order.completed_at - order.created_at).total_seconds()
        lines.append(f"⏱️ Took: {format_duration(took)}")

    if comparison is not None:
        if comparison.fee_saved > 0:
            lines.append(f"💸 Saved {format_currency(comparison.fee_saved)} in fees")
        if comparison.time_saved > 0:
            lines.append(f"⚡ {format_duration(comparison.time_saved)} faster")

    if explorer_url:
        lines.append(f"🔗 {explorer_url.rstrip('/')}/{order.order_id}")

    lines.extend(["", HASHTAGS])
    return "\n".join(lines)

__all__ = [
    'format_number',
    'format_currency',
    'format_percentage',
    'format_chain_name',
    'format_duration',
    'format_metrics_report',
    'format_order_post',
    'CHAIN_NAMES',
]

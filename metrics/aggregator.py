"""Swap metrics aggregation.

Pure functions over already-loaded order records. Asset precision comes from a
resolver callable so the aggregation itself never touches the network or the
database.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Hashable, Iterable, Optional, Sequence, Tuple

from assets import AssetError
from models import OrderRecord, SwapMetrics, TopAssetPair, TopChain

logger = logging.getLogger(__name__)

DecimalsResolver = Callable[[str, str], int]
NameResolver = Callable[[str], Optional[str]]
LabelResolver = Callable[[str, str], Optional[str]]

UNKNOWN = "unknown"

@dataclass
class OrderValue:
    """USD valuation of one order."""
    source_usd: float = 0.0
    destination_usd: float = 0.0
    source_resolved: bool = True
    destination_resolved: bool = True

    @property
    def total(self) -> float:
        return self.source_usd + self.destination_usd

@dataclass
class GroupStats:
    count: int = 0
    volume: float = 0.0

@dataclass
class VolumeSummary:
    volume: float = 0.0
    skipped_orders: int = 0
    skipped_legs: int = 0
    values: Dict[str, OrderValue] = field(default_factory=dict)

def to_human_amount(amount: int, decimals: int) -> float:
    """Convert an integer on-chain amount to a float in whole units."""
    return amount / 10 ** decimals

def value_order(order: OrderRecord, resolve: DecimalsResolver) -> OrderValue:
    """Value both legs of an order in USD.

    An order without an input price or source amount is worth zero. A source
    leg that can't be resolved zeroes the whole order; a destination leg that
    can't be resolved only drops that leg.
    """
    value = OrderValue()

    if not order.input_token_price or order.source_amount is None:
        return value

    try:
        decimals = resolve(order.source_chain, order.source_asset)
    except AssetError as e:
        logger.warning(f"Skipping order {order.order_id}: {e}")
        value.source_resolved = False
        value.destination_resolved = False
        return value

    value.source_usd = to_human_amount(order.source_amount, decimals) * order.input_token_price

    if order.destination_amount is None or not order.output_token_price:
        return value

    try:
        if not order.destination_chain or not order.destination_asset:
            raise AssetError("Missing destination chain or asset information")
        destination_decimals = resolve(order.destination_chain, order.destination_asset)
    except AssetError as e:
        logger.warning(
            f"Skipping destination amount calculation for order {order.order_id}: {e}"
        )
        value.destination_resolved = False
        return value

    value.destination_usd = (
        to_human_amount(order.destination_amount, destination_decimals) * order.output_token_price
    )
    return value

def summarize_volume(orders: Iterable[OrderRecord], resolve: DecimalsResolver) -> VolumeSummary:
    """Sum the USD value of every order, counting what couldn't be resolved."""
    summary = VolumeSummary()
    for order in orders:
        value = value_order(order, resolve)
        summary.values[order.order_id] = value
        summary.volume += value.total
        if not value.source_resolved:
            summary.skipped_orders += 1
        elif not value.destination_resolved:
            summary.skipped_legs += 1
    return summary

def group_top(
    orders: Sequence[OrderRecord],
    key: Callable[[OrderRecord], Optional[Hashable]],
    volume: Callable[[OrderRecord], float]
) -> Optional[Tuple[Hashable, GroupStats]]:
    """Group orders by key and pick the busiest group.

    Highest count wins, then highest summed volume, then the smallest key, so
    the result does not depend on row order. Orders whose key is None are left
    out of the grouping.
    """
    groups: Dict[Hashable, GroupStats] = {}
    for order in orders:
        group_key = key(order)
        if group_key is None:
            continue
        stats = groups.setdefault(group_key, GroupStats())
        stats.count += 1
        stats.volume += volume(order)

    if not groups:
        return None

    return min(
        groups.items(),
        key=lambda item: (-item[1].count, -item[1].volume, item[0])
    )

def _chain_key(order: OrderRecord) -> Optional[str]:
    return order.source_chain.lower() if order.source_chain else None

def _pair_key(order: OrderRecord) -> Optional[Tuple[str, str]]:
    if not order.source_chain or not order.source_asset:
        return None
    return (order.source_chain.lower(), order.source_asset.lower())

def aggregate_metrics(
    orders: Sequence[OrderRecord],
    recent_orders: Sequence[OrderRecord],
    total_matched: int,
    total_successful: int,
    resolve: DecimalsResolver,
    chain_name: Optional[NameResolver] = None,
    asset_label: Optional[LabelResolver] = None,
    all_orders: Optional[int] = None,
    recent_order_count: Optional[int] = None,
    total_users: int = 0
) -> SwapMetrics:
    """Aggregate successful orders into SwapMetrics.

    Args:
        orders: All successful orders
        recent_orders: Successful orders from the last 24 hours
        total_matched: Count of matched orders (completion rate denominator)
        total_successful: Count of successful orders (completion rate numerator)
        resolve: (chain, asset) -> decimals, raising AssetError on a miss
        chain_name: Optional chain -> display name
        asset_label: Optional (chain, asset) -> display label
        all_orders: Count of created orders; defaults to total_matched
        recent_order_count: Orders created in the last 24 hours; defaults to
            the length of recent_orders
        total_users: Distinct initiators, passed through

    Returns:
        SwapMetrics computed from the given snapshot
    """
    all_time = summarize_volume(orders, resolve)
    last_24_hours = summarize_volume(recent_orders, resolve)

    for window, summary in (('all-time', all_time), ('24h', last_24_hours)):
        if summary.skipped_orders or summary.skipped_legs:
            logger.warning(
                f"{window} volume skipped {summary.skipped_orders} unresolvable orders "
                f"and {summary.skipped_legs} unresolvable destination legs"
            )

    def source_volume(order: OrderRecord) -> float:
        value = all_time.values.get(order.order_id)
        return value.source_usd if value else 0.0

    top_chain = TopChain(name=UNKNOWN, count=0)
    chain_winner = group_top(orders, _chain_key, source_volume)
    if chain_winner:
        chain, stats = chain_winner
        name = chain_name(chain) if chain_name else None
        top_chain = TopChain(name=name or chain, count=stats.count)

    top_pair = TopAssetPair(pair=UNKNOWN, count=0)
    pair_winner = group_top(orders, _pair_key, source_volume)
    if pair_winner:
        (chain, asset), stats = pair_winner
        label = asset_label(chain, asset) if asset_label else None
        top_pair = TopAssetPair(pair=label or asset, count=stats.count)

    completion_rate = 0.0
    if total_matched > 0:
        completion_rate = min(max(total_successful / total_matched, 0.0), 1.0)

    return SwapMetrics(
        all_orders=total_matched if all_orders is None else all_orders,
        total_swaps=total_successful,
        last_24_hours_swaps=len(recent_orders) if recent_order_count is None else recent_order_count,
        last_24_hours_volume=last_24_hours.volume,
        all_time_volume=all_time.volume,
        top_chain=top_chain,
        top_asset_pair=top_pair,
        completion_rate=completion_rate,
        total_users=total_users,
    )

__all__ = [
    'OrderValue',
    'GroupStats',
    'VolumeSummary',
    'to_human_amount',
    'value_order',
    'summarize_volume',
    'group_top',
    'aggregate_metrics',
]

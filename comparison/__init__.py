"""Fee and time comparison against other cross-chain swap aggregators.

For a completed order, each aggregator is asked for a quote on the same route
and amount. The savings are the average competitor fee/time minus what the
order actually cost. Every source is optional: a source that can't quote the
route or fails is skipped, and with no quotes at all the savings are zero.
"""
import logging
from dataclasses import dataclass
from statistics import mean
from typing import Any, Dict, List, Optional

import requests

from assets import AssetDirectory, AssetError
from metrics import to_human_amount, value_order
from models import ComparisonMetric, ComparisonResult, OrderRecord
from .constants import (
    API_URLS,
    BTC_MAINNET_CHAIN_ID,
    BTC_MAINNET_RECIPIENT,
    BTC_TESTNET_CHAIN_ID,
    BTC_TESTNET_RECIPIENT,
    CHAINFLIP_ASSETS,
    EVM_DEAD_ADDRESS,
    RELAY_ASSETS,
    RELAY_BTC_SWAP_TIME,
    THORSWAP_ASSETS,
)

logger = logging.getLogger(__name__)

class ComparisonError(Exception):
    """Raised when a source can't produce a quote."""
    pass

class UnsupportedRouteError(ComparisonError):
    """Raised when a source has no notation for one of the assets."""
    pass

@dataclass
class AssetRef:
    """An order leg resolved against the asset metadata."""
    chain: str
    symbol: str
    decimals: int

    @property
    def key(self) -> str:
        return f"{self.chain.lower()}:{self.symbol.lower()}"

    @property
    def is_bitcoin(self) -> bool:
        return self.chain.lower().startswith('bitcoin')

@dataclass
class QuoteRequest:
    source: AssetRef
    destination: AssetRef
    amount_units: int  # smallest unit of the source asset
    amount: float  # whole units of the source asset
    input_price: float
    output_price: float

    @property
    def amount_usd(self) -> float:
        return self.amount * self.input_price

class QuoteSource:
    """Base class for an external aggregator."""

    name = 'base'

    def __init__(self, session: requests.Session, timeout: float = 10, url: Optional[str] = None):
        self.session = session
        self.timeout = timeout
        self.url = url or API_URLS[self.name]

    def quote(self, request: QuoteRequest) -> ComparisonMetric:
        raise NotImplementedError

    def _json(self, response: requests.Response, expected: tuple = (dict,)) -> Any:
        response.raise_for_status()
        try:
            data = response.json()
        except ValueError as e:
            raise ComparisonError(f"{self.name} returned invalid JSON") from e
        if not isinstance(data, expected):
            raise ComparisonError(f"{self.name} returned {type(data).__name__}, not an object")
        return data

class RelaySource(QuoteSource):
    """Relay bridge quotes."""

    name = 'relay'

    @staticmethod
    def _party(chain_id: str) -> str:
        if chain_id == BTC_TESTNET_CHAIN_ID:
            return BTC_TESTNET_RECIPIENT
        if chain_id == BTC_MAINNET_CHAIN_ID:
            return BTC_MAINNET_RECIPIENT
        return EVM_DEAD_ADDRESS

    def quote(self, request: QuoteRequest) -> ComparisonMetric:
        src = RELAY_ASSETS.get(request.source.key)
        dest = RELAY_ASSETS.get(request.destination.key)
        if not src or not dest:
            raise UnsupportedRouteError(f"relay has no route {request.source.key} -> {request.destination.key}")

        body = {
            'user': self._party(src['chain_id']),
            'originChainId': src['chain_id'],
            'destinationChainId': dest['chain_id'],
            'originCurrency': src['currency'],
            'recipient': self._party(dest['chain_id']),
            'destinationCurrency': dest['currency'],
            'amount': str(request.amount_units),
            'tradeType': 'EXACT_INPUT',
        }
        data = self._json(self.session.post(self.url, json=body, timeout=self.timeout))

        if not data.get('fees'):
            raise ComparisonError("relay quote has no fees")
        try:
            details = data['details']
            fee = float(details['currencyIn']['amountUsd']) - float(details['currencyOut']['amountUsd'])
            time = float(details.get('timeEstimate') or 0)
        except (KeyError, AttributeError, TypeError, ValueError) as e:
            raise ComparisonError(f"unexpected relay quote: {e}") from e

        if request.source.is_bitcoin or request.destination.is_bitcoin:
            time = RELAY_BTC_SWAP_TIME
        return ComparisonMetric(fee=fee, time=time)

class ThorSwapSource(QuoteSource):
    """THORChain routes through the SwapKit quote API."""

    name = 'thorswap'

    def quote(self, request: QuoteRequest) -> ComparisonMetric:
        sell_asset = THORSWAP_ASSETS.get(request.source.key)
        buy_asset = THORSWAP_ASSETS.get(request.destination.key)
        if not sell_asset or not buy_asset:
            raise UnsupportedRouteError(
                f"thorswap has no route {request.source.key} -> {request.destination.key}"
            )

        body = {
            'sellAsset': sell_asset,
            'buyAsset': buy_asset,
            'sellAmount': str(request.amount),
        }
        data = self._json(self.session.post(self.url, json=body, timeout=self.timeout))

        try:
            route = data['routes'][0]
            if not isinstance(route, dict):
                raise ComparisonError("thorswap route is not an object")
            prices = {
                entry['asset'].lower(): float(entry['price'])
                for entry in (route.get('meta') or {}).get('assets') or []
            }
            sell_price = prices.get(sell_asset.lower(), request.input_price)
            buy_price = prices.get(buy_asset.lower(), request.output_price)
            bought_usd = float(route['expectedBuyAmount']) * buy_price
            fee = request.amount * sell_price - bought_usd
            time = float((route.get('estimatedTime') or {}).get('total') or 0)
        except (KeyError, IndexError, AttributeError, TypeError, ValueError) as e:
            raise ComparisonError(f"unexpected thorswap quote: {e}") from e

        return ComparisonMetric(fee=fee, time=time)

class ChainflipSource(QuoteSource):
    """Chainflip broker quote API."""

    name = 'chainflip'

    def quote(self, request: QuoteRequest) -> ComparisonMetric:
        src = CHAINFLIP_ASSETS.get(request.source.key)
        dest = CHAINFLIP_ASSETS.get(request.destination.key)
        if not src or not dest:
            raise UnsupportedRouteError(
                f"chainflip has no route {request.source.key} -> {request.destination.key}"
            )

        params = {
            'amount': str(request.amount_units),
            'srcChain': src['chain'],
            'srcAsset': src['asset'],
            'destChain': dest['chain'],
            'destAsset': dest['asset'],
        }
        data = self._json(
            self.session.get(self.url, params=params, timeout=self.timeout),
            expected=(dict, list)
        )

        try:
            quote = data[0] if isinstance(data, list) else data
            egress = to_human_amount(int(quote['egressAmount']), request.destination.decimals)
            fee = request.amount_usd - egress * request.output_price
            time = float(quote.get('estimatedDurationSeconds') or 0)
        except (KeyError, IndexError, AttributeError, TypeError, ValueError) as e:
            raise ComparisonError(f"unexpected chainflip quote: {e}") from e

        return ComparisonMetric(fee=fee, time=time)

DEFAULT_SOURCES = (RelaySource, ThorSwapSource, ChainflipSource)

class FeeComparator:
    """Compares an order's cost against the configured quote sources."""

    def __init__(
        self,
        asset_directory: AssetDirectory,
        session: Optional[requests.Session] = None,
        timeout: float = 10,
        sources: Optional[List[QuoteSource]] = None
    ):
        self.asset_directory = asset_directory
        self.session = session or requests.Session()
        self.session.headers['content-type'] = 'application/json'
        if sources is None:
            sources = [source(self.session, timeout) for source in DEFAULT_SOURCES]
        self.sources = sources

    def _asset_ref(self, chain: Optional[str], asset: Optional[str]) -> AssetRef:
        if not chain or not asset:
            raise AssetError("Missing chain or asset information")
        config = self.asset_directory.find_asset(chain, asset)
        if config is None:
            raise AssetError(f"Asset {asset} not found for chain {chain}")
        return AssetRef(chain=chain, symbol=config.symbol, decimals=config.decimals)

    def build_request(self, order: OrderRecord) -> QuoteRequest:
        """Resolve an order into a quote request.

        Raises:
            AssetError: If either leg can't be resolved
            ComparisonError: If the order has no amount or price to quote
        """
        if order.source_amount is None or not order.input_token_price:
            raise ComparisonError(f"Order {order.order_id} has no source amount or price")

        source = self._asset_ref(order.source_chain, order.source_asset)
        destination = self._asset_ref(order.destination_chain, order.destination_asset)
        return QuoteRequest(
            source=source,
            destination=destination,
            amount_units=order.source_amount,
            amount=to_human_amount(order.source_amount, source.decimals),
            input_price=order.input_token_price,
            output_price=order.output_token_price or 0.0,
        )

    def quotes(self, request: QuoteRequest) -> Dict[str, ComparisonMetric]:
        """Ask every source for a quote, skipping the ones that fail."""
        results = {}
        for source in self.sources:
            try:
                results[source.name] = source.quote(request)
            except UnsupportedRouteError as e:
                logger.debug(str(e))
            except (ComparisonError, requests.exceptions.RequestException) as e:
                logger.warning(f"No {source.name} quote for {request.source.key} -> {request.destination.key}: {e}")
            except Exception as e:
                logger.error(f"Unexpected error from {source.name} quote: {e}")
        return results

    def compare(self, order: OrderRecord) -> ComparisonResult:
        """Fee and time saved by this order relative to the other aggregators."""
        try:
            if not self.asset_directory.loaded:
                self.asset_directory.refresh()
            request = self.build_request(order)
        except (AssetError, ComparisonError) as e:
            logger.warning(f"Skipping comparison for order {order.order_id}: {e}")
            return ComparisonResult()

        quotes = self.quotes(request)
        if not quotes:
            return ComparisonResult()

        value = value_order(order, self.asset_directory.decimals)
        own_fee = 0.0
        if value.destination_resolved and value.destination_usd:
            own_fee = max(value.source_usd - value.destination_usd, 0.0)

        own_time = 0.0
        if order.completed_at and order.completed_at > order.created_at:
            own_time = (order.completed_at - order.created_at).total_seconds()

        average_fee = mean(metric.fee for metric in quotes.values())
        average_time = mean(metric.time for metric in quotes.values())

        result = ComparisonResult(
            fee_saved=max(average_fee - own_fee, 0.0),
            time_saved=max(average_time - own_time, 0.0),
            sources=sorted(quotes),
        )
        logger.info(
            f"Order {order.order_id} saved {result.fee_saved:.2f} USD and "
            f"{result.time_saved:.0f}s versus {', '.join(result.sources)}"
        )
        return result

__all__ = [
    'FeeComparator',
    'QuoteSource',
    'RelaySource',
    'ThorSwapSource',
    'ChainflipSource',
    'QuoteRequest',
    'AssetRef',
    'ComparisonError',
    'UnsupportedRouteError',
]

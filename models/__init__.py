"""Data models shared by the query layer, the aggregator and the bot loops."""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

class OrderRecord(BaseModel):
    """One completed cross-chain swap.

    Only orders whose source and destination swaps both carry a redeem
    transaction hash are ever loaded as OrderRecords.
    """
    order_id: str
    source_chain: str
    source_asset: str
    destination_chain: Optional[str] = None
    destination_asset: Optional[str] = None
    source_amount: Optional[int] = None  # smallest on-chain unit
    destination_amount: Optional[int] = None
    input_token_price: Optional[float] = None
    output_token_price: Optional[float] = None
    created_at: datetime
    completed_at: Optional[datetime] = None

    @field_validator('source_amount', 'destination_amount', mode='before')
    @classmethod
    def parse_amount(cls, value):
        """Amounts arrive as text or NUMERIC; keep them as exact integers."""
        if value is None or value == '':
            return None
        if isinstance(value, int):
            return value
        try:
            return int(Decimal(str(value)))
        except InvalidOperation:
            raise ValueError(f"invalid amount: {value!r}")

    @field_validator('created_at', 'completed_at')
    @classmethod
    def ensure_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

class TopChain(BaseModel):
    name: str = "unknown"
    count: int = 0

class TopAssetPair(BaseModel):
    pair: str = "unknown"
    count: int = 0

class SwapMetrics(BaseModel):
    """Aggregate metrics, recomputed on every request."""
    all_orders: int = 0
    total_swaps: int = 0
    last_24_hours_swaps: int = 0
    last_24_hours_volume: float = 0.0
    all_time_volume: float = 0.0
    top_chain: TopChain = Field(default_factory=TopChain)
    top_asset_pair: TopAssetPair = Field(default_factory=TopAssetPair)
    completion_rate: float = 0.0
    total_users: int = 0

class ComparisonMetric(BaseModel):
    """Quote from one external aggregator: fee in USD, time in seconds."""
    fee: float = 0.0
    time: float = 0.0

class ComparisonResult(BaseModel):
    fee_saved: float = 0.0
    time_saved: float = 0.0
    sources: List[str] = Field(default_factory=list)

class PostResult(BaseModel):
    id: str
    text: str

class PostLogEntry(BaseModel):
    id: str
    message: str
    timestamp: datetime

__all__ = [
    'OrderRecord',
    'TopChain',
    'TopAssetPair',
    'SwapMetrics',
    'ComparisonMetric',
    'ComparisonResult',
    'PostResult',
    'PostLogEntry',
]

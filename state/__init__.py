"""Bot state persisted between restarts.

Keeps the ids of orders that were already handled, a short log of published
posts, a longer log of processed orders and the last computed metrics. The
whole state lives in one JSON file that is rewritten atomically after every
change.
"""
import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Union

from pydantic import ValidationError

from models import OrderRecord, PostLogEntry, PostResult, SwapMetrics

logger = logging.getLogger(__name__)

MAX_POSTS = 100
MAX_ORDERS = 1000

class StateError(Exception):
    """Raised when the state file can't be written"""
    pass

class BotState:
    """File-backed bot state."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.processed_ids: Set[str] = set()
        self.posts: List[PostLogEntry] = []
        self.orders: List[Dict[str, Any]] = []
        self.metrics: Optional[SwapMetrics] = None
        self.metrics_updated_at: Optional[datetime] = None

    def load(self) -> 'BotState':
        """Load state from disk.

        A missing file starts an empty state; so does a corrupt one, which is
        logged and left in place until the next persist overwrites it.
        """
        if not self.path.exists():
            logger.info(f"No state file at {self.path}, starting empty")
            return self

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            processed_ids = set(data.get('processed_ids', []))
            posts = [PostLogEntry.model_validate(entry) for entry in data.get('posts', [])]
            orders = list(data.get('orders', []))
            metrics = data.get('metrics')
            metrics = SwapMetrics.model_validate(metrics) if metrics else None
            updated_at = data.get('metrics_updated_at')
            updated_at = datetime.fromisoformat(updated_at) if updated_at else None
        except (OSError, ValueError, TypeError, AttributeError, ValidationError) as e:
            logger.error(f"Corrupt state file {self.path}, starting empty: {e}")
            return self

        self.processed_ids = processed_ids
        self.posts = posts[-MAX_POSTS:]
        self.orders = orders[-MAX_ORDERS:]
        self.metrics = metrics
        self.metrics_updated_at = updated_at
        logger.info(
            f"Loaded state: {len(self.processed_ids)} processed orders, "
            f"{len(self.posts)} posts"
        )
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            'processed_ids': sorted(self.processed_ids),
            'posts': [entry.model_dump(mode='json') for entry in self.posts],
            'orders': self.orders,
            'metrics': self.metrics.model_dump(mode='json') if self.metrics else None,
            'metrics_updated_at': (
                self.metrics_updated_at.isoformat() if self.metrics_updated_at else None
            ),
        }

    def persist(self) -> None:
        """Write the state to disk through a temp file and rename.

        Raises:
            StateError: If the file can't be written
        """
        directory = self.path.parent
        tmp_path = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=directory)
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(self.to_dict(), f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StateError(f"Failed to write state file {self.path}: {e}") from e

    def is_processed(self, order_id: str) -> bool:
        return order_id in self.processed_ids

    def mark_processed(self, order_id: str) -> None:
        self.processed_ids.add(order_id)

    def add_post(self, result: PostResult) -> PostLogEntry:
        entry = PostLogEntry(
            id=result.id,
            message=result.text,
            timestamp=datetime.now(timezone.utc),
        )
        self.posts.append(entry)
        del self.posts[:-MAX_POSTS]
        return entry

    def recent_posts(self, limit: Optional[int] = None) -> List[PostLogEntry]:
        """Newest last."""
        if limit is None:
            return list(self.posts)
        return self.posts[-limit:] if limit > 0 else []

    def add_order(self, order: OrderRecord, usd_value: float, posted: bool = False) -> None:
        entry = order.model_dump(mode='json')
        entry.update({
            'usd_value': usd_value,
            'posted': posted,
            'logged_at': datetime.now(timezone.utc).isoformat(),
        })
        self.orders.append(entry)
        del self.orders[:-MAX_ORDERS]

    def cache_metrics(self, metrics: SwapMetrics) -> None:
        self.metrics = metrics
        self.metrics_updated_at = datetime.now(timezone.utc)

    def cached_metrics(self) -> Optional[SwapMetrics]:
        return self.metrics

__all__ = ['BotState', 'StateError', 'MAX_POSTS', 'MAX_ORDERS']

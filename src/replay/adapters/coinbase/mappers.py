"""Coinbase mappers: matches and level2 book changes."""

from collections.abc import Iterator
from datetime import datetime
from typing import Any

from src.replay.adapters.base import BaseMapper, price_level
from src.replay.adapters.coinbase.data import (
    CoinbaseL2Update,
    CoinbaseMatch,
    CoinbaseSnapshot,
)
from src.replay.enums import BookSide
from src.replay.model.events import BookChange, Trade


def _type_of(message: Any) -> str | None:
    return message.get("type") if isinstance(message, dict) else None


class CoinbaseTradesMapper(BaseMapper):
    """Maps ``match`` messages to trades."""

    channels = ("match",)

    def can_handle(self, message: Any) -> bool:
        """Handle match messages."""
        return _type_of(message) == "match"

    def map(self, message: Any, local_timestamp: datetime) -> Iterator[Trade]:
        """Emit the matched trade."""
        match = CoinbaseMatch.model_validate(message)
        yield Trade(
            symbol=match.symbol,
            exchange=self.exchange.value,
            id=match.trade_id,
            price=match.price,
            amount=match.size,
            side=match.side,
            timestamp=match.timestamp,
            local_timestamp=local_timestamp,
        )


class CoinbaseBookChangeMapper(BaseMapper):
    """Maps level2 ``snapshot`` and ``l2update`` messages to book changes."""

    channels = ("snapshot", "l2update")

    def can_handle(self, message: Any) -> bool:
        """Handle level2 messages."""
        return _type_of(message) in {"snapshot", "l2update"}

    def map(self, message: Any, local_timestamp: datetime) -> Iterator[BookChange]:
        """Emit the snapshot or the incremental change."""
        if message["type"] == "snapshot":
            snapshot = CoinbaseSnapshot.model_validate(message)
            yield BookChange(
                symbol=snapshot.symbol,
                exchange=self.exchange.value,
                is_snapshot=True,
                bids=[price_level(p, s) for p, s in snapshot.bids],
                asks=[price_level(p, s) for p, s in snapshot.asks],
                timestamp=local_timestamp,
                local_timestamp=local_timestamp,
            )
            return

        update = CoinbaseL2Update.model_validate(message)
        yield BookChange(
            symbol=update.symbol,
            exchange=self.exchange.value,
            is_snapshot=False,
            bids=[price_level(p, s) for p, s in update.changes_for(BookSide.BID)],
            asks=[price_level(p, s) for p, s in update.changes_for(BookSide.ASK)],
            timestamp=update.timestamp or local_timestamp,
            local_timestamp=local_timestamp,
        )

"""Gemini mappers: trades and level 2 updates."""

from collections.abc import Iterable, Iterator
from datetime import datetime
from typing import Any

from src.replay.adapters.base import BaseMapper, price_level, to_decimal
from src.replay.domain.timestamps import from_milliseconds
from src.replay.enums import BookSide, Exchange, TradeSide
from src.replay.model.events import BookChange, BookPriceLevel, Trade


def _type_of(message: Any) -> str | None:
    return message.get("type") if isinstance(message, dict) else None


class GeminiTradesMapper(BaseMapper):
    """Maps ``trade`` messages to trades."""

    channels = ("trade",)

    def can_handle(self, message: Any) -> bool:
        """Handle trade messages."""
        return _type_of(message) == "trade"

    def map(self, message: Any, local_timestamp: datetime) -> Iterator[Trade]:
        """Emit the trade."""
        yield Trade(
            symbol=message["symbol"],
            exchange=self.exchange.value,
            id=str(message["event_id"]),
            price=to_decimal(message["price"]),
            amount=to_decimal(message["quantity"]),
            side=TradeSide.from_exchange(message.get("side")),
            timestamp=from_milliseconds(message["timestamp"]),
            local_timestamp=local_timestamp,
        )


class GeminiBookChangeMapper(BaseMapper):
    """
    Maps ``l2_updates`` messages to book changes.

    The first update received for a symbol holds the full book and is
    reported as a snapshot.
    """

    channels = ("l2_updates",)

    def __init__(
        self, exchange: Exchange, symbols: Iterable[str] | None = None
    ) -> None:
        """Initialize with no symbols seen."""
        super().__init__(exchange, symbols)
        self._seen: set[str] = set()

    def can_handle(self, message: Any) -> bool:
        """Handle level 2 update messages."""
        return _type_of(message) == "l2_updates"

    def map(self, message: Any, local_timestamp: datetime) -> Iterator[BookChange]:
        """Emit the snapshot or the incremental change."""
        symbol = message["symbol"]
        is_snapshot = symbol not in self._seen
        self._seen.add(symbol)

        bids: list[BookPriceLevel] = []
        asks: list[BookPriceLevel] = []
        for side, price, quantity in message.get("changes", []):
            level = price_level(price, quantity)
            if BookSide.from_exchange(side) is BookSide.BID:
                bids.append(level)
            else:
                asks.append(level)

        yield BookChange(
            symbol=symbol,
            exchange=self.exchange.value,
            is_snapshot=is_snapshot,
            bids=bids,
            asks=asks,
            timestamp=local_timestamp,
            local_timestamp=local_timestamp,
        )

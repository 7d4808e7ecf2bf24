"""Crypto Facilities mappers: trades, book changes and tickers."""

from collections.abc import Iterator
from datetime import datetime
from typing import Any

from src.replay.adapters.base import (
    BaseMapper,
    DerivativeTickerMapper,
    price_level,
    to_decimal,
)
from src.replay.domain.timestamps import from_milliseconds
from src.replay.enums import BookSide, TradeSide
from src.replay.model.events import BookChange, DerivativeTicker, Trade


def _feed_of(message: Any) -> str | None:
    if not isinstance(message, dict) or "event" in message:
        return None
    return message.get("feed")


class CryptofacilitiesTradesMapper(BaseMapper):
    """Maps ``trade`` feed messages to trades; trade snapshots are skipped."""

    channels = ("trade",)

    def can_handle(self, message: Any) -> bool:
        """Handle trade feed messages."""
        return _feed_of(message) == "trade"

    def map(self, message: Any, local_timestamp: datetime) -> Iterator[Trade]:
        """Emit the trade."""
        yield Trade(
            symbol=message["product_id"],
            exchange=self.exchange.value,
            id=message.get("uid"),
            price=to_decimal(message["price"]),
            amount=to_decimal(message["qty"]),
            side=TradeSide.from_exchange(message.get("side")),
            timestamp=from_milliseconds(message["time"]),
            local_timestamp=local_timestamp,
        )


class CryptofacilitiesBookChangeMapper(BaseMapper):
    """Maps ``book_snapshot`` and single-level ``book`` messages."""

    channels = ("book", "book_snapshot")

    def can_handle(self, message: Any) -> bool:
        """Handle book feed messages."""
        return _feed_of(message) in {"book", "book_snapshot"}

    def map(self, message: Any, local_timestamp: datetime) -> Iterator[BookChange]:
        """Emit the snapshot or the single level update."""
        timestamp = (
            from_milliseconds(message["timestamp"])
            if message.get("timestamp")
            else local_timestamp
        )
        if message["feed"] == "book_snapshot":
            yield BookChange(
                symbol=message["product_id"],
                exchange=self.exchange.value,
                is_snapshot=True,
                bids=[price_level(b["price"], b["qty"]) for b in message["bids"]],
                asks=[price_level(a["price"], a["qty"]) for a in message["asks"]],
                timestamp=timestamp,
                local_timestamp=local_timestamp,
            )
            return

        level = price_level(message["price"], message["qty"])
        is_bid = BookSide.from_exchange(message["side"]) == BookSide.BID
        yield BookChange(
            symbol=message["product_id"],
            exchange=self.exchange.value,
            is_snapshot=False,
            bids=[level] if is_bid else [],
            asks=[] if is_bid else [level],
            timestamp=timestamp,
            local_timestamp=local_timestamp,
        )


class CryptofacilitiesDerivativeTickerMapper(DerivativeTickerMapper):
    """Maps ``ticker`` feed messages of futures and perpetuals."""

    channels = ("ticker",)

    def can_handle(self, message: Any) -> bool:
        """Handle ticker feed messages."""
        return _feed_of(message) == "ticker"

    def map(
        self, message: Any, local_timestamp: datetime
    ) -> Iterator[DerivativeTicker]:
        """Merge the ticker into the product's pending ticker."""
        pending = self.pending_ticker(message["product_id"])
        pending.update(
            last_price=message.get("last"),
            open_interest=message.get("openInterest"),
            funding_rate=message.get("relative_funding_rate"),
            index_price=message.get("index"),
            mark_price=message.get("markPrice"),
        )
        if message.get("time"):
            pending.update_timestamp(from_milliseconds(message["time"]))
        if pending.has_changed:
            yield pending.get_snapshot(local_timestamp)

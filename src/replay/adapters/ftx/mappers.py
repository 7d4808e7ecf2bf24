"""FTX mappers: trades and order book changes."""

from collections.abc import Iterator
from datetime import datetime
from typing import Any

from src.replay.adapters.base import BaseMapper, price_level, to_decimal
from src.replay.domain.timestamps import from_seconds, parse_exchange_datetime
from src.replay.enums import TradeSide
from src.replay.model.events import BookChange, Trade


def _is_data(message: Any, channel: str) -> bool:
    return (
        isinstance(message, dict)
        and message.get("channel") == channel
        and message.get("type") in {"partial", "update"}
        and "data" in message
    )


class FtxTradesMapper(BaseMapper):
    """Maps ``trades`` updates; each update carries a list of trades."""

    channels = ("trades",)

    def can_handle(self, message: Any) -> bool:
        """Handle trades data messages."""
        return _is_data(message, "trades")

    def map(self, message: Any, local_timestamp: datetime) -> Iterator[Trade]:
        """Emit one trade per entry."""
        for trade in message["data"]:
            yield Trade(
                symbol=message["market"],
                exchange=self.exchange.value,
                id=str(trade["id"]) if trade.get("id") is not None else None,
                price=to_decimal(trade["price"]),
                amount=to_decimal(trade["size"]),
                side=TradeSide.from_exchange(trade.get("side")),
                timestamp=parse_exchange_datetime(trade["time"]),
                local_timestamp=local_timestamp,
            )


class FtxBookChangeMapper(BaseMapper):
    """Maps ``orderbook`` messages; ``partial`` is the snapshot."""

    channels = ("orderbook",)

    def can_handle(self, message: Any) -> bool:
        """Handle order book data messages."""
        return _is_data(message, "orderbook")

    def map(self, message: Any, local_timestamp: datetime) -> Iterator[BookChange]:
        """Emit the snapshot or update."""
        data = message["data"]
        bids = [price_level(p, s) for p, s in data.get("bids", [])]
        asks = [price_level(p, s) for p, s in data.get("asks", [])]
        is_snapshot = message["type"] == "partial"
        if not is_snapshot and not bids and not asks:
            return
        time = data.get("time")
        yield BookChange(
            symbol=message["market"],
            exchange=self.exchange.value,
            is_snapshot=is_snapshot,
            bids=bids,
            asks=asks,
            timestamp=from_seconds(time) if time is not None else local_timestamp,
            local_timestamp=local_timestamp,
        )

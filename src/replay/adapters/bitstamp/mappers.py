"""Bitstamp mappers: live trades and diff order book changes."""

from collections.abc import Iterable, Iterator
from datetime import datetime
from typing import Any

from src.replay.adapters.base import BaseMapper, price_level, to_decimal
from src.replay.adapters.bitstamp.decoder import split_channel
from src.replay.domain.timestamps import from_microseconds
from src.replay.enums import Exchange, TradeSide
from src.replay.model.events import BookChange, Trade


class BitstampTradesMapper(BaseMapper):
    """Maps ``live_trades`` trade events; ``type`` 0 is a buy, 1 a sell."""

    channels = ("live_trades",)

    def can_handle(self, message: Any) -> bool:
        """Handle trade events."""
        parts = split_channel(message)
        return (
            parts is not None
            and parts[0] == "live_trades"
            and message.get("event") == "trade"
        )

    def map(self, message: Any, local_timestamp: datetime) -> Iterator[Trade]:
        """Emit the trade."""
        _, symbol = split_channel(message)  # type: ignore[misc]
        data = message["data"]
        yield Trade(
            symbol=symbol.upper(),
            exchange=self.exchange.value,
            id=str(data["id"]),
            price=to_decimal(data["price"]),
            amount=to_decimal(data["amount"]),
            side=TradeSide.BUY if data["type"] == 0 else TradeSide.SELL,
            timestamp=from_microseconds(data["microtimestamp"]),
            local_timestamp=local_timestamp,
        )


class BitstampBookChangeMapper(BaseMapper):
    """
    Maps ``diff_order_book`` events to book changes.

    The capture records a REST snapshot as a ``snapshot`` event. Diffs seen
    before it are buffered and only those newer than the snapshot's
    ``microtimestamp`` are emitted after it.
    """

    channels = ("diff_order_book",)

    def __init__(
        self, exchange: Exchange, symbols: Iterable[str] | None = None
    ) -> None:
        """Initialize with no synchronized symbols."""
        super().__init__(exchange, symbols)
        self._synchronized: set[str] = set()
        self._buffered: dict[str, list[tuple[dict[str, Any], datetime]]] = {}

    def can_handle(self, message: Any) -> bool:
        """Handle diff order book data and snapshot events."""
        parts = split_channel(message)
        return (
            parts is not None
            and parts[0] == "diff_order_book"
            and message.get("event") in {"data", "snapshot"}
        )

    def map(self, message: Any, local_timestamp: datetime) -> Iterator[BookChange]:
        """Emit snapshot and synchronized diffs."""
        _, symbol = split_channel(message)  # type: ignore[misc]
        symbol = symbol.upper()
        data = message["data"]

        if message["event"] == "snapshot":
            yield self._to_change(symbol, data, local_timestamp, is_snapshot=True)
            snapshot_time = int(data["microtimestamp"])
            for diff, buffered_at in self._buffered.pop(symbol, []):
                if int(diff["microtimestamp"]) > snapshot_time:
                    yield self._to_change(symbol, diff, buffered_at)
            self._synchronized.add(symbol)
            return

        if symbol not in self._synchronized:
            self._buffered.setdefault(symbol, []).append((data, local_timestamp))
            return
        yield self._to_change(symbol, data, local_timestamp)

    def _to_change(
        self,
        symbol: str,
        data: dict[str, Any],
        local_timestamp: datetime,
        is_snapshot: bool = False,
    ) -> BookChange:
        return BookChange(
            symbol=symbol,
            exchange=self.exchange.value,
            is_snapshot=is_snapshot,
            bids=[price_level(p, a) for p, a in data["bids"]],
            asks=[price_level(p, a) for p, a in data["asks"]],
            timestamp=from_microseconds(data["microtimestamp"]),
            local_timestamp=local_timestamp,
        )

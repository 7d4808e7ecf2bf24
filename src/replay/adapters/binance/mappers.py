"""Binance mappers: trades, depth book changes and futures tickers."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.replay.adapters.base import BaseMapper, DerivativeTickerMapper, price_level
from src.replay.adapters.binance.data import (
    BinanceDepthSnapshot,
    BinanceDepthUpdate,
    BinanceStreamMessage,
    BinanceTrade,
)
from src.replay.domain.timestamps import from_milliseconds
from src.replay.enums import Exchange
from src.replay.model.events import BookChange, DerivativeTicker, Trade


def _channel_of(message: Any) -> str | None:
    if not isinstance(message, dict):
        return None
    stream = message.get("stream")
    if not isinstance(stream, str) or "@" not in stream:
        return None
    return stream.split("@")[1]


class BinanceTradesMapper(BaseMapper):
    """Maps ``trade`` stream payloads to trades."""

    channels = ("trade",)

    def can_handle(self, message: Any) -> bool:
        """Handle trade stream messages."""
        return _channel_of(message) == "trade"

    def map(self, message: Any, local_timestamp: datetime) -> Iterator[Trade]:
        """Emit the trade."""
        trade = BinanceTrade.model_validate(message["data"])
        yield Trade(
            symbol=trade.symbol,
            exchange=self.exchange.value,
            id=str(trade.trade_id),
            price=trade.price,
            amount=trade.amount,
            side=trade.side,
            timestamp=trade.timestamp,
            local_timestamp=local_timestamp,
        )


@dataclass
class _DepthState:
    """Per-symbol depth synchronization state."""

    snapshot_processed: bool = False
    buffered: list[tuple[BinanceDepthUpdate, datetime]] = field(default_factory=list)


class BinanceBookChangeMapper(BaseMapper):
    """
    Maps ``depth`` updates and generated ``depthSnapshot`` to book changes.

    Updates received before the symbol's snapshot are buffered; once the
    snapshot arrives, buffered updates already contained in it (by update
    id) are dropped and the rest are emitted after the snapshot.
    """

    channels = ("depth", "depthSnapshot")

    def __init__(
        self, exchange: Exchange, symbols: Iterable[str] | None = None
    ) -> None:
        """Initialize with no synchronized symbols."""
        super().__init__(exchange, symbols)
        self._states: dict[str, _DepthState] = {}

    def can_handle(self, message: Any) -> bool:
        """Handle depth and depth snapshot messages."""
        return _channel_of(message) in {"depth", "depthSnapshot"}

    def map(self, message: Any, local_timestamp: datetime) -> Iterator[BookChange]:
        """Emit snapshot and synchronized updates."""
        envelope = BinanceStreamMessage.model_validate(message)
        symbol = envelope.symbol
        state = self._states.setdefault(symbol, _DepthState())

        if envelope.channel == "depthSnapshot":
            snapshot = BinanceDepthSnapshot.model_validate(envelope.data)
            yield BookChange(
                symbol=symbol,
                exchange=self.exchange.value,
                is_snapshot=True,
                bids=[price_level(p, q) for p, q, *_ in snapshot.bids],
                asks=[price_level(p, q) for p, q, *_ in snapshot.asks],
                timestamp=snapshot.timestamp or local_timestamp,
                local_timestamp=local_timestamp,
            )
            for update, buffered_at in state.buffered:
                if update.last_update_id > snapshot.last_update_id:
                    yield self._to_change(symbol, update, buffered_at)
            state.buffered.clear()
            state.snapshot_processed = True
            return

        update = BinanceDepthUpdate.model_validate(envelope.data)
        if not state.snapshot_processed:
            state.buffered.append((update, local_timestamp))
            return
        yield self._to_change(symbol, update, local_timestamp)

    def _to_change(
        self, symbol: str, update: BinanceDepthUpdate, local_timestamp: datetime
    ) -> BookChange:
        return BookChange(
            symbol=symbol,
            exchange=self.exchange.value,
            is_snapshot=False,
            bids=[price_level(p, q) for p, q, *_ in update.bids],
            asks=[price_level(p, q) for p, q, *_ in update.asks],
            timestamp=update.timestamp,
            local_timestamp=local_timestamp,
        )


class BinanceFuturesDerivativeTickerMapper(DerivativeTickerMapper):
    """
    Maps futures ``markPrice``, ``ticker`` and ``openInterest`` streams.

    Mark price updates carry mark price, funding rate and (when available)
    index price; the 24h ticker carries the last price; open interest comes
    from the generated stream.
    """

    channels = ("markPrice", "ticker", "openInterest")

    def can_handle(self, message: Any) -> bool:
        """Handle mark price, ticker and open interest messages."""
        return _channel_of(message) in {"markPrice", "ticker", "openInterest"}

    def map(
        self, message: Any, local_timestamp: datetime
    ) -> Iterator[DerivativeTicker]:
        """Merge the update into the symbol's pending ticker."""
        envelope = BinanceStreamMessage.model_validate(message)
        data = envelope.data
        pending = self.pending_ticker(envelope.symbol)

        if envelope.channel == "markPrice":
            pending.update(
                mark_price=data.get("p"),
                funding_rate=data.get("r"),
                index_price=data.get("i"),
            )
        elif envelope.channel == "ticker":
            pending.update(last_price=data.get("c"))
        else:
            pending.update(open_interest=data.get("openInterest"))

        event_time = data.get("E") or data.get("time")
        if event_time:
            pending.update_timestamp(from_milliseconds(event_time))
        if pending.has_changed:
            yield pending.get_snapshot(local_timestamp)

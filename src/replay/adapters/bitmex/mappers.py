"""BitMEX mappers: trades, order book L2 changes and instrument tickers."""

from collections.abc import Iterable, Iterator
from datetime import datetime
from decimal import Decimal
from typing import Any

from src.replay.adapters.base import BaseMapper, DerivativeTickerMapper
from src.replay.adapters.bitmex.data import (
    BitmexBookLevel,
    BitmexInstrument,
    BitmexMessage,
    BitmexTrade,
)
from src.replay.enums import BookSide, Exchange
from src.replay.model.events import BookChange, BookPriceLevel, DerivativeTicker, Trade


def _is_table(message: Any, table: str) -> bool:
    return isinstance(message, dict) and message.get("table") == table


class BitmexTradesMapper(BaseMapper):
    """Maps ``trade`` table inserts to trades."""

    channels = ("trade",)

    def can_handle(self, message: Any) -> bool:
        """Handle trade table messages."""
        return _is_table(message, "trade") and message.get("action") == "insert"

    def map(self, message: Any, local_timestamp: datetime) -> Iterator[Trade]:
        """Emit one trade per row."""
        envelope = BitmexMessage.model_validate(message)
        for row in envelope.data:
            trade = BitmexTrade.model_validate(row)
            if not self.wants(trade.symbol):
                continue
            yield Trade(
                symbol=trade.symbol,
                exchange=self.exchange.value,
                id=trade.trade_id,
                price=trade.price,
                amount=trade.amount,
                side=trade.side,
                timestamp=trade.timestamp,
                local_timestamp=local_timestamp,
            )


class BitmexBookChangeMapper(BaseMapper):
    """
    Maps ``orderBookL2`` messages to book changes.

    Tracks level id to price per symbol because updates and deletes carry
    only the level id.
    """

    channels = ("orderBookL2",)

    def __init__(
        self, exchange: Exchange, symbols: Iterable[str] | None = None
    ) -> None:
        """Initialize with empty level maps."""
        super().__init__(exchange, symbols)
        self._id_to_price: dict[str, dict[int, Decimal]] = {}

    def can_handle(self, message: Any) -> bool:
        """Handle order book L2 messages."""
        return _is_table(message, "orderBookL2")

    def map(self, message: Any, local_timestamp: datetime) -> Iterator[BookChange]:
        """Emit one book change per symbol present in the message."""
        envelope = BitmexMessage.model_validate(message)
        changes: dict[str, tuple[list[BookPriceLevel], list[BookPriceLevel]]] = {}
        timestamps: dict[str, datetime] = {}

        for row in envelope.data:
            level = BitmexBookLevel.model_validate(row)
            if not self.wants(level.symbol):
                continue
            if envelope.is_partial and level.symbol not in changes:
                self._id_to_price[level.symbol] = {}
            prices = self._id_to_price.setdefault(level.symbol, {})

            if level.price is not None:
                price = Decimal(str(level.price))
                prices[level.id] = price
            elif level.id in prices:
                price = prices[level.id]
            else:
                # Level created before this replay started
                continue

            if envelope.action == "delete":
                amount = Decimal("0")
                prices.pop(level.id, None)
            else:
                amount = Decimal(str(level.size or 0))

            bids, asks = changes.setdefault(level.symbol, ([], []))
            target = bids if level.side == BookSide.BID else asks
            target.append(BookPriceLevel(price=price, amount=amount))
            if level.timestamp is not None:
                timestamps[level.symbol] = level.timestamp

        for symbol, (bids, asks) in changes.items():
            yield BookChange(
                symbol=symbol,
                exchange=self.exchange.value,
                is_snapshot=envelope.is_partial,
                bids=bids,
                asks=asks,
                timestamp=timestamps.get(symbol, local_timestamp),
                local_timestamp=local_timestamp,
            )


class BitmexDerivativeTickerMapper(DerivativeTickerMapper):
    """Maps ``instrument`` partials and updates to derivative tickers."""

    channels = ("instrument",)

    def can_handle(self, message: Any) -> bool:
        """Handle instrument table messages."""
        return _is_table(message, "instrument")

    def map(
        self, message: Any, local_timestamp: datetime
    ) -> Iterator[DerivativeTicker]:
        """Emit a ticker for each instrument whose values changed."""
        envelope = BitmexMessage.model_validate(message)
        for row in envelope.data:
            instrument = BitmexInstrument.model_validate(row)
            if not self.wants(instrument.symbol):
                continue
            pending = self.pending_ticker(instrument.symbol)
            pending.update(
                last_price=instrument.last_price,
                open_interest=instrument.open_interest,
                funding_rate=instrument.funding_rate,
                index_price=instrument.index_price,
                mark_price=instrument.mark_price,
            )
            if instrument.timestamp is not None:
                pending.update_timestamp(instrument.timestamp)
            if pending.has_changed:
                yield pending.get_snapshot(local_timestamp)

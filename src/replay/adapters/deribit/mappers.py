"""Deribit mappers: trades, raw book changes and tickers."""

from collections.abc import Iterator
from datetime import datetime
from decimal import Decimal
from typing import Any

from src.replay.adapters.base import BaseMapper, DerivativeTickerMapper
from src.replay.adapters.deribit.data import (
    DeribitBook,
    DeribitNotification,
    DeribitTicker,
    DeribitTrade,
    channel_parts,
)
from src.replay.model.events import BookChange, BookPriceLevel, DerivativeTicker, Trade


def _channel_name(message: Any) -> str | None:
    parts = channel_parts(message)
    return parts[0] if parts else None


class DeribitTradesMapper(BaseMapper):
    """Maps ``trades`` notifications to trades."""

    channels = ("trades",)

    def can_handle(self, message: Any) -> bool:
        """Handle trades notifications."""
        return _channel_name(message) == "trades"

    def map(self, message: Any, local_timestamp: datetime) -> Iterator[Trade]:
        """Emit one trade per notification item."""
        notification = DeribitNotification.model_validate(message["params"])
        for item in notification.data:
            trade = DeribitTrade.model_validate(item)
            yield Trade(
                symbol=trade.instrument_name,
                exchange=self.exchange.value,
                id=str(trade.trade_id),
                price=Decimal(str(trade.price)),
                amount=Decimal(str(trade.amount)),
                side=trade.side,
                timestamp=trade.timestamp,
                local_timestamp=local_timestamp,
            )


class DeribitBookChangeMapper(BaseMapper):
    """Maps raw ``book`` notifications to book changes."""

    channels = ("book",)

    def can_handle(self, message: Any) -> bool:
        """Handle book notifications."""
        return _channel_name(message) == "book"

    def map(self, message: Any, local_timestamp: datetime) -> Iterator[BookChange]:
        """Emit the snapshot or incremental change."""
        notification = DeribitNotification.model_validate(message["params"])
        book = DeribitBook.model_validate(notification.data)
        yield BookChange(
            symbol=book.instrument_name,
            exchange=self.exchange.value,
            is_snapshot=book.is_snapshot,
            bids=[self._level(level) for level in book.bids],
            asks=[self._level(level) for level in book.asks],
            timestamp=book.timestamp,
            local_timestamp=local_timestamp,
        )

    def _level(self, level: list[Any]) -> BookPriceLevel:
        price, amount = DeribitBook.level_values(level)
        return BookPriceLevel(price=price, amount=amount)


class DeribitDerivativeTickerMapper(DerivativeTickerMapper):
    """Maps ``ticker`` notifications to derivative tickers."""

    channels = ("ticker",)

    def can_handle(self, message: Any) -> bool:
        """Handle ticker notifications."""
        return _channel_name(message) == "ticker"

    def map(
        self, message: Any, local_timestamp: datetime
    ) -> Iterator[DerivativeTicker]:
        """Merge the ticker into the instrument's pending ticker."""
        notification = DeribitNotification.model_validate(message["params"])
        ticker = DeribitTicker.model_validate(notification.data)
        pending = self.pending_ticker(ticker.instrument_name)
        pending.update(
            last_price=ticker.last_price,
            open_interest=ticker.open_interest,
            funding_rate=ticker.funding_rate,
            index_price=ticker.index_price,
            mark_price=ticker.mark_price,
        )
        pending.update_timestamp(ticker.timestamp)
        if pending.has_changed:
            yield pending.get_snapshot(local_timestamp)

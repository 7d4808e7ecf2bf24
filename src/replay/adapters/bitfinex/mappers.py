"""Bitfinex mappers: trades, book changes and derivatives status tickers."""

from collections.abc import Iterable, Iterator
from datetime import datetime
from decimal import Decimal
from typing import Any

from src.replay.adapters.base import (
    BaseMapper,
    DerivativeTickerMapper,
    optional_decimal,
    to_decimal,
)
from src.replay.adapters.bitfinex.data import (
    STATUS_CURRENT_FUNDING,
    STATUS_DERIV_PRICE,
    STATUS_MARK_PRICE,
    STATUS_OPEN_INTEREST,
    STATUS_SPOT_PRICE,
    STATUS_TIMESTAMP,
    BitfinexSubscriptions,
    is_heartbeat,
)
from src.replay.domain.timestamps import from_milliseconds
from src.replay.enums import Exchange, TradeSide
from src.replay.model.events import (
    BookChange,
    BookPriceLevel,
    NormalizedEventBase,
    Trade,
)


class _BitfinexMapper(BaseMapper):
    """Tracks subscriptions and routes data frames of ``channels``."""

    def __init__(
        self, exchange: Exchange, symbols: Iterable[str] | None = None
    ) -> None:
        """Initialize with no subscriptions."""
        super().__init__(exchange, symbols)
        self._subscriptions = BitfinexSubscriptions()

    def can_handle(self, message: Any) -> bool:
        """Handle subscription events and data frames of our channels."""
        if isinstance(message, dict):
            return (
                message.get("event") == "subscribed"
                and message.get("channel") in self.channels
            )
        if not isinstance(message, list) or is_heartbeat(message):
            return False
        subscription = self._subscriptions.lookup(message)
        return subscription is not None and subscription.channel in self.channels

    def map(
        self, message: Any, local_timestamp: datetime
    ) -> Iterator[NormalizedEventBase]:
        """Register subscriptions, map data frames."""
        if isinstance(message, dict):
            self._subscriptions.register(message)
            return iter(())
        subscription = self._subscriptions.lookup(message)
        if subscription is None:
            return iter(())
        return self.map_data(subscription.symbol, message, local_timestamp)

    def map_data(
        self, symbol: str, message: list[Any], local_timestamp: datetime
    ) -> Iterator[NormalizedEventBase]:
        """Map a data frame of a known subscription."""
        raise NotImplementedError


class BitfinexTradesMapper(_BitfinexMapper):
    """Maps ``te`` (trade executed) frames to trades; snapshots are skipped."""

    channels = ("trades",)

    def map_data(
        self, symbol: str, message: list[Any], local_timestamp: datetime
    ) -> Iterator[Trade]:
        """Emit the executed trade."""
        if len(message) < 3 or message[1] != "te":
            return
        trade_id, mts, amount, price = message[2][:4]
        amount = to_decimal(amount)
        yield Trade(
            symbol=symbol,
            exchange=self.exchange.value,
            id=str(trade_id),
            price=to_decimal(price),
            amount=abs(amount),
            side=TradeSide.BUY if amount > 0 else TradeSide.SELL,
            timestamp=from_milliseconds(mts),
            local_timestamp=local_timestamp,
        )


class BitfinexBookChangeMapper(_BitfinexMapper):
    """
    Maps ``book`` frames to book changes.

    A frame whose payload is a list of levels is a snapshot. Positive
    amounts are bids, negative asks, and a zero count removes the level.
    """

    channels = ("book",)

    def map_data(
        self, symbol: str, message: list[Any], local_timestamp: datetime
    ) -> Iterator[BookChange]:
        """Emit the snapshot or single level update."""
        payload = message[1]
        if not isinstance(payload, list) or not payload:
            return
        is_snapshot = isinstance(payload[0], list)
        levels = payload if is_snapshot else [payload]

        bids: list[BookPriceLevel] = []
        asks: list[BookPriceLevel] = []
        for price, count, amount in levels:
            amount = to_decimal(amount)
            level = BookPriceLevel(
                price=to_decimal(price),
                amount=Decimal("0") if count == 0 else abs(amount),
            )
            (bids if amount > 0 else asks).append(level)

        yield BookChange(
            symbol=symbol,
            exchange=self.exchange.value,
            is_snapshot=is_snapshot,
            bids=bids,
            asks=asks,
            timestamp=local_timestamp,
            local_timestamp=local_timestamp,
        )


class BitfinexDerivativeTickerMapper(_BitfinexMapper, DerivativeTickerMapper):
    """Maps derivatives ``status`` frames to derivative tickers."""

    channels = ("status",)

    def map_data(
        self, symbol: str, message: list[Any], local_timestamp: datetime
    ) -> Iterator[NormalizedEventBase]:
        """Merge the status into the symbol's pending ticker."""
        status = message[1]
        if not isinstance(status, list) or len(status) <= STATUS_OPEN_INTEREST:
            return
        pending = self.pending_ticker(symbol)
        pending.update(
            last_price=status[STATUS_DERIV_PRICE],
            index_price=status[STATUS_SPOT_PRICE],
            funding_rate=status[STATUS_CURRENT_FUNDING],
            mark_price=status[STATUS_MARK_PRICE],
            open_interest=optional_decimal(status[STATUS_OPEN_INTEREST]),
        )
        pending.update_timestamp(from_milliseconds(status[STATUS_TIMESTAMP]))
        if pending.has_changed:
            yield pending.get_snapshot(local_timestamp)

"""OKEx v3 mappers: trades, depth book changes and swap/futures tickers."""

from collections.abc import Iterator
from datetime import datetime
from typing import Any

from src.replay.adapters.base import (
    BaseMapper,
    DerivativeTickerMapper,
    price_level,
    to_decimal,
)
from src.replay.domain.timestamps import parse_exchange_datetime
from src.replay.enums import TradeSide
from src.replay.model.events import BookChange, DerivativeTicker, Trade


def _table_of(message: Any) -> str | None:
    if isinstance(message, dict) and "event" not in message:
        return message.get("table")
    return None


class OkexTradesMapper(BaseMapper):
    """Maps spot, swap and futures trade tables to trades."""

    channels = ("spot/trade", "swap/trade", "futures/trade")

    def can_handle(self, message: Any) -> bool:
        """Handle trade tables."""
        return _table_of(message) in self.channels

    def map(self, message: Any, local_timestamp: datetime) -> Iterator[Trade]:
        """Emit one trade per row; derivatives report ``qty`` instead of ``size``."""
        for row in message["data"]:
            if not self.wants(row["instrument_id"]):
                continue
            yield Trade(
                symbol=row["instrument_id"],
                exchange=self.exchange.value,
                id=row.get("trade_id"),
                price=to_decimal(row["price"]),
                amount=to_decimal(row["size"] if "size" in row else row["qty"]),
                side=TradeSide.from_exchange(row.get("side")),
                timestamp=parse_exchange_datetime(row["timestamp"]),
                local_timestamp=local_timestamp,
            )


class OkexBookChangeMapper(BaseMapper):
    """Maps depth tables (``partial`` snapshot, ``update`` changes)."""

    channels = ("spot/depth", "swap/depth", "futures/depth")

    def can_handle(self, message: Any) -> bool:
        """Handle depth tables."""
        return _table_of(message) in self.channels

    def map(self, message: Any, local_timestamp: datetime) -> Iterator[BookChange]:
        """Emit one book change per row."""
        is_snapshot = message.get("action") == "partial"
        for row in message["data"]:
            if not self.wants(row["instrument_id"]):
                continue
            yield BookChange(
                symbol=row["instrument_id"],
                exchange=self.exchange.value,
                is_snapshot=is_snapshot,
                bids=[price_level(level[0], level[1]) for level in row["bids"]],
                asks=[price_level(level[0], level[1]) for level in row["asks"]],
                timestamp=parse_exchange_datetime(row["timestamp"]),
                local_timestamp=local_timestamp,
            )


class OkexDerivativeTickerMapper(DerivativeTickerMapper):
    """
    Maps swap and futures tickers, swap funding rates and mark prices.

    Each table only carries some of the ticker values; the pending ticker
    merges them per instrument.
    """

    channels = (
        "swap/ticker",
        "swap/funding_rate",
        "swap/mark_price",
        "futures/ticker",
        "futures/mark_price",
    )

    def can_handle(self, message: Any) -> bool:
        """Handle derivative ticker tables."""
        return _table_of(message) in self.channels

    def map(
        self, message: Any, local_timestamp: datetime
    ) -> Iterator[DerivativeTicker]:
        """Merge each row into its instrument's pending ticker."""
        table = message["table"]
        for row in message["data"]:
            if not self.wants(row["instrument_id"]):
                continue
            pending = self.pending_ticker(row["instrument_id"])
            if table.endswith("/ticker"):
                pending.update(
                    last_price=row.get("last"),
                    open_interest=row.get("open_interest"),
                )
            elif table.endswith("/funding_rate"):
                pending.update(funding_rate=row.get("funding_rate"))
            else:
                pending.update(mark_price=row.get("mark_price"))

            if row.get("timestamp"):
                pending.update_timestamp(parse_exchange_datetime(row["timestamp"]))
            if pending.has_changed:
                yield pending.get_snapshot(local_timestamp)

"""Kraken mappers: trades and book changes."""

from collections.abc import Iterator
from datetime import datetime
from typing import Any

from src.replay.adapters.base import BaseMapper, price_level, to_decimal
from src.replay.domain.timestamps import from_seconds
from src.replay.enums import TradeSide
from src.replay.model.events import BookChange, BookPriceLevel, Trade


def _channel_of(message: Any) -> str | None:
    if isinstance(message, list) and len(message) >= 4:
        return str(message[-2]).split("-")[0]
    return None


class KrakenTradesMapper(BaseMapper):
    """Maps ``trade`` frames; each frame may carry several trades."""

    channels = ("trade",)

    def can_handle(self, message: Any) -> bool:
        """Handle trade frames."""
        return _channel_of(message) == "trade"

    def map(self, message: Any, local_timestamp: datetime) -> Iterator[Trade]:
        """Emit one trade per entry; Kraken provides no trade ids."""
        symbol = message[-1]
        for price, volume, time, side, *_ in message[1]:
            yield Trade(
                symbol=symbol,
                exchange=self.exchange.value,
                id=None,
                price=to_decimal(price),
                amount=to_decimal(volume),
                side=TradeSide.from_exchange(side),
                timestamp=from_seconds(time),
                local_timestamp=local_timestamp,
            )


class KrakenBookChangeMapper(BaseMapper):
    """
    Maps ``book`` frames to book changes.

    Snapshots use ``as``/``bs`` keys, updates ``a``/``b``, and an update
    frame may split asks and bids into two payload objects.
    """

    channels = ("book",)

    def can_handle(self, message: Any) -> bool:
        """Handle book frames."""
        return _channel_of(message) == "book"

    def map(self, message: Any, local_timestamp: datetime) -> Iterator[BookChange]:
        """Emit the snapshot or the merged update."""
        payloads = [p for p in message[1:-2] if isinstance(p, dict)]
        is_snapshot = any("as" in p or "bs" in p for p in payloads)

        bids: list[BookPriceLevel] = []
        asks: list[BookPriceLevel] = []
        latest: float | None = None
        for payload in payloads:
            for key, levels in payload.items():
                if key not in {"a", "b", "as", "bs"}:
                    continue
                target = asks if key.startswith("a") else bids
                for price, volume, time, *_ in levels:
                    target.append(price_level(price, volume))
                    moment = float(time)
                    latest = moment if latest is None else max(latest, moment)

        if not bids and not asks:
            return
        yield BookChange(
            symbol=message[-1],
            exchange=self.exchange.value,
            is_snapshot=is_snapshot,
            bids=bids,
            asks=asks,
            timestamp=from_seconds(latest) if latest is not None else local_timestamp,
            local_timestamp=local_timestamp,
        )

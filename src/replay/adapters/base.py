"""
Shared building blocks for exchange adapters.

Every archived segment uses the same line framing, ``<local timestamp>
<frame>``, so decoders only differ in how they classify decoded messages.
Mappers share symbol handling and derivative ticker accumulation.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator
from datetime import datetime
from decimal import Decimal
from typing import IO, Any

from src.replay.domain.timestamps import parse_local_timestamp
from src.replay.enums import Exchange
from src.replay.model.events import (
    BookPriceLevel,
    DerivativeTicker,
    NormalizedEventBase,
)
from src.replay.model.request import Filter
from src.replay.protocols.replay import Frame


def to_decimal(value: str | float | int | Decimal) -> Decimal:
    """Convert a JSON number or numeric string to Decimal."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def optional_decimal(value: str | float | int | None) -> Decimal | None:
    """Convert to Decimal, passing through None and empty strings."""
    if value is None or value == "":
        return None
    return to_decimal(value)


def price_level(price: Any, amount: Any) -> BookPriceLevel:
    """Build a price level from raw exchange values."""
    return BookPriceLevel(price=to_decimal(price), amount=abs(to_decimal(amount)))


# =============================================================================
# DECODING
# =============================================================================


class JsonLinesDecoder:
    """
    Base decoder for line-framed JSON segments.

    Subclasses implement ``channel_of`` and ``symbol_of`` for their
    exchange's message shapes.
    """

    def __init__(self, exchange: Exchange) -> None:
        """Initialize the decoder for one replay of ``exchange``."""
        self.exchange = exchange

    def split_frames(self, stream: IO[bytes]) -> Iterator[Frame]:
        """Split a decompressed segment into frames, in capture order."""
        for line in stream:
            line = line.rstrip(b"\r\n")
            if not line:
                continue
            separator = line.find(b" ")
            if separator == -1:
                # Timestamp with no frame marks a capture-time disconnect
                yield Frame(parse_local_timestamp(line), b"")
                continue
            yield Frame(
                parse_local_timestamp(line[:separator]),
                line[separator + 1 :].strip(),
            )

    def decode(self, payload: bytes) -> Any:
        """Decode a JSON frame."""
        return json.loads(payload)

    def channel_of(self, message: Any) -> str | None:
        """Get the channel of a decoded message."""
        raise NotImplementedError

    def symbol_of(self, message: Any) -> str | None:
        """Get the symbol of a decoded message."""
        raise NotImplementedError

    def symbols_of(self, message: Any) -> list[str]:
        """
        Get every symbol a decoded message carries data for.

        Exchanges batching several symbols into one message override this.
        """
        symbol = self.symbol_of(message)
        return [symbol] if symbol is not None else []


# =============================================================================
# MAPPING
# =============================================================================


class BaseMapper:
    """
    Base class for exchange mappers.

    ``channels`` lists the raw channels the mapper consumes; the default
    ``filters`` implementation requests each of them for the given symbols.
    """

    channels: tuple[str, ...] = ()

    def __init__(
        self, exchange: Exchange, symbols: Iterable[str] | None = None
    ) -> None:
        """
        Initialize the mapper with empty state.

        Args:
            exchange: Exchange the mapper translates
            symbols: Symbols to emit events for; None means all

        """
        self.exchange = exchange
        self.symbols = frozenset(s.upper() for s in symbols) if symbols else None

    def wants(self, symbol: str) -> bool:
        """Check whether events for a symbol should be emitted."""
        return self.symbols is None or symbol.upper() in self.symbols

    def filters(self, symbols: Iterable[str] | None) -> list[Filter]:
        """Get the raw filters this mapper needs for the given symbols."""
        symbol_list = list(symbols) if symbols else None
        return [Filter(channel=c, symbols=symbol_list) for c in self.channels]

    def can_handle(self, message: Any) -> bool:
        """Check whether a raw message is relevant to this mapper."""
        raise NotImplementedError

    def map(
        self, message: Any, local_timestamp: datetime
    ) -> Iterable[NormalizedEventBase]:
        """Map one raw message to zero or more normalized events."""
        raise NotImplementedError


class PendingTickerInfo:
    """
    Accumulates partial derivative ticker updates for one symbol.

    Exchanges publish funding, prices and open interest on separate channels
    or as partial updates. A snapshot is only worth emitting when one of the
    tracked values actually changed.
    """

    def __init__(self, symbol: str, exchange: Exchange) -> None:
        """Initialize with no known values."""
        self.symbol = symbol
        self.exchange = exchange
        self.last_price: Decimal | None = None
        self.open_interest: Decimal | None = None
        self.funding_rate: Decimal | None = None
        self.index_price: Decimal | None = None
        self.mark_price: Decimal | None = None
        self.timestamp: datetime | None = None
        self._changed = False

    def update(
        self,
        last_price: Any = None,
        open_interest: Any = None,
        funding_rate: Any = None,
        index_price: Any = None,
        mark_price: Any = None,
    ) -> None:
        """Merge new values; None leaves the current value untouched."""
        updates = {
            "last_price": last_price,
            "open_interest": open_interest,
            "funding_rate": funding_rate,
            "index_price": index_price,
            "mark_price": mark_price,
        }
        for name, raw in updates.items():
            value = optional_decimal(raw)
            if value is None:
                continue
            if getattr(self, name) != value:
                setattr(self, name, value)
                self._changed = True

    def update_timestamp(self, timestamp: datetime) -> None:
        """Track the latest exchange timestamp seen for the symbol."""
        if self.timestamp is None or timestamp > self.timestamp:
            self.timestamp = timestamp

    @property
    def has_changed(self) -> bool:
        """Check whether any value changed since the last snapshot."""
        return self._changed

    def get_snapshot(self, local_timestamp: datetime) -> DerivativeTicker:
        """Emit the current values and reset the change flag."""
        self._changed = False
        return DerivativeTicker(
            symbol=self.symbol,
            exchange=self.exchange.value,
            last_price=self.last_price,
            open_interest=self.open_interest,
            funding_rate=self.funding_rate,
            index_price=self.index_price,
            mark_price=self.mark_price,
            timestamp=self.timestamp or local_timestamp,
            local_timestamp=local_timestamp,
        )


class DerivativeTickerMapper(BaseMapper):
    """Base class for derivative ticker mappers tracking pending tickers."""

    def __init__(
        self, exchange: Exchange, symbols: Iterable[str] | None = None
    ) -> None:
        """Initialize with no pending tickers."""
        super().__init__(exchange, symbols)
        self._pending: dict[str, PendingTickerInfo] = {}

    def pending_ticker(self, symbol: str) -> PendingTickerInfo:
        """Get the pending ticker of a symbol, creating it on first use."""
        if symbol not in self._pending:
            self._pending[symbol] = PendingTickerInfo(symbol, self.exchange)
        return self._pending[symbol]

"""
Normalized event models.

These models are the exchange-agnostic representation produced by the
normalization pipeline. Every event carries the exchange, the symbol, the
exchange-reported timestamp (when available) and the capture-time local
timestamp of the raw message it was derived from.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from src.replay.enums import TradeSide


class BookPriceLevel(BaseModel):
    """
    Single price level change.

    An amount of zero means the level was removed from the book.
    """

    price: Decimal
    amount: Decimal

    model_config = ConfigDict(frozen=True)

    @property
    def is_removal(self) -> bool:
        """Check whether this level was removed."""
        return self.amount == 0

    def to_tuple(self) -> tuple[Decimal, Decimal]:
        """Convert to tuple for compatibility."""
        return (self.price, self.amount)


class NormalizedEventBase(BaseModel):
    """Base event for all normalized market data."""

    type: Literal["trade", "book_change", "derivative_ticker", "disconnect"]
    symbol: str
    exchange: str
    timestamp: datetime = Field(description="Exchange timestamp, else local time")
    local_timestamp: datetime = Field(description="Capture receive time (UTC)")

    model_config = ConfigDict(frozen=True)

    def to_log_entry(self) -> str:
        """Generate a log-friendly representation."""
        return (
            f"[{self.type.upper()}] {self.exchange}:{self.symbol} "
            f"@ {self.local_timestamp.isoformat()}"
        )


class Trade(NormalizedEventBase):
    """Trade execution event."""

    type: Literal["trade"] = "trade"
    id: str | None = Field(default=None, description="Exchange trade identifier")
    price: Decimal
    amount: Decimal
    side: TradeSide = TradeSide.UNKNOWN

    @property
    def value(self) -> Decimal:
        """Calculate trade value (price * amount)."""
        return self.price * self.amount

    def to_summary(self) -> str:
        """Generate trade summary."""
        return f"{self.side.value} {self.amount} @ {self.price} on {self.symbol}"


class BookChange(NormalizedEventBase):
    """
    Order book change event.

    When ``is_snapshot`` is set the levels replace the whole book state,
    otherwise they are incremental updates.
    """

    type: Literal["book_change"] = "book_change"
    is_snapshot: bool = False
    bids: list[BookPriceLevel] = Field(default_factory=list)
    asks: list[BookPriceLevel] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """Check whether the change carries no levels."""
        return not self.bids and not self.asks


class DerivativeTicker(NormalizedEventBase):
    """Derivative instrument ticker update (funding, open interest, prices)."""

    type: Literal["derivative_ticker"] = "derivative_ticker"
    last_price: Decimal | None = None
    open_interest: Decimal | None = None
    funding_rate: Decimal | None = None
    index_price: Decimal | None = None
    mark_price: Decimal | None = None


class Disconnect(NormalizedEventBase):
    """
    Synthetic continuity gap marker.

    Consumers that derive state (e.g. an order book) must reset it.
    """

    type: Literal["disconnect"] = "disconnect"


NormalizedEvent = Annotated[
    Trade | BookChange | DerivativeTicker | Disconnect,
    Field(discriminator="type"),
]

"""
Binance combined-stream Pydantic Models.

Captured Binance frames use the combined stream envelope
``{"stream": "<symbol>@<channel>[@<speed>]", "data": {...}}``. The
``depthSnapshot`` and ``openInterest`` streams are generated by the capture
process from REST responses and use the same envelope.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.replay.domain.timestamps import from_milliseconds
from src.replay.enums import TradeSide


class BinanceStreamMessage(BaseModel):
    """Combined stream envelope."""

    stream: str
    data: dict[str, Any]
    generated: bool = False

    model_config = ConfigDict(extra="ignore")

    @property
    def symbol(self) -> str:
        """Get the stream symbol upper-cased (e.g. ``BTCUSDT``)."""
        return self.stream.split("@", 1)[0].upper()

    @property
    def channel(self) -> str:
        """Get the stream channel without the update speed suffix."""
        parts = self.stream.split("@")
        return parts[1] if len(parts) > 1 else ""


class BinanceTrade(BaseModel):
    """Payload of the ``trade`` stream."""

    symbol: str = Field(alias="s")
    trade_id: int = Field(alias="t")
    price_raw: str = Field(alias="p")
    quantity_raw: str = Field(alias="q")
    trade_time: int = Field(alias="T")
    buyer_is_maker: bool = Field(alias="m")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @property
    def price(self) -> Decimal:
        """Get trade price."""
        return Decimal(self.price_raw)

    @property
    def amount(self) -> Decimal:
        """Get trade quantity."""
        return Decimal(self.quantity_raw)

    @property
    def side(self) -> TradeSide:
        """Get aggressor side; a maker buyer means the seller hit the bid."""
        return TradeSide.SELL if self.buyer_is_maker else TradeSide.BUY

    @property
    def timestamp(self) -> datetime:
        """Get trade timestamp."""
        return from_milliseconds(self.trade_time)


class BinanceDepthUpdate(BaseModel):
    """Payload of the ``depth`` stream."""

    event_time: int = Field(alias="E")
    transaction_time: int | None = Field(alias="T", default=None)
    first_update_id: int = Field(alias="U")
    last_update_id: int = Field(alias="u")
    bids: list[list[str]] = Field(alias="b", default_factory=list)
    asks: list[list[str]] = Field(alias="a", default_factory=list)

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @property
    def timestamp(self) -> datetime:
        """Get update timestamp (transaction time on futures)."""
        return from_milliseconds(self.transaction_time or self.event_time)


class BinanceDepthSnapshot(BaseModel):
    """Payload of the generated ``depthSnapshot`` stream."""

    last_update_id: int = Field(alias="lastUpdateId")
    transaction_time: int | None = Field(alias="T", default=None)
    bids: list[list[str]] = Field(default_factory=list)
    asks: list[list[str]] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @property
    def timestamp(self) -> datetime | None:
        """Get snapshot timestamp when the exchange provides one."""
        if self.transaction_time is None:
            return None
        return from_milliseconds(self.transaction_time)

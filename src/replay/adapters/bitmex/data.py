"""
BitMEX WebSocket API Pydantic Models.

BitMEX publishes table messages ``{"table", "action", "data": [...]}``.
These models parse the data rows the mappers need. Raw fields keep the
exchange's camelCase names through aliases; properties expose normalized
values.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.replay.domain.timestamps import parse_exchange_datetime
from src.replay.enums import BookSide, TradeSide


class BitmexMessage(BaseModel):
    """Envelope of every BitMEX table message."""

    table: str
    action: str = "partial"
    data: list[dict[str, Any]] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")

    @property
    def is_partial(self) -> bool:
        """Check whether this message is a table snapshot."""
        return self.action == "partial"


class BitmexTrade(BaseModel):
    """Row of the ``trade`` table."""

    symbol: str
    side_raw: str = Field(alias="side")
    size_raw: int | float = Field(alias="size")
    price_raw: float | int = Field(alias="price")
    trade_id: str | None = Field(alias="trdMatchID", default=None)
    timestamp_raw: str = Field(alias="timestamp")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @property
    def side(self) -> TradeSide:
        """Get trade aggressor side."""
        return TradeSide.from_exchange(self.side_raw)

    @property
    def price(self) -> Decimal:
        """Get trade price."""
        return Decimal(str(self.price_raw))

    @property
    def amount(self) -> Decimal:
        """Get trade size in contracts."""
        return Decimal(str(self.size_raw))

    @property
    def timestamp(self) -> datetime:
        """Get trade timestamp."""
        return parse_exchange_datetime(self.timestamp_raw)


class BitmexBookLevel(BaseModel):
    """
    Row of the ``orderBookL2`` table.

    Updates and deletes identify levels by ``id`` only; the price is known
    from the insert or partial that created the level.
    """

    symbol: str
    id: int
    side_raw: str = Field(alias="side")
    size: int | float | None = None
    price: float | int | None = None
    timestamp_raw: str | None = Field(alias="timestamp", default=None)

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @property
    def side(self) -> BookSide:
        """Get the side as enum value."""
        return BookSide.from_exchange(self.side_raw)

    @property
    def timestamp(self) -> datetime | None:
        """Get level timestamp when the exchange provides one."""
        if self.timestamp_raw is None:
            return None
        return parse_exchange_datetime(self.timestamp_raw)


class BitmexInstrument(BaseModel):
    """Row of the ``instrument`` table (partial updates carry few fields)."""

    symbol: str
    last_price: float | None = Field(alias="lastPrice", default=None)
    open_interest: float | int | None = Field(alias="openInterest", default=None)
    funding_rate: float | None = Field(alias="fundingRate", default=None)
    index_price: float | None = Field(alias="indicativeSettlePrice", default=None)
    mark_price: float | None = Field(alias="markPrice", default=None)
    timestamp_raw: str | None = Field(alias="timestamp", default=None)

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @property
    def timestamp(self) -> datetime | None:
        """Get instrument update timestamp."""
        if self.timestamp_raw is None:
            return None
        return parse_exchange_datetime(self.timestamp_raw)

"""
Coinbase Pro WebSocket feed Pydantic Models.

This module implements Pydantic models that parse captured Coinbase feed
messages and expose normalized properties.

Key design principles:
- Pydantic models inherit ONLY from BaseModel
- Raw fields store exchange data as-is (with _raw suffix)
- Properties provide the normalized interface
"""

from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from src.replay.domain.timestamps import parse_exchange_datetime
from src.replay.enums import BookSide, TradeSide


# Base Message Models
class CoinbaseBaseMessage(BaseModel):
    """
    Base message model for all Coinbase feed messages.

    Every message is tagged by ``type`` and most carry ``product_id``.
    """

    type: str
    product_id: str

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @property
    def symbol(self) -> str:
        """Get market identifier."""
        return self.product_id


# Matches Channel Models
class CoinbaseMatch(CoinbaseBaseMessage):
    """
    Trade from the ``match`` channel.

    ``side`` is the maker order side; the aggressor is the opposite side.
    """

    trade_id_raw: str | int = Field(alias="trade_id")
    price_raw: str | float = Field(alias="price")
    size_raw: str | float = Field(alias="size")
    side_raw: str = Field(alias="side")
    time: str

    def _to_decimal(self, value: str | float) -> Decimal:
        """Convert string or float to Decimal."""
        return Decimal(str(value))

    @property
    def price(self) -> Decimal:
        """Get trade price."""
        return self._to_decimal(self.price_raw)

    @property
    def size(self) -> Decimal:
        """Get trade size."""
        return self._to_decimal(self.size_raw)

    @property
    def side(self) -> TradeSide:
        """Get trade aggressor side."""
        return TradeSide.from_exchange(self.side_raw).opposite()

    @property
    def timestamp(self) -> datetime:
        """Get trade timestamp."""
        return parse_exchange_datetime(self.time)

    @property
    def trade_id(self) -> str:
        """Get unique trade identifier."""
        return str(self.trade_id_raw)


# Level2 Channel Models
class CoinbaseSnapshot(CoinbaseBaseMessage):
    """Full level2 book snapshot (``snapshot`` message)."""

    bids_raw: list[list[str]] = Field(alias="bids", default_factory=list)
    asks_raw: list[list[str]] = Field(alias="asks", default_factory=list)

    @property
    def bids(self) -> Sequence[tuple[str, str]]:
        """Get bid levels as (price, size)."""
        return [(level[0], level[1]) for level in self.bids_raw]

    @property
    def asks(self) -> Sequence[tuple[str, str]]:
        """Get ask levels as (price, size)."""
        return [(level[0], level[1]) for level in self.asks_raw]


class CoinbaseL2Update(CoinbaseBaseMessage):
    """Incremental level2 change (``l2update`` message)."""

    changes: list[list[str]] = Field(default_factory=list)
    time: str | None = None

    @property
    def timestamp(self) -> datetime | None:
        """Get update timestamp."""
        if self.time is None:
            return None
        return parse_exchange_datetime(self.time)

    def changes_for(self, side: BookSide) -> Sequence[tuple[str, str]]:
        """Get changed levels for one side as (price, size)."""
        return [
            (change[1], change[2])
            for change in self.changes
            if BookSide.from_exchange(change[0]) == side
        ]

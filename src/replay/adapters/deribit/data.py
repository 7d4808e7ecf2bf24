"""
Deribit JSON-RPC subscription Pydantic Models.

Deribit pushes ``{"method": "subscription", "params": {"channel", "data"}}``
notifications where the channel reads ``<name>.<instrument>[.<interval>]``.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.replay.domain.timestamps import from_milliseconds
from src.replay.enums import TradeSide


def channel_parts(message: Any) -> list[str] | None:
    """Split the notification channel of a message, if it is one."""
    if not isinstance(message, dict) or message.get("method") != "subscription":
        return None
    params = message.get("params")
    if not isinstance(params, dict) or not isinstance(params.get("channel"), str):
        return None
    return params["channel"].split(".")


class DeribitNotification(BaseModel):
    """Subscription notification envelope."""

    channel: str
    data: Any

    model_config = ConfigDict(extra="ignore")

    @property
    def name(self) -> str:
        """Get the channel name (``book.BTC-PERPETUAL.raw`` -> ``book``)."""
        return self.channel.split(".")[0]


class DeribitTrade(BaseModel):
    """Single trade of a ``trades`` notification."""

    trade_id: str | int
    instrument_name: str
    price: float
    amount: float
    direction: str
    timestamp_raw: int = Field(alias="timestamp")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @property
    def side(self) -> TradeSide:
        """Get trade aggressor side."""
        return TradeSide.from_exchange(self.direction)

    @property
    def timestamp(self) -> datetime:
        """Get trade timestamp."""
        return from_milliseconds(self.timestamp_raw)


class DeribitBook(BaseModel):
    """
    Payload of a raw ``book`` notification.

    Levels are ``[action, price, amount]`` with action new/change/delete.
    The first notification of a subscription has no ``prev_change_id``.
    """

    instrument_name: str
    type: str | None = None
    prev_change_id: int | None = None
    bids: list[list[Any]] = Field(default_factory=list)
    asks: list[list[Any]] = Field(default_factory=list)
    timestamp_raw: int = Field(alias="timestamp")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @property
    def is_snapshot(self) -> bool:
        """Check whether this notification is the initial book snapshot."""
        if self.type is not None:
            return self.type == "snapshot"
        return self.prev_change_id is None

    @property
    def timestamp(self) -> datetime:
        """Get book timestamp."""
        return from_milliseconds(self.timestamp_raw)

    @staticmethod
    def level_values(level: list[Any]) -> tuple[Decimal, Decimal]:
        """Get (price, amount) of a level; deletes have zero amount."""
        if len(level) == 3:
            action, price, amount = level
            if action == "delete":
                amount = 0
        else:
            price, amount = level
        return Decimal(str(price)), Decimal(str(amount))


class DeribitTicker(BaseModel):
    """Payload of a ``ticker`` notification."""

    instrument_name: str
    last_price: float | None = None
    open_interest: float | None = None
    mark_price: float | None = None
    index_price: float | None = None
    current_funding: float | None = None
    funding_8h: float | None = None
    timestamp_raw: int = Field(alias="timestamp")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @property
    def funding_rate(self) -> float | None:
        """Get the 8h funding rate, falling back to the current funding."""
        return self.funding_8h if self.funding_8h is not None else self.current_funding

    @property
    def timestamp(self) -> datetime:
        """Get ticker timestamp."""
        return from_milliseconds(self.timestamp_raw)

"""Bitfinex frame classification."""

from typing import Any

from src.replay.adapters.base import JsonLinesDecoder
from src.replay.adapters.bitfinex.data import BitfinexSubscriptions
from src.replay.enums import Exchange


class BitfinexDecoder(JsonLinesDecoder):
    """
    Classifies frames through the subscriptions seen so far in the replay.

    Data frames for a channel id whose ``subscribed`` event was not replayed
    have no channel and never match a filter.
    """

    def __init__(self, exchange: Exchange) -> None:
        """Initialize with no subscriptions."""
        super().__init__(exchange)
        self._subscriptions = BitfinexSubscriptions()

    def decode(self, payload: bytes) -> Any:
        """Decode a frame, recording subscription events."""
        message = super().decode(payload)
        self._subscriptions.register(message)
        return message

    def channel_of(self, message: Any) -> str | None:
        """Get the subscribed channel of the frame."""
        subscription = self._subscriptions.lookup(message)
        return subscription.channel if subscription else None

    def symbol_of(self, message: Any) -> str | None:
        """Get the subscribed symbol of the frame."""
        subscription = self._subscriptions.lookup(message)
        return subscription.symbol if subscription else None

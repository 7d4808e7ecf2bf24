"""Bitstamp v2 frame classification."""

from typing import Any

from src.replay.adapters.base import JsonLinesDecoder


def split_channel(message: Any) -> tuple[str, str] | None:
    """Split ``live_trades_btcusd`` into (``live_trades``, ``btcusd``)."""
    if not isinstance(message, dict):
        return None
    channel = message.get("channel")
    if not isinstance(channel, str) or "_" not in channel:
        return None
    name, symbol = channel.rsplit("_", 1)
    return name, symbol


class BitstampDecoder(JsonLinesDecoder):
    """Channel and symbol are encoded together in the channel field."""

    def channel_of(self, message: Any) -> str | None:
        """Get the channel name without the currency pair."""
        parts = split_channel(message)
        return parts[0] if parts else None

    def symbol_of(self, message: Any) -> str | None:
        """Get the currency pair."""
        parts = split_channel(message)
        return parts[1] if parts else None

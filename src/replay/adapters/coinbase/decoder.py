"""Coinbase frame classification."""

from typing import Any

from src.replay.adapters.base import JsonLinesDecoder


class CoinbaseDecoder(JsonLinesDecoder):
    """Channel is the message type, symbol the product id."""

    def channel_of(self, message: Any) -> str | None:
        """Get the message type."""
        if isinstance(message, dict):
            return message.get("type")
        return None

    def symbol_of(self, message: Any) -> str | None:
        """Get the product id."""
        if isinstance(message, dict):
            return message.get("product_id")
        return None

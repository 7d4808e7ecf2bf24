"""Gemini frame classification."""

from typing import Any

from src.replay.adapters.base import JsonLinesDecoder


class GeminiDecoder(JsonLinesDecoder):
    """Channel is the message type, symbol the top-level ``symbol``."""

    def channel_of(self, message: Any) -> str | None:
        """Get the message type."""
        if isinstance(message, dict):
            return message.get("type")
        return None

    def symbol_of(self, message: Any) -> str | None:
        """Get the symbol (e.g. ``BTCUSD``)."""
        if isinstance(message, dict):
            return message.get("symbol")
        return None

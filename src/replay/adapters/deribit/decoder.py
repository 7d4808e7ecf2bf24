"""Deribit frame classification."""

from typing import Any

from src.replay.adapters.base import JsonLinesDecoder
from src.replay.adapters.deribit.data import channel_parts


class DeribitDecoder(JsonLinesDecoder):
    """Channel and symbol are the first two parts of the notification channel."""

    def channel_of(self, message: Any) -> str | None:
        """Get the notification channel name; RPC responses have none."""
        parts = channel_parts(message)
        return parts[0] if parts else None

    def symbol_of(self, message: Any) -> str | None:
        """Get the instrument (or index name) of the notification."""
        parts = channel_parts(message)
        if not parts or len(parts) < 2:
            return None
        return parts[1]

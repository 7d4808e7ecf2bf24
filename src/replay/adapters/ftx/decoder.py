"""FTX frame classification."""

from typing import Any

from src.replay.adapters.base import JsonLinesDecoder


class FtxDecoder(JsonLinesDecoder):
    """Channel and market are top-level fields of every data message."""

    def channel_of(self, message: Any) -> str | None:
        """Get the channel name."""
        if isinstance(message, dict):
            return message.get("channel")
        return None

    def symbol_of(self, message: Any) -> str | None:
        """Get the market name (e.g. ``BTC-PERP``)."""
        if isinstance(message, dict):
            return message.get("market")
        return None

"""Kraken frame classification."""

from typing import Any

from src.replay.adapters.base import JsonLinesDecoder


class KrakenDecoder(JsonLinesDecoder):
    """
    Data frames are arrays ending with ``channelName, pair``.

    ``book-10`` and similar depth-suffixed names are reported as ``book``.
    Subscription status events are classified by their subscription name.
    """

    def channel_of(self, message: Any) -> str | None:
        """Get the channel name without the depth suffix."""
        if isinstance(message, list) and len(message) >= 4:
            return str(message[-2]).split("-")[0]
        if isinstance(message, dict) and message.get("event") == "subscriptionStatus":
            name = message.get("subscription", {}).get("name")
            return name.split("-")[0] if isinstance(name, str) else None
        return None

    def symbol_of(self, message: Any) -> str | None:
        """Get the pair (e.g. ``XBT/USD``)."""
        if isinstance(message, list) and len(message) >= 4:
            return message[-1]
        if isinstance(message, dict):
            return message.get("pair")
        return None

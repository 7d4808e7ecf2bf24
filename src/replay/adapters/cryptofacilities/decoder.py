"""Crypto Facilities frame classification."""

from typing import Any

from src.replay.adapters.base import JsonLinesDecoder


class CryptofacilitiesDecoder(JsonLinesDecoder):
    """Channel is the feed name, symbol the product id."""

    def channel_of(self, message: Any) -> str | None:
        """Get the feed name; subscription events carry it too."""
        if isinstance(message, dict):
            return message.get("feed")
        return None

    def symbol_of(self, message: Any) -> str | None:
        """Get the product id."""
        if isinstance(message, dict):
            product_id = message.get("product_id")
            if product_id is None and message.get("product_ids"):
                product_id = message["product_ids"][0]
            return product_id
        return None

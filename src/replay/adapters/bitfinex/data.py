"""
Bitfinex v2 WebSocket structures.

Bitfinex data frames are positional arrays ``[chanId, ...]``. The channel
and symbol of a channel id are only known from the ``subscribed`` event the
capture recorded earlier in the same feed, so both the decoder and the
mappers keep a subscription map.
"""

from typing import Any, NamedTuple

# Positions in a derivatives status update
STATUS_TIMESTAMP = 0
STATUS_DERIV_PRICE = 2
STATUS_SPOT_PRICE = 3
STATUS_CURRENT_FUNDING = 11
STATUS_MARK_PRICE = 14
STATUS_OPEN_INTEREST = 17


class Subscription(NamedTuple):
    """Channel and symbol bound to a channel id."""

    channel: str
    symbol: str


def _strip_prefix(symbol: str) -> str:
    # Trading pairs are prefixed with "t", funding currencies with "f"
    if symbol[:1] in {"t", "f"} and symbol[1:2].isupper():
        return symbol[1:]
    return symbol


def subscription_symbol(event: dict[str, Any]) -> str:
    """
    Get the symbol of a ``subscribed`` event.

    Derivatives status subscriptions carry a key such as
    ``deriv:tBTCF0:USTF0`` instead of a symbol.
    """
    key = event.get("key")
    if isinstance(key, str) and ":" in key:
        return _strip_prefix(key.split(":", 1)[1])
    symbol = event.get("symbol") or event.get("pair") or ""
    return _strip_prefix(symbol)


class BitfinexSubscriptions:
    """Channel id to subscription map built from ``subscribed`` events."""

    def __init__(self) -> None:
        """Initialize with no subscriptions."""
        self._by_id: dict[int, Subscription] = {}

    def register(self, message: Any) -> Subscription | None:
        """Record a ``subscribed`` event; return its subscription if it was one."""
        if not isinstance(message, dict) or message.get("event") != "subscribed":
            return None
        subscription = Subscription(message["channel"], subscription_symbol(message))
        self._by_id[message["chanId"]] = subscription
        return subscription

    def lookup(self, message: Any) -> Subscription | None:
        """Get the subscription of a data frame, or of a ``subscribed`` event."""
        if isinstance(message, list) and message:
            return self._by_id.get(message[0])
        if isinstance(message, dict) and message.get("event") == "subscribed":
            return Subscription(message["channel"], subscription_symbol(message))
        return None


def is_heartbeat(message: list[Any]) -> bool:
    """Check whether a data frame is a heartbeat or checksum."""
    return (
        len(message) > 1
        and isinstance(message[1], str)
        and message[1] in {"hb", "cs"}
    )

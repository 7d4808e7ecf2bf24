"""
Enums for market data replay.

This module defines the standardized enum values used throughout the replay
engine. These enums represent the semantic vocabulary of the domain and
establish consistent naming across exchanges and components.

"""

from __future__ import annotations

import enum

# Bumped whenever an exchange is added to or removed from Exchange.
EXCHANGES_VERSION = 1

# =============================================================================
# EXCHANGE ENUMS
# =============================================================================


class Exchange(str, enum.Enum):
    """
    Supported exchange identifiers.

    These identifiers name the exchanges whose captured feeds can be replayed
    and are used for routing segments, decoders and normalizers.
    """

    BITMEX = "bitmex"
    COINBASE = "coinbase"
    DERIBIT = "deribit"
    CRYPTOFACILITIES = "cryptofacilities"
    BITSTAMP = "bitstamp"
    KRAKEN = "kraken"
    OKEX = "okex"
    FTX = "ftx"
    GEMINI = "gemini"
    BINANCE = "binance"
    BINANCE_US = "binance-us"
    BINANCE_JERSEY = "binance-jersey"
    BINANCE_FUTURES = "binance-futures"
    BITFINEX = "bitfinex"
    BITFINEX_DERIVATIVES = "bitfinex-derivatives"

    @classmethod
    def parse(cls, value: str | Exchange) -> Exchange:
        """
        Convert an exchange identifier to the enum member.

        Args:
            value: Exchange identifier (e.g., "bitmex", "binance-futures")

        Returns:
            Matching Exchange enum value

        Raises:
            ValueError: If the identifier is not a supported exchange

        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            supported = ", ".join(e.value for e in cls)
            raise ValueError(
                f"Invalid exchange: {value!r}. Supported exchanges: {supported}"
            ) from None


EXCHANGES: tuple[Exchange, ...] = tuple(Exchange)


# =============================================================================
# SIDE ENUMS
# =============================================================================


class BookSide(str, enum.Enum):
    """
    Order book side identifiers.

    Represents the side of an order book (bid/buy or ask/sell).
    """

    BID = "bid"  # Buy side
    ASK = "ask"  # Sell side

    @classmethod
    def from_exchange(cls, side: str) -> BookSide:
        """
        Convert exchange book side format to standardized enum.

        Args:
            side: Exchange side string (e.g., "buy", "Sell", "bid", "offer")

        Returns:
            Standardized BookSide enum value

        """
        normalized = side.lower()
        if normalized in {"buy", "b", "bid", "bids"}:
            return cls.BID
        elif normalized in {"sell", "s", "ask", "asks", "offer"}:
            return cls.ASK
        else:
            raise ValueError(f"Invalid book side: {side}")


class TradeSide(str, enum.Enum):
    """
    Standardized enum for trade sides.

    Represents the aggressor direction of a trade in a consistent format
    across all exchanges. UNKNOWN is used when the exchange does not report it.
    """

    BUY = "buy"  # Aggressor bought
    SELL = "sell"  # Aggressor sold
    UNKNOWN = "unknown"

    @classmethod
    def from_exchange(cls, side: str | None) -> TradeSide:
        """
        Convert exchange side format to standardized enum.

        Args:
            side: Exchange side string (e.g., "BUY", "Sell", "b", "s")

        Returns:
            Standardized TradeSide enum value

        """
        if not side:
            return cls.UNKNOWN
        normalized = side.lower()
        if normalized in {"buy", "b", "bid"}:
            return cls.BUY
        elif normalized in {"sell", "s", "ask"}:
            return cls.SELL
        else:
            raise ValueError(f"Invalid trade side: {side}")

    def opposite(self) -> TradeSide:
        """Get the opposite side (maker side to taker side)."""
        if self == TradeSide.BUY:
            return TradeSide.SELL
        if self == TradeSide.SELL:
            return TradeSide.BUY
        return TradeSide.UNKNOWN

"""
Channels published by each supported exchange.

A replay filter may only name a channel listed here for its exchange.
"""

from src.replay.enums import Exchange

_BINANCE_CHANNELS = frozenset(
    {"trade", "aggTrade", "ticker", "depth", "depthSnapshot", "bookTicker"}
)

EXCHANGE_CHANNELS: dict[Exchange, frozenset[str]] = {
    Exchange.BITMEX: frozenset(
        {
            "trade",
            "orderBookL2",
            "orderBookL2_25",
            "orderBook10",
            "quote",
            "liquidation",
            "instrument",
            "settlement",
            "funding",
            "insurance",
            "announcement",
            "connected",
            "chat",
            "publicNotifications",
            "tradeBin1m",
            "tradeBin5m",
            "tradeBin1h",
            "tradeBin1d",
            "quoteBin1m",
            "quoteBin5m",
            "quoteBin1h",
            "quoteBin1d",
        }
    ),
    Exchange.COINBASE: frozenset(
        {
            "subscriptions",
            "received",
            "open",
            "done",
            "match",
            "change",
            "l2update",
            "ticker",
            "snapshot",
            "last_match",
            "full_snapshot",
        }
    ),
    Exchange.DERIBIT: frozenset(
        {
            "book",
            "deribit_price_index",
            "deribit_price_ranking",
            "estimated_expiration_price",
            "markprice",
            "perpetual",
            "trades",
            "ticker",
            "quote",
            "platform_state",
        }
    ),
    Exchange.CRYPTOFACILITIES: frozenset(
        {"trade", "trade_snapshot", "book", "book_snapshot", "ticker", "heartbeat"}
    ),
    Exchange.BITSTAMP: frozenset({"live_trades", "live_orders", "diff_order_book"}),
    Exchange.KRAKEN: frozenset({"trade", "ticker", "book", "spread"}),
    Exchange.OKEX: frozenset(
        {
            "spot/ticker",
            "spot/trade",
            "spot/depth",
            "spot/depth_l2_tbt",
            "swap/ticker",
            "swap/trade",
            "swap/depth",
            "swap/depth_l2_tbt",
            "swap/funding_rate",
            "swap/price_range",
            "swap/mark_price",
            "futures/ticker",
            "futures/trade",
            "futures/depth",
            "futures/depth_l2_tbt",
            "futures/price_range",
            "futures/mark_price",
            "futures/estimated_price",
            "index/ticker",
        }
    ),
    Exchange.FTX: frozenset({"orderbook", "trades", "instrument"}),
    Exchange.GEMINI: frozenset(
        {
            "trade",
            "l2_updates",
            "auction_open",
            "auction_indicative",
            "auction_result",
        }
    ),
    Exchange.BINANCE: _BINANCE_CHANNELS,
    Exchange.BINANCE_US: _BINANCE_CHANNELS,
    Exchange.BINANCE_JERSEY: _BINANCE_CHANNELS,
    Exchange.BINANCE_FUTURES: _BINANCE_CHANNELS
    | {"markPrice", "forceOrder", "openInterest"},
    Exchange.BITFINEX: frozenset({"trades", "book"}),
    Exchange.BITFINEX_DERIVATIVES: frozenset({"trades", "book", "status"}),
}


def channels_for(exchange: Exchange) -> frozenset[str]:
    """Get the set of channels an exchange publishes."""
    return EXCHANGE_CHANNELS[exchange]

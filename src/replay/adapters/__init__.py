"""
============================

Market Data Exchange Adapters.

============================

This package contains adapter implementations for every supported exchange.
Each adapter provides a decoder (framing, channel and symbol classification)
and the mappers that translate exchange-native messages into normalized
events. The registries below are closed: one entry per supported exchange.

"""

from src.replay.adapters.base import BaseMapper, JsonLinesDecoder
from src.replay.adapters.binance import (
    BinanceBookChangeMapper,
    BinanceDecoder,
    BinanceFuturesDerivativeTickerMapper,
    BinanceTradesMapper,
)
from src.replay.adapters.bitfinex import (
    BitfinexBookChangeMapper,
    BitfinexDecoder,
    BitfinexDerivativeTickerMapper,
    BitfinexTradesMapper,
)
from src.replay.adapters.bitmex import (
    BitmexBookChangeMapper,
    BitmexDecoder,
    BitmexDerivativeTickerMapper,
    BitmexTradesMapper,
)
from src.replay.adapters.bitstamp import (
    BitstampBookChangeMapper,
    BitstampDecoder,
    BitstampTradesMapper,
)
from src.replay.adapters.coinbase import (
    CoinbaseBookChangeMapper,
    CoinbaseDecoder,
    CoinbaseTradesMapper,
)
from src.replay.adapters.cryptofacilities import (
    CryptofacilitiesBookChangeMapper,
    CryptofacilitiesDecoder,
    CryptofacilitiesDerivativeTickerMapper,
    CryptofacilitiesTradesMapper,
)
from src.replay.adapters.deribit import (
    DeribitBookChangeMapper,
    DeribitDecoder,
    DeribitDerivativeTickerMapper,
    DeribitTradesMapper,
)
from src.replay.adapters.ftx import FtxBookChangeMapper, FtxDecoder, FtxTradesMapper
from src.replay.adapters.gemini import (
    GeminiBookChangeMapper,
    GeminiDecoder,
    GeminiTradesMapper,
)
from src.replay.adapters.kraken import (
    KrakenBookChangeMapper,
    KrakenDecoder,
    KrakenTradesMapper,
)
from src.replay.adapters.okex import (
    OkexBookChangeMapper,
    OkexDecoder,
    OkexDerivativeTickerMapper,
    OkexTradesMapper,
)
from src.replay.enums import Exchange

_BINANCE_FAMILY = (
    Exchange.BINANCE,
    Exchange.BINANCE_US,
    Exchange.BINANCE_JERSEY,
    Exchange.BINANCE_FUTURES,
)
_BITFINEX_FAMILY = (Exchange.BITFINEX, Exchange.BITFINEX_DERIVATIVES)

DECODERS: dict[Exchange, type[JsonLinesDecoder]] = {
    Exchange.BITMEX: BitmexDecoder,
    Exchange.COINBASE: CoinbaseDecoder,
    Exchange.DERIBIT: DeribitDecoder,
    Exchange.CRYPTOFACILITIES: CryptofacilitiesDecoder,
    Exchange.BITSTAMP: BitstampDecoder,
    Exchange.KRAKEN: KrakenDecoder,
    Exchange.OKEX: OkexDecoder,
    Exchange.FTX: FtxDecoder,
    Exchange.GEMINI: GeminiDecoder,
    **{exchange: BinanceDecoder for exchange in _BINANCE_FAMILY},
    **{exchange: BitfinexDecoder for exchange in _BITFINEX_FAMILY},
}

TRADE_MAPPERS: dict[Exchange, type[BaseMapper]] = {
    Exchange.BITMEX: BitmexTradesMapper,
    Exchange.COINBASE: CoinbaseTradesMapper,
    Exchange.DERIBIT: DeribitTradesMapper,
    Exchange.CRYPTOFACILITIES: CryptofacilitiesTradesMapper,
    Exchange.BITSTAMP: BitstampTradesMapper,
    Exchange.KRAKEN: KrakenTradesMapper,
    Exchange.OKEX: OkexTradesMapper,
    Exchange.FTX: FtxTradesMapper,
    Exchange.GEMINI: GeminiTradesMapper,
    **{exchange: BinanceTradesMapper for exchange in _BINANCE_FAMILY},
    **{exchange: BitfinexTradesMapper for exchange in _BITFINEX_FAMILY},
}

BOOK_CHANGE_MAPPERS: dict[Exchange, type[BaseMapper]] = {
    Exchange.BITMEX: BitmexBookChangeMapper,
    Exchange.COINBASE: CoinbaseBookChangeMapper,
    Exchange.DERIBIT: DeribitBookChangeMapper,
    Exchange.CRYPTOFACILITIES: CryptofacilitiesBookChangeMapper,
    Exchange.BITSTAMP: BitstampBookChangeMapper,
    Exchange.KRAKEN: KrakenBookChangeMapper,
    Exchange.OKEX: OkexBookChangeMapper,
    Exchange.FTX: FtxBookChangeMapper,
    Exchange.GEMINI: GeminiBookChangeMapper,
    **{exchange: BinanceBookChangeMapper for exchange in _BINANCE_FAMILY},
    **{exchange: BitfinexBookChangeMapper for exchange in _BITFINEX_FAMILY},
}

DERIVATIVE_TICKER_MAPPERS: dict[Exchange, type[BaseMapper]] = {
    Exchange.BITMEX: BitmexDerivativeTickerMapper,
    Exchange.BINANCE_FUTURES: BinanceFuturesDerivativeTickerMapper,
    Exchange.BITFINEX_DERIVATIVES: BitfinexDerivativeTickerMapper,
    Exchange.CRYPTOFACILITIES: CryptofacilitiesDerivativeTickerMapper,
    Exchange.DERIBIT: DeribitDerivativeTickerMapper,
    Exchange.OKEX: OkexDerivativeTickerMapper,
}


def decoder_for(exchange: Exchange) -> JsonLinesDecoder:
    """Create a decoder for one replay of ``exchange``."""
    return DECODERS[exchange](exchange)


__all__ = [
    "BOOK_CHANGE_MAPPERS",
    "DECODERS",
    "DERIVATIVE_TICKER_MAPPERS",
    "TRADE_MAPPERS",
    "BaseMapper",
    "JsonLinesDecoder",
    "decoder_for",
]

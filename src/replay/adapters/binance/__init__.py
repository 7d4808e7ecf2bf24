"""Binance adapter (spot, US, Jersey and futures)."""

from src.replay.adapters.binance.decoder import BinanceDecoder
from src.replay.adapters.binance.mappers import (
    BinanceBookChangeMapper,
    BinanceFuturesDerivativeTickerMapper,
    BinanceTradesMapper,
)

__all__ = [
    "BinanceBookChangeMapper",
    "BinanceDecoder",
    "BinanceFuturesDerivativeTickerMapper",
    "BinanceTradesMapper",
]

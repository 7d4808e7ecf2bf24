"""Bitfinex adapter (spot and derivatives)."""

from src.replay.adapters.bitfinex.decoder import BitfinexDecoder
from src.replay.adapters.bitfinex.mappers import (
    BitfinexBookChangeMapper,
    BitfinexDerivativeTickerMapper,
    BitfinexTradesMapper,
)

__all__ = [
    "BitfinexBookChangeMapper",
    "BitfinexDecoder",
    "BitfinexDerivativeTickerMapper",
    "BitfinexTradesMapper",
]

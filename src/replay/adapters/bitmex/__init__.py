"""BitMEX adapter."""

from src.replay.adapters.bitmex.decoder import BitmexDecoder
from src.replay.adapters.bitmex.mappers import (
    BitmexBookChangeMapper,
    BitmexDerivativeTickerMapper,
    BitmexTradesMapper,
)

__all__ = [
    "BitmexBookChangeMapper",
    "BitmexDecoder",
    "BitmexDerivativeTickerMapper",
    "BitmexTradesMapper",
]

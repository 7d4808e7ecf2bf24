"""OKEx adapter."""

from src.replay.adapters.okex.decoder import OkexDecoder
from src.replay.adapters.okex.mappers import (
    OkexBookChangeMapper,
    OkexDerivativeTickerMapper,
    OkexTradesMapper,
)

__all__ = [
    "OkexBookChangeMapper",
    "OkexDecoder",
    "OkexDerivativeTickerMapper",
    "OkexTradesMapper",
]

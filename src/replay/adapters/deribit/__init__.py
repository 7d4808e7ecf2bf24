"""Deribit adapter."""

from src.replay.adapters.deribit.decoder import DeribitDecoder
from src.replay.adapters.deribit.mappers import (
    DeribitBookChangeMapper,
    DeribitDerivativeTickerMapper,
    DeribitTradesMapper,
)

__all__ = [
    "DeribitBookChangeMapper",
    "DeribitDecoder",
    "DeribitDerivativeTickerMapper",
    "DeribitTradesMapper",
]

"""Bitstamp adapter."""

from src.replay.adapters.bitstamp.decoder import BitstampDecoder
from src.replay.adapters.bitstamp.mappers import (
    BitstampBookChangeMapper,
    BitstampTradesMapper,
)

__all__ = ["BitstampBookChangeMapper", "BitstampDecoder", "BitstampTradesMapper"]

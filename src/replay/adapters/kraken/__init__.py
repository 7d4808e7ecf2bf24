"""Kraken adapter."""

from src.replay.adapters.kraken.decoder import KrakenDecoder
from src.replay.adapters.kraken.mappers import (
    KrakenBookChangeMapper,
    KrakenTradesMapper,
)

__all__ = ["KrakenBookChangeMapper", "KrakenDecoder", "KrakenTradesMapper"]

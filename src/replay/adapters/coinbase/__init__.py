"""Coinbase adapter."""

from src.replay.adapters.coinbase.decoder import CoinbaseDecoder
from src.replay.adapters.coinbase.mappers import (
    CoinbaseBookChangeMapper,
    CoinbaseTradesMapper,
)

__all__ = ["CoinbaseBookChangeMapper", "CoinbaseDecoder", "CoinbaseTradesMapper"]

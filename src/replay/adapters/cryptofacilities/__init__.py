"""Crypto Facilities adapter."""

from src.replay.adapters.cryptofacilities.decoder import CryptofacilitiesDecoder
from src.replay.adapters.cryptofacilities.mappers import (
    CryptofacilitiesBookChangeMapper,
    CryptofacilitiesDerivativeTickerMapper,
    CryptofacilitiesTradesMapper,
)

__all__ = [
    "CryptofacilitiesBookChangeMapper",
    "CryptofacilitiesDecoder",
    "CryptofacilitiesDerivativeTickerMapper",
    "CryptofacilitiesTradesMapper",
]

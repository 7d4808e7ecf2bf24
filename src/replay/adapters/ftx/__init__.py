"""FTX adapter."""

from src.replay.adapters.ftx.decoder import FtxDecoder
from src.replay.adapters.ftx.mappers import FtxBookChangeMapper, FtxTradesMapper

__all__ = ["FtxBookChangeMapper", "FtxDecoder", "FtxTradesMapper"]

"""Replay engine protocols."""

from src.replay.protocols.replay import (
    CatalogClient,
    Decoder,
    Frame,
    Mapper,
    Normalizer,
    SegmentFetcher,
)

__all__ = [
    "CatalogClient",
    "Decoder",
    "Frame",
    "Mapper",
    "Normalizer",
    "SegmentFetcher",
]

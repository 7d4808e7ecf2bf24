"""Segment caching."""

from src.replay.cache.segments import SegmentCache

__all__ = ["SegmentCache"]

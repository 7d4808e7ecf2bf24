"""Gemini adapter."""

from src.replay.adapters.gemini.decoder import GeminiDecoder
from src.replay.adapters.gemini.mappers import (
    GeminiBookChangeMapper,
    GeminiTradesMapper,
)

__all__ = ["GeminiBookChangeMapper", "GeminiDecoder", "GeminiTradesMapper"]

"""Replay data models."""

from src.replay.model.details import ExchangeDetails, SymbolDetails
from src.replay.model.events import (
    BookChange,
    BookPriceLevel,
    DerivativeTicker,
    Disconnect,
    NormalizedEvent,
    Trade,
)
from src.replay.model.message import ReplayMessage
from src.replay.model.request import Filter, ReplayNormalizedRequest, ReplayRequest
from src.replay.model.segment import SegmentKey

__all__ = [
    "BookChange",
    "BookPriceLevel",
    "DerivativeTicker",
    "Disconnect",
    "ExchangeDetails",
    "Filter",
    "NormalizedEvent",
    "ReplayMessage",
    "ReplayNormalizedRequest",
    "ReplayRequest",
    "SegmentKey",
    "SymbolDetails",
    "Trade",
]

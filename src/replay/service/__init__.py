"""Replay services: raw stream, normalization pipeline, catalog and client."""

from src.replay.service.catalog import ExchangeCatalog
from src.replay.service.client import (
    ReplayClient,
    clear_cache,
    get_default_client,
    get_exchange_details,
    list_supported_exchanges,
    replay,
    replay_normalized,
)
from src.replay.service.normalized import NormalizationPipeline
from src.replay.service.stream import ReplayStream

__all__ = [
    "ExchangeCatalog",
    "NormalizationPipeline",
    "ReplayClient",
    "ReplayStream",
    "clear_cache",
    "get_default_client",
    "get_exchange_details",
    "list_supported_exchanges",
    "replay",
    "replay_normalized",
]

"""
Replay Protocol Layer.

This module defines the capability contracts the replay engine is composed
of. Implementations satisfy them structurally; nothing has to inherit from
these protocols.

Key design principles:
- Decoders are per-exchange and per-stream: they may hold state built from
  earlier frames of the same replay (e.g. channel id subscriptions)
- Mappers are per-exchange and per-replay: they own per-symbol state and
  are never shared between replays
- Archive and catalog access are external collaborators behind protocols
  so tests can substitute in-memory fakes
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import datetime
from typing import IO, Any, NamedTuple, Protocol, runtime_checkable

from src.replay.enums import Exchange
from src.replay.model.details import ExchangeDetails
from src.replay.model.events import NormalizedEventBase
from src.replay.model.request import Filter
from src.replay.model.segment import SegmentKey


class Frame(NamedTuple):
    """
    One captured wire frame.

    ``payload`` is empty when the line marks a capture-time disconnect.
    """

    local_timestamp: datetime
    payload: bytes


# =============================================================================
# DECODING PROTOCOLS
# =============================================================================


@runtime_checkable
class Decoder(Protocol):
    """
    Exchange-specific framing and message classification.

    Semantic Role: Turns segment bytes into frames and tells the stream
    which channel and symbol a decoded message belongs to, so filters can
    be applied.
    """

    exchange: Exchange

    def split_frames(self, stream: IO[bytes]) -> Iterator[Frame]:
        """
        Split a decompressed segment into frames, in capture order.

        Args:
            stream: Decompressed segment byte stream

        Yields:
            Frames with their local timestamps

        """
        ...

    def decode(self, payload: bytes) -> Any:
        """Decode one frame payload into the exchange-native structure."""
        ...

    def channel_of(self, message: Any) -> str | None:
        """Get the channel a decoded message belongs to, if any."""
        ...

    def symbols_of(self, message: Any) -> list[str]:
        """Get every symbol a decoded message carries data for."""
        ...


# =============================================================================
# NORMALIZATION PROTOCOLS
# =============================================================================


@runtime_checkable
class Mapper(Protocol):
    """
    Maps raw exchange messages of one exchange to normalized events.

    Semantic Role: Stateful per-replay transducer
    Relationships:
    - Created by: Normalizer.mapper_for
    - Owns: per-symbol state for the lifetime of one replay
    """

    def filters(self, symbols: Iterable[str] | None) -> list[Filter]:
        """Get the raw filters this mapper needs for the given symbols."""
        ...

    def can_handle(self, message: Any) -> bool:
        """Check whether a raw message is relevant to this mapper."""
        ...

    def map(
        self, message: Any, local_timestamp: datetime
    ) -> Iterable[NormalizedEventBase]:
        """Map one raw message to zero or more normalized events."""
        ...


@runtime_checkable
class Normalizer(Protocol):
    """
    Normalizer plugin registered with replay_normalized.

    Semantic Role: Factory of fresh mappers per exchange and replay
    """

    name: str

    def supports(self, exchange: Exchange) -> bool:
        """Check whether this normalizer handles the exchange."""
        ...

    def mapper_for(
        self, exchange: Exchange, symbols: Iterable[str] | None = None
    ) -> Mapper:
        """Create a new mapper with empty state, restricted to ``symbols``."""
        ...


# =============================================================================
# EXTERNAL COLLABORATOR PROTOCOLS
# =============================================================================


@runtime_checkable
class SegmentFetcher(Protocol):
    """
    Archive client retrieving compressed segment bytes.

    Raises AuthorizationError, SegmentNotFoundError or TransientFetchError.
    """

    async def fetch(self, key: SegmentKey) -> bytes:
        """Download the compressed bytes of one segment."""
        ...


@runtime_checkable
class CatalogClient(Protocol):
    """Exchange catalog service client."""

    async def fetch_exchange_details(self, exchange: Exchange) -> ExchangeDetails:
        """Download the details of one exchange."""
        ...

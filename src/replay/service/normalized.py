"""
Normalization pipeline.

Runs the raw replay of the channels the requested normalizers need and
feeds every message through their mappers, in registration order. Mappers
are created per replay and recreated after every disconnect so per-symbol
state never spans a capture gap.
"""

import logging
from collections.abc import AsyncGenerator, Iterable, Sequence

from src.replay.errors import NormalizationError, ValidationError
from src.replay.model.events import Disconnect, NormalizedEventBase
from src.replay.model.message import ReplayMessage
from src.replay.model.request import Filter, ReplayNormalizedRequest, ReplayRequest
from src.replay.protocols.replay import Mapper, Normalizer
from src.replay.service.stream import ReplayStream

logger = logging.getLogger(__name__)


def merge_filters(filters: Iterable[Filter]) -> list[Filter]:
    """
    Merge filters per channel, keeping first-seen channel order.

    A channel requested for all symbols by any filter stays unrestricted.
    """
    merged: dict[str, set[str] | None] = {}
    for f in filters:
        current = merged.get(f.channel, set())
        if current is None or f.symbols is None:
            merged[f.channel] = None
        else:
            merged[f.channel] = current | set(f.symbols)
    return [
        Filter(channel=channel, symbols=sorted(symbols) if symbols else None)
        for channel, symbols in merged.items()
    ]


class NormalizationPipeline:
    """
    Composes normalizers over one raw replay.

    Construction validates the normalizers against the exchange and builds
    the raw request, so a bad request fails before any I/O.
    """

    def __init__(
        self, request: ReplayNormalizedRequest, normalizers: Sequence[Normalizer]
    ) -> None:
        """
        Initialize the pipeline.

        Args:
            request: Validated normalized replay request
            normalizers: Normalizers applied to every message, in order

        Raises:
            ValidationError: If no normalizer is given or one of them does not
                support the exchange

        """
        if not normalizers:
            raise ValidationError("At least one normalizer is required")
        for normalizer in normalizers:
            if not normalizer.supports(request.exchange):
                raise ValidationError(
                    f"Normalizer {normalizer.name} does not support exchange "
                    f"{request.exchange.value}"
                )

        self.request = request
        self.normalizers = list(normalizers)
        self.mappers = self._create_mappers()
        self.raw_request = ReplayRequest.create(
            exchange=request.exchange,
            from_=request.from_,
            to=request.to,
            filters=merge_filters(
                f for mapper in self.mappers for f in mapper.filters(request.symbols)
            ),
            with_disconnects=request.with_disconnect_messages,
        )
        self._seen_symbols: dict[str, None] = {}

    def _create_mappers(self) -> list[Mapper]:
        return [
            n.mapper_for(self.request.exchange, self.request.symbols)
            for n in self.normalizers
        ]

    def map_message(self, item: ReplayMessage) -> list[NormalizedEventBase]:
        """
        Map one raw message through every mapper.

        Raises:
            NormalizationError: If any mapper fails

        """
        events: list[NormalizedEventBase] = []
        for mapper in self.mappers:
            try:
                if not mapper.can_handle(item.message):
                    continue
                events.extend(mapper.map(item.message, item.local_timestamp))
            except Exception as e:
                raise NormalizationError(
                    f"{type(mapper).__name__} failed on {self.request.exchange.value} "
                    f"message at {item.local_timestamp.isoformat()}: {e}",
                    exchange=self.request.exchange.value,
                    local_timestamp=item.local_timestamp,
                    raw_message=item.message,
                ) from e
        for event in events:
            self._seen_symbols.setdefault(event.symbol, None)
        return events

    def disconnect(self, item: ReplayMessage) -> list[Disconnect]:
        """
        Handle a continuity gap: reset mappers and emit disconnect events.

        One event is produced per requested symbol, or per symbol seen so
        far when the replay is not restricted to symbols.
        """
        self.mappers = self._create_mappers()
        symbols = self.request.symbols or tuple(self._seen_symbols)
        logger.debug(
            f"Disconnect at {item.local_timestamp.isoformat()} for "
            f"{len(symbols)} symbol(s), mappers reset"
        )
        return [
            Disconnect(
                symbol=symbol,
                exchange=self.request.exchange.value,
                timestamp=item.local_timestamp,
                local_timestamp=item.local_timestamp,
            )
            for symbol in symbols
        ]

    async def run(
        self, messages: ReplayStream[ReplayMessage]
    ) -> AsyncGenerator[NormalizedEventBase, None]:
        """
        Normalize a raw message stream, closing it when done.

        Consecutive disconnect markers collapse into a single set of
        disconnect events.
        """
        disconnected = False
        try:
            async for item in messages:
                if item.is_disconnect:
                    if disconnected:
                        continue
                    disconnected = True
                    for disconnect in self.disconnect(item):
                        yield disconnect
                    continue

                disconnected = False
                for event in self.map_message(item):
                    yield event
        finally:
            await messages.aclose()

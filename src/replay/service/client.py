"""
Replay engine entry points.

``ReplayClient`` wires the cache, the archive fetcher and the catalog
together. The module-level functions delegate to a default client built
from environment configuration on first use.
"""

import logging
from collections.abc import Iterable
from datetime import date, datetime
from typing import Any, Self

from src.replay.cache.segments import SegmentCache
from src.replay.config import ReplayConfig
from src.replay.enums import Exchange
from src.replay.fetch.http import HttpCatalogClient, HttpSegmentFetcher
from src.replay.model.details import ExchangeDetails
from src.replay.model.events import NormalizedEventBase
from src.replay.model.message import ReplayMessage
from src.replay.model.request import Filter, ReplayNormalizedRequest, ReplayRequest
from src.replay.protocols.replay import CatalogClient, Normalizer, SegmentFetcher
from src.replay.service.catalog import ExchangeCatalog
from src.replay.service.catalog import (
    list_supported_exchanges as list_static_exchanges,
)
from src.replay.service.normalized import NormalizationPipeline
from src.replay.service.stream import ReplayStream, replay_messages

logger = logging.getLogger(__name__)

DateLike = str | datetime | date
FilterLike = Filter | dict[str, Any]


class ReplayClient:
    """
    Market data replay engine.

    Collaborators default to the HTTP archive clients and the on-disk cache
    configured by ``config``; any of them can be supplied instead.
    """

    def __init__(
        self,
        config: ReplayConfig | None = None,
        cache: SegmentCache | None = None,
        fetcher: SegmentFetcher | None = None,
        catalog: CatalogClient | None = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            config: Engine configuration (defaults to environment)
            cache: Segment cache (defaults to ``config.cache.cache_dir``)
            fetcher: Archive segment client
            catalog: Catalog service client

        """
        self.config = config or ReplayConfig.from_env()
        self.cache = cache or SegmentCache(self.config.cache.cache_dir)
        self.fetcher = fetcher or HttpSegmentFetcher(self.config.fetch)
        self.catalog = ExchangeCatalog(catalog or HttpCatalogClient(self.config.fetch))

    def replay(
        self,
        exchange: str | Exchange,
        from_: DateLike,
        to: DateLike,
        filters: Iterable[FilterLike] = (),
        skip_decoding: bool = False,
        with_disconnects: bool = False,
    ) -> ReplayStream[ReplayMessage]:
        """
        Replay raw exchange messages.

        The request is validated immediately; fetching starts with the first
        item requested from the returned stream.

        Args:
            exchange: Exchange identifier
            from_: Inclusive UTC start
            to: Exclusive UTC end
            filters: Channel and symbol filters; none replays everything
            skip_decoding: Yield original frame bytes instead of decoded JSON
            with_disconnects: Yield ``None`` messages at capture gaps

        Returns:
            Stream of replay messages

        Raises:
            ValidationError: If the request is invalid

        """
        request = ReplayRequest.create(
            exchange=exchange,
            from_=from_,
            to=to,
            filters=tuple(filters),
            skip_decoding=skip_decoding,
            with_disconnects=with_disconnects,
        )
        return self.replay_request(request)

    def replay_request(self, request: ReplayRequest) -> ReplayStream[ReplayMessage]:
        """Replay raw exchange messages for an already validated request."""
        return ReplayStream(
            replay_messages(request, self.cache, self.fetcher, self.config.stream)
        )

    def replay_normalized(
        self,
        exchange: str | Exchange,
        from_: DateLike,
        to: DateLike,
        *normalizers: Normalizer,
        symbols: Iterable[str] | None = None,
        with_disconnect_messages: bool = False,
    ) -> ReplayStream[NormalizedEventBase]:
        """
        Replay normalized events produced by the given normalizers.

        Args:
            exchange: Exchange identifier
            from_: Inclusive UTC start
            to: Exclusive UTC end
            *normalizers: Normalizers applied in order to every message
            symbols: Restrict the replay to these symbols
            with_disconnect_messages: Emit Disconnect events at capture gaps

        Returns:
            Stream of normalized events

        Raises:
            ValidationError: If the request is invalid or a normalizer does
                not support the exchange

        """
        request = ReplayNormalizedRequest.create(
            exchange=exchange,
            from_=from_,
            to=to,
            symbols=list(symbols) if symbols is not None else None,
            with_disconnect_messages=with_disconnect_messages,
        )
        pipeline = NormalizationPipeline(request, normalizers)
        return ReplayStream(pipeline.run(self.replay_request(pipeline.raw_request)))

    def clear_cache(self) -> None:
        """Remove every cached segment. Safe to call repeatedly."""
        self.cache.clear()

    async def get_exchange_details(self, exchange: str | Exchange) -> ExchangeDetails:
        """Get catalog details of one exchange."""
        return await self.catalog.get_exchange_details(exchange)

    def list_supported_exchanges(self) -> list[str]:
        """Get the supported exchange identifiers in declaration order."""
        return self.catalog.list_supported_exchanges()

    async def aclose(self) -> None:
        """Close HTTP collaborators owned by this client."""
        for collaborator in (self.fetcher, self.catalog.client):
            close = getattr(collaborator, "aclose", None)
            if close is not None:
                await close()

    async def __aenter__(self) -> Self:
        """Enter the client context."""
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        """Close the client on context exit."""
        await self.aclose()


_default_client: ReplayClient | None = None


def get_default_client() -> ReplayClient:
    """Get the process-wide client, creating it from the environment."""
    global _default_client
    if _default_client is None:
        logger.debug("Creating default replay client from environment")
        _default_client = ReplayClient(ReplayConfig.from_env())
    return _default_client


def replay(
    exchange: str | Exchange,
    from_: DateLike,
    to: DateLike,
    filters: Iterable[FilterLike] = (),
    skip_decoding: bool = False,
    with_disconnects: bool = False,
) -> ReplayStream[ReplayMessage]:
    """Replay raw exchange messages with the default client."""
    return get_default_client().replay(
        exchange,
        from_,
        to,
        filters=filters,
        skip_decoding=skip_decoding,
        with_disconnects=with_disconnects,
    )


def replay_normalized(
    exchange: str | Exchange,
    from_: DateLike,
    to: DateLike,
    *normalizers: Normalizer,
    symbols: Iterable[str] | None = None,
    with_disconnect_messages: bool = False,
) -> ReplayStream[NormalizedEventBase]:
    """Replay normalized events with the default client."""
    return get_default_client().replay_normalized(
        exchange,
        from_,
        to,
        *normalizers,
        symbols=symbols,
        with_disconnect_messages=with_disconnect_messages,
    )


def clear_cache() -> None:
    """Clear the default client's segment cache."""
    get_default_client().clear_cache()


async def get_exchange_details(exchange: str | Exchange) -> ExchangeDetails:
    """Get catalog details of one exchange with the default client."""
    return await get_default_client().get_exchange_details(exchange)


def list_supported_exchanges() -> list[str]:
    """Get the supported exchange identifiers in declaration order."""
    return list_static_exchanges()

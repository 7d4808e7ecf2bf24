"""
Raw replay stream.

Walks the UTC days of a request in order, obtains each day's segment(s)
through the cache, decompresses them lazily and yields the captured frames
clipped to ``[from, to)`` and filtered by channel and symbol.

Key behaviors:
- Frames keep capture order; channel partitions of one day are merged
  by local timestamp
- The next day is fetched while the current one is consumed
- A missing day is empty; authorization and transient fetch errors end the
  stream at the point they are reached
- Every exit path cancels pending fetches and closes decompression handles
"""

import asyncio
import gzip
import heapq
import io
import logging
from collections.abc import AsyncGenerator, Iterator
from contextlib import ExitStack
from datetime import date
from types import TracebackType
from typing import IO, Generic, Self, TypeVar

from src.replay.adapters import decoder_for
from src.replay.cache.segments import SegmentCache
from src.replay.config import StreamConfig
from src.replay.domain.timestamps import ONE_DAY, day_start, iter_days
from src.replay.errors import SegmentNotFoundError
from src.replay.model.message import ReplayMessage
from src.replay.model.request import ReplayRequest
from src.replay.model.segment import SegmentKey
from src.replay.protocols.replay import Decoder, Frame, SegmentFetcher

logger = logging.getLogger(__name__)

T = TypeVar("T")

_GZIP_MAGIC = b"\x1f\x8b"


class ReplayStream(Generic[T]):
    """
    Forward-only async cursor over a replay.

    Nothing is fetched until the first item is requested. Use it with
    ``async for`` and, to stop early, ``aclose()`` or ``async with``.
    """

    def __init__(self, source: AsyncGenerator[T, None]) -> None:
        """Wrap the generator producing the replay items."""
        self._source = source

    def __aiter__(self) -> Self:
        """Return the cursor itself."""
        return self

    async def __anext__(self) -> T:
        """Produce the next item, raising StopAsyncIteration at the end."""
        return await self._source.__anext__()

    async def aclose(self) -> None:
        """Stop the replay and release its resources."""
        await self._source.aclose()

    async def __aenter__(self) -> Self:
        """Enter the replay context."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Close the replay on context exit."""
        await self.aclose()


def open_segment(data: bytes) -> IO[bytes]:
    """Open segment bytes for line iteration, decompressing gzip lazily."""
    if data[:2] == _GZIP_MAGIC:
        return gzip.GzipFile(fileobj=io.BytesIO(data), mode="rb")
    return io.BytesIO(data)


def _retrieve_exception(task: asyncio.Task[list[bytes]]) -> None:
    if not task.cancelled():
        task.exception()


class SegmentLoader:
    """
    Obtains the segments of each replayed day, optionally one day ahead.

    With several partitions a day is missing only when every partition is.
    """

    def __init__(
        self,
        cache: SegmentCache,
        fetcher: SegmentFetcher,
        request: ReplayRequest,
        partitions: list[str | None],
    ) -> None:
        """Initialize the loader for one replay."""
        self.cache = cache
        self.fetcher = fetcher
        self.request = request
        self.partitions = partitions
        self._pending: dict[date, asyncio.Task[list[bytes]]] = {}

    def prefetch(self, day: date) -> None:
        """Start loading a day in the background."""
        if day not in self._pending:
            logger.debug(f"Prefetching {self.request.exchange.value} {day}")
            task = asyncio.create_task(self._load(day))
            task.add_done_callback(_retrieve_exception)
            self._pending[day] = task

    async def load(self, day: date) -> list[bytes]:
        """
        Get the segments of a day, one per partition present.

        Raises:
            SegmentNotFoundError: If the archive has nothing for the day
            FetchError: For any other fetch failure

        """
        task = self._pending.pop(day, None)
        if task is None:
            return await self._load(day)
        return await task

    def cancel(self) -> None:
        """Cancel every background load."""
        for task in self._pending.values():
            task.cancel()
        self._pending.clear()

    async def _load(self, day: date) -> list[bytes]:
        keys = [
            SegmentKey(exchange=self.request.exchange, day=day, partition=partition)
            for partition in self.partitions
        ]
        results = await asyncio.gather(
            *(self.cache.get_or_fetch(key, self.fetcher) for key in keys),
            return_exceptions=True,
        )

        segments: list[bytes] = []
        missing: SegmentNotFoundError | None = None
        for key, result in zip(keys, results, strict=True):
            if isinstance(result, SegmentNotFoundError):
                logger.warning(f"No segment for {key}")
                missing = result
            elif isinstance(result, BaseException):
                raise result
            else:
                segments.append(result)

        if not segments and missing is not None:
            raise missing
        return segments


def iter_frames(decoder: Decoder, handles: list[IO[bytes]]) -> Iterator[Frame]:
    """Iterate the frames of one day, merging partitions by local timestamp."""
    if len(handles) == 1:
        return decoder.split_frames(handles[0])
    return heapq.merge(
        *(decoder.split_frames(handle) for handle in handles),
        key=lambda frame: frame.local_timestamp,
    )


async def replay_messages(
    request: ReplayRequest,
    cache: SegmentCache,
    fetcher: SegmentFetcher,
    config: StreamConfig,
) -> AsyncGenerator[ReplayMessage, None]:
    """
    Produce the raw messages of a validated replay request.

    Args:
        request: Validated request
        cache: Segment cache
        fetcher: Archive client used on cache misses
        config: Prefetch and partitioning settings

    Yields:
        Replay messages in non-decreasing local timestamp order

    Raises:
        AuthorizationError: When the archive denies access to a segment
        TransientFetchError: On any other archive failure

    """
    exchange = request.exchange.value
    decoder = decoder_for(request.exchange)
    partitions: list[str | None] = (
        list(request.filter_channels)
        if config.partition_by_channel and request.filters
        else [None]
    )
    fast_path = request.skip_decoding and not request.filters
    days = list(iter_days(request.from_, request.to))
    loader = SegmentLoader(cache, fetcher, request, partitions)

    logger.info(
        f"Replaying {exchange} from {request.from_.isoformat()} to "
        f"{request.to.isoformat()} ({len(days)} day(s), "
        f"{len(request.filters)} filter(s), skip_decoding={request.skip_decoding})"
    )
    try:
        for index, day in enumerate(days):
            if config.prefetch_segments and index + 1 < len(days):
                loader.prefetch(days[index + 1])

            window_start = max(request.from_, day_start(day))
            window_end = min(request.to, day_start(day) + ONE_DAY)

            try:
                segments = await loader.load(day)
            except SegmentNotFoundError:
                if request.with_disconnects:
                    yield ReplayMessage.of(None, window_start)
                continue

            with ExitStack() as stack:
                handles = [stack.enter_context(open_segment(s)) for s in segments]
                for frame in iter_frames(decoder, handles):
                    local_timestamp = frame.local_timestamp
                    if local_timestamp < window_start:
                        continue
                    if local_timestamp >= window_end:
                        break

                    if not frame.payload:
                        if request.with_disconnects:
                            yield ReplayMessage.of(None, local_timestamp)
                        continue

                    if fast_path:
                        yield ReplayMessage.of(frame.payload, local_timestamp)
                        continue

                    message = decoder.decode(frame.payload)
                    if request.filters and not request.accepts(
                        decoder.channel_of(message), *decoder.symbols_of(message)
                    ):
                        continue
                    yield ReplayMessage.of(
                        frame.payload if request.skip_decoding else message,
                        local_timestamp,
                    )
    finally:
        loader.cancel()
        logger.debug(f"Replay of {exchange} closed")

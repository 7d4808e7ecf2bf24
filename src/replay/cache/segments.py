"""
Local segment cache.

Segments are stored verbatim, still compressed, one file per segment key.
Concurrent requests for a key that is not cached yet share a single
in-flight load, so the archive is asked at most once per key between two
``clear()`` calls.
"""

import asyncio
import logging
import os
import shutil
import tempfile
from pathlib import Path

from src.replay.model.segment import SegmentKey
from src.replay.protocols.replay import SegmentFetcher

logger = logging.getLogger(__name__)


def _retrieve_exception(task: asyncio.Future[bytes]) -> None:
    # A fetch whose waiters all went away must not log "never retrieved"
    if not task.cancelled():
        task.exception()


class SegmentCache:
    """
    On-disk cache of compressed segments with in-flight deduplication.

    Attributes:
        root: Cache directory; segments live under ``root / "feeds"``
        generation: Incremented by every ``clear()``

    """

    def __init__(self, root: Path) -> None:
        """
        Initialize the cache.

        Args:
            root: Cache directory, created on first write

        """
        self.root = Path(root)
        self.generation = 0
        self._in_flight: dict[SegmentKey, asyncio.Task[bytes]] = {}

    def path_for(self, key: SegmentKey) -> Path:
        """Get the file path of a segment."""
        return self.root.joinpath(*key.relative_path.parts)

    def get(self, key: SegmentKey) -> bytes | None:
        """Get cached segment bytes, or None on a miss."""
        path = self.path_for(key)
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            return None
        logger.debug(f"Cache hit for {key}")
        return data

    def put(self, key: SegmentKey, data: bytes) -> None:
        """Store segment bytes atomically."""
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as temp_file:
                temp_file.write(data)
            os.replace(temp_name, path)
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise

    def clear(self) -> None:
        """
        Remove every cached segment and start a new generation.

        Idempotent: clearing an empty or missing cache succeeds. Fetches
        still in flight complete for their waiters but are not stored.
        """
        self.generation += 1
        self._in_flight.clear()
        feeds = self.root / "feeds"
        if feeds.exists():
            shutil.rmtree(feeds)
        logger.info(f"Cleared segment cache at {self.root}")

    async def get_or_fetch(self, key: SegmentKey, fetcher: SegmentFetcher) -> bytes:
        """
        Get a segment from the cache, fetching it on a miss.

        Disk reads and writes run in a worker thread so the event loop keeps
        serving other streams.

        Args:
            key: Segment to obtain
            fetcher: Archive client used on a miss

        Returns:
            Compressed segment bytes

        Raises:
            FetchError: Propagated from the fetcher

        """
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._load(key, fetcher, self.generation))
            task.add_done_callback(_retrieve_exception)
            task.add_done_callback(lambda done: self._forget(key, done))
            self._in_flight[key] = task
        else:
            logger.debug(f"Joining in-flight load of {key}")

        # A cancelled waiter must not cancel the load shared with others
        return await asyncio.shield(task)

    async def _load(
        self, key: SegmentKey, fetcher: SegmentFetcher, generation: int
    ) -> bytes:
        cached = await asyncio.to_thread(self.get, key)
        if cached is not None:
            return cached

        logger.debug(f"Cache miss for {key}, fetching")
        data = await fetcher.fetch(key)
        if generation == self.generation:
            await asyncio.to_thread(self.put, key, data)
        else:
            logger.debug(f"Discarding {key} fetched before cache was cleared")
        return data

    def _forget(self, key: SegmentKey, task: asyncio.Task[bytes]) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]

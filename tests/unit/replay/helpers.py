"""Test helpers for replay tests."""

import asyncio
import gzip
import json
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any

from src.replay.cache.segments import SegmentCache
from src.replay.config import CacheConfig, ReplayConfig, StreamConfig
from src.replay.enums import Exchange
from src.replay.errors import (
    AuthorizationError,
    SegmentNotFoundError,
    TransientFetchError,
)
from src.replay.model.details import ExchangeDetails
from src.replay.model.segment import SegmentKey
from src.replay.service.client import ReplayClient


def utc(text: str) -> datetime:
    """Parse an ISO timestamp as UTC."""
    return datetime.fromisoformat(text).replace(tzinfo=UTC)


class SegmentBuilder:
    """Builder for gzip-compressed segment bytes."""

    def __init__(self) -> None:
        """Initialize with no frames."""
        self._lines: list[bytes] = []

    def with_frame(self, timestamp: str, message: Any) -> "SegmentBuilder":
        """Add a frame; dicts and lists are serialized as compact JSON."""
        payload = message if isinstance(message, str) else json.dumps(message)
        self._lines.append(f"{timestamp} {payload}".encode())
        return self

    def with_disconnect(self, timestamp: str) -> "SegmentBuilder":
        """Add a capture-time disconnect marker."""
        self._lines.append(timestamp.encode())
        return self

    def build_text(self) -> bytes:
        """Build the decompressed segment."""
        return b"".join(line + b"\n" for line in self._lines)

    def build(self) -> bytes:
        """Build the compressed segment."""
        return gzip.compress(self.build_text())


class FakeFetcher:
    """
    In-memory archive.

    Keys without a segment are reported missing; denied keys raise an
    authorization error. An optional gate holds every fetch until set.
    """

    def __init__(self) -> None:
        """Initialize an empty archive."""
        self.segments: dict[tuple[Exchange, date, str | None], bytes] = {}
        self.denied: dict[tuple[Exchange, date, str | None], int] = {}
        self.broken: set[tuple[Exchange, date, str | None]] = set()
        self.calls: list[SegmentKey] = []
        self.gate: asyncio.Event | None = None

    def add(
        self,
        exchange: Exchange,
        day: date,
        data: bytes,
        partition: str | None = None,
    ) -> "FakeFetcher":
        """Store a segment."""
        self.segments[(exchange, day, partition)] = data
        return self

    def deny(
        self,
        exchange: Exchange,
        day: date,
        status: int = 401,
        partition: str | None = None,
    ) -> "FakeFetcher":
        """Deny access to a segment."""
        self.denied[(exchange, day, partition)] = status
        return self

    def fail(
        self, exchange: Exchange, day: date, partition: str | None = None
    ) -> "FakeFetcher":
        """Make a segment fail with a transient error."""
        self.broken.add((exchange, day, partition))
        return self

    async def fetch(self, key: SegmentKey) -> bytes:
        """Serve a segment from memory."""
        self.calls.append(key)
        if self.gate is not None:
            await self.gate.wait()
        else:
            await asyncio.sleep(0)

        ident = (key.exchange, key.day, key.partition)
        if ident in self.denied:
            raise AuthorizationError(f"{key} denied", self.denied[ident])
        if ident in self.broken:
            raise TransientFetchError(f"{key} failed", 503)
        if ident not in self.segments:
            raise SegmentNotFoundError(f"{key} not found")
        return self.segments[ident]


class FakeCatalogClient:
    """In-memory catalog service."""

    def __init__(self, details: dict[Exchange, dict[str, Any]] | None = None) -> None:
        """Initialize with raw catalog JSON per exchange."""
        self.details = details or {}
        self.calls: list[Exchange] = []

    async def fetch_exchange_details(self, exchange: Exchange) -> ExchangeDetails:
        """Serve exchange details from memory."""
        self.calls.append(exchange)
        return ExchangeDetails.model_validate(self.details[exchange])


def make_client(
    cache_dir: Path,
    fetcher: FakeFetcher,
    catalog: FakeCatalogClient | None = None,
    prefetch_segments: bool = True,
    partition_by_channel: bool = False,
) -> ReplayClient:
    """Create a replay client over in-memory collaborators."""
    config = ReplayConfig(
        cache=CacheConfig(cache_dir=cache_dir),
        stream=StreamConfig(
            prefetch_segments=prefetch_segments,
            partition_by_channel=partition_by_channel,
        ),
    )
    return ReplayClient(
        config=config,
        cache=SegmentCache(cache_dir),
        fetcher=fetcher,
        catalog=catalog or FakeCatalogClient(),
    )


def bitmex_trade(symbol: str, price: float, size: int, at: str) -> dict[str, Any]:
    """Build a BitMEX trade table insert."""
    return {
        "table": "trade",
        "action": "insert",
        "data": [
            {
                "timestamp": at,
                "symbol": symbol,
                "side": "Buy",
                "size": size,
                "price": price,
                "tickDirection": "PlusTick",
                "trdMatchID": f"{symbol}-{at}",
            }
        ],
    }


def bitmex_book(action: str, rows: list[dict[str, Any]]) -> dict[str, Any]:
    """Build a BitMEX orderBookL2 message."""
    return {"table": "orderBookL2", "action": action, "data": rows}

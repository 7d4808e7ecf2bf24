"""Tests for the normalization pipeline."""

from collections.abc import AsyncGenerator
from typing import Any

import pytest

from src.replay.adapters.base import BaseMapper
from src.replay.enums import Exchange
from src.replay.errors import NormalizationError, ValidationError
from src.replay.model.events import BookChange, Disconnect, Trade
from src.replay.model.message import ReplayMessage
from src.replay.model.request import Filter, ReplayNormalizedRequest
from src.replay.normalizers import (
    ExchangeNormalizer,
    normalize_book_changes,
    normalize_derivative_tickers,
    normalize_trades,
)
from src.replay.service.normalized import NormalizationPipeline, merge_filters
from src.replay.service.stream import ReplayStream
from tests.unit.replay.helpers import bitmex_book, bitmex_trade, utc


def make_request(**overrides: Any) -> ReplayNormalizedRequest:
    """Create a BitMEX normalized request for one hour."""
    data: dict[str, Any] = {
        "exchange": "bitmex",
        "from_": "2019-05-01",
        "to": "2019-05-01T01:00:00",
    }
    data.update(overrides)
    return ReplayNormalizedRequest.create(**data)


def stream_of(*items: ReplayMessage) -> ReplayStream[ReplayMessage]:
    """Wrap messages in a replay stream."""

    async def source() -> AsyncGenerator[ReplayMessage, None]:
        for item in items:
            yield item

    return ReplayStream(source())


class FragileMapper(BaseMapper):
    """Mapper whose message check fails on every frame."""

    channels = ("trade",)

    def can_handle(self, message: Any) -> bool:
        """Fail while inspecting the message."""
        return message["missing"]


async def collect(pipeline: NormalizationPipeline, *items: ReplayMessage) -> list[Any]:
    """Run the pipeline over messages and collect the events."""
    return [event async for event in pipeline.run(stream_of(*items))]


class TestMergeFilters:
    """Filter merging across normalizers."""

    def test_symbols_are_unioned_per_channel(self) -> None:
        """Filters on the same channel merge their symbols."""
        merged = merge_filters(
            [
                Filter(channel="trade", symbols=["XBTUSD"]),
                Filter(channel="orderBookL2", symbols=["XBTUSD"]),
                Filter(channel="trade", symbols=["ETHUSD"]),
            ]
        )
        assert merged == [
            Filter(channel="trade", symbols=["ETHUSD", "XBTUSD"]),
            Filter(channel="orderBookL2", symbols=["XBTUSD"]),
        ]

    def test_unrestricted_filter_wins(self) -> None:
        """Any all-symbols filter keeps the channel unrestricted."""
        merged = merge_filters(
            [
                Filter(channel="trade", symbols=["XBTUSD"]),
                Filter(channel="trade"),
                Filter(channel="trade", symbols=["ETHUSD"]),
            ]
        )
        assert merged == [Filter(channel="trade")]


class TestPipelineConstruction:
    """Validation done before any replay starts."""

    def test_requires_a_normalizer(self) -> None:
        """An empty normalizer list is rejected."""
        with pytest.raises(ValidationError):
            NormalizationPipeline(make_request(), [])

    def test_rejects_unsupported_normalizer(self) -> None:
        """Derivative tickers are not available for spot-only exchanges."""
        with pytest.raises(ValidationError, match="coinbase"):
            NormalizationPipeline(
                make_request(exchange="coinbase"), [normalize_derivative_tickers]
            )

    def test_raw_request_combines_mapper_channels(self) -> None:
        """The raw request carries every channel needed, for the symbols."""
        pipeline = NormalizationPipeline(
            make_request(symbols=["XBTUSD"], with_disconnect_messages=True),
            [normalize_trades, normalize_book_changes],
        )
        raw = pipeline.raw_request
        assert raw.exchange is Exchange.BITMEX
        assert raw.filter_channels == ["trade", "orderBookL2"]
        assert all(f.symbols == ("XBTUSD",) for f in raw.filters)
        assert raw.with_disconnects
        assert not raw.skip_decoding


class TestPipelineRun:
    """Event production."""

    @pytest.mark.asyncio
    async def test_events_in_normalizer_order(self) -> None:
        """Each message is offered to every mapper in registration order."""
        pipeline = NormalizationPipeline(
            make_request(), [normalize_trades, normalize_book_changes]
        )
        events = await collect(
            pipeline,
            ReplayMessage.of(
                bitmex_trade("XBTUSD", 5000.5, 10, "2019-05-01T00:00:01.000Z"),
                utc("2019-05-01T00:00:01"),
            ),
            ReplayMessage.of(
                bitmex_book(
                    "partial",
                    [
                        {
                            "symbol": "XBTUSD",
                            "id": 1,
                            "side": "Buy",
                            "size": 3,
                            "price": 5000,
                        }
                    ],
                ),
                utc("2019-05-01T00:00:02"),
            ),
        )
        assert [type(e) for e in events] == [Trade, BookChange]

    @pytest.mark.asyncio
    async def test_mapper_failure_is_fatal(self) -> None:
        """A malformed message raises NormalizationError with context."""
        pipeline = NormalizationPipeline(make_request(), [normalize_trades])
        broken = {"table": "trade", "action": "insert", "data": [{"symbol": "X"}]}
        at = utc("2019-05-01T00:00:03")

        with pytest.raises(NormalizationError) as exc_info:
            await collect(pipeline, ReplayMessage.of(broken, at))

        assert exc_info.value.exchange == "bitmex"
        assert exc_info.value.local_timestamp == at
        assert exc_info.value.raw_message == broken

    @pytest.mark.asyncio
    async def test_disconnect_for_requested_symbols(self) -> None:
        """Consecutive markers collapse into one disconnect per symbol."""
        pipeline = NormalizationPipeline(
            make_request(symbols=["XBTUSD", "ETHUSD"], with_disconnect_messages=True),
            [normalize_trades],
        )
        at = utc("2019-05-01T00:10:00")
        events = await collect(
            pipeline,
            ReplayMessage.of(None, at),
            ReplayMessage.of(None, utc("2019-05-01T00:10:01")),
        )
        assert all(isinstance(e, Disconnect) for e in events)
        assert [e.symbol for e in events] == ["XBTUSD", "ETHUSD"]
        assert all(e.local_timestamp == at for e in events)

    @pytest.mark.asyncio
    async def test_disconnect_for_seen_symbols(self) -> None:
        """Without a symbol restriction, symbols seen so far are reported."""
        pipeline = NormalizationPipeline(
            make_request(with_disconnect_messages=True), [normalize_trades]
        )
        events = await collect(
            pipeline,
            ReplayMessage.of(
                bitmex_trade("ETHUSD", 160.5, 1, "2019-05-01T00:00:01.000Z"),
                utc("2019-05-01T00:00:01"),
            ),
            ReplayMessage.of(None, utc("2019-05-01T00:00:02")),
            ReplayMessage.of(
                bitmex_trade("ETHUSD", 160.6, 1, "2019-05-01T00:00:03.000Z"),
                utc("2019-05-01T00:00:03"),
            ),
            ReplayMessage.of(None, utc("2019-05-01T00:00:04")),
        )
        assert [e.type for e in events] == [
            "trade",
            "disconnect",
            "trade",
            "disconnect",
        ]
        assert events[1].symbol == "ETHUSD"

    @pytest.mark.asyncio
    async def test_disconnect_resets_mapper_state(self) -> None:
        """Book levels known before a gap are forgotten after it."""
        pipeline = NormalizationPipeline(
            make_request(symbols=["XBTUSD"], with_disconnect_messages=True),
            [normalize_book_changes],
        )
        level = {"symbol": "XBTUSD", "id": 1, "side": "Buy", "size": 3, "price": 5000}
        update = {"symbol": "XBTUSD", "id": 1, "side": "Buy", "size": 4}
        events = await collect(
            pipeline,
            ReplayMessage.of(bitmex_book("partial", [level]), utc("2019-05-01")),
            ReplayMessage.of(None, utc("2019-05-01T00:00:01")),
            ReplayMessage.of(
                bitmex_book("update", [update]), utc("2019-05-01T00:00:02")
            ),
        )
        assert [e.type for e in events] == ["book_change", "disconnect"]

    @pytest.mark.asyncio
    async def test_closes_source_stream(self) -> None:
        """Stopping the normalized stream closes the raw one."""
        closed = False

        async def source() -> AsyncGenerator[ReplayMessage, None]:
            nonlocal closed
            try:
                for second in range(10):
                    yield ReplayMessage.of(
                        bitmex_trade(
                            "XBTUSD", 5000, 1, f"2019-05-01T00:00:0{second}.000Z"
                        ),
                        utc(f"2019-05-01T00:00:0{second}"),
                    )
            finally:
                closed = True

        pipeline = NormalizationPipeline(make_request(), [normalize_trades])
        events = ReplayStream(pipeline.run(ReplayStream(source())))
        async for _ in events:
            break
        await events.aclose()

        assert closed

    @pytest.mark.asyncio
    async def test_failing_message_check_is_fatal(self) -> None:
        """Errors raised while checking a message are normalization errors."""
        fragile = ExchangeNormalizer("fragile", {Exchange.BITMEX: FragileMapper})
        pipeline = NormalizationPipeline(make_request(), [fragile])
        message = bitmex_trade("XBTUSD", 5000, 1, "2019-05-01T00:00:01.000Z")

        with pytest.raises(NormalizationError) as exc_info:
            await collect(pipeline, ReplayMessage.of(message, utc("2019-05-01")))

        assert isinstance(exc_info.value.__cause__, KeyError)
        assert exc_info.value.raw_message == message

    @pytest.mark.asyncio
    async def test_batched_rows_outside_symbols_are_dropped(self) -> None:
        """Only requested symbols of a multi-symbol table become events."""
        pipeline = NormalizationPipeline(
            make_request(symbols=["XBTUSD"]), [normalize_trades]
        )
        message = bitmex_trade("ETHUSD", 160.5, 1, "2019-05-01T00:00:01.000Z")
        message["data"] += bitmex_trade(
            "XBTUSD", 5000.5, 2, "2019-05-01T00:00:01.000Z"
        )["data"]

        events = await collect(
            pipeline, ReplayMessage.of(message, utc("2019-05-01T00:00:01"))
        )
        assert [e.symbol for e in events] == ["XBTUSD"]

    @pytest.mark.asyncio
    async def test_lower_case_symbols_match_events(self) -> None:
        """Symbols are matched and reported upper-cased."""
        pipeline = NormalizationPipeline(
            make_request(symbols=["xbtusd"], with_disconnect_messages=True),
            [normalize_trades],
        )
        events = await collect(
            pipeline,
            ReplayMessage.of(
                bitmex_trade("XBTUSD", 5000.5, 2, "2019-05-01T00:00:01.000Z"),
                utc("2019-05-01T00:00:01"),
            ),
            ReplayMessage.of(None, utc("2019-05-01T00:00:02")),
        )
        assert [(e.type, e.symbol) for e in events] == [
            ("trade", "XBTUSD"),
            ("disconnect", "XBTUSD"),
        ]

    @pytest.mark.asyncio
    async def test_bitfinex_trade_snapshot_is_ignored(self) -> None:
        """Snapshot frames of list payloads map to nothing."""
        pipeline = NormalizationPipeline(
            make_request(exchange="bitfinex"), [normalize_trades]
        )
        subscribed = {
            "event": "subscribed",
            "channel": "trades",
            "chanId": 7,
            "symbol": "tBTCUSD",
        }
        events = await collect(
            pipeline,
            ReplayMessage.of(subscribed, utc("2019-05-01T00:00:01")),
            ReplayMessage.of(
                [7, [[1, 1559347200000, 0.5, 8000]]], utc("2019-05-01T00:00:02")
            ),
            ReplayMessage.of(
                [7, "te", [2, 1559347200000, 0.5, 8000]], utc("2019-05-01T00:00:03")
            ),
        )
        assert [e.id for e in events] == ["2"]

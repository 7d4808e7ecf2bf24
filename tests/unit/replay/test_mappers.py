"""Tests for per-exchange mappers."""

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from src.replay.adapters import (
    BOOK_CHANGE_MAPPERS,
    DERIVATIVE_TICKER_MAPPERS,
    TRADE_MAPPERS,
)
from src.replay.adapters.base import BaseMapper
from src.replay.enums import EXCHANGES, Exchange, TradeSide
from src.replay.model.events import BookChange, BookPriceLevel, DerivativeTicker, Trade

LOCAL = datetime(2019, 5, 1, 0, 0, 1, tzinfo=UTC)


def run(mapper: BaseMapper, *messages: Any) -> list[Any]:
    """Feed messages through a mapper the way the pipeline does."""
    events: list[Any] = []
    for message in messages:
        if mapper.can_handle(message):
            events.extend(mapper.map(message, LOCAL))
    return events


def level(price: str, amount: str) -> BookPriceLevel:
    """Build an expected price level."""
    return BookPriceLevel(price=Decimal(price), amount=Decimal(amount))


def test_every_exchange_has_trade_and_book_mappers() -> None:
    """Trades and book changes cover every supported exchange."""
    assert set(TRADE_MAPPERS) == set(EXCHANGES)
    assert set(BOOK_CHANGE_MAPPERS) == set(EXCHANGES)
    assert set(DERIVATIVE_TICKER_MAPPERS) == {
        Exchange.BITMEX,
        Exchange.BINANCE_FUTURES,
        Exchange.BITFINEX_DERIVATIVES,
        Exchange.CRYPTOFACILITIES,
        Exchange.DERIBIT,
        Exchange.OKEX,
    }


def test_mapper_filters_cover_channels() -> None:
    """Default filters request each mapper channel for the symbols."""
    mapper = BOOK_CHANGE_MAPPERS[Exchange.COINBASE](Exchange.COINBASE)
    filters = mapper.filters(["btc-usd"])
    assert [f.channel for f in filters] == ["snapshot", "l2update"]
    assert all(f.symbols == ("BTC-USD",) for f in filters)


class TestBitmex:
    """BitMEX trade, orderBookL2 and instrument tables."""

    def test_trade_insert(self) -> None:
        """Each trade row becomes a trade."""
        mapper = TRADE_MAPPERS[Exchange.BITMEX](Exchange.BITMEX)
        [trade] = run(
            mapper,
            {
                "table": "trade",
                "action": "insert",
                "data": [
                    {
                        "timestamp": "2019-05-01T00:00:00.500Z",
                        "symbol": "ETHUSD",
                        "side": "Sell",
                        "size": 25,
                        "price": 160.05,
                        "trdMatchID": "abc",
                    }
                ],
            },
        )
        assert isinstance(trade, Trade)
        assert trade.symbol == "ETHUSD"
        assert trade.side is TradeSide.SELL
        assert trade.price == Decimal("160.05")
        assert trade.amount == Decimal("25")
        assert trade.id == "abc"
        assert trade.timestamp == datetime(2019, 5, 1, 0, 0, 0, 500000, tzinfo=UTC)
        assert trade.local_timestamp == LOCAL

    def test_rows_outside_symbols_are_skipped(self) -> None:
        """A table batching several symbols yields only the requested rows."""
        mapper = TRADE_MAPPERS[Exchange.BITMEX](Exchange.BITMEX, ["xbtusd"])
        row = {
            "timestamp": "2019-05-01T00:00:00.500Z",
            "side": "Buy",
            "size": 10,
            "price": 5000.5,
        }
        events = run(
            mapper,
            {
                "table": "trade",
                "action": "insert",
                "data": [
                    {**row, "symbol": "ETHUSD", "trdMatchID": "eth"},
                    {**row, "symbol": "XBTUSD", "trdMatchID": "xbt"},
                ],
            },
        )
        assert [(t.symbol, t.id) for t in events] == [("XBTUSD", "xbt")]
        assert mapper.wants("XBTUSD")
        assert not mapper.wants("ETHUSD")

    def test_unrestricted_mapper_wants_every_symbol(self) -> None:
        """Without symbols every row is mapped."""
        mapper = TRADE_MAPPERS[Exchange.BITMEX](Exchange.BITMEX)
        assert mapper.symbols is None
        assert mapper.wants("ETHUSD")

    def test_book_updates_resolve_price_by_id(self) -> None:
        """Updates and deletes carry ids only; prices come from the partial."""
        mapper = BOOK_CHANGE_MAPPERS[Exchange.BITMEX](Exchange.BITMEX)
        events = run(
            mapper,
            {
                "table": "orderBookL2",
                "action": "partial",
                "data": [
                    {
                        "symbol": "XBTUSD",
                        "id": 1,
                        "side": "Sell",
                        "size": 5,
                        "price": 5001,
                    },
                    {
                        "symbol": "XBTUSD",
                        "id": 2,
                        "side": "Buy",
                        "size": 7,
                        "price": 5000,
                    },
                ],
            },
            {
                "table": "orderBookL2",
                "action": "update",
                "data": [{"symbol": "XBTUSD", "id": 2, "side": "Buy", "size": 9}],
            },
            {
                "table": "orderBookL2",
                "action": "delete",
                "data": [{"symbol": "XBTUSD", "id": 1, "side": "Sell"}],
            },
        )
        snapshot, update, delete = events
        assert snapshot.is_snapshot
        assert snapshot.asks == [level("5001", "5")]
        assert snapshot.bids == [level("5000", "7")]
        assert not update.is_snapshot
        assert update.bids == [level("5000", "9")]
        assert delete.asks == [level("5001", "0")]

    def test_update_for_unknown_level_is_skipped(self) -> None:
        """Levels created before the replay started are ignored."""
        mapper = BOOK_CHANGE_MAPPERS[Exchange.BITMEX](Exchange.BITMEX)
        events = run(
            mapper,
            {
                "table": "orderBookL2",
                "action": "update",
                "data": [{"symbol": "XBTUSD", "id": 42, "side": "Buy", "size": 1}],
            },
        )
        assert events == []

    def test_instrument_emits_only_on_change(self) -> None:
        """Repeated identical instrument values produce no new ticker."""
        mapper = DERIVATIVE_TICKER_MAPPERS[Exchange.BITMEX](Exchange.BITMEX)
        update = {
            "table": "instrument",
            "action": "update",
            "data": [
                {
                    "symbol": "XBTUSD",
                    "fundingRate": 0.0001,
                    "markPrice": 5000.5,
                    "timestamp": "2019-05-01T00:00:00.000Z",
                }
            ],
        }
        events = run(mapper, update, update)
        assert len(events) == 1
        ticker = events[0]
        assert isinstance(ticker, DerivativeTicker)
        assert ticker.funding_rate == Decimal("0.0001")
        assert ticker.mark_price == Decimal("5000.5")
        assert ticker.last_price is None


class TestCoinbase:
    """Coinbase matches and level2."""

    def test_match_side_is_taker_side(self) -> None:
        """The maker side is flipped to the aggressor side."""
        mapper = TRADE_MAPPERS[Exchange.COINBASE](Exchange.COINBASE)
        [trade] = run(
            mapper,
            {
                "type": "match",
                "trade_id": 13,
                "side": "sell",
                "size": "0.5",
                "price": "50.1",
                "product_id": "ZEC-USDC",
                "time": "2019-06-01T00:03:03.733000Z",
            },
        )
        assert trade.side is TradeSide.BUY
        assert trade.id == "13"

    def test_l2update_splits_sides(self) -> None:
        """Buy changes are bids, sell changes asks."""
        mapper = BOOK_CHANGE_MAPPERS[Exchange.COINBASE](Exchange.COINBASE)
        [change] = run(
            mapper,
            {
                "type": "l2update",
                "product_id": "BTC-USD",
                "changes": [["buy", "100.0", "1.5"], ["sell", "101.0", "0"]],
                "time": "2019-06-01T00:00:00.000Z",
            },
        )
        assert change.bids == [level("100.0", "1.5")]
        assert change.asks == [level("101.0", "0")]


class TestBinance:
    """Binance trades, depth synchronization and futures tickers."""

    def test_trade_side_from_buyer_maker(self) -> None:
        """A maker buyer means the aggressor sold."""
        mapper = TRADE_MAPPERS[Exchange.BINANCE](Exchange.BINANCE)
        [trade] = run(
            mapper,
            {
                "stream": "batpax@trade",
                "data": {
                    "e": "trade",
                    "E": 1559347200000,
                    "s": "BATPAX",
                    "t": 1,
                    "p": "0.3",
                    "q": "10",
                    "T": 1559347200000,
                    "m": True,
                },
            },
        )
        assert trade.symbol == "BATPAX"
        assert trade.side is TradeSide.SELL

    def test_depth_buffered_until_snapshot(self) -> None:
        """Updates before the snapshot wait and stale ones are dropped."""
        mapper = BOOK_CHANGE_MAPPERS[Exchange.BINANCE](Exchange.BINANCE)

        def depth(first: int, last: int, price: str) -> dict[str, Any]:
            return {
                "stream": "btcusdt@depth@100ms",
                "data": {
                    "E": 1559347200000,
                    "U": first,
                    "u": last,
                    "b": [[price, "1"]],
                    "a": [],
                },
            }

        events = run(
            mapper,
            depth(1, 10, "1.0"),
            depth(11, 20, "2.0"),
            {
                "stream": "btcusdt@depthSnapshot",
                "generated": True,
                "data": {
                    "lastUpdateId": 15,
                    "bids": [["1.5", "3"]],
                    "asks": [["1.6", "4"]],
                },
            },
            depth(21, 30, "3.0"),
        )
        assert [e.is_snapshot for e in events] == [True, False, False]
        assert events[0].bids == [level("1.5", "3")]
        assert events[1].bids == [level("2.0", "1")]
        assert events[2].bids == [level("3.0", "1")]

    def test_futures_ticker_merges_streams(self) -> None:
        """Mark price and ticker streams fill one pending ticker."""
        mapper = DERIVATIVE_TICKER_MAPPERS[Exchange.BINANCE_FUTURES](
            Exchange.BINANCE_FUTURES
        )
        events = run(
            mapper,
            {
                "stream": "btcusdt@markPrice",
                "data": {"E": 1569888000000, "p": "8300.1", "r": "0.0001"},
            },
            {"stream": "btcusdt@ticker", "data": {"E": 1569888001000, "c": "8299.5"}},
        )
        assert len(events) == 2
        assert events[1].mark_price == Decimal("8300.1")
        assert events[1].last_price == Decimal("8299.5")
        assert events[1].symbol == "BTCUSDT"


class TestBitfinex:
    """Bitfinex channel id subscriptions."""

    def test_trades_resolved_through_subscription(self) -> None:
        """Data frames are mapped once their subscription is known."""
        mapper = TRADE_MAPPERS[Exchange.BITFINEX](Exchange.BITFINEX)
        events = run(
            mapper,
            [7, "te", [1, 1559347200000, 0.5, 8000]],
            {
                "event": "subscribed",
                "channel": "trades",
                "chanId": 7,
                "symbol": "tBTCUSD",
            },
            [7, "hb"],
            [7, "te", [2, 1559347200000, -0.25, 8001]],
            [7, "tu", [2, 1559347200000, -0.25, 8001]],
        )
        [trade] = events
        assert trade.symbol == "BTCUSD"
        assert trade.side is TradeSide.SELL
        assert trade.amount == Decimal("0.25")

    def test_trade_snapshot_is_skipped(self) -> None:
        """Snapshot payloads of the trades channel carry no executed trade."""
        mapper = TRADE_MAPPERS[Exchange.BITFINEX](Exchange.BITFINEX)
        events = run(
            mapper,
            {
                "event": "subscribed",
                "channel": "trades",
                "chanId": 7,
                "symbol": "tBTCUSD",
            },
            [7, [[1, 1559347200000, 0.5, 8000], [2, 1559347200000, -1, 8001]]],
            [7, "te", [3, 1559347200000, 0.75, 8002]],
        )
        [trade] = events
        assert trade.id == "3"
        assert trade.side is TradeSide.BUY

    def test_book_snapshot_and_removal(self) -> None:
        """List payloads are snapshots; zero count removes a level."""
        mapper = BOOK_CHANGE_MAPPERS[Exchange.BITFINEX](Exchange.BITFINEX)
        snapshot, removal = run(
            mapper,
            {
                "event": "subscribed",
                "channel": "book",
                "chanId": 3,
                "symbol": "tBTCUSD",
            },
            [3, [[8000, 1, 2.5], [8001, 2, -1.5]]],
            [3, [8001, 0, -1]],
        )
        assert snapshot.is_snapshot
        assert snapshot.bids == [level("8000", "2.5")]
        assert snapshot.asks == [level("8001", "1.5")]
        assert removal.asks == [level("8001", "0")]


class TestDeribit:
    """Deribit notifications."""

    def test_book_snapshot_then_delete(self) -> None:
        """The first raw book notification is the snapshot."""
        mapper = BOOK_CHANGE_MAPPERS[Exchange.DERIBIT](Exchange.DERIBIT)

        def book(data: dict[str, Any]) -> dict[str, Any]:
            return {
                "jsonrpc": "2.0",
                "method": "subscription",
                "params": {"channel": "book.BTC-PERPETUAL.raw", "data": data},
            }

        snapshot, delete = run(
            mapper,
            book(
                {
                    "instrument_name": "BTC-PERPETUAL",
                    "change_id": 1,
                    "timestamp": 1556668800000,
                    "bids": [["new", 5000.0, 10.0]],
                    "asks": [["new", 5000.5, 20.0]],
                }
            ),
            book(
                {
                    "instrument_name": "BTC-PERPETUAL",
                    "change_id": 2,
                    "prev_change_id": 1,
                    "timestamp": 1556668800001,
                    "bids": [["delete", 5000.0, 0.0]],
                    "asks": [],
                }
            ),
        )
        assert snapshot.is_snapshot
        assert not delete.is_snapshot
        assert delete.bids == [level("5000.0", "0")]


class TestOtherExchanges:
    """Stateless and snapshot-first mappers of the remaining exchanges."""

    def test_cryptofacilities_single_level_update(self) -> None:
        """A ``book`` message updates one level of one side."""
        mapper = BOOK_CHANGE_MAPPERS[Exchange.CRYPTOFACILITIES](
            Exchange.CRYPTOFACILITIES
        )
        [change] = run(
            mapper,
            {
                "feed": "book",
                "product_id": "PI_XBTUSD",
                "side": "sell",
                "seq": 2,
                "price": 5001.5,
                "qty": 0.0,
                "timestamp": 1556668800000,
            },
        )
        assert change.bids == []
        assert change.asks == [level("5001.5", "0")]

    def test_okex_derivative_trade_uses_qty(self) -> None:
        """Swap trades report ``qty`` instead of ``size``."""
        mapper = TRADE_MAPPERS[Exchange.OKEX](Exchange.OKEX)
        [trade] = run(
            mapper,
            {
                "table": "swap/trade",
                "data": [
                    {
                        "instrument_id": "BTC-USD-SWAP",
                        "price": "5000.1",
                        "qty": "3",
                        "side": "buy",
                        "timestamp": "2019-05-01T00:00:00.123Z",
                        "trade_id": "99",
                    }
                ],
            },
        )
        assert trade.amount == Decimal("3")
        assert trade.side is TradeSide.BUY

    def test_okex_rows_outside_symbols_are_skipped(self) -> None:
        """Depth tables batching instruments yield only requested ones."""
        mapper = BOOK_CHANGE_MAPPERS[Exchange.OKEX](Exchange.OKEX, ["BTC-USDT"])
        events = run(
            mapper,
            {
                "table": "spot/depth",
                "action": "partial",
                "data": [
                    {
                        "instrument_id": "ETH-USDT",
                        "asks": [["160.1", "2", "0", "1"]],
                        "bids": [],
                        "timestamp": "2019-05-01T00:00:00.123Z",
                    },
                    {
                        "instrument_id": "BTC-USDT",
                        "asks": [],
                        "bids": [["5000.1", "1.5", "0", "2"]],
                        "timestamp": "2019-05-01T00:00:00.123Z",
                    },
                ],
            },
        )
        [change] = events
        assert change.symbol == "BTC-USDT"
        assert change.bids == [level("5000.1", "1.5")]

    def test_bitstamp_diffs_wait_for_snapshot(self) -> None:
        """Diffs older than the snapshot are dropped."""
        mapper = BOOK_CHANGE_MAPPERS[Exchange.BITSTAMP](Exchange.BITSTAMP)

        def diff(micros: int) -> dict[str, Any]:
            return {
                "event": "data",
                "channel": "diff_order_book_btcusd",
                "data": {
                    "microtimestamp": str(micros),
                    "bids": [["5000.00", "1.0"]],
                    "asks": [],
                },
            }

        events = run(
            mapper,
            diff(100),
            diff(300),
            {
                "event": "snapshot",
                "channel": "diff_order_book_btcusd",
                "data": {
                    "microtimestamp": "200",
                    "bids": [["4999.00", "2.0"]],
                    "asks": [["5001.00", "3.0"]],
                },
            },
        )
        assert [e.is_snapshot for e in events] == [True, False]
        assert events[1].symbol == "BTCUSD"

    def test_kraken_book_snapshot_and_split_update(self) -> None:
        """Snapshots use ``as``/``bs``; updates may carry two payloads."""
        mapper = BOOK_CHANGE_MAPPERS[Exchange.KRAKEN](Exchange.KRAKEN)
        snapshot, update = run(
            mapper,
            [
                0,
                {
                    "as": [["5541.3", "2.5", "1534614248.123678"]],
                    "bs": [["5541.2", "1.5", "1534614248.765567"]],
                },
                "book-10",
                "XBT/USD",
            ],
            [
                0,
                {"a": [["5541.3", "0.0", "1534614335.345903"]]},
                {"b": [["5541.1", "1.0", "1534614335.345904"]]},
                "book-10",
                "XBT/USD",
            ],
        )
        assert snapshot.is_snapshot
        assert not update.is_snapshot
        assert update.asks == [level("5541.3", "0")]
        assert update.bids == [level("5541.1", "1.0")]

    def test_kraken_trades(self) -> None:
        """Every entry of a trade frame is a trade."""
        mapper = TRADE_MAPPERS[Exchange.KRAKEN](Exchange.KRAKEN)
        trades = run(
            mapper,
            [
                0,
                [
                    ["5541.2", "0.15", "1534614057.321597", "s", "l", ""],
                    ["6060.0", "0.02", "1534614057.324998", "b", "l", ""],
                ],
                "trade",
                "XBT/USD",
            ],
        )
        assert [t.side for t in trades] == [TradeSide.SELL, TradeSide.BUY]

    def test_ftx_partial_is_snapshot(self) -> None:
        """The ``partial`` orderbook message is the snapshot."""
        mapper = BOOK_CHANGE_MAPPERS[Exchange.FTX](Exchange.FTX)
        [change] = run(
            mapper,
            {
                "channel": "orderbook",
                "market": "BTC-PERP",
                "type": "partial",
                "data": {
                    "time": 1564790400.1234,
                    "bids": [[10000.0, 1.0]],
                    "asks": [[10001.0, 2.0]],
                    "action": "partial",
                },
            },
        )
        assert change.is_snapshot
        assert change.asks == [level("10001.0", "2.0")]

    def test_gemini_first_update_is_snapshot(self) -> None:
        """The first l2_updates message per symbol holds the full book."""
        mapper = BOOK_CHANGE_MAPPERS[Exchange.GEMINI](Exchange.GEMINI)
        message = {
            "type": "l2_updates",
            "symbol": "BTCUSD",
            "changes": [["buy", "9122.04", "0.00121425"], ["sell", "9122.07", "0"]],
        }
        first, second = run(mapper, message, message)
        assert first.is_snapshot
        assert not second.is_snapshot
        assert isinstance(first, BookChange)
        assert first.bids == [level("9122.04", "0.00121425")]
        assert first.asks == [level("9122.07", "0")]

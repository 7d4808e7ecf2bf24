#!/usr/bin/env python3
"""Replay captured market data to stdout."""

import argparse
import asyncio
import json
import logging

from dotenv import load_dotenv

from src.replay import (
    ReplayClient,
    normalize_book_changes,
    normalize_derivative_tickers,
    normalize_trades,
)
from src.replay.config import ReplayConfig
from src.replay.log import configure_logging

logger = logging.getLogger(__name__)

NORMALIZERS = {
    "trades": normalize_trades,
    "book_changes": normalize_book_changes,
    "derivative_tickers": normalize_derivative_tickers,
}


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("exchange")
    parser.add_argument("from_", metavar="from", help="inclusive UTC start")
    parser.add_argument("to", help="exclusive UTC end")
    parser.add_argument("--channel", action="append", default=[])
    parser.add_argument("--symbol", action="append", default=[])
    parser.add_argument(
        "--normalize",
        action="append",
        choices=sorted(NORMALIZERS),
        help="emit normalized events instead of raw messages",
    )
    parser.add_argument("--with-disconnects", action="store_true")
    parser.add_argument("--limit", type=int, default=None)
    return parser.parse_args()


async def main() -> None:
    """Run one replay and print every item as a JSON line."""
    args = parse_args()
    config = ReplayConfig.from_env()
    configure_logging(config)

    async with ReplayClient(config) as client:
        if args.normalize:
            stream = client.replay_normalized(
                args.exchange,
                args.from_,
                args.to,
                *(NORMALIZERS[name] for name in args.normalize),
                symbols=args.symbol or None,
                with_disconnect_messages=args.with_disconnects,
            )
        else:
            stream = client.replay(
                args.exchange,
                args.from_,
                args.to,
                filters=[
                    {"channel": channel, "symbols": args.symbol or None}
                    for channel in args.channel
                ],
                with_disconnects=args.with_disconnects,
            )

        count = 0
        async with stream:
            async for item in stream:
                logger.debug(item.to_log_entry())
                if args.normalize:
                    print(item.model_dump_json())
                else:
                    print(
                        json.dumps(
                            {
                                "localTimestamp": item.local_timestamp.isoformat(),
                                "message": item.message,
                            }
                        )
                    )
                count += 1
                if args.limit is not None and count >= args.limit:
                    break
        logger.info(f"Replayed {count} item(s) from {args.exchange}")


if __name__ == "__main__":
    load_dotenv()
    asyncio.run(main())

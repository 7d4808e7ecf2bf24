"""Domain primitives for market data replay."""

from src.replay.domain.timestamps import (
    day_start,
    iter_days,
    parse_local_timestamp,
    parse_request_datetime,
)

__all__ = [
    "day_start",
    "iter_days",
    "parse_local_timestamp",
    "parse_request_datetime",
]

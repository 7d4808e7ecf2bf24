"""
Timestamp primitives for replay requests and captured frames.

Request dates accept a small set of textual forms and are always interpreted
as UTC. Captured frames carry an ISO-8601 local timestamp with up to seven
fractional digits, which is truncated to microsecond precision.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from datetime import UTC, date, datetime, time, timedelta

_REQUEST_DATE_PATTERN = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})"
    r"(?:[ T](?P<time>\d{2}:\d{2}(?::\d{2}(?:\.(?P<fraction>\d+))?)?))?"
    r"(?P<offset>Z|[+-]\d{2}:?\d{2})?$"
)

ONE_DAY = timedelta(days=1)


def parse_request_datetime(value: str | datetime | date) -> datetime:
    """
    Parse a replay request boundary into an aware UTC datetime.

    Accepted forms are ``YYYY-MM-DD`` optionally followed by `` HH:MM``,
    `` HH:MM:SS`` or `` HH:MM:SS.fff`` (space or ``T`` separated). A ``Z``
    suffix is accepted and changes nothing; naive values are UTC.

    Args:
        value: Date string, datetime or date

    Returns:
        Timezone-aware datetime in UTC

    Raises:
        ValueError: If the value is not one of the accepted forms

    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
    if isinstance(value, date):
        return datetime.combine(value, time(), tzinfo=UTC)
    if not isinstance(value, str):
        raise ValueError(f"Invalid date: {value!r}")

    match = _REQUEST_DATE_PATTERN.match(value.strip())
    if match is None:
        raise ValueError(f"Invalid date: {value!r}")

    text = match.group("date")
    if match.group("time"):
        clock = match.group("time")
        fraction = match.group("fraction")
        if fraction and len(fraction) > 6:
            clock = clock[: len(clock) - len(fraction)] + fraction[:6]
        text = f"{text}T{clock}"

    offset = match.group("offset")
    if offset and offset != "Z":
        text += offset

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(f"Invalid date: {value!r}") from None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def parse_local_timestamp(raw: bytes | str) -> datetime:
    """
    Parse the capture timestamp prefix of a segment line.

    Args:
        raw: ISO-8601 timestamp such as ``2019-05-01T00:00:00.1234567Z``

    Returns:
        Timezone-aware datetime in UTC

    """
    text = raw.decode("ascii") if isinstance(raw, bytes) else raw
    if text.endswith("Z"):
        text = text[:-1]
    dot = text.find(".")
    if dot != -1 and len(text) - dot > 7:
        text = text[: dot + 7]
    return datetime.fromisoformat(text).replace(tzinfo=UTC)


def parse_exchange_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp embedded in an exchange message."""
    return parse_local_timestamp(value.replace("+00:00", ""))


def from_milliseconds(value: int | float) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    return datetime.fromtimestamp(value / 1000, tz=UTC)


def from_microseconds(value: int | str) -> datetime:
    """Convert epoch microseconds to an aware UTC datetime."""
    micros = int(value)
    return datetime(1970, 1, 1, tzinfo=UTC) + timedelta(microseconds=micros)


def from_seconds(value: int | float | str) -> datetime:
    """Convert epoch seconds (possibly fractional) to an aware UTC datetime."""
    return datetime.fromtimestamp(float(value), tz=UTC)


def day_start(day: date) -> datetime:
    """Get midnight UTC of a calendar day."""
    return datetime.combine(day, time(), tzinfo=UTC)


def iter_days(start: datetime, end: datetime) -> Iterator[date]:
    """
    Enumerate the UTC calendar days spanned by ``[start, end)``.

    Args:
        start: Inclusive start instant
        end: Exclusive end instant

    Yields:
        Each UTC date touched by the range, ascending

    """
    if start >= end:
        return
    current = start.astimezone(UTC).date()
    last = (end.astimezone(UTC) - timedelta(microseconds=1)).date()
    while current <= last:
        yield current
        current += ONE_DAY

"""
Error taxonomy for the replay engine.

Every error surfaces to the consumer at the step that would have produced
the next item of a replay. Nothing here is ever swallowed by the engine.
"""

from datetime import datetime
from typing import Any


class ReplayError(Exception):
    """Base class for all replay engine errors."""


class ValidationError(ReplayError, ValueError):
    """
    Invalid replay request.

    Raised before any I/O for an unknown exchange, unparseable or misordered
    dates, a channel the exchange does not publish, or a normalizer that does
    not support the exchange.
    """


class FetchError(ReplayError):
    """
    Segment could not be obtained from the archive.

    Attributes:
        status: HTTP-like status code reported by the archive, if any

    """

    def __init__(self, message: str, status: int | None = None) -> None:
        """Initialize with a message and an optional status code."""
        super().__init__(message)
        self.status = status


class AuthorizationError(FetchError):
    """Archive denied access to a segment. Fatal to the current replay."""

    def __init__(self, message: str, status: int) -> None:
        """Initialize with the denial status code (e.g. 401 or 403)."""
        super().__init__(message, status=status)


class SegmentNotFoundError(FetchError):
    """Archive has no segment for the requested key (day treated as empty)."""

    def __init__(self, message: str, status: int | None = 404) -> None:
        """Initialize with a message and the not-found status."""
        super().__init__(message, status=status)


class TransientFetchError(FetchError):
    """I/O failure from the archive not related to authorization."""


class NormalizationError(ReplayError):
    """
    A normalizer failed to map a raw message.

    Fatal to the whole normalized replay.

    Attributes:
        exchange: Exchange identifier of the message
        local_timestamp: Capture time of the failing message
        raw_message: The exchange-native message that failed

    """

    def __init__(
        self,
        message: str,
        exchange: str,
        local_timestamp: datetime,
        raw_message: Any,
    ) -> None:
        """Initialize with the failing message context."""
        super().__init__(message)
        self.exchange = exchange
        self.local_timestamp = local_timestamp
        self.raw_message = raw_message

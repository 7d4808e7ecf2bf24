"""Segment key model."""

from datetime import date
from pathlib import PurePosixPath

from pydantic import BaseModel, ConfigDict

from src.replay.enums import Exchange


class SegmentKey(BaseModel):
    """
    Identity of one stored segment.

    A segment holds every captured frame of one exchange for one UTC day,
    optionally restricted to a single channel partition.
    """

    exchange: Exchange
    day: date
    partition: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def relative_path(self) -> PurePosixPath:
        """Get the cache-relative path of this segment."""
        partition = (self.partition or "all").replace("/", "_")
        return PurePosixPath(
            "feeds",
            self.exchange.value,
            partition,
            f"{self.day.isoformat()}.json.gz",
        )

    def __str__(self) -> str:
        """Format as exchange/day[/partition]."""
        suffix = f"/{self.partition}" if self.partition else ""
        return f"{self.exchange.value}/{self.day.isoformat()}{suffix}"

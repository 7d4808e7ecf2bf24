"""
Raw replay message model.

A replay message pairs one captured frame with the time the capturing
process received it. In decoded mode ``message`` is the exchange-native
JSON value; in skip-decoding mode it is the original frame bytes. A
``None`` message marks a gap in captured continuity (disconnect marker).
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ReplayMessage(BaseModel):
    """Single item of a raw replay."""

    message: Any = Field(description="Decoded message, raw frame bytes or None")
    local_timestamp: datetime = Field(description="Capture receive time (UTC)")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def of(cls, message: Any, local_timestamp: datetime) -> "ReplayMessage":
        """Build a message without re-validating already parsed fields."""
        return cls.model_construct(message=message, local_timestamp=local_timestamp)

    @property
    def is_disconnect(self) -> bool:
        """Check whether this item marks a capture gap."""
        return self.message is None

    def to_log_entry(self) -> str:
        """Generate a log-friendly representation."""
        if self.is_disconnect:
            return f"[DISCONNECT] @ {self.local_timestamp.isoformat()}"
        return f"[MESSAGE] @ {self.local_timestamp.isoformat()}"

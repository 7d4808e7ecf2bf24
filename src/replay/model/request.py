"""
Replay request models.

Requests are validated once, before any I/O, and are immutable afterwards.
Pydantic validation failures are surfaced as the engine's ValidationError
so callers deal with a single error type for malformed requests.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from src.replay.channels import channels_for
from src.replay.domain.timestamps import parse_request_datetime
from src.replay.enums import Exchange
from src.replay.errors import ValidationError


class Filter(BaseModel):
    """
    Channel and optional symbol restriction for a replay.

    A message matches when its channel equals ``channel`` and either no
    symbols are given or its symbol is one of them (case-insensitive).
    """

    channel: str
    symbols: tuple[str, ...] | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("symbols", mode="before")
    @classmethod
    def normalize_symbols(cls, v: Iterable[str] | None) -> tuple[str, ...] | None:
        """Store symbols upper-cased, dropping an empty list to mean 'all'."""
        if v is None:
            return None
        if isinstance(v, str):
            v = [v]
        symbols = tuple(dict.fromkeys(s.upper() for s in v))
        return symbols or None

    def matches(self, channel: str | None, symbol: str | None) -> bool:
        """Check whether a message with this channel and symbol passes."""
        if channel != self.channel:
            return False
        if self.symbols is None:
            return True
        return symbol is not None and symbol.upper() in self.symbols


class ReplayWindow(BaseModel):
    """Exchange and UTC time range shared by all replay requests."""

    exchange: Exchange
    from_: datetime = Field(alias="from")
    to: datetime

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("exchange", mode="before")
    @classmethod
    def validate_exchange(cls, v: str | Exchange) -> Exchange:
        """Reject exchanges outside the supported enumeration."""
        return Exchange.parse(v)

    @field_validator("from_", "to", mode="before")
    @classmethod
    def validate_datetime(cls, v: str | datetime | date) -> datetime:
        """Parse accepted date forms as UTC."""
        return parse_request_datetime(v)

    @model_validator(mode="after")
    def validate_range(self) -> Self:
        """Ensure the range is non-empty."""
        if self.from_ >= self.to:
            raise ValueError(
                f"Invalid range: 'from' ({self.from_.isoformat()}) must be "
                f"before 'to' ({self.to.isoformat()})"
            )
        return self

    @classmethod
    def create(cls, **data: Any) -> Self:
        """
        Validate request data, raising the engine's ValidationError.

        Args:
            **data: Request fields (``from`` may be passed as ``from_``)

        Returns:
            Validated, immutable request

        Raises:
            ValidationError: If any field or cross-field invariant fails

        """
        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'request'}: {err['msg']}"
                for err in e.errors()
            )
            raise ValidationError(f"Invalid {cls.__name__}: {details}") from e


class ReplayRequest(ReplayWindow):
    """
    Raw replay request.

    Filters are applied in both decoded and skip-decoding modes.
    """

    filters: tuple[Filter, ...] = ()
    skip_decoding: bool = False
    with_disconnects: bool = False

    @model_validator(mode="after")
    def validate_channels(self) -> Self:
        """Ensure every filter names a channel the exchange publishes."""
        available = channels_for(self.exchange)
        for f in self.filters:
            if f.channel not in available:
                raise ValueError(
                    f"Invalid channel {f.channel!r} for exchange "
                    f"{self.exchange.value}. Available channels: "
                    f"{', '.join(sorted(available))}"
                )
        return self

    @property
    def filter_channels(self) -> list[str]:
        """Get the distinct filtered channels in filter order."""
        return list(dict.fromkeys(f.channel for f in self.filters))

    def accepts(self, channel: str | None, *symbols: str) -> bool:
        """
        Check whether a message passes at least one filter.

        A message carrying data for several symbols passes when any of them
        matches.
        """
        if not self.filters:
            return True
        candidates: tuple[str | None, ...] = symbols or (None,)
        return any(
            f.matches(channel, symbol) for f in self.filters for symbol in candidates
        )


class ReplayNormalizedRequest(ReplayWindow):
    """
    Normalized replay request.

    Raw filters are derived from the registered normalizers, restricted to
    ``symbols`` when given.
    """

    symbols: tuple[str, ...] | None = None
    with_disconnect_messages: bool = False

    @field_validator("symbols", mode="before")
    @classmethod
    def normalize_symbols(cls, v: Iterable[str] | None) -> tuple[str, ...] | None:
        """Store symbols upper-cased, treating an empty list as 'all'."""
        if v is None:
            return None
        if isinstance(v, str):
            v = [v]
        return tuple(dict.fromkeys(s.upper() for s in v)) or None

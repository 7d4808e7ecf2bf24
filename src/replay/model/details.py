"""
Exchange catalog models.

Parsed from the catalog service's camelCase JSON. Read-only guidance for
callers choosing valid replay ranges; never used to gate a replay.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.replay.domain.timestamps import parse_request_datetime


def _to_camel(name: str) -> str:
    head, *tail = name.split("_")
    return head + "".join(part.capitalize() for part in tail)


class SymbolDetails(BaseModel):
    """Archived history availability for one symbol."""

    id: str
    type: str | None = None
    available_since: datetime
    available_to: datetime | None = None

    model_config = ConfigDict(
        frozen=True, alias_generator=_to_camel, populate_by_name=True, extra="ignore"
    )

    def is_available_at(self, moment: str | datetime) -> bool:
        """Check whether history exists at the given instant."""
        moment = parse_request_datetime(moment)
        if moment < self.available_since:
            return False
        return self.available_to is None or moment < self.available_to


class ExchangeDetails(BaseModel):
    """Per-exchange metadata supplied by the catalog."""

    id: str
    name: str = ""
    enabled: bool = True
    available_since: datetime | None = None
    available_channels: list[str] = Field(default_factory=list)
    available_symbols: list[SymbolDetails] = Field(default_factory=list)

    model_config = ConfigDict(
        frozen=True, alias_generator=_to_camel, populate_by_name=True, extra="ignore"
    )

    def get_symbol(self, symbol_id: str) -> SymbolDetails | None:
        """Find symbol details by id (case-insensitive)."""
        wanted = symbol_id.upper()
        for symbol in self.available_symbols:
            if symbol.id.upper() == wanted:
                return symbol
        return None

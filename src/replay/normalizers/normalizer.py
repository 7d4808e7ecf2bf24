"""
Exchange-dispatching normalizers.

A normalizer is a named factory of mappers. Each call to ``mapper_for``
returns a fresh mapper so per-symbol state never leaks between replays or
across a disconnect.
"""

from collections.abc import Iterable

from src.replay.adapters import (
    BOOK_CHANGE_MAPPERS,
    DERIVATIVE_TICKER_MAPPERS,
    TRADE_MAPPERS,
    BaseMapper,
)
from src.replay.enums import Exchange
from src.replay.errors import ValidationError


class ExchangeNormalizer:
    """Normalizer backed by a per-exchange mapper registry."""

    def __init__(self, name: str, mappers: dict[Exchange, type[BaseMapper]]) -> None:
        """
        Initialize the normalizer.

        Args:
            name: Name used in logs and error messages
            mappers: Mapper class for each supported exchange

        """
        self.name = name
        self._mappers = mappers

    def supports(self, exchange: Exchange) -> bool:
        """Check whether this normalizer handles the exchange."""
        return exchange in self._mappers

    def mapper_for(
        self, exchange: Exchange, symbols: Iterable[str] | None = None
    ) -> BaseMapper:
        """
        Create a new mapper with empty state for the exchange.

        Args:
            exchange: Exchange to map
            symbols: Symbols the mapper emits events for; None means all

        Raises:
            ValidationError: If the exchange is not supported

        """
        if not self.supports(exchange):
            raise ValidationError(
                f"{self.name} does not support exchange {exchange.value}"
            )
        return self._mappers[exchange](exchange, symbols)

    def __repr__(self) -> str:
        """Show the normalizer name."""
        return f"ExchangeNormalizer({self.name!r})"


normalize_trades = ExchangeNormalizer("normalize_trades", TRADE_MAPPERS)
normalize_book_changes = ExchangeNormalizer(
    "normalize_book_changes", BOOK_CHANGE_MAPPERS
)
normalize_derivative_tickers = ExchangeNormalizer(
    "normalize_derivative_tickers", DERIVATIVE_TICKER_MAPPERS
)

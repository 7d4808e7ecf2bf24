"""
Exchange catalog access.

The supported exchange list is static. Exchange details come from the
catalog service and are cached for the lifetime of the catalog instance.
"""

import asyncio
import logging

from src.replay.enums import EXCHANGES, Exchange
from src.replay.errors import ValidationError
from src.replay.model.details import ExchangeDetails
from src.replay.protocols.replay import CatalogClient

logger = logging.getLogger(__name__)


def list_supported_exchanges() -> list[str]:
    """Get the supported exchange identifiers in declaration order."""
    return [exchange.value for exchange in EXCHANGES]


class ExchangeCatalog:
    """Read-through cache in front of a catalog client."""

    def __init__(self, client: CatalogClient) -> None:
        """
        Initialize the catalog.

        Args:
            client: Catalog service client

        """
        self.client = client
        self._details: dict[Exchange, ExchangeDetails] = {}
        self._lock = asyncio.Lock()

    def list_supported_exchanges(self) -> list[str]:
        """Get the supported exchange identifiers in declaration order."""
        return list_supported_exchanges()

    async def get_exchange_details(self, exchange: str | Exchange) -> ExchangeDetails:
        """
        Get the details of one exchange.

        Args:
            exchange: Exchange identifier

        Returns:
            Exchange details as reported by the catalog service

        Raises:
            ValidationError: If the exchange is not supported
            FetchError: If the catalog service cannot be reached

        """
        try:
            parsed = Exchange.parse(exchange)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        async with self._lock:
            details = self._details.get(parsed)
            if details is None:
                details = await self.client.fetch_exchange_details(parsed)
                self._details[parsed] = details
                logger.debug(f"Cached exchange details for {parsed.value}")
        return details

"""
HTTP archive client.

Downloads compressed segments and exchange details from the archive API
with ``httpx``. Status codes are mapped onto the engine's fetch errors;
retrying is left to the caller.
"""

import logging

import httpx

from src.replay.config import FetchConfig
from src.replay.enums import Exchange
from src.replay.errors import (
    AuthorizationError,
    SegmentNotFoundError,
    TransientFetchError,
)
from src.replay.model.details import ExchangeDetails
from src.replay.model.segment import SegmentKey

logger = logging.getLogger(__name__)


def raise_for_status(response: httpx.Response, what: str) -> None:
    """
    Map an unsuccessful archive response to a fetch error.

    Args:
        response: Archive response
        what: Description of the requested resource for error messages

    Raises:
        AuthorizationError: On 401 or 403
        SegmentNotFoundError: On 404
        TransientFetchError: On any other error status

    """
    status = response.status_code
    if status < 400:
        return
    if status in (401, 403):
        logger.error(f"Archive denied access to {what} (HTTP {status})")
        raise AuthorizationError(f"Access to {what} denied (HTTP {status})", status)
    if status == 404:
        raise SegmentNotFoundError(f"{what} not found", status)
    raise TransientFetchError(f"Fetching {what} failed (HTTP {status})", status)


class ArchiveHttpClient:
    """
    Base for clients of the archive API.

    Owns its ``httpx.AsyncClient`` unless one is supplied.
    """

    def __init__(
        self, config: FetchConfig, client: httpx.AsyncClient | None = None
    ) -> None:
        """
        Initialize the client.

        Args:
            config: Archive URL, API key and timeout
            client: Optional preconfigured client (e.g. for tests)

        """
        self.config = config
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the HTTP client, creating it on first use."""
        if self._client is None:
            headers: dict[str, str] = {}
            if self.config.api_key:
                headers["Authorization"] = f"Bearer {self.config.api_key}"
            self._client = httpx.AsyncClient(
                base_url=self.config.api_url,
                headers=headers,
                timeout=self.config.timeout_seconds,
            )
        return self._client

    async def _get(
        self, path: str, what: str, params: dict[str, str] | None = None
    ) -> httpx.Response:
        try:
            response = await self.client.get(path, params=params)
        except httpx.HTTPError as e:
            raise TransientFetchError(f"Fetching {what} failed: {e}") from e
        raise_for_status(response, what)
        return response

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None


class HttpSegmentFetcher(ArchiveHttpClient):
    """Fetches segments from ``GET /data-feeds/<exchange>/<date>``."""

    async def fetch(self, key: SegmentKey) -> bytes:
        """
        Download the compressed bytes of one segment.

        Raises:
            AuthorizationError: If the API key is missing or not entitled
            SegmentNotFoundError: If no capture exists for the key
            TransientFetchError: On any other failure

        """
        params = {"channel": key.partition} if key.partition else None
        what = f"segment {key}"
        logger.debug(f"Fetching {what}")
        try:
            # Raw bytes: a gzip Content-Encoding must not be undone
            async with self.client.stream(
                "GET",
                f"/data-feeds/{key.exchange.value}/{key.day.isoformat()}",
                params=params,
            ) as response:
                raise_for_status(response, what)
                data = b"".join([chunk async for chunk in response.aiter_raw()])
        except httpx.HTTPError as e:
            raise TransientFetchError(f"Fetching {what} failed: {e}") from e
        logger.debug(f"Fetched {what} ({len(data)} bytes)")
        return data


class HttpCatalogClient(ArchiveHttpClient):
    """Fetches exchange details from ``GET /exchanges/<exchange>``."""

    async def fetch_exchange_details(self, exchange: Exchange) -> ExchangeDetails:
        """Download and parse the details of one exchange."""
        logger.debug(f"Fetching exchange details for {exchange.value}")
        response = await self._get(
            f"/exchanges/{exchange.value}", what=f"exchange {exchange.value}"
        )
        return ExchangeDetails.model_validate(response.json())

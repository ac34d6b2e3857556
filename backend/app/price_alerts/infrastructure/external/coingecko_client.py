"""CoinGecko REST API client for fetching spot prices.

CoinGecko API documentation: https://docs.coingecko.com/reference/simple-price
Uses the ``/simple/price`` endpoint, which prices many coin ids in one call.
Public (demo) plan rate limit: roughly 30 calls/minute, which is why prices
go through the TTL cache before reaching this client.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Optional

import httpx

from app.price_alerts.application.exceptions import UpstreamError
from app.price_alerts.application.interfaces.price_source import PriceSource

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.coingecko.com/api/v3"

# Default timeout for HTTP requests; the fetcher applies its own, shorter bound
DEFAULT_TIMEOUT_SECONDS = 10.0


class CoinGeckoClient(PriceSource):
    """CoinGecko REST API client implementing the PriceSource interface.

    Every failure mode (transport error, timeout, non-2xx status, body that
    is not a JSON object) raises ``UpstreamError``. Per-asset gaps in the
    payload are left for the caller to interpret.

    Attributes:
        _client: httpx AsyncClient for making HTTP requests.
        _base_url: CoinGecko API base URL.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        api_key: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize the CoinGecko client.

        Args:
            base_url: CoinGecko API base URL.
            api_key: Optional demo API key, sent as ``x-cg-demo-api-key``.
            timeout: HTTP request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        self._base_url = base_url.rstrip("/")
        headers = {"Accept": "application/json"}
        if api_key:
            headers["x-cg-demo-api-key"] = api_key

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

    @property
    def source_name(self) -> str:
        """Return the source name."""
        return "CoinGecko"

    async def fetch_prices(
        self, asset_ids: Sequence[str], quote_currency: str
    ) -> Mapping[str, Any]:
        """Fetch ``{id: {currency: price}}`` for the given coin ids.

        Args:
            asset_ids: CoinGecko coin ids (e.g., "bitcoin", "solana").
            quote_currency: Quote currency (e.g., "usd").

        Returns:
            The decoded response body.

        Raises:
            UpstreamError: If the request fails or the body is not an object.
        """
        if not asset_ids:
            return {}

        params = {"ids": ",".join(asset_ids), "vs_currencies": quote_currency}

        try:
            response = await self._client.get("/simple/price", params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            raise UpstreamError(f"Timeout fetching CoinGecko prices: {e}") from e
        except httpx.HTTPStatusError as e:
            raise UpstreamError(
                f"HTTP error fetching CoinGecko prices: {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"Error reaching CoinGecko: {e}") from e
        except ValueError as e:
            raise UpstreamError(f"Error parsing CoinGecko response: {e}") from e

        if not isinstance(data, dict):
            raise UpstreamError(
                f"Unexpected CoinGecko response type: {type(data).__name__}"
            )

        logger.debug(f"CoinGecko returned prices for {len(data)} of {len(asset_ids)} ids")
        return data

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "CoinGeckoClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

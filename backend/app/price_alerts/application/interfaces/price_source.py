"""Price source interface for fetching raw quotes from an external price API."""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any


class PriceSource(ABC):
    """Abstract base class for external price APIs.

    Implementations return the upstream payload in the shape
    ``{asset_id: {quote_currency: price}}`` and leave interpretation of
    individual entries to the caller.
    """

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Return the name of this price source."""
        ...

    @abstractmethod
    async def fetch_prices(
        self, asset_ids: Sequence[str], quote_currency: str
    ) -> Mapping[str, Any]:
        """Fetch current prices for the given assets.

        Args:
            asset_ids: Normalized, de-duplicated asset identifiers.
            quote_currency: Lower-case quote currency (e.g., "usd").

        Returns:
            Mapping of asset id to a mapping of currency to price.

        Raises:
            UpstreamError: On network failure, non-2xx status or a body that
                is not a JSON object.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""
        ...

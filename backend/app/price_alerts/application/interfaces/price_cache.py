"""Price cache interface bounding how often the price source is called."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from app.price_alerts.domain.entities.price_snapshot import PriceSnapshot


@dataclass(frozen=True)
class CacheEntry:
    """Last known price of one asset.

    Attributes:
        price: Cached price.
        stored_at: Clock reading (seconds) when the entry was written.
        ttl_seconds: Freshness window.
    """

    price: Decimal
    stored_at: float
    ttl_seconds: float

    def is_fresh(self, now: float) -> bool:
        """An entry is fresh iff ``now - stored_at < ttl``."""
        return now - self.stored_at < self.ttl_seconds


class PriceCache(ABC):
    """Abstract TTL-bounded store of last-known prices.

    The cache is an optimization, never a source of truth: callers treat
    ``CacheUnavailableError`` as a total miss.
    """

    @abstractmethod
    async def get(self, asset_ids: Iterable[str]) -> PriceSnapshot:
        """Return a partial snapshot holding only fresh entries.

        Raises:
            CacheUnavailableError: If the backend cannot be reached.
        """
        ...

    @abstractmethod
    async def put(self, snapshot: PriceSnapshot, ttl_seconds: int) -> None:
        """Store every price of the snapshot, overwriting existing entries.

        Raises:
            CacheUnavailableError: If the backend cannot be reached.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release backend connections."""
        ...

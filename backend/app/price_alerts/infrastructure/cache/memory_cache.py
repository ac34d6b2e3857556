"""In-process implementation of the PriceCache interface."""

import time
from collections.abc import Callable, Iterable

from app.price_alerts.application.interfaces.price_cache import CacheEntry, PriceCache
from app.price_alerts.domain.entities.price_snapshot import PriceSnapshot
from app.price_alerts.domain.value_objects.asset_id import normalize_asset_id


class MemoryPriceCache(PriceCache):
    """Dictionary-backed price cache.

    Only the alert cycle writes to it and cycles never overlap, so no lock
    is taken. Stale entries are dropped lazily on read.

    Attributes:
        _entries: Cache entries keyed by normalized asset id.
        _clock: Monotonic clock in seconds (injectable for tests).
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._clock = clock

    async def get(self, asset_ids: Iterable[str]) -> PriceSnapshot:
        """Return fresh entries for the requested assets."""
        now = self._clock()
        prices = {}
        for raw in asset_ids:
            asset_id = normalize_asset_id(raw)
            entry = self._entries.get(asset_id)
            if entry is None:
                continue
            if entry.is_fresh(now):
                prices[asset_id] = entry.price
            else:
                del self._entries[asset_id]
        return PriceSnapshot(prices=prices)

    async def put(self, snapshot: PriceSnapshot, ttl_seconds: int) -> None:
        """Store every price of the snapshot (last writer wins)."""
        now = self._clock()
        for asset_id, price in snapshot.prices.items():
            self._entries[asset_id] = CacheEntry(
                price=price, stored_at=now, ttl_seconds=ttl_seconds
            )

    async def close(self) -> None:
        self._entries.clear()

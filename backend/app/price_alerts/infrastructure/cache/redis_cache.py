"""Redis implementation of the PriceCache interface.

Each asset lives under its own key (``price:<asset>``) holding
``{"price": "<decimal>", "ts": <epoch seconds>}`` and written with
``SET ... EX ttl``, so Redis expires entries on its own.
"""

import json
import logging
import time
from collections.abc import Callable, Iterable
from decimal import Decimal, InvalidOperation
from typing import Optional

import redis.asyncio as aioredis
from redis.asyncio import Redis
from redis.exceptions import RedisError

from app.price_alerts.application.exceptions import CacheUnavailableError
from app.price_alerts.application.interfaces.price_cache import CacheEntry, PriceCache
from app.price_alerts.domain.entities.price_snapshot import PriceSnapshot
from app.price_alerts.domain.value_objects.asset_id import distinct_asset_ids

logger = logging.getLogger(__name__)

DEFAULT_KEY_PREFIX = "price:"


class RedisPriceCache(PriceCache):
    """Price cache shared through Redis.

    Attributes:
        _redis: Async Redis client (``decode_responses=True``).
        _key_prefix: Namespace for price keys.
        _clock: Wall clock in epoch seconds, used for the freshness check.
    """

    def __init__(
        self,
        client: Redis,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._redis = client
        self._key_prefix = key_prefix
        self._clock = clock

    @classmethod
    def from_url(cls, url: str, key_prefix: str = DEFAULT_KEY_PREFIX) -> "RedisPriceCache":
        """Create a cache connected to the Redis server at ``url``."""
        client = aioredis.from_url(url, encoding="utf-8", decode_responses=True)
        return cls(client, key_prefix=key_prefix)

    def _key(self, asset_id: str) -> str:
        return f"{self._key_prefix}{asset_id}"

    async def get(self, asset_ids: Iterable[str]) -> PriceSnapshot:
        """Read fresh prices with a single MGET."""
        ids = distinct_asset_ids(asset_ids)
        if not ids:
            return PriceSnapshot()

        try:
            values = await self._redis.mget([self._key(a) for a in ids])
        except RedisError as e:
            raise CacheUnavailableError(str(e)) from e

        now = self._clock()
        prices: dict[str, Decimal] = {}
        for asset_id, raw in zip(ids, values):
            if raw is None:
                continue
            entry = self._decode(asset_id, raw)
            if entry is not None and entry.is_fresh(now):
                prices[asset_id] = entry.price
        return PriceSnapshot(prices=prices)

    async def put(self, snapshot: PriceSnapshot, ttl_seconds: int) -> None:
        """Write every price in one pipeline."""
        if snapshot.is_empty:
            return

        now = self._clock()
        pipe = self._redis.pipeline(transaction=False)
        for asset_id, price in snapshot.prices.items():
            value = json.dumps({"price": str(price), "ts": now, "ttl": ttl_seconds})
            pipe.set(self._key(asset_id), value, ex=ttl_seconds)

        try:
            await pipe.execute()
        except RedisError as e:
            raise CacheUnavailableError(str(e)) from e

    async def close(self) -> None:
        await self._redis.aclose()

    def _decode(self, asset_id: str, raw: str) -> Optional[CacheEntry]:
        try:
            data = json.loads(raw)
            return CacheEntry(
                price=Decimal(data["price"]),
                stored_at=float(data["ts"]),
                ttl_seconds=float(data["ttl"]),
            )
        except (ValueError, TypeError, KeyError, InvalidOperation) as e:
            logger.warning(f"Ignoring unreadable cache entry for {asset_id}: {e}")
            return None

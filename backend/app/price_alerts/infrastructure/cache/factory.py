"""Select the price cache backend from settings."""

import logging

from app.core.config import Settings
from app.price_alerts.application.interfaces.price_cache import PriceCache
from app.price_alerts.infrastructure.cache.memory_cache import MemoryPriceCache
from app.price_alerts.infrastructure.cache.redis_cache import RedisPriceCache

logger = logging.getLogger(__name__)


def create_price_cache(settings: Settings) -> PriceCache:
    """Build the configured cache backend ("memory" or "redis")."""
    if settings.cache_backend == "redis":
        logger.info("Using Redis price cache")
        return RedisPriceCache.from_url(str(settings.redis_url))

    logger.info("Using in-memory price cache")
    return MemoryPriceCache()

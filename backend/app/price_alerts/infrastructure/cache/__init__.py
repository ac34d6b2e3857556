# Price cache backends - in-process memory and Redis

from .factory import create_price_cache
from .memory_cache import MemoryPriceCache
from .redis_cache import RedisPriceCache

__all__ = ["MemoryPriceCache", "RedisPriceCache", "create_price_cache"]

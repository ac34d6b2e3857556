# Ports for external integrations (price source, cache, subscribers, rule store)

from .event_publisher import EventPublisher
from .price_cache import CacheEntry, PriceCache
from .price_source import PriceSource
from .rule_store import RuleStoreScope

__all__ = [
    "CacheEntry",
    "EventPublisher",
    "PriceCache",
    "PriceSource",
    "RuleStoreScope",
]

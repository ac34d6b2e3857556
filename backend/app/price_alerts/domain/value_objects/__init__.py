"""Domain value objects for the price alert monitor.

- Price: Quote-currency amounts parsed from upstream payloads
- normalize_asset_id / distinct_asset_ids: Canonical asset identifiers
"""

from app.price_alerts.domain.value_objects.asset_id import (
    distinct_asset_ids,
    normalize_asset_id,
)
from app.price_alerts.domain.value_objects.price import Price, format_amount

__all__ = ["Price", "distinct_asset_ids", "format_amount", "normalize_asset_id"]

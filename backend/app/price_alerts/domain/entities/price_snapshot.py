"""PriceSnapshot entity representing one point-in-time price reading."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from types import MappingProxyType
from typing import Optional

from app.price_alerts.domain.value_objects.asset_id import normalize_asset_id


@dataclass(frozen=True)
class PriceSnapshot:
    """Immutable mapping of asset id to price, plus the capture time.

    Keys are normalized on construction. A new cycle produces a new snapshot;
    ``merge`` and ``restrict_to`` return new instances.

    Attributes:
        prices: Read-only mapping of normalized asset id to price.
        captured_at: UTC timestamp of the reading.
    """

    prices: Mapping[str, Decimal] = field(default_factory=dict)
    captured_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        normalized = {normalize_asset_id(k): v for k, v in self.prices.items()}
        object.__setattr__(self, "prices", MappingProxyType(normalized))

    def __contains__(self, asset_id: object) -> bool:
        return isinstance(asset_id, str) and self.price_for(asset_id) is not None

    @property
    def asset_ids(self) -> frozenset[str]:
        return frozenset(self.prices)

    @property
    def is_empty(self) -> bool:
        return not self.prices

    def price_for(self, asset_id: str) -> Optional[Decimal]:
        """Look up the price of an asset, None when the snapshot lacks it."""
        try:
            key = normalize_asset_id(asset_id)
        except ValueError:
            return None
        return self.prices.get(key)

    def merge(self, other: "PriceSnapshot") -> "PriceSnapshot":
        """Combine two snapshots; ``other`` wins on shared assets.

        The capture time is the later of the two.
        """
        combined = dict(self.prices)
        combined.update(other.prices)
        return PriceSnapshot(
            prices=combined,
            captured_at=max(self.captured_at, other.captured_at),
        )

    def restrict_to(self, asset_ids: Iterable[str]) -> "PriceSnapshot":
        """Return a snapshot holding only the given assets."""
        wanted = {normalize_asset_id(a) for a in asset_ids}
        return PriceSnapshot(
            prices={k: v for k, v in self.prices.items() if k in wanted},
            captured_at=self.captured_at,
        )

    def to_payload(self) -> dict[str, float]:
        """JSON-ready ``{asset: price}`` mapping."""
        return {asset: float(price) for asset, price in sorted(self.prices.items())}

"""Rule entity representing a user's price threshold subscription."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional, Self

from app.price_alerts.domain.value_objects.asset_id import normalize_asset_id


class RuleKind(Enum):
    """Direction of the threshold crossing a rule watches for."""

    ABOVE = "PRICE_ABOVE"
    BELOW = "PRICE_BELOW"

    @classmethod
    def parse(cls, raw: str) -> Self:
        """Parse a kind from its wire value or member name.

        Accepts "PRICE_ABOVE", "above", "ABOVE" and the BELOW equivalents.

        Raises:
            ValueError: If the value names no known kind.
        """
        text = str(raw).strip().upper()
        for kind in cls:
            if text in (kind.value, kind.name):
                return kind
        raise ValueError(f"Unknown rule kind: {raw!r}")

    @property
    def verb(self) -> str:
        """Phrase used in trigger messages."""
        return "rose above" if self is RuleKind.ABOVE else "fell below"


@dataclass
class Rule:
    """Domain entity representing a persisted price threshold rule.

    Attributes:
        id: Database identifier (None for unsaved entities).
        owner_id: Key of the user owning the rule.
        asset_id: Normalized identifier of the watched asset.
        kind: Whether the rule fires above or below the threshold.
        threshold: Price level in the quote currency.
        quote_currency: Currency the threshold is expressed in.
        enabled: Only enabled rules are evaluated.
        created_at: Timestamp when the rule was created.
    """

    id: Optional[int]
    owner_id: str
    asset_id: str
    kind: RuleKind
    threshold: Decimal
    quote_currency: str = "usd"
    enabled: bool = True
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        self.asset_id = normalize_asset_id(self.asset_id)
        if not self.owner_id:
            raise ValueError("Rule owner cannot be empty")
        if not self.threshold.is_finite() or self.threshold <= 0:
            raise ValueError("Threshold must be a positive number")

    def is_crossed_by(self, price: Decimal) -> bool:
        """Check the threshold condition; equality never crosses."""
        if self.kind is RuleKind.ABOVE:
            return price > self.threshold
        return price < self.threshold

    def disable(self) -> None:
        """Stop evaluating the rule."""
        self.enabled = False

    def enable(self) -> None:
        """Resume evaluating the rule."""
        self.enabled = True

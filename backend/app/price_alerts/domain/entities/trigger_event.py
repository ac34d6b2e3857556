"""Firing results: evaluator output, broadcast event and history record."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from app.price_alerts.domain.entities.rule import Rule
from app.price_alerts.domain.value_objects.price import format_amount


def build_trigger_message(rule: Rule) -> str:
    """Human-readable firing message, e.g. ``"bitcoin rose above 50000"``."""
    return f"{rule.asset_id} {rule.kind.verb} {format_amount(rule.threshold)}"


@dataclass(frozen=True)
class FiredRule:
    """A rule whose condition held for a snapshot price.

    Attributes:
        rule: The rule that fired.
        price: Snapshot price that satisfied the condition.
        message: Human-readable description of the crossing.
    """

    rule: Rule
    price: Decimal
    message: str

    def to_event(self) -> "TriggerEvent":
        """Build the broadcastable event for this firing."""
        return TriggerEvent(
            asset_id=self.rule.asset_id,
            price=self.price,
            message=self.message,
            rule_id=self.rule.id,
            owner_id=self.rule.owner_id,
        )


@dataclass(frozen=True)
class TriggerEvent:
    """Immutable event produced exactly once per firing."""

    asset_id: str
    price: Decimal
    message: str
    rule_id: Optional[int]
    owner_id: str
    triggered_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_payload(self) -> dict:
        return {
            "assetId": self.asset_id,
            "price": float(self.price),
            "message": self.message,
            "ruleId": self.rule_id,
        }


@dataclass(frozen=True)
class TriggerRecord:
    """Persisted history row for a rule firing."""

    id: Optional[int]
    rule_id: int
    price: Decimal
    triggered_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

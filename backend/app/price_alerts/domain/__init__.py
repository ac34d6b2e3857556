# Domain layer - pure business rules, no framework dependencies

from app.price_alerts.domain.entities import (
    FiredRule,
    PriceSnapshot,
    Rule,
    RuleKind,
    TriggerEvent,
    TriggerRecord,
)
from app.price_alerts.domain.services import RuleEvaluator
from app.price_alerts.domain.value_objects import Price, normalize_asset_id

__all__ = [
    # Entities
    "Rule",
    "RuleKind",
    "PriceSnapshot",
    "FiredRule",
    "TriggerEvent",
    "TriggerRecord",
    # Services
    "RuleEvaluator",
    # Value objects
    "Price",
    "normalize_asset_id",
]

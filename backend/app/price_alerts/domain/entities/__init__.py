"""Domain entities for the price alert monitor.

This module exports the core business entities used throughout the domain layer.
"""

from app.price_alerts.domain.entities.price_snapshot import PriceSnapshot
from app.price_alerts.domain.entities.rule import Rule, RuleKind
from app.price_alerts.domain.entities.trigger_event import (
    FiredRule,
    TriggerEvent,
    TriggerRecord,
    build_trigger_message,
)

__all__ = [
    "FiredRule",
    "PriceSnapshot",
    "Rule",
    "RuleKind",
    "TriggerEvent",
    "TriggerRecord",
    "build_trigger_message",
]

"""Data transfer objects for application layer."""

from app.price_alerts.application.dto.price_dto import AssetPriceDTO
from app.price_alerts.application.dto.rule_dto import (
    CreateRuleRequest,
    RuleDTO,
    RuleListDTO,
    SubmitRuleRequest,
    TriggerRecordDTO,
    UpdateRuleRequest,
)

__all__ = [
    # Price DTOs
    "AssetPriceDTO",
    # Rule DTOs
    "SubmitRuleRequest",
    "CreateRuleRequest",
    "UpdateRuleRequest",
    "RuleDTO",
    "RuleListDTO",
    "TriggerRecordDTO",
]

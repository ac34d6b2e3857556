"""Application use cases for orchestrating domain logic."""

from app.price_alerts.application.use_cases.manage_rules import (
    GetRuleHistoryUseCase,
    GetRuleUseCase,
    ListRulesUseCase,
    SetRuleEnabledUseCase,
    SubmitRuleUseCase,
)
from app.price_alerts.application.use_cases.run_alert_cycle import (
    CycleResult,
    RunAlertCycleUseCase,
)

__all__ = [
    "RunAlertCycleUseCase",
    "CycleResult",
    "SubmitRuleUseCase",
    "ListRulesUseCase",
    "GetRuleUseCase",
    "SetRuleEnabledUseCase",
    "GetRuleHistoryUseCase",
]

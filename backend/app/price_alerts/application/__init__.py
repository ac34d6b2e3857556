"""Application layer - use cases and orchestration.

This layer contains:
- DTOs: Data Transfer Objects for API and WebSocket payloads
- Interfaces: Ports for the price source, cache, rule store and subscribers
- Services: The price fetcher
- Use Cases: Application services that orchestrate domain logic
- Exceptions: Application-level error types
"""

from app.price_alerts.application.dto import (
    AssetPriceDTO,
    CreateRuleRequest,
    RuleDTO,
    RuleListDTO,
    SubmitRuleRequest,
    TriggerRecordDTO,
    UpdateRuleRequest,
)
from app.price_alerts.application.exceptions import (
    ApplicationError,
    CacheUnavailableError,
    InvalidRuleError,
    RuleNotFoundError,
    StoreError,
    UpstreamError,
)
from app.price_alerts.application.services import PriceFetcher
from app.price_alerts.application.use_cases import (
    CycleResult,
    GetRuleHistoryUseCase,
    GetRuleUseCase,
    ListRulesUseCase,
    RunAlertCycleUseCase,
    SetRuleEnabledUseCase,
    SubmitRuleUseCase,
)

__all__ = [
    # DTOs
    "AssetPriceDTO",
    "SubmitRuleRequest",
    "CreateRuleRequest",
    "UpdateRuleRequest",
    "RuleDTO",
    "RuleListDTO",
    "TriggerRecordDTO",
    # Services
    "PriceFetcher",
    # Use Cases
    "RunAlertCycleUseCase",
    "CycleResult",
    "SubmitRuleUseCase",
    "ListRulesUseCase",
    "GetRuleUseCase",
    "SetRuleEnabledUseCase",
    "GetRuleHistoryUseCase",
    # Exceptions
    "ApplicationError",
    "UpstreamError",
    "StoreError",
    "CacheUnavailableError",
    "RuleNotFoundError",
    "InvalidRuleError",
]

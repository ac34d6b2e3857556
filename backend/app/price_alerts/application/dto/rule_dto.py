"""Data Transfer Objects for rule-related API and WebSocket payloads.

These DTOs represent the external contract for rule operations exposed
through the REST API and the subscriber channel. They are decoupled from
domain entities and use camelCase names on the wire.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.price_alerts.domain.entities.rule import Rule, RuleKind
from app.price_alerts.domain.entities.trigger_event import TriggerRecord
from app.price_alerts.domain.value_objects.asset_id import normalize_asset_id


class SubmitRuleRequest(BaseModel):
    """Rule submission payload (``submit_rule`` event data).

    Accepts ``assetId``/``asset_id``; ``kind`` takes "PRICE_ABOVE",
    "PRICE_BELOW", "above" or "below". Thresholds may arrive as strings.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    asset_id: str = Field(description="Asset to watch (e.g., 'bitcoin')")
    threshold: Decimal = Field(gt=0, description="Price level in the quote currency")
    kind: RuleKind = Field(description="PRICE_ABOVE or PRICE_BELOW")

    @field_validator("asset_id")
    @classmethod
    def _normalize_asset(cls, value: str) -> str:
        return normalize_asset_id(value)

    @field_validator("kind", mode="before")
    @classmethod
    def _parse_kind(cls, value: Any) -> RuleKind:
        if isinstance(value, RuleKind):
            return value
        return RuleKind.parse(value)


class CreateRuleRequest(SubmitRuleRequest):
    """REST request payload for creating a rule on behalf of an owner."""

    owner_id: str = Field(min_length=1, max_length=255, description="Rule owner key")


class UpdateRuleRequest(BaseModel):
    """Request payload for re-enabling or disabling a rule."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    enabled: bool = Field(description="Whether the rule should be evaluated")


class RuleDTO(BaseModel):
    """Rule data for API responses and ``initial_rules`` events."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_encoders={Decimal: lambda v: float(v)},
    )

    id: int = Field(description="Unique rule identifier")
    owner_id: str = Field(description="Rule owner key")
    asset_id: str = Field(description="Watched asset")
    kind: RuleKind = Field(description="Crossing direction")
    threshold: Decimal = Field(description="Price level")
    quote_currency: str = Field(default="usd", description="Threshold currency")
    enabled: bool = Field(description="Whether the rule is evaluated")
    created_at: datetime = Field(description="When the rule was created (UTC)")

    @classmethod
    def from_entity(cls, rule: Rule) -> "RuleDTO":
        return cls(
            id=rule.id,  # type: ignore[arg-type]
            owner_id=rule.owner_id,
            asset_id=rule.asset_id,
            kind=rule.kind,
            threshold=rule.threshold,
            quote_currency=rule.quote_currency,
            enabled=rule.enabled,
            created_at=rule.created_at,
        )


class RuleListDTO(BaseModel):
    """List of rules for API responses."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    rules: list[RuleDTO] = Field(default_factory=list)
    total: int = Field(description="Number of rules returned")


class TriggerRecordDTO(BaseModel):
    """One entry of a rule's trigger history."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_encoders={Decimal: lambda v: float(v)},
    )

    id: int
    rule_id: int
    price: Decimal
    triggered_at: datetime

    @classmethod
    def from_entity(cls, record: TriggerRecord) -> "TriggerRecordDTO":
        return cls(
            id=record.id,  # type: ignore[arg-type]
            rule_id=record.rule_id,
            price=record.price,
            triggered_at=record.triggered_at,
        )

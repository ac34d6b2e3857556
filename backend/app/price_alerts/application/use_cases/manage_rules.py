"""Use cases for creating, listing and toggling price rules.

Implements rule management by orchestrating the RuleRepository. Callers
own the unit of work and commit after a successful write.
"""

from typing import Optional

from app.price_alerts.application.dto.rule_dto import RuleDTO, SubmitRuleRequest, TriggerRecordDTO
from app.price_alerts.application.exceptions import InvalidRuleError, RuleNotFoundError
from app.price_alerts.domain.entities.rule import Rule
from app.price_alerts.domain.repositories.rule_repository import RuleRepository


class SubmitRuleUseCase:
    """Application service creating a new enabled rule for an owner."""

    def __init__(self, rule_repository: RuleRepository, quote_currency: str = "usd") -> None:
        """Initialize the use case with required dependencies.

        Args:
            rule_repository: Repository for rule persistence.
            quote_currency: Currency new thresholds are expressed in.
        """
        self._rule_repository = rule_repository
        self._quote_currency = quote_currency

    async def execute(self, owner_id: str, request: SubmitRuleRequest) -> Rule:
        """Execute the rule creation.

        Args:
            owner_id: Key of the submitting owner.
            request: Validated submission payload.

        Returns:
            The persisted Rule.

        Raises:
            InvalidRuleError: If the rule violates domain constraints.
            StoreError: If the rule store is unavailable.
        """
        try:
            rule = Rule(
                id=None,  # Will be assigned by the database
                owner_id=owner_id,
                asset_id=request.asset_id,
                kind=request.kind,
                threshold=request.threshold,
                quote_currency=self._quote_currency,
                enabled=True,
            )
        except ValueError as e:
            raise InvalidRuleError(str(e)) from e

        return await self._rule_repository.create(rule)


class ListRulesUseCase:
    """Application service listing an owner's rules."""

    def __init__(self, rule_repository: RuleRepository) -> None:
        self._rule_repository = rule_repository

    async def execute(self, owner_id: str, enabled_only: bool = False) -> list[RuleDTO]:
        """List rules of ``owner_id``, optionally only the enabled ones."""
        if enabled_only:
            rules = await self._rule_repository.list_enabled(owner_id)
        else:
            rules = await self._rule_repository.list_by_owner(owner_id)
        return [RuleDTO.from_entity(rule) for rule in rules]


class GetRuleUseCase:
    """Application service fetching a single rule."""

    def __init__(self, rule_repository: RuleRepository) -> None:
        self._rule_repository = rule_repository

    async def execute(self, rule_id: int) -> RuleDTO:
        rule = await self._rule_repository.get_by_id(rule_id)
        if rule is None:
            raise RuleNotFoundError(rule_id)
        return RuleDTO.from_entity(rule)


class SetRuleEnabledUseCase:
    """Application service re-enabling or disabling a rule.

    Firing disables a rule for good as far as the alert cycle is concerned;
    this is the explicit way to re-arm it.
    """

    def __init__(self, rule_repository: RuleRepository) -> None:
        self._rule_repository = rule_repository

    async def execute(self, rule_id: int, enabled: bool) -> RuleDTO:
        """Set the flag and return the updated rule.

        Raises:
            RuleNotFoundError: If no rule has this id.
        """
        found = await self._rule_repository.set_enabled(rule_id, enabled)
        if not found:
            raise RuleNotFoundError(rule_id)

        rule: Optional[Rule] = await self._rule_repository.get_by_id(rule_id)
        if rule is None:
            raise RuleNotFoundError(rule_id)
        return RuleDTO.from_entity(rule)


class GetRuleHistoryUseCase:
    """Application service listing when a rule fired."""

    def __init__(self, rule_repository: RuleRepository) -> None:
        self._rule_repository = rule_repository

    async def execute(self, rule_id: int) -> list[TriggerRecordDTO]:
        """Return the rule's trigger history, most recent first.

        Raises:
            RuleNotFoundError: If no rule has this id.
        """
        if await self._rule_repository.get_by_id(rule_id) is None:
            raise RuleNotFoundError(rule_id)

        records = await self._rule_repository.get_history(rule_id)
        return [TriggerRecordDTO.from_entity(record) for record in records]

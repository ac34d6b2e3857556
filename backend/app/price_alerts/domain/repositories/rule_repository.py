"""Abstract repository interface for Rule entities and their trigger history."""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Optional

from ..entities.rule import Rule
from ..entities.trigger_event import TriggerRecord


class RuleRepository(ABC):
    """Abstract repository for Rule persistence operations.

    All methods are async to support non-blocking I/O in the
    infrastructure layer. Implementations raise ``StoreError`` when the
    underlying store is unreachable. Writes become durable on ``commit``.
    """

    @abstractmethod
    async def create(self, rule: Rule) -> Rule:
        """Persist a new rule.

        Args:
            rule: The Rule entity to save (id must be None).

        Returns:
            The saved Rule entity with its ID populated.
        """
        pass

    @abstractmethod
    async def get_by_id(self, rule_id: int) -> Optional[Rule]:
        """Retrieve a rule by its database ID.

        Returns:
            The Rule entity if found, None otherwise.
        """
        pass

    @abstractmethod
    async def list_enabled(self, owner_id: Optional[str] = None) -> List[Rule]:
        """Retrieve enabled rules in creation order.

        Args:
            owner_id: Restrict the result to one owner when given.

        Returns:
            List of Rule entities with enabled == True.
        """
        pass

    @abstractmethod
    async def list_by_owner(self, owner_id: str) -> List[Rule]:
        """Retrieve every rule of an owner, enabled or not."""
        pass

    @abstractmethod
    async def set_enabled(self, rule_id: int, enabled: bool) -> bool:
        """Update a rule's enabled flag.

        Returns:
            True if the rule exists, False otherwise.
        """
        pass

    @abstractmethod
    async def append_history(self, rule_id: int, price: Decimal) -> TriggerRecord:
        """Record that a rule fired at the given price."""
        pass

    @abstractmethod
    async def get_history(self, rule_id: int) -> List[TriggerRecord]:
        """Retrieve a rule's trigger history, most recent first."""
        pass

    @abstractmethod
    async def commit(self) -> None:
        """Make pending writes durable."""
        pass

"""Outbound event interface for real-time subscribers."""

from abc import ABC, abstractmethod

from app.price_alerts.domain.entities.price_snapshot import PriceSnapshot
from app.price_alerts.domain.entities.trigger_event import TriggerEvent


class EventPublisher(ABC):
    """Fan-out boundary for cycle output.

    Publishing must not block on slow subscribers; delivery is best-effort.
    """

    @abstractmethod
    async def publish_snapshot(self, snapshot: PriceSnapshot) -> None:
        """Deliver a price snapshot to every subscriber."""
        ...

    @abstractmethod
    async def publish_trigger(self, event: TriggerEvent) -> None:
        """Deliver a rule trigger event to every subscriber."""
        ...

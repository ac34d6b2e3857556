"""WebSocket fan-out of price snapshots and rule triggers.

Outbound events:
- ``price_snapshot``: every cycle's snapshot, to every subscriber
- ``rule_triggered``: every firing, to every subscriber
- ``initial_rules``: the owner's enabled rules, on connect and after a
  ``submit_rule`` from that owner

Each subscriber owns a bounded queue drained by its own writer task, so
publishing never waits on a slow socket and every subscriber sees events in
publish order. Delivery is best-effort: a full queue drops the message, a
failed send drops the subscriber, and nothing is replayed except the last
snapshot on connect.
"""

import asyncio
import logging
import uuid
from typing import Any, Optional

from fastapi import WebSocket
from pydantic import ValidationError

from app.price_alerts.application.dto.rule_dto import RuleDTO, SubmitRuleRequest
from app.price_alerts.application.exceptions import InvalidRuleError, StoreError
from app.price_alerts.application.interfaces.event_publisher import EventPublisher
from app.price_alerts.application.interfaces.rule_store import RuleStoreScope
from app.price_alerts.application.use_cases.manage_rules import SubmitRuleUseCase
from app.price_alerts.domain.entities.price_snapshot import PriceSnapshot
from app.price_alerts.domain.entities.rule import Rule
from app.price_alerts.domain.entities.trigger_event import TriggerEvent

logger = logging.getLogger(__name__)

PRICE_SNAPSHOT = "price_snapshot"
RULE_TRIGGERED = "rule_triggered"
INITIAL_RULES = "initial_rules"
SUBMIT_RULE = "submit_rule"


def envelope(event: str, data: Any) -> dict[str, Any]:
    """Wrap a payload in the ``{"event", "data"}`` message shape."""
    return {"event": event, "data": data}


def snapshot_message(snapshot: PriceSnapshot) -> dict[str, Any]:
    return envelope(
        PRICE_SNAPSHOT,
        {"prices": snapshot.to_payload(), "capturedAt": snapshot.captured_at.isoformat()},
    )


def rules_message(rules: list[Rule]) -> dict[str, Any]:
    return envelope(
        INITIAL_RULES,
        [RuleDTO.from_entity(rule).model_dump(mode="json", by_alias=True) for rule in rules],
    )


class Subscriber:
    """One connected client and its outbound queue."""

    def __init__(self, websocket: WebSocket, owner_id: str, queue_size: int) -> None:
        self.id = uuid.uuid4().hex
        self.owner_id = owner_id
        self.websocket = websocket
        self._queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=queue_size)
        self._task: Optional[asyncio.Task] = None

    def enqueue(self, message: dict[str, Any]) -> bool:
        """Queue a message without waiting; False if it was dropped."""
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull:
            logger.warning(
                f"Subscriber {self.id} queue full, dropping {message.get('event')}"
            )
            return False
        return True

    def start(self, broadcaster: "Broadcaster") -> None:
        self._task = asyncio.create_task(
            self._writer_loop(broadcaster), name=f"ws-writer-{self.id}"
        )

    async def _writer_loop(self, broadcaster: "Broadcaster") -> None:
        while True:
            message = await self._queue.get()
            try:
                await self.websocket.send_json(message)
            except Exception as e:
                logger.info(f"Send to subscriber {self.id} failed, dropping it: {e}")
                broadcaster.discard(self)
                return

    async def stop(self) -> None:
        """Stop the writer task."""
        task, self._task = self._task, None
        if task is None or task is asyncio.current_task():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass


class Broadcaster(EventPublisher):
    """Registry of connected subscribers and the fan-out to them.

    Attributes:
        _rule_store: Opens a rule-store unit of work for submissions.
        _queue_size: Outbound queue bound per subscriber.
        _subscribers: Connected subscribers keyed by id.
        _last_snapshot: Most recent published snapshot, replayed on connect.
    """

    def __init__(
        self,
        rule_store: RuleStoreScope,
        queue_size: int = 100,
        quote_currency: str = "usd",
    ) -> None:
        self._rule_store = rule_store
        self._queue_size = queue_size
        self._quote_currency = quote_currency
        self._subscribers: dict[str, Subscriber] = {}
        self._last_snapshot: Optional[PriceSnapshot] = None

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @property
    def last_snapshot(self) -> Optional[PriceSnapshot]:
        return self._last_snapshot

    async def connect(
        self,
        websocket: WebSocket,
        owner_id: str,
        initial_rules: Optional[list[Rule]] = None,
    ) -> Subscriber:
        """Accept a connection and queue its initial state.

        The new subscriber receives, once, the last broadcast snapshot (if
        any) followed by the owner's enabled rules. Those are read from the
        rule store unless ``initial_rules`` is given.
        """
        await websocket.accept()
        rules = initial_rules
        if rules is None:
            rules = await self._load_enabled_rules(owner_id)

        subscriber = Subscriber(websocket, owner_id, self._queue_size)
        if self._last_snapshot is not None:
            subscriber.enqueue(snapshot_message(self._last_snapshot))
        if rules is not None:
            subscriber.enqueue(rules_message(rules))

        self._subscribers[subscriber.id] = subscriber
        subscriber.start(self)
        logger.info(
            f"Subscriber {subscriber.id} connected for owner '{owner_id}' "
            f"({self.subscriber_count} connected)"
        )
        return subscriber

    def discard(self, subscriber: Subscriber) -> None:
        """Unregister a subscriber without waiting for its writer."""
        if self._subscribers.pop(subscriber.id, None) is not None:
            logger.info(
                f"Subscriber {subscriber.id} disconnected ({self.subscriber_count} connected)"
            )

    async def disconnect(self, subscriber: Subscriber) -> None:
        """Unregister a subscriber and stop its writer."""
        self.discard(subscriber)
        await subscriber.stop()

    async def close(self) -> None:
        """Disconnect every subscriber."""
        for subscriber in list(self._subscribers.values()):
            await self.disconnect(subscriber)

    async def publish_snapshot(self, snapshot: PriceSnapshot) -> None:
        """Queue a snapshot for every subscriber and remember it."""
        self._last_snapshot = snapshot
        self._fan_out(snapshot_message(snapshot))

    async def publish_trigger(self, event: TriggerEvent) -> None:
        """Queue a trigger event for every subscriber."""
        self._fan_out(envelope(RULE_TRIGGERED, event.to_payload()))

    async def handle_message(self, subscriber: Subscriber, message: Any) -> None:
        """Route one inbound message from a subscriber."""
        if not isinstance(message, dict):
            logger.warning(f"Ignoring non-object message from subscriber {subscriber.id}")
            return

        event = message.get("event")
        if event == SUBMIT_RULE:
            await self.submit_rule(subscriber.owner_id, message.get("data"))
        else:
            logger.warning(f"Ignoring unknown event {event!r} from subscriber {subscriber.id}")

    async def submit_rule(self, owner_id: str, payload: Any) -> Optional[Rule]:
        """Create a rule for ``owner_id`` and re-sync that owner's rules.

        Args:
            owner_id: Key of the submitting owner.
            payload: Raw ``submit_rule`` data ({assetId, threshold, kind}).

        Returns:
            The created rule, or None if the submission was rejected or
            could not be stored.
        """
        try:
            request = SubmitRuleRequest.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"Rejected rule submission from '{owner_id}': {e.errors()}")
            return None

        try:
            async with self._rule_store() as rules:
                use_case = SubmitRuleUseCase(rules, quote_currency=self._quote_currency)
                rule = await use_case.execute(owner_id, request)
                await rules.commit()
                enabled = await rules.list_enabled(owner_id)
        except (InvalidRuleError, StoreError) as e:
            logger.error(f"Failed to save rule for '{owner_id}': {e.message}")
            return None

        logger.info(
            f"Rule {rule.id} saved for '{owner_id}': {rule.asset_id} "
            f"{rule.kind.value} {rule.threshold}"
        )
        self.send_to_owner(owner_id, rules_message(enabled))
        return rule

    def send_to_owner(self, owner_id: str, message: dict[str, Any]) -> int:
        """Queue a message for the owner's connections only."""
        sent = 0
        for subscriber in list(self._subscribers.values()):
            if subscriber.owner_id == owner_id and subscriber.enqueue(message):
                sent += 1
        return sent

    def _fan_out(self, message: dict[str, Any]) -> None:
        for subscriber in list(self._subscribers.values()):
            subscriber.enqueue(message)

    async def _load_enabled_rules(self, owner_id: str) -> Optional[list[Rule]]:
        try:
            async with self._rule_store() as rules:
                return await rules.list_enabled(owner_id)
        except StoreError as e:
            logger.warning(f"Could not load rules for '{owner_id}': {e.message}")
            return None

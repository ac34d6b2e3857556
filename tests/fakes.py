"""In-memory stand-ins for the rule store, price source, publisher and sockets."""

import asyncio
import dataclasses
from collections.abc import Mapping, Sequence
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any, AsyncIterator, List, Optional

from app.price_alerts.application.exceptions import StoreError, UpstreamError
from app.price_alerts.application.interfaces.event_publisher import EventPublisher
from app.price_alerts.application.interfaces.price_source import PriceSource
from app.price_alerts.domain.entities.price_snapshot import PriceSnapshot
from app.price_alerts.domain.entities.rule import Rule
from app.price_alerts.domain.entities.trigger_event import TriggerEvent, TriggerRecord
from app.price_alerts.domain.repositories.rule_repository import RuleRepository


class InMemoryRuleRepository(RuleRepository):
    """Rule store kept in a dict.

    Reads return copies, like rows loaded from a database. ``fail_on`` makes
    the n-th call (1-based) of an operation raise StoreError.
    """

    def __init__(self, rules: Sequence[Rule] = ()) -> None:
        self.rules: dict[int, Rule] = {}
        self.history: list[TriggerRecord] = []
        self.commits = 0
        self.calls: dict[str, int] = {}
        self._failures: dict[str, int] = {}
        self._next_id = 1
        for rule in rules:
            self._store(rule)

    def fail_on(self, operation: str, call: int = 1) -> None:
        self._failures[operation] = call

    def _track(self, operation: str) -> None:
        self.calls[operation] = self.calls.get(operation, 0) + 1
        if self._failures.get(operation) == self.calls[operation]:
            raise StoreError(operation, "database is gone")

    def _store(self, rule: Rule) -> Rule:
        if rule.id is None:
            rule = dataclasses.replace(rule, id=self._next_id)
        self._next_id = max(self._next_id, rule.id) + 1
        self.rules[rule.id] = dataclasses.replace(rule)
        return dataclasses.replace(rule)

    async def create(self, rule: Rule) -> Rule:
        self._track("create")
        return self._store(rule)

    async def get_by_id(self, rule_id: int) -> Optional[Rule]:
        self._track("get_by_id")
        rule = self.rules.get(rule_id)
        return dataclasses.replace(rule) if rule else None

    async def list_enabled(self, owner_id: Optional[str] = None) -> List[Rule]:
        self._track("list_enabled")
        return [
            dataclasses.replace(r)
            for r in self.rules.values()
            if r.enabled and (owner_id is None or r.owner_id == owner_id)
        ]

    async def list_by_owner(self, owner_id: str) -> List[Rule]:
        self._track("list_by_owner")
        return [dataclasses.replace(r) for r in self.rules.values() if r.owner_id == owner_id]

    async def set_enabled(self, rule_id: int, enabled: bool) -> bool:
        self._track("set_enabled")
        rule = self.rules.get(rule_id)
        if rule is None:
            return False
        rule.enabled = enabled
        return True

    async def append_history(self, rule_id: int, price: Decimal) -> TriggerRecord:
        self._track("append_history")
        record = TriggerRecord(id=len(self.history) + 1, rule_id=rule_id, price=price)
        self.history.append(record)
        return record

    async def get_history(self, rule_id: int) -> List[TriggerRecord]:
        self._track("get_history")
        return [r for r in reversed(self.history) if r.rule_id == rule_id]

    async def commit(self) -> None:
        self._track("commit")
        self.commits += 1

    def scope(self):
        """A rule-store scope handing out this repository."""

        @asynccontextmanager
        async def open_scope() -> AsyncIterator["InMemoryRuleRepository"]:
            yield self

        return open_scope


class FakePriceSource(PriceSource):
    """Price source answering from a fixed payload and recording calls."""

    def __init__(
        self,
        payload: Optional[Mapping[str, Any]] = None,
        error: Optional[Exception] = None,
        delay: float = 0.0,
    ) -> None:
        self.payload = payload if payload is not None else {}
        self.error = error
        self.delay = delay
        self.calls: list[tuple[list[str], str]] = []
        self.closed = False

    @classmethod
    def with_prices(cls, prices: Mapping[str, Any], currency: str = "usd") -> "FakePriceSource":
        return cls({asset: {currency: price} for asset, price in prices.items()})

    @property
    def source_name(self) -> str:
        return "Fake"

    async def fetch_prices(self, asset_ids: Sequence[str], quote_currency: str) -> Any:
        self.calls.append((list(asset_ids), quote_currency))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.payload

    async def close(self) -> None:
        self.closed = True


def upstream_down() -> UpstreamError:
    return UpstreamError("HTTP error fetching prices: 502", status_code=502)


class RecordingPublisher(EventPublisher):
    """Publisher keeping every published item in order."""

    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []

    async def publish_snapshot(self, snapshot: PriceSnapshot) -> None:
        self.events.append(("snapshot", snapshot))

    async def publish_trigger(self, event: TriggerEvent) -> None:
        self.events.append(("trigger", event))

    @property
    def snapshots(self) -> list[PriceSnapshot]:
        return [item for kind, item in self.events if kind == "snapshot"]

    @property
    def triggers(self) -> list[TriggerEvent]:
        return [item for kind, item in self.events if kind == "trigger"]


class FakeWebSocket:
    """Collects what the server sends; ``fail_send`` simulates a dead peer."""

    def __init__(self, fail_send: bool = False) -> None:
        self.accepted = False
        self.sent: list[dict[str, Any]] = []
        self.fail_send = fail_send

    async def accept(self) -> None:
        self.accepted = True

    async def send_json(self, data: Any) -> None:
        if self.fail_send:
            raise RuntimeError("connection closed")
        self.sent.append(data)

    def events(self) -> list[str]:
        return [message["event"] for message in self.sent]

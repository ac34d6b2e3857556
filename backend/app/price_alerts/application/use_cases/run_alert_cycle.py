"""Use case running one price-check cycle.

A cycle reads the enabled rules, builds a snapshot for the assets they
reference (cache first, price source for the rest), evaluates the rules,
broadcasts the snapshot and then applies each firing rule by rule:
broadcast the trigger, append history, disable the rule, commit.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from app.price_alerts.application.exceptions import (
    CacheUnavailableError,
    StoreError,
    UpstreamError,
)
from app.price_alerts.application.interfaces.event_publisher import EventPublisher
from app.price_alerts.application.interfaces.price_cache import PriceCache
from app.price_alerts.application.services.price_fetcher import PriceFetcher
from app.price_alerts.domain.entities.price_snapshot import PriceSnapshot
from app.price_alerts.domain.entities.trigger_event import FiredRule
from app.price_alerts.domain.repositories.rule_repository import RuleRepository
from app.price_alerts.domain.services.rule_evaluator import RuleEvaluator
from app.price_alerts.domain.value_objects.asset_id import distinct_asset_ids

logger = logging.getLogger(__name__)


@dataclass
class CycleResult:
    """Summary of one alert cycle.

    Attributes:
        rules_checked: Number of enabled rules loaded.
        asset_ids: Distinct assets referenced by those rules.
        cached_ids: Assets served from the price cache.
        fetched_ids: Assets priced by the price source this cycle.
        fired: Number of rules that fired.
        processed: Number of firings whose side effects completed.
        skipped: True when no rule was enabled.
        error: Description of the error that aborted the cycle, if any.
    """

    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None
    rules_checked: int = 0
    asset_ids: list[str] = field(default_factory=list)
    cached_ids: list[str] = field(default_factory=list)
    fetched_ids: list[str] = field(default_factory=list)
    fired: int = 0
    processed: int = 0
    skipped: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def finish(self) -> "CycleResult":
        self.finished_at = datetime.now(timezone.utc)
        return self


class RunAlertCycleUseCase:
    """Application service running one fetch, evaluate, broadcast cycle.

    Upstream and store failures abort the rest of the cycle and are reported
    in the returned ``CycleResult``; an unreachable cache only costs the
    lookup. Any other exception propagates to the caller, which for the
    background loop is ``AlertScheduler.run_once``.
    """

    def __init__(
        self,
        rule_repository: RuleRepository,
        price_cache: PriceCache,
        price_fetcher: PriceFetcher,
        publisher: EventPublisher,
        cache_ttl_seconds: int = 30,
        evaluator: Optional[RuleEvaluator] = None,
    ) -> None:
        """Initialize the use case with required dependencies.

        Args:
            rule_repository: Rule store bound to this cycle's unit of work.
            price_cache: Shared TTL cache of last-known prices.
            price_fetcher: Upstream price access.
            publisher: Subscriber fan-out.
            cache_ttl_seconds: Freshness window for fetched prices.
            evaluator: Rule evaluation service.
        """
        self._rules = rule_repository
        self._cache = price_cache
        self._fetcher = price_fetcher
        self._publisher = publisher
        self._cache_ttl_seconds = cache_ttl_seconds
        self._evaluator = evaluator or RuleEvaluator()

    async def execute(self) -> CycleResult:
        """Run the cycle.

        Returns:
            Summary of what the cycle did.
        """
        result = CycleResult()

        # 1. Read enabled rules at cycle start
        try:
            rules = await self._rules.list_enabled()
        except StoreError as e:
            return self._abort(result, e)

        result.rules_checked = len(rules)
        result.asset_ids = distinct_asset_ids(rule.asset_id for rule in rules)

        # 2. Nothing to watch - avoid the upstream call
        if not result.asset_ids:
            logger.debug("No enabled rules, skipping cycle")
            result.skipped = True
            return result.finish()

        # 3. Cache first, price source for missing or stale assets
        try:
            snapshot = await self._load_snapshot(result)
        except UpstreamError as e:
            return self._abort(result, e)

        # 4. Evaluate
        fired = self._evaluator.evaluate(snapshot, rules)
        result.fired = len(fired)
        logger.info(
            f"Checked {result.rules_checked} rules over {len(result.asset_ids)} assets "
            f"({len(result.cached_ids)} cached, {len(result.fetched_ids)} fetched), "
            f"{result.fired} fired"
        )

        # 5. Snapshot goes out before any trigger derived from it
        await self._publisher.publish_snapshot(snapshot)

        # 6. Side effects rule by rule so a late failure spares earlier rules
        for item in fired:
            try:
                await self._apply_firing(item)
            except StoreError as e:
                return self._abort(result, e)
            result.processed += 1

        return result.finish()

    async def _load_snapshot(self, result: CycleResult) -> PriceSnapshot:
        """Build the cycle snapshot for ``result.asset_ids``."""
        asset_ids = result.asset_ids

        try:
            cached = (await self._cache.get(asset_ids)).restrict_to(asset_ids)
        except CacheUnavailableError as e:
            logger.warning(f"{e.message}; treating as a cache miss")
            cached = PriceSnapshot()

        result.cached_ids = [a for a in asset_ids if a in cached.prices]
        missing = [a for a in asset_ids if a not in cached.prices]
        if not missing:
            return cached

        fetched = await self._fetcher.fetch(missing)
        result.fetched_ids = [a for a in missing if a in fetched.prices]

        if not fetched.is_empty:
            try:
                await self._cache.put(fetched, self._cache_ttl_seconds)
            except CacheUnavailableError as e:
                logger.warning(f"{e.message}; fetched prices not cached")

        return cached.merge(fetched)

    async def _apply_firing(self, item: FiredRule) -> None:
        """Broadcast, record and disable one fired rule."""
        rule = item.rule
        logger.info(f"Rule {rule.id} triggered: {item.message} (price {item.price})")

        await self._publisher.publish_trigger(item.to_event())

        if rule.id is None:
            logger.warning(f"Fired rule for {rule.asset_id} has no id, nothing to persist")
            return

        await self._rules.append_history(rule.id, item.price)
        await self._rules.set_enabled(rule.id, False)
        await self._rules.commit()
        rule.disable()

    def _abort(self, result: CycleResult, error: UpstreamError | StoreError) -> CycleResult:
        logger.error(f"Alert cycle aborted: {error.message}")
        result.error = error.message
        return result.finish()

"""SQLAlchemy implementation of RuleRepository.

Provides async database operations for Rule entities and their trigger
history using SQLAlchemy 2.0 async patterns with asyncpg driver. Every
SQLAlchemy failure, and every connection error the driver raises unwrapped,
surfaces as ``StoreError`` so the alert cycle can abort and retry on its
next tick.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.price_alerts.application.exceptions import StoreError
from app.price_alerts.domain.entities.rule import Rule
from app.price_alerts.domain.entities.trigger_event import TriggerRecord
from app.price_alerts.domain.repositories.rule_repository import RuleRepository
from app.price_alerts.infrastructure.db.models import RuleModel, TriggerRecordModel
from app.price_alerts.infrastructure.db.session import get_async_session_local

logger = logging.getLogger(__name__)

# asyncpg raises OSError subclasses (ConnectionRefusedError) that SQLAlchemy
# does not wrap when a connection cannot be opened.
_STORE_ERRORS = (SQLAlchemyError, OSError)


class SqlRuleRepository(RuleRepository):
    """SQLAlchemy-based implementation of the RuleRepository interface."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with a database session.

        Args:
            session: An async SQLAlchemy session.
        """
        self._session = session

    async def create(self, rule: Rule) -> Rule:
        """Insert a new rule and return it with its ID."""
        model = self._to_model(rule)
        try:
            self._session.add(model)
            await self._session.flush()
            await self._session.refresh(model)
        except _STORE_ERRORS as e:
            raise StoreError("create rule", str(e)) from e
        return self._to_entity(model)

    async def get_by_id(self, rule_id: int) -> Optional[Rule]:
        """Retrieve a rule by its database ID."""
        model = await self._get_model(rule_id, "get rule")
        if model is None:
            return None
        try:
            return self._to_entity(model)
        except ValueError as e:
            raise StoreError("get rule", f"invalid stored rule {rule_id}: {e}") from e

    async def list_enabled(self, owner_id: Optional[str] = None) -> List[Rule]:
        """Retrieve enabled rules, oldest first."""
        stmt = select(RuleModel).where(RuleModel.enabled.is_(True))
        if owner_id is not None:
            stmt = stmt.where(RuleModel.owner_id == owner_id)
        stmt = stmt.order_by(RuleModel.id)
        return await self._fetch_rules(stmt, "list enabled rules")

    async def list_by_owner(self, owner_id: str) -> List[Rule]:
        """Retrieve all rules of an owner, oldest first."""
        stmt = (
            select(RuleModel)
            .where(RuleModel.owner_id == owner_id)
            .order_by(RuleModel.id)
        )
        return await self._fetch_rules(stmt, "list owner rules")

    async def set_enabled(self, rule_id: int, enabled: bool) -> bool:
        """Update the enabled flag of an existing rule."""
        model = await self._get_model(rule_id, "update rule")
        if model is None:
            return False

        model.enabled = enabled
        try:
            await self._session.flush()
        except _STORE_ERRORS as e:
            raise StoreError("update rule", str(e)) from e
        return True

    async def append_history(self, rule_id: int, price: Decimal) -> TriggerRecord:
        """Insert a trigger history row for a rule."""
        model = TriggerRecordModel(
            rule_id=rule_id,
            price=price,
            triggered_at=datetime.now(timezone.utc),
        )
        try:
            self._session.add(model)
            await self._session.flush()
            await self._session.refresh(model)
        except _STORE_ERRORS as e:
            raise StoreError("append history", str(e)) from e

        return TriggerRecord(
            id=model.id,
            rule_id=model.rule_id,
            price=Decimal(str(model.price)),
            triggered_at=model.triggered_at,
        )

    async def get_history(self, rule_id: int) -> List[TriggerRecord]:
        """Retrieve a rule's trigger history, most recent first."""
        stmt = (
            select(TriggerRecordModel)
            .where(TriggerRecordModel.rule_id == rule_id)
            .order_by(TriggerRecordModel.triggered_at.desc(), TriggerRecordModel.id.desc())
        )
        try:
            result = await self._session.execute(stmt)
            models = result.scalars().all()
        except _STORE_ERRORS as e:
            raise StoreError("get history", str(e)) from e

        return [
            TriggerRecord(
                id=m.id,
                rule_id=m.rule_id,
                price=Decimal(str(m.price)),
                triggered_at=m.triggered_at,
            )
            for m in models
        ]

    async def commit(self) -> None:
        """Commit the session, rolling back on failure."""
        try:
            await self._session.commit()
        except _STORE_ERRORS as e:
            try:
                await self._session.rollback()
            except _STORE_ERRORS as rollback_error:
                logger.warning(f"Rollback after failed commit also failed: {rollback_error}")
            raise StoreError("commit", str(e)) from e

    async def _get_model(self, rule_id: int, operation: str) -> Optional[RuleModel]:
        stmt = select(RuleModel).where(RuleModel.id == rule_id)
        try:
            result = await self._session.execute(stmt)
        except _STORE_ERRORS as e:
            raise StoreError(operation, str(e)) from e
        return result.scalar_one_or_none()

    async def _fetch_rules(self, stmt, operation: str) -> List[Rule]:
        try:
            result = await self._session.execute(stmt)
            models = result.scalars().all()
        except _STORE_ERRORS as e:
            raise StoreError(operation, str(e)) from e

        rules = []
        for model in models:
            try:
                rules.append(self._to_entity(model))
            except ValueError as e:
                logger.warning(f"Skipping invalid stored rule {model.id}: {e}")
        return rules

    def _to_entity(self, model: RuleModel) -> Rule:
        """Convert a RuleModel to a Rule domain entity."""
        return Rule(
            id=model.id,
            owner_id=model.owner_id,
            asset_id=model.asset_id,
            kind=model.kind,
            threshold=Decimal(str(model.threshold)),
            quote_currency=model.quote_currency,
            enabled=model.enabled,
            created_at=model.created_at,
        )

    def _to_model(self, entity: Rule) -> RuleModel:
        """Convert a Rule domain entity to a RuleModel."""
        return RuleModel(
            id=entity.id,
            owner_id=entity.owner_id,
            asset_id=entity.asset_id,
            kind=entity.kind,
            threshold=entity.threshold,
            quote_currency=entity.quote_currency,
            enabled=entity.enabled,
            created_at=entity.created_at,
        )


@asynccontextmanager
async def rule_repository_scope() -> AsyncIterator[SqlRuleRepository]:
    """Open one session and yield a rule repository bound to it.

    Uncommitted writes are rolled back when the scope exits.
    """
    session_factory = get_async_session_local()
    async with session_factory() as session:
        yield SqlRuleRepository(session)

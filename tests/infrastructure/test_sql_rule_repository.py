"""Tests for SqlRuleRepository against a mocked AsyncSession."""

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from app.price_alerts.application.exceptions import StoreError
from app.price_alerts.domain.entities.rule import Rule, RuleKind
from app.price_alerts.infrastructure.db.models import RuleModel
from app.price_alerts.infrastructure.repositories.sql_rule_repository import SqlRuleRepository


def db_down() -> OperationalError:
    return OperationalError("SELECT 1", {}, Exception("connection refused"))


@pytest.fixture
def session() -> MagicMock:
    session = MagicMock()
    session.execute = AsyncMock(return_value=MagicMock())
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
def rule_model() -> RuleModel:
    return RuleModel(
        id=7,
        owner_id="alice",
        asset_id="bitcoin",
        kind=RuleKind.ABOVE,
        threshold=Decimal("50000.0000000000"),
        quote_currency="usd",
        enabled=True,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


class TestMapping:
    """Entity/model conversion."""

    @pytest.mark.asyncio
    async def test_get_by_id_maps_model(self, session: MagicMock, rule_model: RuleModel) -> None:
        session.execute.return_value.scalar_one_or_none.return_value = rule_model

        rule = await SqlRuleRepository(session).get_by_id(7)

        assert rule == Rule(
            id=7,
            owner_id="alice",
            asset_id="bitcoin",
            kind=RuleKind.ABOVE,
            threshold=Decimal("50000"),
            created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )

    @pytest.mark.asyncio
    async def test_list_enabled(self, session: MagicMock, rule_model: RuleModel) -> None:
        session.execute.return_value.scalars.return_value.all.return_value = [rule_model]

        rules = await SqlRuleRepository(session).list_enabled("alice")

        assert [r.id for r in rules] == [7]

    @pytest.mark.asyncio
    async def test_set_enabled_missing_rule(self, session: MagicMock) -> None:
        session.execute.return_value.scalar_one_or_none.return_value = None

        assert await SqlRuleRepository(session).set_enabled(99, False) is False
        session.flush.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_set_enabled(self, session: MagicMock, rule_model: RuleModel) -> None:
        session.execute.return_value.scalar_one_or_none.return_value = rule_model

        assert await SqlRuleRepository(session).set_enabled(7, False) is True
        assert rule_model.enabled is False
        session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_list_enabled_skips_invalid_rows(
        self, session: MagicMock, rule_model: RuleModel
    ) -> None:
        # Arrange
        broken = RuleModel(
            id=8,
            owner_id="bob",
            asset_id="ethereum",
            kind=RuleKind.BELOW,
            threshold=Decimal("0"),
            quote_currency="usd",
            enabled=True,
            created_at=datetime(2024, 1, 2, tzinfo=timezone.utc),
        )
        rule_model.threshold = Decimal("100")
        session.execute.return_value.scalars.return_value.all.return_value = [rule_model, broken]

        # Act
        rules = await SqlRuleRepository(session).list_enabled()

        # Assert
        assert [(r.id, r.threshold) for r in rules] == [(7, Decimal("100"))]

    @pytest.mark.asyncio
    async def test_get_by_id_invalid_row(self, session: MagicMock, rule_model: RuleModel) -> None:
        rule_model.asset_id = "  "
        session.execute.return_value.scalar_one_or_none.return_value = rule_model

        with pytest.raises(StoreError, match="get rule"):
            await SqlRuleRepository(session).get_by_id(7)


class TestErrors:
    """Database and connection failures surface as StoreError."""

    @pytest.mark.asyncio
    async def test_read_failure(self, session: MagicMock) -> None:
        session.execute.side_effect = db_down()

        with pytest.raises(StoreError, match="list enabled rules"):
            await SqlRuleRepository(session).list_enabled()

    @pytest.mark.asyncio
    async def test_create_failure(self, session: MagicMock) -> None:
        session.flush.side_effect = db_down()
        rule = Rule(id=None, owner_id="alice", asset_id="bitcoin", kind=RuleKind.ABOVE,
                    threshold=Decimal("1"))

        with pytest.raises(StoreError, match="create rule"):
            await SqlRuleRepository(session).create(rule)

    @pytest.mark.asyncio
    async def test_commit_failure_rolls_back(self, session: MagicMock) -> None:
        session.commit.side_effect = db_down()

        with pytest.raises(StoreError, match="commit"):
            await SqlRuleRepository(session).commit()

        session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_connection_refused_on_read(self, session: MagicMock) -> None:
        session.execute.side_effect = ConnectionRefusedError(111, "Connect call failed")

        with pytest.raises(StoreError, match="list enabled rules"):
            await SqlRuleRepository(session).list_enabled()

    @pytest.mark.asyncio
    async def test_connection_refused_on_lookup(self, session: MagicMock) -> None:
        session.execute.side_effect = ConnectionRefusedError(111, "Connect call failed")

        with pytest.raises(StoreError, match="get rule"):
            await SqlRuleRepository(session).get_by_id(7)

    @pytest.mark.asyncio
    async def test_commit_failure_with_failed_rollback(self, session: MagicMock) -> None:
        session.commit.side_effect = ConnectionRefusedError(111, "Connect call failed")
        session.rollback.side_effect = ConnectionRefusedError(111, "Connect call failed")

        with pytest.raises(StoreError, match="commit"):
            await SqlRuleRepository(session).commit()

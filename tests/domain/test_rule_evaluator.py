"""Unit tests for RuleEvaluator and trigger messages."""

from decimal import Decimal

import pytest

from app.price_alerts.domain.entities.price_snapshot import PriceSnapshot
from app.price_alerts.domain.entities.rule import Rule, RuleKind
from app.price_alerts.domain.entities.trigger_event import build_trigger_message
from app.price_alerts.domain.services.rule_evaluator import RuleEvaluator


def make_rule(
    rule_id: int,
    asset_id: str,
    kind: RuleKind,
    threshold: str,
    owner_id: str = "alice",
    enabled: bool = True,
) -> Rule:
    return Rule(
        id=rule_id,
        owner_id=owner_id,
        asset_id=asset_id,
        kind=kind,
        threshold=Decimal(threshold),
        enabled=enabled,
    )


@pytest.fixture
def evaluator() -> RuleEvaluator:
    return RuleEvaluator()


class TestStrictCrossing:
    """Equality never fires; only a strict crossing does."""

    @pytest.mark.parametrize(
        "price,expected",
        [("50000.01", True), ("50000", False), ("49999.99", False)],
    )
    def test_above(self, evaluator: RuleEvaluator, price: str, expected: bool) -> None:
        rule = make_rule(1, "bitcoin", RuleKind.ABOVE, "50000")
        snapshot = PriceSnapshot(prices={"bitcoin": Decimal(price)})

        fired = evaluator.evaluate(snapshot, [rule])

        assert bool(fired) is expected

    @pytest.mark.parametrize(
        "price,expected",
        [("2999.99", True), ("3000", False), ("3000.01", False)],
    )
    def test_below(self, evaluator: RuleEvaluator, price: str, expected: bool) -> None:
        rule = make_rule(1, "ethereum", RuleKind.BELOW, "3000")
        snapshot = PriceSnapshot(prices={"ethereum": Decimal(price)})

        fired = evaluator.evaluate(snapshot, [rule])

        assert bool(fired) is expected


class TestEvaluate:
    """Tests for RuleEvaluator.evaluate."""

    def test_absent_asset_never_fires(self, evaluator: RuleEvaluator) -> None:
        rule = make_rule(1, "dogecoin", RuleKind.BELOW, "1000000")
        snapshot = PriceSnapshot(prices={"bitcoin": Decimal("1")})

        assert evaluator.evaluate(snapshot, [rule]) == []

    def test_disabled_rule_is_skipped(self, evaluator: RuleEvaluator) -> None:
        rule = make_rule(1, "bitcoin", RuleKind.ABOVE, "1", enabled=False)
        snapshot = PriceSnapshot(prices={"bitcoin": Decimal("50000")})

        assert evaluator.evaluate(snapshot, [rule]) == []

    def test_scenario_mixed_rules(self, evaluator: RuleEvaluator) -> None:
        """Only the crossed rule fires and carries its snapshot price."""
        # Arrange
        btc_above = make_rule(1, "bitcoin", RuleKind.ABOVE, "50000")
        eth_below = make_rule(2, "ethereum", RuleKind.BELOW, "3000")
        snapshot = PriceSnapshot(
            prices={"bitcoin": Decimal("51000"), "ethereum": Decimal("3100")}
        )

        # Act
        fired = evaluator.evaluate(snapshot, [btc_above, eth_below])

        # Assert
        assert len(fired) == 1
        assert fired[0].rule is btc_above
        assert fired[0].price == Decimal("51000")
        assert fired[0].message == "bitcoin rose above 50000"

    def test_preserves_rule_order(self, evaluator: RuleEvaluator) -> None:
        rules = [
            make_rule(3, "solana", RuleKind.BELOW, "200"),
            make_rule(1, "bitcoin", RuleKind.ABOVE, "100"),
            make_rule(2, "solana", RuleKind.BELOW, "150"),
        ]
        snapshot = PriceSnapshot(prices={"solana": Decimal("120"), "bitcoin": Decimal("200")})

        fired = evaluator.evaluate(snapshot, rules)

        assert [f.rule.id for f in fired] == [3, 1, 2]

    def test_is_idempotent_and_pure(self, evaluator: RuleEvaluator) -> None:
        rules = [
            make_rule(1, "bitcoin", RuleKind.ABOVE, "50000"),
            make_rule(2, "ethereum", RuleKind.BELOW, "3000"),
        ]
        snapshot = PriceSnapshot(
            prices={"bitcoin": Decimal("51000"), "ethereum": Decimal("2900")}
        )

        first = evaluator.evaluate(snapshot, rules)
        second = evaluator.evaluate(snapshot, rules)

        assert first == second
        assert all(rule.enabled for rule in rules)

    def test_asset_ids_are_normalized(self, evaluator: RuleEvaluator) -> None:
        rule = make_rule(1, " Bitcoin ", RuleKind.ABOVE, "10")
        snapshot = PriceSnapshot(prices={"BITCOIN": Decimal("11")})

        fired = evaluator.evaluate(snapshot, [rule])

        assert len(fired) == 1
        assert fired[0].rule.asset_id == "bitcoin"


class TestTriggerMessage:
    """Tests for build_trigger_message."""

    def test_above_message(self) -> None:
        rule = make_rule(1, "bitcoin", RuleKind.ABOVE, "50000.00")
        assert build_trigger_message(rule) == "bitcoin rose above 50000"

    def test_below_message_keeps_fraction(self) -> None:
        rule = make_rule(1, "shiba-inu", RuleKind.BELOW, "0.0000250")
        assert build_trigger_message(rule) == "shiba-inu fell below 0.000025"

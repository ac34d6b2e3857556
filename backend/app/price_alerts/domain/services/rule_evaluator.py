"""Rule evaluator domain service.

Decides which enabled rules fire for a price snapshot:
- ABOVE fires when price > threshold, BELOW when price < threshold
- Equality never fires (crossing semantics, not "reached")
- A rule whose asset is missing from the snapshot is skipped silently
"""

from collections.abc import Sequence

from app.price_alerts.domain.entities.price_snapshot import PriceSnapshot
from app.price_alerts.domain.entities.rule import Rule
from app.price_alerts.domain.entities.trigger_event import FiredRule, build_trigger_message


class RuleEvaluator:
    """Domain service for evaluating rules against a snapshot.

    The evaluator is a pure function of its inputs: it never mutates rules
    and never performs I/O. Disabling a fired rule is a side effect applied
    by the caller after evaluation.
    """

    def evaluate(
        self,
        snapshot: PriceSnapshot,
        rules: Sequence[Rule],
    ) -> list[FiredRule]:
        """Return the rules that fire, in input order.

        Args:
            snapshot: Prices to check against.
            rules: Candidate rules; disabled ones are ignored.

        Returns:
            FiredRule for every enabled rule whose condition holds.
        """
        fired: list[FiredRule] = []
        for rule in rules:
            if not rule.enabled:
                continue

            price = snapshot.price_for(rule.asset_id)
            if price is None:
                continue

            if rule.is_crossed_by(price):
                fired.append(
                    FiredRule(rule=rule, price=price, message=build_trigger_message(rule))
                )
        return fired

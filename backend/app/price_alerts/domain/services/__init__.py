"""Domain services implementing core business rules.

These are pure domain services with no infrastructure dependencies:
- RuleEvaluator: Threshold crossing evaluation for a price snapshot
"""

from app.price_alerts.domain.services.rule_evaluator import RuleEvaluator

__all__ = ["RuleEvaluator"]

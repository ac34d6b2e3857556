"""Infrastructure repository implementations.

This module exports concrete repository implementations that fulfill
the abstract interfaces defined in the domain layer.
"""

from app.price_alerts.infrastructure.repositories.sql_rule_repository import (
    SqlRuleRepository,
    rule_repository_scope,
)

__all__ = [
    "SqlRuleRepository",
    "rule_repository_scope",
]

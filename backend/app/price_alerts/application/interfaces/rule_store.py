"""Scoped access to the rule store."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from app.price_alerts.domain.repositories.rule_repository import RuleRepository

# Opens a unit of work (e.g. one database session) and yields a repository
# bound to it. Each alert cycle and each rule submission uses its own scope.
RuleStoreScope = Callable[[], AbstractAsyncContextManager[RuleRepository]]

"""Domain repository interfaces for the price alert monitor.

This module defines the abstract repository interface that establishes the
contract between the domain layer and persistence implementations. Concrete
implementations live in the infrastructure layer
(e.g., backend/app/price_alerts/infrastructure/repositories/).
"""

from app.price_alerts.domain.repositories.rule_repository import RuleRepository

__all__ = ["RuleRepository"]

"""Database infrastructure components.

This module exports SQLAlchemy models, session management utilities,
and the Base class for ORM model definitions.
"""

from app.price_alerts.infrastructure.db.models import (
    Base,
    RuleModel,
    TriggerRecordModel,
)
from app.price_alerts.infrastructure.db.session import (
    dispose_engine,
    get_async_session_local,
    get_db_session,
    get_engine,
    init_models,
)

__all__ = [
    # Base class
    "Base",
    # Models
    "RuleModel",
    "TriggerRecordModel",
    # Session utilities
    "get_engine",
    "get_async_session_local",
    "get_db_session",
    "init_models",
    "dispose_engine",
]

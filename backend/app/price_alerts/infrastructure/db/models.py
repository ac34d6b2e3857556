"""SQLAlchemy ORM models mapping to domain entities.

These models represent the database schema and handle persistence concerns.
They are converted to/from domain entities by the rule repository.
"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
)
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import DeclarativeBase, relationship

from app.price_alerts.domain.entities.rule import RuleKind


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class RuleModel(Base):
    """ORM model for rules table."""

    __tablename__ = "rules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(String(255), nullable=False, index=True)
    asset_id = Column(String(100), nullable=False)
    kind = Column(SQLEnum(RuleKind), nullable=False)
    threshold = Column(Numeric(28, 10), nullable=False)
    quote_currency = Column(String(10), nullable=False, default="usd")
    enabled = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False)

    # Relationships
    history = relationship(
        "TriggerRecordModel", back_populates="rule", cascade="all, delete-orphan"
    )

    # Index for the per-cycle enabled-rule scan
    __table_args__ = (Index("ix_rules_enabled_owner", "enabled", "owner_id"),)

    def __repr__(self) -> str:
        return f"<RuleModel(id={self.id}, asset_id='{self.asset_id}', kind={self.kind})>"


class TriggerRecordModel(Base):
    """ORM model for rule_history table."""

    __tablename__ = "rule_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    rule_id = Column(Integer, ForeignKey("rules.id"), nullable=False, index=True)
    price = Column(Numeric(28, 10), nullable=False)
    triggered_at = Column(DateTime(timezone=True), nullable=False)

    # Relationships
    rule = relationship("RuleModel", back_populates="history")

    def __repr__(self) -> str:
        return f"<TriggerRecordModel(id={self.id}, rule_id={self.rule_id}, price={self.price})>"

"""Goal ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, Integer, String, Text, func, text as sa_text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from dailystride.db.base import Base


class Goal(Base):
    __tablename__ = "goals"
    __table_args__ = (Index("ix_goals_user_id", "user_id"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    deadline = Column(Date, nullable=False)
    progress = Column(Integer, nullable=False, default=0, server_default=sa_text("0"))
    # Per-goal override of settings.planning_mode; NULL follows the global setting.
    planning_mode = Column(String(length=20), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    user = relationship("User", back_populates="goals")
    tasks = relationship(
        "DailyTask",
        back_populates="goal",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

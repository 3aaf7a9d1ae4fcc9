"""Daily task ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Index, Integer, String, Text, func, text as sa_text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from dailystride.db.base import Base

TASK_STATUSES = ("PENDING", "COMPLETED", "SKIPPED")


class DailyTask(Base):
    __tablename__ = "daily_tasks"
    __table_args__ = (
        Index("ix_daily_tasks_goal_id_date", "goal_id", "date"),
        CheckConstraint("difficulty BETWEEN 1 AND 5", name="ck_daily_tasks_difficulty"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    goal_id = Column(UUID(as_uuid=True), ForeignKey("goals.id", ondelete="CASCADE"), nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    date = Column(Date, nullable=False)
    difficulty = Column(Integer, nullable=False, default=1, server_default=sa_text("1"))
    status = Column(String(length=20), nullable=False, default="PENDING", server_default=sa_text("'PENDING'"))
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    goal = relationship("Goal", back_populates="tasks")

"""Schemas for goals."""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dailystride.core.dates import parse_date
from dailystride.services.task_planner import PlanningMode


def _coerce_deadline(value: Any) -> Any:
    if isinstance(value, str):
        return parse_date(value)
    return value


class GoalCreateRequest(BaseModel):
    user_id: UUID
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None
    deadline: date
    progress: int = Field(default=0, ge=0, le=100)
    planning_mode: Optional[PlanningMode] = None

    @field_validator("deadline", mode="before")
    @classmethod
    def _parse_deadline(cls, value: Any) -> Any:
        return _coerce_deadline(value)


class GoalUpdateRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    description: Optional[str] = None
    deadline: Optional[date] = None
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    planning_mode: Optional[PlanningMode] = None

    @field_validator("deadline", mode="before")
    @classmethod
    def _parse_deadline(cls, value: Any) -> Any:
        return _coerce_deadline(value)


class GoalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    title: str
    description: Optional[str]
    deadline: date
    progress: int
    planning_mode: Optional[str]
    created_at: datetime
    updated_at: datetime

"""Schemas for daily tasks and generation plans."""
from __future__ import annotations

import datetime as dt
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from dailystride.services.task_planner import PlanningMode


class DailyTaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    goal_id: UUID
    title: str
    description: Optional[str]
    date: dt.date
    difficulty: int
    status: str
    created_at: dt.datetime
    updated_at: dt.datetime


class PlanResponse(BaseModel):
    final_task_count: int
    final_difficulty: int
    carry_over_ratio: float
    strategy_name: Optional[str]
    completion_ratio: float
    consecutive_missed_days: int
    mode: PlanningMode


class GenerateTasksRequest(BaseModel):
    mode: Optional[PlanningMode] = None


class GenerateTasksResponse(BaseModel):
    goal_id: UUID
    created: bool
    plan: Optional[PlanResponse]
    tasks: List[DailyTaskResponse]
    request_id: Optional[str] = None


class TaskStatusUpdateRequest(BaseModel):
    status: Literal["PENDING", "COMPLETED", "SKIPPED"]

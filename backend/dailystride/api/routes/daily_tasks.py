"""Daily task API routes: today's tasks, generation, history and status."""
from __future__ import annotations

from time import perf_counter
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, Request
from sqlalchemy.orm import Session

from dailystride.api.deps import get_task_composer
from dailystride.api.errors import to_http_exception
from dailystride.api.schemas.daily_task import (
    DailyTaskResponse,
    GenerateTasksRequest,
    GenerateTasksResponse,
    PlanResponse,
    TaskStatusUpdateRequest,
)
from dailystride.core.errors import DailyStrideError
from dailystride.db.deps import get_db
from dailystride.observability.metrics import log_metric
from dailystride.observability.tracing import trace
from dailystride.services import daily_tasks as daily_task_service
from dailystride.services.daily_tasks import TaskPeriod
from dailystride.services.task_composer import TaskComposer

router = APIRouter(prefix="/goals", tags=["daily-tasks"])


@router.get("/{goal_id}/today-tasks", response_model=List[DailyTaskResponse])
def get_today_tasks(goal_id: UUID, db: Session = Depends(get_db)) -> List[DailyTaskResponse]:
    try:
        tasks = daily_task_service.get_today_tasks(db, goal_id)
    except DailyStrideError as exc:
        raise to_http_exception(exc) from exc
    return [DailyTaskResponse.model_validate(task) for task in tasks]


@router.post("/{goal_id}/generate-tasks", response_model=GenerateTasksResponse)
def generate_tasks(
    goal_id: UUID,
    http_request: Request,
    payload: Optional[GenerateTasksRequest] = Body(default=None),
    db: Session = Depends(get_db),
    composer: TaskComposer = Depends(get_task_composer),
) -> GenerateTasksResponse:
    """Generate today's tasks for a goal, or return them if they already exist."""
    request_id = getattr(http_request.state, "request_id", None)
    mode = payload.mode if payload else None
    start = perf_counter()

    with trace(
        "daily_tasks.generate_route",
        metadata={"route": "/goals/{goal_id}/generate-tasks", "mode": mode.value if mode else None},
        goal_id=str(goal_id),
        request_id=request_id,
    ):
        try:
            result = daily_task_service.generate_tasks_for_today(db, goal_id, composer=composer, mode=mode)
        except DailyStrideError as exc:
            raise to_http_exception(exc) from exc

    latency_ms = (perf_counter() - start) * 1000
    log_metric("daily_tasks.generate.latency_ms", latency_ms, metadata={"created": result.created})

    plan = PlanResponse(**result.plan.to_dict()) if result.plan else None
    return GenerateTasksResponse(
        goal_id=goal_id,
        created=result.created,
        plan=plan,
        tasks=[DailyTaskResponse.model_validate(task) for task in result.tasks],
        request_id=request_id,
    )


@router.get("/{goal_id}/tasks", response_model=List[DailyTaskResponse])
def list_tasks(
    goal_id: UUID,
    period: TaskPeriod = Query(TaskPeriod.ALL_TIME),
    db: Session = Depends(get_db),
) -> List[DailyTaskResponse]:
    try:
        tasks = daily_task_service.list_tasks(db, goal_id, period)
    except DailyStrideError as exc:
        raise to_http_exception(exc) from exc
    return [DailyTaskResponse.model_validate(task) for task in tasks]


@router.patch("/tasks/{task_id}/status", response_model=DailyTaskResponse)
def update_task_status(
    task_id: UUID,
    payload: TaskStatusUpdateRequest,
    http_request: Request,
    db: Session = Depends(get_db),
) -> DailyTaskResponse:
    request_id = getattr(http_request.state, "request_id", None)
    with trace(
        "daily_tasks.update_status",
        metadata={"task_id": str(task_id), "status": payload.status},
        request_id=request_id,
    ):
        try:
            task = daily_task_service.update_task_status(db, task_id, payload.status)
        except DailyStrideError as exc:
            raise to_http_exception(exc) from exc
    return DailyTaskResponse.model_validate(task)

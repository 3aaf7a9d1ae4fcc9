"""Goal CRUD API routes."""
from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from dailystride.api.errors import to_http_exception
from dailystride.api.schemas.goal import GoalCreateRequest, GoalResponse, GoalUpdateRequest
from dailystride.core.errors import DailyStrideError
from dailystride.db.deps import get_db
from dailystride.observability.metrics import log_metric
from dailystride.observability.tracing import trace
from dailystride.services import goal_service

router = APIRouter(prefix="/goals", tags=["goals"])


@router.post("", response_model=GoalResponse, status_code=status.HTTP_201_CREATED)
def create_goal(
    payload: GoalCreateRequest,
    http_request: Request,
    db: Session = Depends(get_db),
) -> GoalResponse:
    request_id = getattr(http_request.state, "request_id", None)
    with trace(
        "goal.create",
        metadata={"route": "/goals", "user_id": str(payload.user_id)},
        request_id=request_id,
    ):
        try:
            goal = goal_service.create_goal(
                db,
                user_id=payload.user_id,
                title=payload.title,
                description=payload.description,
                deadline=payload.deadline,
                progress=payload.progress,
                planning_mode=payload.planning_mode,
            )
        except DailyStrideError as exc:
            raise to_http_exception(exc) from exc
    log_metric("goals.created", 1, metadata={"user_id": str(payload.user_id)})
    return GoalResponse.model_validate(goal)


@router.get("", response_model=List[GoalResponse])
def list_goals(
    user_id: UUID = Query(..., description="User owning the goals"),
    db: Session = Depends(get_db),
) -> List[GoalResponse]:
    try:
        goals = goal_service.list_goals(db, user_id)
    except DailyStrideError as exc:
        raise to_http_exception(exc) from exc
    return [GoalResponse.model_validate(goal) for goal in goals]


@router.get("/{goal_id}", response_model=GoalResponse)
def get_goal(goal_id: UUID, db: Session = Depends(get_db)) -> GoalResponse:
    try:
        goal = goal_service.get_goal(db, goal_id)
    except DailyStrideError as exc:
        raise to_http_exception(exc) from exc
    return GoalResponse.model_validate(goal)


@router.patch("/{goal_id}", response_model=GoalResponse)
def update_goal(
    goal_id: UUID,
    payload: GoalUpdateRequest,
    db: Session = Depends(get_db),
) -> GoalResponse:
    changes = payload.model_dump(exclude_unset=True)
    try:
        goal = goal_service.update_goal(db, goal_id, **changes)
    except DailyStrideError as exc:
        raise to_http_exception(exc) from exc
    return GoalResponse.model_validate(goal)


@router.delete("/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_goal(goal_id: UUID, db: Session = Depends(get_db)) -> Response:
    try:
        goal_service.delete_goal(db, goal_id)
    except DailyStrideError as exc:
        raise to_http_exception(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)

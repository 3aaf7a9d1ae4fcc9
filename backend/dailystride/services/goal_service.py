"""Goal CRUD helpers."""
from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dailystride.core.errors import InvalidInput, NotFound, PersistenceFailure
from dailystride.db.models.goal import Goal
from dailystride.services.task_planner import PlanningMode
from dailystride.services.user_service import get_user

logger = logging.getLogger(__name__)

_UNSET = object()


def _validate_mode(mode: Optional[str]) -> Optional[str]:
    if mode is None:
        return None
    try:
        return PlanningMode(mode).value
    except ValueError as exc:
        raise InvalidInput(f"Unknown planning mode: {mode}") from exc


def _validate_progress(progress: int) -> int:
    if not 0 <= progress <= 100:
        raise InvalidInput("Progress must be between 0 and 100")
    return progress


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceFailure(f"Could not {action} goal") from exc


def create_goal(
    db: Session,
    *,
    user_id: UUID,
    title: str,
    deadline: date,
    description: Optional[str] = None,
    progress: int = 0,
    planning_mode: Optional[str] = None,
) -> Goal:
    get_user(db, user_id)
    if not title.strip():
        raise InvalidInput("Goal title must not be empty")

    goal = Goal(
        user_id=user_id,
        title=title.strip(),
        description=description,
        deadline=deadline,
        progress=_validate_progress(progress),
        planning_mode=_validate_mode(planning_mode),
    )
    db.add(goal)
    _commit(db, "create")
    db.refresh(goal)
    logger.info("Created goal %s for user %s", goal.id, user_id)
    return goal


def get_goal(db: Session, goal_id: UUID) -> Goal:
    goal = db.get(Goal, goal_id)
    if goal is None:
        raise NotFound("Goal", goal_id)
    return goal


def list_goals(db: Session, user_id: UUID) -> List[Goal]:
    get_user(db, user_id)
    return db.query(Goal).filter(Goal.user_id == user_id).order_by(desc(Goal.created_at)).all()


def update_goal(
    db: Session,
    goal_id: UUID,
    *,
    title: Optional[str] = None,
    description=_UNSET,
    deadline: Optional[date] = None,
    progress: Optional[int] = None,
    planning_mode=_UNSET,
) -> Goal:
    """Apply a partial update; ``planning_mode=None`` clears the per-goal override."""
    goal = get_goal(db, goal_id)
    if title is not None:
        if not title.strip():
            raise InvalidInput("Goal title must not be empty")
        goal.title = title.strip()
    if description is not _UNSET:
        goal.description = description
    if deadline is not None:
        goal.deadline = deadline
    if progress is not None:
        goal.progress = _validate_progress(progress)
    if planning_mode is not _UNSET:
        goal.planning_mode = _validate_mode(planning_mode)

    _commit(db, "update")
    db.refresh(goal)
    return goal


def delete_goal(db: Session, goal_id: UUID) -> None:
    goal = get_goal(db, goal_id)
    db.delete(goal)
    _commit(db, "delete")
    logger.info("Deleted goal %s", goal_id)

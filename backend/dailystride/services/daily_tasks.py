"""Daily task history, generation and status management."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from threading import Lock
from typing import Dict, List, Optional, Sequence
from uuid import UUID
from weakref import WeakValueDictionary

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dailystride.core.config import settings
from dailystride.core.dates import days_ago, days_between, today_utc, utcnow
from dailystride.core.errors import InvalidInput, NotFound, PersistenceFailure
from dailystride.db.models.daily_task import TASK_STATUSES, DailyTask
from dailystride.db.models.goal import Goal
from dailystride.observability.metrics import log_metric
from dailystride.observability.tracing import trace
from dailystride.services.fallback_tasks import GeneratedTask
from dailystride.services.task_composer import MISSED_CONTEXT_LIMIT, GoalSummary, TaskComposer
from dailystride.services.task_planner import (
    STATUS_PENDING,
    AdaptivePlan,
    PlanningMode,
    TaskRecord,
    get_planning_strategy,
)

logger = logging.getLogger(__name__)

# Entries vanish once no request holds the goal's lock.
_goal_locks: "WeakValueDictionary[UUID, Lock]" = WeakValueDictionary()
_goal_locks_guard = Lock()


class TaskPeriod(str, Enum):
    LAST_DAY = "LastDay"
    LAST_WEEK = "LastWeek"
    LAST_MONTH = "LastMonth"
    ALL_TIME = "AllTime"


PERIOD_DAYS: Dict[TaskPeriod, Optional[int]] = {
    TaskPeriod.LAST_DAY: 1,
    TaskPeriod.LAST_WEEK: 7,
    TaskPeriod.LAST_MONTH: 30,
    TaskPeriod.ALL_TIME: None,
}


@dataclass
class GenerationResult:
    tasks: List[DailyTask]
    plan: Optional[AdaptivePlan]
    created: bool


def _goal_lock(goal_id: UUID) -> Lock:
    with _goal_locks_guard:
        lock = _goal_locks.get(goal_id)
        if lock is None:
            lock = Lock()
            _goal_locks[goal_id] = lock
        return lock


def to_record(task: DailyTask) -> TaskRecord:
    return TaskRecord(
        id=task.id,
        goal_id=task.goal_id,
        title=task.title,
        description=task.description,
        date=task.date,
        difficulty=task.difficulty,
        status=task.status,
        created_at=task.created_at,
    )


def get_goal(db: Session, goal_id: UUID, *, for_update: bool = False) -> Goal:
    stmt = select(Goal).where(Goal.id == goal_id)
    if for_update:
        stmt = stmt.with_for_update()
    goal = db.execute(stmt).scalar_one_or_none()
    if goal is None:
        raise NotFound("Goal", goal_id)
    return goal


def get_task_history(db: Session, goal_id: UUID) -> List[TaskRecord]:
    """Return every task of a goal, newest day first and creation order within a day."""
    get_goal(db, goal_id)
    stmt = (
        select(DailyTask)
        .where(DailyTask.goal_id == goal_id)
        .order_by(DailyTask.date.desc(), DailyTask.created_at.asc())
    )
    return [to_record(task) for task in db.execute(stmt).scalars()]


def recent_missed_tasks(history: Sequence[TaskRecord], limit: int = MISSED_CONTEXT_LIMIT) -> List[TaskRecord]:
    return [task for task in history if task.missed][:limit]


def get_today_tasks(db: Session, goal_id: UUID, now: Optional[datetime] = None) -> List[DailyTask]:
    get_goal(db, goal_id)
    return _tasks_for_day(db, goal_id, today_utc(now))


def _tasks_for_day(db: Session, goal_id: UUID, day: date) -> List[DailyTask]:
    stmt = (
        select(DailyTask)
        .where(DailyTask.goal_id == goal_id, DailyTask.date == day)
        .order_by(DailyTask.created_at.asc())
    )
    return list(db.execute(stmt).scalars())


def resolve_planning_mode(requested: PlanningMode | str | None, goal: Goal) -> PlanningMode:
    """Request override wins, then the goal's column, then ``settings.planning_mode``."""
    for candidate in (requested, goal.planning_mode, settings.planning_mode):
        if candidate is None:
            continue
        try:
            return PlanningMode(candidate)
        except ValueError as exc:
            raise InvalidInput(f"Unknown planning mode: {candidate}") from exc
    return PlanningMode.ADAPTIVE


def save_generated_tasks(
    db: Session,
    goal_id: UUID,
    generated: Sequence[GeneratedTask],
    plan: AdaptivePlan,
    day: date,
    now: datetime,
) -> List[DailyTask]:
    """Add one PENDING row per generated task; the caller commits.

    Rows carry the plan difficulty and creation stamps one microsecond apart so
    the batch keeps its order on backends with coarse ``now()``.
    """
    rows: List[DailyTask] = []
    for index, item in enumerate(generated):
        row = DailyTask(
            goal_id=goal_id,
            title=item.title,
            description=item.description,
            date=day,
            difficulty=plan.final_difficulty,
            status=STATUS_PENDING,
            created_at=now + timedelta(microseconds=index),
            updated_at=now + timedelta(microseconds=index),
        )
        db.add(row)
        rows.append(row)
    return rows


def generate_tasks_for_today(
    db: Session,
    goal_id: UUID,
    *,
    composer: TaskComposer,
    mode: PlanningMode | str | None = None,
    now: Optional[datetime] = None,
) -> GenerationResult:
    """Return today's tasks for a goal, generating and persisting them once per day."""
    now = now or utcnow()
    today = today_utc(now)

    with _goal_lock(goal_id), trace("daily_tasks.generate", goal_id=str(goal_id)) as generate_trace:
        goal = get_goal(db, goal_id, for_update=True)

        existing = _tasks_for_day(db, goal_id, today)
        if existing:
            logger.info("Goal %s already has %s tasks for %s", goal_id, len(existing), today)
            db.commit()
            return GenerationResult(tasks=existing, plan=None, created=False)

        planning_mode = resolve_planning_mode(mode, goal)
        history = get_task_history(db, goal_id)
        days_until_deadline = days_between(now, goal.deadline)

        plan = get_planning_strategy(planning_mode).build_plan(history, now, days_until_deadline)
        logger.info(
            "Planned %s tasks at difficulty %s for goal %s (mode=%s strategy=%s)",
            plan.final_task_count,
            plan.final_difficulty,
            goal_id,
            plan.mode.value,
            plan.strategy_name,
        )

        summary = GoalSummary(
            title=goal.title,
            description=goal.description,
            deadline=goal.deadline,
            progress=goal.progress,
        )
        generated = composer.compose_tasks(
            summary,
            history,
            recent_missed_tasks(history),
            plan,
            days_until_deadline,
        )

        try:
            rows = save_generated_tasks(db, goal_id, generated, plan, today, now)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Failed to persist generated tasks for goal %s", goal_id)
            raise PersistenceFailure(f"Could not save tasks for goal {goal_id}") from exc

        for row in rows:
            db.refresh(row)

        if generate_trace:
            generate_trace.update(
                metadata={
                    "plan": plan.to_dict(),
                    "plan_metrics": dict(plan.metrics),
                    "task_ids": [str(row.id) for row in rows],
                }
            )

    log_metric("daily_tasks.generated", len(rows), metadata={"mode": plan.mode.value, "strategy": plan.strategy_name})
    return GenerationResult(tasks=rows, plan=plan, created=True)


def update_task_status(db: Session, task_id: UUID, status: str) -> DailyTask:
    """Overwrite a task's status; any transition between known statuses is allowed."""
    if status not in TASK_STATUSES:
        raise InvalidInput(f"Invalid task status: {status}")
    task = db.get(DailyTask, task_id)
    if task is None:
        raise NotFound("Task", task_id)

    previous = task.status
    task.status = status
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceFailure(f"Could not update task {task_id}") from exc
    db.refresh(task)
    logger.info("Task %s status %s -> %s", task_id, previous, status)
    log_metric("daily_tasks.status_updated", 1, metadata={"from": previous, "to": status})
    return task


def list_tasks(
    db: Session,
    goal_id: UUID,
    period: TaskPeriod | str = TaskPeriod.ALL_TIME,
    now: Optional[datetime] = None,
) -> List[DailyTask]:
    """Return a goal's tasks for a period, newest day first."""
    try:
        period = TaskPeriod(period)
    except ValueError as exc:
        raise InvalidInput(f"Invalid period: {period}") from exc

    get_goal(db, goal_id)
    stmt = select(DailyTask).where(DailyTask.goal_id == goal_id)
    days = PERIOD_DAYS[period]
    if days is not None:
        stmt = stmt.where(DailyTask.date >= days_ago(days, now or utcnow()).date())
    stmt = stmt.order_by(DailyTask.date.desc(), DailyTask.created_at.asc())
    return list(db.execute(stmt).scalars())

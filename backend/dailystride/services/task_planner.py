"""Adaptive task planning: how many tasks to hand out today and how hard they are.

Two generations of the algorithm are kept side by side:

* ``adaptive`` (primary) inspects a three-day window, classifies the user into
  one of five strategies and decides which share of today's tasks should be
  simplified carry-overs of missed work.
* ``legacy`` looks only at the most recent day and tunes count/difficulty
  without any carry-over concept. Goals created before the adaptive engine
  rely on its numbers, so it stays selectable.

Both are pure functions of their inputs.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional, Sequence
from uuid import UUID

from dailystride.core.dates import date_key, days_ago

DEFAULT_TASK_COUNT = 3
DEFAULT_DIFFICULTY = 2
MIN_TASK_COUNT = 1
MAX_TASK_COUNT = 6
MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 5

RECENT_WINDOW_DAYS = 3

LEGACY_DEFAULT_COUNT = 3
LEGACY_DEFAULT_DIFFICULTY = 1
LEGACY_MIN_TASK_COUNT = 2
LEGACY_MAX_TASK_COUNT = 8

STATUS_PENDING = "PENDING"
STATUS_COMPLETED = "COMPLETED"
STATUS_SKIPPED = "SKIPPED"


class Strategy(str, Enum):
    PROGRESSIVE = "PROGRESSIVE"
    BALANCED = "BALANCED"
    RECOVERY = "RECOVERY"
    RESET = "RESET"
    INTERVENTION = "INTERVENTION"


class PlanningMode(str, Enum):
    ADAPTIVE = "adaptive"
    LEGACY = "legacy"


CARRY_OVER_RATIOS: Dict[Strategy, float] = {
    Strategy.INTERVENTION: 0.8,
    Strategy.PROGRESSIVE: 0.0,
    Strategy.BALANCED: 0.2,
    Strategy.RECOVERY: 0.5,
    Strategy.RESET: 0.7,
}


@dataclass(frozen=True)
class TaskRecord:
    """A previously generated task as seen by the planner."""

    date: date
    difficulty: int
    status: str
    title: str = ""
    description: Optional[str] = None
    id: Optional[UUID] = None
    goal_id: Optional[UUID] = None
    created_at: Optional[datetime] = None

    @property
    def completed(self) -> bool:
        return self.status == STATUS_COMPLETED

    @property
    def missed(self) -> bool:
        return self.status in (STATUS_PENDING, STATUS_SKIPPED)


@dataclass(frozen=True)
class AdaptivePlan:
    final_task_count: int
    final_difficulty: int
    carry_over_ratio: float
    strategy_name: Optional[str]
    completion_ratio: float
    consecutive_missed_days: int
    mode: PlanningMode = PlanningMode.ADAPTIVE
    metrics: Dict[str, float] = field(default_factory=dict, compare=False)

    def to_dict(self) -> Dict[str, object]:
        return {
            "final_task_count": self.final_task_count,
            "final_difficulty": self.final_difficulty,
            "carry_over_ratio": self.carry_over_ratio,
            "strategy_name": self.strategy_name,
            "completion_ratio": self.completion_ratio,
            "consecutive_missed_days": self.consecutive_missed_days,
            "mode": self.mode.value,
        }


@dataclass(frozen=True)
class TaskParameters:
    count: int
    difficulty: int


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives (2.5 -> 3), unlike built-in round()."""
    return math.floor(value + 0.5)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def cold_start_plan() -> AdaptivePlan:
    return AdaptivePlan(
        final_task_count=DEFAULT_TASK_COUNT,
        final_difficulty=DEFAULT_DIFFICULTY,
        carry_over_ratio=0.0,
        strategy_name=Strategy.BALANCED.value,
        completion_ratio=0.0,
        consecutive_missed_days=0,
        metrics={
            "window_size": 0.0,
            "avg_difficulty": float(DEFAULT_DIFFICULTY),
            "avg_task_count": float(DEFAULT_TASK_COUNT),
            "urgency_multiplier": 1.0,
        },
    )


def group_by_day(tasks: Sequence[TaskRecord]) -> Dict[str, List[TaskRecord]]:
    """Group tasks by date key, preserving the input order inside each day."""
    grouped: Dict[str, List[TaskRecord]] = {}
    for task in tasks:
        grouped.setdefault(date_key(task.date), []).append(task)
    return grouped


def count_consecutive_missed_days(tasks: Sequence[TaskRecord]) -> int:
    """Length of the run of fully-missed days, starting from the most recent day."""
    grouped = group_by_day(tasks)
    streak = 0
    for key in sorted(grouped.keys(), reverse=True):
        if any(task.completed for task in grouped[key]):
            break
        streak += 1
    return streak


def urgency_multiplier(days_until_deadline: int) -> float:
    if days_until_deadline <= 7:
        return 1.2
    if days_until_deadline <= 30:
        return 1.1
    return 1.0


def select_strategy(completion_ratio: float, consecutive_missed_days: int) -> Strategy:
    """Priority order: INTERVENTION > PROGRESSIVE > BALANCED > RECOVERY > RESET."""
    if consecutive_missed_days >= 3:
        return Strategy.INTERVENTION
    if completion_ratio >= 0.8:
        return Strategy.PROGRESSIVE
    if completion_ratio >= 0.5:
        return Strategy.BALANCED
    if completion_ratio >= 0.2:
        return Strategy.RECOVERY
    return Strategy.RESET


def compute_adaptive_plan(
    recent_tasks: Sequence[TaskRecord],
    now: datetime,
    days_until_deadline: int,
) -> AdaptivePlan:
    """Derive today's plan from recent history.

    Total over any well-formed input: empty history, zero or negative
    ``days_until_deadline`` and histories older than the window all produce a
    bounded plan.
    """
    if not recent_tasks:
        return cold_start_plan()

    window_start = days_ago(RECENT_WINDOW_DAYS, now).date()
    window = [task for task in recent_tasks if task.date >= window_start]

    total = len(window)
    completed = sum(1 for task in window if task.completed)
    completion_ratio = completed / total if total else 0.0

    consecutive_missed_days = count_consecutive_missed_days(window)

    distinct_days = len(group_by_day(window))
    avg_difficulty = sum(task.difficulty for task in window) / total if total else float(DEFAULT_DIFFICULTY)
    avg_task_count = total / distinct_days if distinct_days else float(DEFAULT_TASK_COUNT)

    strategy = select_strategy(completion_ratio, consecutive_missed_days)
    multiplier = 1.0

    if strategy is Strategy.INTERVENTION:
        difficulty = max(MIN_DIFFICULTY, math.floor(avg_difficulty) - 1)
        count = max(MIN_TASK_COUNT, math.floor(avg_task_count) - 1)
    elif strategy is Strategy.PROGRESSIVE:
        multiplier = urgency_multiplier(days_until_deadline)
        difficulty = min(MAX_DIFFICULTY, math.ceil(avg_difficulty) + 1)
        count = min(MAX_TASK_COUNT, math.ceil(avg_task_count * multiplier) + 1)
    elif strategy is Strategy.BALANCED:
        difficulty = round_half_up(avg_difficulty)
        count = round_half_up(avg_task_count)
    elif strategy is Strategy.RECOVERY:
        difficulty = max(MIN_DIFFICULTY, math.floor(avg_difficulty) - 1)
        count = max(MIN_TASK_COUNT, math.floor(avg_task_count))
    else:
        difficulty = max(MIN_DIFFICULTY, math.floor(avg_difficulty) - 1)
        count = max(MIN_TASK_COUNT, math.floor(avg_task_count) - 1)

    return AdaptivePlan(
        final_task_count=int(_clamp(count, MIN_TASK_COUNT, MAX_TASK_COUNT)),
        final_difficulty=int(_clamp(difficulty, MIN_DIFFICULTY, MAX_DIFFICULTY)),
        carry_over_ratio=float(_clamp(CARRY_OVER_RATIOS[strategy], 0.0, 1.0)),
        strategy_name=strategy.value,
        completion_ratio=completion_ratio,
        consecutive_missed_days=consecutive_missed_days,
        metrics={
            "window_size": float(total),
            "avg_difficulty": avg_difficulty,
            "avg_task_count": avg_task_count,
            "urgency_multiplier": multiplier,
        },
    )


def calculate_task_parameters(
    previous_tasks: Sequence[TaskRecord],
    days_until_deadline: int,
) -> TaskParameters:
    """Legacy count/difficulty rules driven by the most recent day only.

    ``previous_tasks`` is expected newest day first; within the most recent
    day the first task is treated as the reference for difficulty bumps.
    """
    if not previous_tasks:
        return TaskParameters(count=LEGACY_DEFAULT_COUNT, difficulty=LEGACY_DEFAULT_DIFFICULTY)

    grouped = group_by_day(previous_tasks)
    most_recent_tasks = grouped[max(grouped.keys())]

    total = len(most_recent_tasks)
    completion_rate = sum(1 for task in most_recent_tasks if task.completed) / total

    completed_tasks = [task for task in previous_tasks if task.completed]
    if completed_tasks:
        avg_completed_difficulty = sum(task.difficulty for task in completed_tasks) / len(completed_tasks)
    else:
        avg_completed_difficulty = 1.0

    count = total
    if completion_rate == 1:
        count = total + 1
        difficulty = min(most_recent_tasks[0].difficulty + 1, MAX_DIFFICULTY)
    elif completion_rate >= 0.7:
        difficulty = min(round_half_up(avg_completed_difficulty + 0.5), MAX_DIFFICULTY)
    else:
        difficulty = max(round_half_up(avg_completed_difficulty), MIN_DIFFICULTY)

    if 0 < days_until_deadline <= 7:
        count = min(count + 1, LEGACY_MAX_TASK_COUNT)
        difficulty = min(difficulty + 1, MAX_DIFFICULTY)

    count = int(_clamp(count, LEGACY_MIN_TASK_COUNT, LEGACY_MAX_TASK_COUNT))
    difficulty = int(_clamp(difficulty, MIN_DIFFICULTY, MAX_DIFFICULTY))
    return TaskParameters(count=count, difficulty=difficulty)


def _most_recent_completion_rate(previous_tasks: Sequence[TaskRecord]) -> float:
    if not previous_tasks:
        return 0.0
    grouped = group_by_day(previous_tasks)
    latest = grouped[max(grouped.keys())]
    return sum(1 for task in latest if task.completed) / len(latest)


class PlanningStrategy:
    """Base interface for plan builders."""

    mode: PlanningMode

    def build_plan(
        self,
        history: Sequence[TaskRecord],
        now: datetime,
        days_until_deadline: int,
    ) -> AdaptivePlan:
        raise NotImplementedError


class AdaptiveStrategy(PlanningStrategy):
    mode = PlanningMode.ADAPTIVE

    def build_plan(
        self,
        history: Sequence[TaskRecord],
        now: datetime,
        days_until_deadline: int,
    ) -> AdaptivePlan:
        return compute_adaptive_plan(history, now, days_until_deadline)


class LegacyStrategy(PlanningStrategy):
    mode = PlanningMode.LEGACY

    def build_plan(
        self,
        history: Sequence[TaskRecord],
        now: datetime,
        days_until_deadline: int,
    ) -> AdaptivePlan:
        params = calculate_task_parameters(history, days_until_deadline)
        return AdaptivePlan(
            final_task_count=params.count,
            final_difficulty=params.difficulty,
            carry_over_ratio=0.0,
            strategy_name=None,
            completion_ratio=_most_recent_completion_rate(history),
            consecutive_missed_days=0,
            mode=PlanningMode.LEGACY,
        )


_STRATEGIES: Dict[PlanningMode, PlanningStrategy] = {
    PlanningMode.ADAPTIVE: AdaptiveStrategy(),
    PlanningMode.LEGACY: LegacyStrategy(),
}


def get_planning_strategy(mode: PlanningMode | str | None) -> PlanningStrategy:
    """Return the strategy for ``mode``; ``None`` selects the adaptive engine."""
    if mode is None:
        return _STRATEGIES[PlanningMode.ADAPTIVE]
    try:
        return _STRATEGIES[PlanningMode(mode)]
    except ValueError as exc:
        raise ValueError(f"Unknown planning mode: {mode}") from exc

"""Compose today's tasks from a plan, blending adapted carry-overs with new work."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from dailystride.core.errors import GeneratorUnavailable
from dailystride.observability.metrics import log_metric
from dailystride.observability.tracing import trace
from dailystride.services.content.base import ContentGenerator, ContentRequest
from dailystride.services.fallback_tasks import GeneratedTask, build_fallback_tasks
from dailystride.services.task_planner import (
    MAX_DIFFICULTY,
    MIN_DIFFICULTY,
    AdaptivePlan,
    TaskRecord,
    round_half_up,
)

logger = logging.getLogger(__name__)

HISTORY_CONTEXT_LIMIT = 10
MISSED_CONTEXT_LIMIT = 5

ADAPTATION_INSTRUCTIONS = [
    "Adapted tasks must reduce the scope, duration or complexity of the original missed task.",
    "Never repeat a missed task's title verbatim; rephrase it as a smaller step.",
]


@dataclass(frozen=True)
class GoalSummary:
    title: str
    description: Optional[str]
    deadline: Any
    progress: int


def split_counts(plan: AdaptivePlan) -> tuple[int, int]:
    """Return (adapted_count, new_count) for a plan."""
    adapted = round_half_up(plan.final_task_count * plan.carry_over_ratio)
    adapted = max(0, min(plan.final_task_count, adapted))
    return adapted, plan.final_task_count - adapted


def _history_entry(task: TaskRecord) -> Dict[str, Any]:
    return {
        "title": task.title,
        "description": task.description,
        "date": task.date.isoformat(),
        "difficulty": task.difficulty,
        "status": task.status,
    }


def _clean_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def sanitize_generated(items: Sequence[Dict[str, Any]], plan: AdaptivePlan) -> List[GeneratedTask]:
    """Trim text, drop blank titles, clamp difficulty and cap at the planned count."""
    tasks: List[GeneratedTask] = []
    for item in items:
        title = _clean_text(item.get("title"))
        if not title:
            continue
        description = _clean_text(item.get("description")) or None
        raw_difficulty = item.get("difficulty")
        if (
            isinstance(raw_difficulty, bool)
            or not isinstance(raw_difficulty, (int, float))
            or not math.isfinite(raw_difficulty)
        ):
            difficulty = plan.final_difficulty
        else:
            difficulty = int(raw_difficulty)
        difficulty = max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, difficulty))
        tasks.append(GeneratedTask(title=title, description=description, difficulty=difficulty))
        if len(tasks) >= plan.final_task_count:
            break
    return tasks


class TaskComposer:
    """Turns an AdaptivePlan into exactly ``final_task_count`` tasks.

    Generator failures never escape: the composer logs them and falls back to
    the deterministic templates.
    """

    def __init__(self, generator: ContentGenerator):
        self.generator = generator

    def build_request(
        self,
        goal: GoalSummary,
        history: Sequence[TaskRecord],
        missed_tasks: Sequence[TaskRecord],
        plan: AdaptivePlan,
        days_until_deadline: int,
    ) -> ContentRequest:
        adapted_count, new_count = split_counts(plan)
        missed = [task for task in missed_tasks if task.missed][:MISSED_CONTEXT_LIMIT]
        return ContentRequest(
            goal_title=goal.title,
            goal_description=goal.description,
            days_until_deadline=days_until_deadline,
            progress=goal.progress,
            task_count=plan.final_task_count,
            difficulty=plan.final_difficulty,
            adapted_count=adapted_count,
            new_count=new_count,
            strategy_name=plan.strategy_name,
            history=[_history_entry(task) for task in history[:HISTORY_CONTEXT_LIMIT]],
            missed_tasks=[_history_entry(task) for task in missed],
            instructions=list(ADAPTATION_INSTRUCTIONS) if adapted_count else [],
        )

    def compose_tasks(
        self,
        goal: GoalSummary,
        history: Sequence[TaskRecord],
        missed_tasks: Sequence[TaskRecord],
        plan: AdaptivePlan,
        days_until_deadline: int,
    ) -> List[GeneratedTask]:
        count = plan.final_task_count
        request = self.build_request(goal, history, missed_tasks, plan, days_until_deadline)

        with trace(
            "daily_tasks.compose",
            metadata={
                "generator": self.generator.name,
                "task_count": count,
                "adapted_count": request.adapted_count,
                "strategy": plan.strategy_name,
            },
        ) as compose_trace:
            tasks = self._generate(request, plan)
            fallback_used = count - len(tasks)
            if fallback_used > 0:
                if tasks:
                    logger.warning("Generated only %s tasks, filling with %s fallback tasks", len(tasks), fallback_used)
                tasks.extend(build_fallback_tasks(fallback_used, plan.final_difficulty))
            if compose_trace:
                compose_trace.update(metadata={"fallback_tasks": fallback_used, "titles": [task.title for task in tasks]})

        log_metric("daily_tasks.compose.fallback_tasks", max(fallback_used, 0), metadata={"generator": self.generator.name})
        return tasks

    def _generate(self, request: ContentRequest, plan: AdaptivePlan) -> List[GeneratedTask]:
        if not self.generator.enabled:
            logger.info("Content generator %s disabled; using fallback tasks", self.generator.name)
            return []
        try:
            tasks = sanitize_generated(self.generator.generate_tasks(request), plan)
        except GeneratorUnavailable as exc:
            logger.warning("Content generation unavailable, using fallback tasks: %s", exc)
            return []
        except Exception:
            logger.exception("Content generator %s failed, using fallback tasks", self.generator.name)
            return []
        if not tasks:
            logger.warning("No valid tasks generated, using fallback tasks")
        return tasks

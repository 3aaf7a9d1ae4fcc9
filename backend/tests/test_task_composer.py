from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Dict, List

from dailystride.core.errors import GeneratorUnavailable
from dailystride.services.content.base import ContentGenerator, ContentRequest
from dailystride.services.content.disabled import DisabledContentGenerator
from dailystride.services.content.openai_generator import parse_tasks_payload
from dailystride.services.fallback_tasks import FALLBACK_TEMPLATES
from dailystride.services.task_composer import GoalSummary, TaskComposer, sanitize_generated, split_counts
from dailystride.services.task_planner import AdaptivePlan, TaskRecord, cold_start_plan

GOAL = GoalSummary(title="Run a marathon", description="Finish under 4h", deadline=date(2026, 6, 1), progress=20)


def _plan(count: int = 3, difficulty: int = 2, ratio: float = 0.0) -> AdaptivePlan:
    return AdaptivePlan(
        final_task_count=count,
        final_difficulty=difficulty,
        carry_over_ratio=ratio,
        strategy_name="BALANCED",
        completion_ratio=0.5,
        consecutive_missed_days=0,
    )


class _StubGenerator(ContentGenerator):
    name = "stub"

    def __init__(self, items: List[Dict[str, Any]] | None = None, error: Exception | None = None):
        self.items = items or []
        self.error = error
        self.requests: List[ContentRequest] = []

    def generate_tasks(self, request: ContentRequest) -> List[Dict[str, Any]]:
        self.requests.append(request)
        if self.error:
            raise self.error
        return self.items


def test_disabled_generator_falls_back_to_templates() -> None:
    composer = TaskComposer(DisabledContentGenerator("no key"))

    tasks = composer.compose_tasks(GOAL, [], [], _plan(count=4, difficulty=2), 30)

    assert len(tasks) == 4
    assert tasks[0].title == FALLBACK_TEMPLATES[2][0]["title"]
    assert tasks[3].title.endswith("(4)")


def test_generated_tasks_are_used_and_shortfall_is_filled() -> None:
    generator = _StubGenerator(
        items=[
            {"title": "  Run 5k easy  ", "description": " Keep it conversational ", "difficulty": 2},
            {"title": "   ", "description": "blank titles are dropped", "difficulty": 2},
            {"title": "Stretch for 10 minutes", "difficulty": 1},
        ]
    )
    composer = TaskComposer(generator)

    tasks = composer.compose_tasks(GOAL, [], [], _plan(count=4, difficulty=2), 30)

    assert [task.title for task in tasks] == [
        "Run 5k easy",
        "Stretch for 10 minutes",
        FALLBACK_TEMPLATES[2][0]["title"],
        FALLBACK_TEMPLATES[2][1]["title"],
    ]
    assert tasks[0].description == "Keep it conversational"
    assert tasks[1].description is None


def test_extra_generated_tasks_are_truncated() -> None:
    items = [{"title": f"Task {idx}", "description": "", "difficulty": 3} for idx in range(6)]
    composer = TaskComposer(_StubGenerator(items=items))

    tasks = composer.compose_tasks(GOAL, [], [], _plan(count=2), 30)

    assert [task.title for task in tasks] == ["Task 0", "Task 1"]


def test_sanitize_clamps_or_defaults_difficulty() -> None:
    items = [
        {"title": "a", "difficulty": 9},
        {"title": "b", "difficulty": 0},
        {"title": "c", "difficulty": "hard"},
        {"title": "d", "difficulty": True},
        {"title": "e"},
    ]

    tasks = sanitize_generated(items, _plan(count=5, difficulty=3))

    assert [task.difficulty for task in tasks] == [5, 1, 3, 3, 3]


def test_generator_errors_never_escape() -> None:
    for error in (GeneratorUnavailable("timeout"), RuntimeError("boom")):
        composer = TaskComposer(_StubGenerator(error=error))

        tasks = composer.compose_tasks(GOAL, [], [], _plan(count=3, difficulty=1), 30)

        assert [task.title for task in tasks] == [template["title"] for template in FALLBACK_TEMPLATES[1]]


def test_request_splits_adapted_and_new_counts() -> None:
    today = date(2026, 3, 10)
    history = [
        TaskRecord(date=today - timedelta(days=idx // 2 + 1), difficulty=2, status="PENDING" if idx % 2 else "COMPLETED", title=f"T{idx}")
        for idx in range(14)
    ]
    missed = [task for task in history if task.missed]
    generator = _StubGenerator(items=[{"title": "x", "difficulty": 2}])
    plan = _plan(count=5, difficulty=2, ratio=0.5)

    TaskComposer(generator).compose_tasks(GOAL, history, missed, plan, 12)

    request = generator.requests[0]
    assert split_counts(plan) == (3, 2)
    assert (request.adapted_count, request.new_count) == (3, 2)
    assert len(request.history) == 10
    assert len(request.missed_tasks) == 5
    assert all(item["status"] == "PENDING" for item in request.missed_tasks)
    assert any("never repeat" in line.lower() for line in request.instructions)
    assert request.goal_title == "Run a marathon"
    assert request.days_until_deadline == 12


def test_no_adaptation_instructions_without_carry_over() -> None:
    generator = _StubGenerator(items=[{"title": "x", "difficulty": 2}])

    TaskComposer(generator).compose_tasks(GOAL, [], [], _plan(count=1, ratio=0.0), 30)

    assert generator.requests[0].adapted_count == 0
    assert generator.requests[0].instructions == []


def test_non_finite_difficulty_falls_back_to_plan_difficulty() -> None:
    items = parse_tasks_payload('{"tasks":[{"title":"Read","difficulty":NaN},{"title":"Write","difficulty":Infinity}]}')
    composer = TaskComposer(_StubGenerator(items=items))

    tasks = composer.compose_tasks(GOAL, [], [], cold_start_plan(), 100)

    assert [task.title for task in tasks[:2]] == ["Read", "Write"]
    assert [task.difficulty for task in tasks[:2]] == [2, 2]
    assert len(tasks) == 3


def test_malformed_generator_items_never_escape() -> None:
    composer = TaskComposer(_StubGenerator(items=["not a mapping"]))  # type: ignore[list-item]

    tasks = composer.compose_tasks(GOAL, [], [], _plan(count=2, difficulty=1), 30)

    assert [task.title for task in tasks] == [template["title"] for template in FALLBACK_TEMPLATES[1][:2]]

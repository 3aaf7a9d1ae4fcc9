from __future__ import annotations

from dailystride.services.fallback_tasks import FALLBACK_TEMPLATES, build_fallback_tasks


def test_fallback_tasks_cycle_templates_and_suffix_repeats() -> None:
    tasks = build_fallback_tasks(5, 3)
    base_titles = [template["title"] for template in FALLBACK_TEMPLATES[3]]

    assert [task.title for task in tasks] == [
        base_titles[0],
        base_titles[1],
        base_titles[2],
        f"{base_titles[0]} (4)",
        f"{base_titles[1]} (5)",
    ]
    assert all(task.difficulty == 3 for task in tasks)
    assert tasks[0].description == FALLBACK_TEMPLATES[3][0]["description"]


def test_fallback_difficulty_is_clamped_to_template_levels() -> None:
    assert build_fallback_tasks(1, 9)[0].title == FALLBACK_TEMPLATES[5][0]["title"]
    assert build_fallback_tasks(1, 9)[0].difficulty == 5
    assert build_fallback_tasks(1, 0)[0].difficulty == 1


def test_fallback_is_deterministic_and_handles_zero() -> None:
    assert build_fallback_tasks(4, 2) == build_fallback_tasks(4, 2)
    assert build_fallback_tasks(0, 2) == []

"""Deterministic task templates used when the content generator cannot help."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass(frozen=True)
class GeneratedTask:
    title: str
    description: Optional[str]
    difficulty: int


FALLBACK_TEMPLATES: Dict[int, List[Dict[str, str]]] = {
    1: [
        {"title": "Take a small step towards your goal", "description": "Spend 5-10 minutes on a simple task"},
        {"title": "Review your goal and plan", "description": "Reflect on your progress and next steps"},
        {"title": "Do a quick practice session", "description": "Focus on one aspect for 10 minutes"},
    ],
    2: [
        {"title": "Complete a focused work session", "description": "Dedicate 20-30 minutes to your goal"},
        {"title": "Practice key skills", "description": "Work on fundamental techniques"},
        {"title": "Review and apply learnings", "description": "Apply what you've learned recently"},
    ],
    3: [
        {"title": "Deep work session", "description": "Spend 45-60 minutes on focused work"},
        {"title": "Tackle a challenging aspect", "description": "Work on something that pushes you"},
        {"title": "Complete a significant milestone", "description": "Make substantial progress today"},
    ],
    4: [
        {"title": "Extended practice session", "description": "Dedicate 1-2 hours to intensive work"},
        {"title": "Challenge yourself significantly", "description": "Push beyond your comfort zone"},
        {"title": "Work on advanced techniques", "description": "Focus on complex aspects of your goal"},
    ],
    5: [
        {"title": "Major milestone work", "description": "Dedicate 2+ hours to a significant achievement"},
        {"title": "Complete a major project component", "description": "Finish an important part of your goal"},
        {"title": "Intensive focus session", "description": "Deep, uninterrupted work on your goal"},
    ],
}

# Indices above this get a " (n)" suffix so repeated templates stay distinguishable.
SUFFIX_AFTER_INDEX = 2


def build_fallback_tasks(count: int, difficulty: int) -> List[GeneratedTask]:
    """Return ``count`` templated tasks for ``difficulty`` (clamped to 1-5)."""
    level = max(1, min(5, difficulty))
    templates = FALLBACK_TEMPLATES[level]
    tasks: List[GeneratedTask] = []
    for index in range(max(0, count)):
        template = templates[index % len(templates)]
        title = template["title"]
        if index > SUFFIX_AFTER_INDEX:
            title = f"{title} ({index + 1})"
        tasks.append(GeneratedTask(title=title, description=template["description"], difficulty=level))
    return tasks

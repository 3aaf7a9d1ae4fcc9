"""Content generator interface."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ContentRequest:
    """Structured parameters for a task-generation call."""

    goal_title: str
    goal_description: Optional[str]
    days_until_deadline: int
    progress: int
    task_count: int
    difficulty: int
    adapted_count: int = 0
    new_count: int = 0
    strategy_name: Optional[str] = None
    history: List[Dict[str, Any]] = field(default_factory=list)
    missed_tasks: List[Dict[str, Any]] = field(default_factory=list)
    instructions: List[str] = field(default_factory=list)


class ContentGenerator:
    """Base interface for task content providers.

    Implementations return raw ``{"title", "description", "difficulty"}``
    mappings and raise ``GeneratorUnavailable`` for every failure mode.
    """

    name = "base"

    @property
    def enabled(self) -> bool:
        return True

    def generate_tasks(self, request: ContentRequest) -> List[Dict[str, Any]]:
        raise NotImplementedError

"""FastAPI dependency providers for services."""
from __future__ import annotations

from dailystride.services.content.factory import get_content_generator
from dailystride.services.task_composer import TaskComposer


def get_task_composer() -> TaskComposer:
    return TaskComposer(get_content_generator())

"""Content generator used when no provider is configured."""
from __future__ import annotations

from typing import Any, Dict, List

from dailystride.core.errors import GeneratorUnavailable
from dailystride.services.content.base import ContentGenerator, ContentRequest


class DisabledContentGenerator(ContentGenerator):
    name = "disabled"

    def __init__(self, reason: str = "content generator not configured"):
        self.reason = reason

    @property
    def enabled(self) -> bool:
        return False

    def generate_tasks(self, request: ContentRequest) -> List[Dict[str, Any]]:
        raise GeneratorUnavailable(self.reason)

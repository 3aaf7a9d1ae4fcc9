"""Content generator factory."""
from __future__ import annotations

import logging
from functools import lru_cache

from dailystride.core.config import settings
from dailystride.services.content.base import ContentGenerator
from dailystride.services.content.disabled import DisabledContentGenerator
from dailystride.services.content.openai_generator import OpenAIContentGenerator

logger = logging.getLogger(__name__)


@lru_cache
def get_content_generator() -> ContentGenerator:
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY not set; daily tasks will use fallback templates.")
        return DisabledContentGenerator("OPENAI_API_KEY not configured")
    return OpenAIContentGenerator(
        api_key=settings.openai_api_key,
        model=settings.content_model,
        temperature=settings.content_temperature,
        timeout=settings.content_timeout_seconds,
        max_retries=settings.content_max_retries,
    )

"""OpenAI-backed task content generator."""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List

import openai

from dailystride.core.errors import GeneratorUnavailable
from dailystride.observability.tracing import trace
from dailystride.services.content.base import ContentGenerator, ContentRequest

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"```(?:json)?\n?")

SYSTEM_PROMPT = (
    "You are an assistant helping users achieve long-term goals through small daily tasks. "
    "Return only JSON. Every task must be specific, actionable and doable within one day."
)

DIFFICULTY_GUIDE = (
    "Difficulty guidelines:\n"
    "- Level 1 (Easy): small, simple actions (5-15 min)\n"
    "- Level 2 (Medium): regular tasks (15-30 min)\n"
    "- Level 3 (Hard): focused work (30-60 min)\n"
    "- Level 4 (Very Hard): challenging tasks (1-2 hours)\n"
    "- Level 5 (Challenging): major milestones (2+ hours)"
)


def render_prompt(request: ContentRequest) -> str:
    """Render a ContentRequest into the user prompt sent to the model."""
    history_lines = [
        f"Day {idx + 1}: \"{item['title']}\" (Difficulty: {item['difficulty']}, Status: {item['status']})"
        for idx, item in enumerate(request.history)
    ]
    missed_lines = [
        f"- \"{item['title']}\" (Difficulty: {item['difficulty']}, Status: {item['status']}, Date: {item['date']})"
        for item in request.missed_tasks
    ]
    sections = [
        "Goal information:",
        f"- Title: {request.goal_title}",
        f"- Description: {request.goal_description or 'No description provided'}",
        f"- Deadline: {request.days_until_deadline} days from now",
        f"- Current progress: {request.progress}%",
        "",
        "Recent task history:",
        "\n".join(history_lines) or "No previous tasks yet",
        "",
        "Recently missed tasks:",
        "\n".join(missed_lines) or "None",
        "",
    ]
    if request.strategy_name:
        sections.append(f"Planning strategy: {request.strategy_name}")
    sections.extend(
        [
            f"Generate EXACTLY {request.task_count} tasks for today at difficulty {request.difficulty} (scale 1-5).",
            f"- {request.adapted_count} task(s) must be adapted from the missed tasks above.",
            f"- {request.new_count} task(s) must be new and different from the recent history.",
        ]
    )
    sections.extend(f"- {line}" for line in request.instructions)
    sections.extend(
        [
            "",
            DIFFICULTY_GUIDE,
            "",
            'Return JSON shaped as {"tasks": [{"title": str, "description": str, "difficulty": int}]}.',
        ]
    )
    return "\n".join(sections)


def parse_tasks_payload(content: str) -> List[Dict[str, Any]]:
    """Strip code fences and return the ``tasks`` list from a model reply."""
    cleaned = _CODE_FENCE.sub("", (content or "").strip()).strip()
    if not cleaned:
        raise GeneratorUnavailable("Empty response from content generator")
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise GeneratorUnavailable("Content generator returned invalid JSON") from exc
    tasks = payload.get("tasks") if isinstance(payload, dict) else None
    if not isinstance(tasks, list):
        raise GeneratorUnavailable("Content generator response is missing a tasks list")
    return [item for item in tasks if isinstance(item, dict)]


class OpenAIContentGenerator(ContentGenerator):
    name = "openai"

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        temperature: float = 0.6,
        timeout: float = 20.0,
        max_retries: int = 1,
    ):
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.timeout = timeout
        self.max_retries = max_retries

    def generate_tasks(self, request: ContentRequest) -> List[Dict[str, Any]]:
        prompt = render_prompt(request)
        with trace(
            "content.generate_tasks",
            metadata={
                "model": self.model,
                "task_count": request.task_count,
                "difficulty": request.difficulty,
                "strategy": request.strategy_name,
                "llm_input_text": prompt[:500],
            },
        ) as generation_trace:
            try:
                client = openai.OpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=self.max_retries)
                completion = client.chat.completions.create(
                    model=self.model,
                    response_format={"type": "json_object"},
                    temperature=self.temperature,
                    messages=[
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": prompt},
                    ],
                )
                content = completion.choices[0].message.content or ""
            except Exception as exc:
                raise GeneratorUnavailable(f"Content generation failed: {exc}") from exc

            logger.debug("Content generator response: %s", content[:200])
            tasks = parse_tasks_payload(content)
            if generation_trace:
                generation_trace.update(metadata={"llm_output_text": content[:500], "returned": len(tasks)})
            return tasks

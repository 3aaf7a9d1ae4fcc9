"""Metric helpers; every metric is also written to the debug log."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from dailystride.observability.client import get_opik_client

logger = logging.getLogger(__name__)


def log_metric(name: str, value: float | int, metadata: Optional[Dict[str, Any]] = None) -> None:
    logger.debug("metric %s=%s %s", name, value, metadata or {})
    client = get_opik_client()
    if not client:
        return

    payload: Dict[str, Any] = {"value": value}
    if metadata:
        payload.update(metadata)

    try:
        client.trace(name=f"metric:{name}", metadata=payload)
    except Exception as exc:  # pragma: no cover
        logger.debug("Unable to record metric %s: %s", name, exc)

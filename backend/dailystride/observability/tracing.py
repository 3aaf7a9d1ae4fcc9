"""Tracing context manager backed by Opik."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Dict, Iterator, Optional

from dailystride.core.context import get_request_id
from dailystride.observability.client import get_opik_client

if TYPE_CHECKING:  # pragma: no cover
    from opik.api_objects.trace.trace_client import Trace

logger = logging.getLogger(__name__)


@contextmanager
def trace(
    name: str,
    metadata: Optional[Dict[str, Any]] = None,
    goal_id: Optional[str] = None,
    request_id: Optional[str] = None,
) -> Iterator[Optional["Trace"]]:
    """
    Open an Opik trace around a block of work.

    Yields ``None`` when tracing is disabled, so callers guard updates with
    ``if span:``. The current request id is attached automatically.
    """
    client = get_opik_client()
    opik_trace: Optional["Trace"] = None

    if client:
        trace_metadata = dict(metadata or {})
        if goal_id:
            trace_metadata.setdefault("goal_id", str(goal_id))
        trace_metadata.setdefault("request_id", request_id or get_request_id())
        try:
            opik_trace = client.trace(name=name, metadata=trace_metadata)
        except Exception as exc:  # pragma: no cover
            logger.debug("Unable to start Opik trace %s: %s", name, exc)
            opik_trace = None

    try:
        yield opik_trace
    except Exception as exc:
        if opik_trace:
            try:
                opik_trace.update(error_info={"exception_type": type(exc).__name__, "message": str(exc)})
            except Exception:  # pragma: no cover
                logger.debug("Failed to attach error info to Opik trace %s", name, exc_info=True)
        raise
    finally:
        if opik_trace:
            try:
                opik_trace.end()
            except Exception:  # pragma: no cover
                logger.debug("Failed to close Opik trace %s", name, exc_info=True)

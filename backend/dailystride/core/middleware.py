"""Custom FastAPI middleware."""
from __future__ import annotations

import logging
from time import perf_counter
from typing import Callable
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from dailystride.core.context import request_id_ctx_var, set_request_id

logger = logging.getLogger("dailystride.http")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Populate request.state.request_id, log the request and echo the id header."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Response]) -> Response:  # type: ignore[override]
        request_id = request.headers.get("X-Request-Id") or str(uuid4())
        request.state.request_id = request_id
        token = set_request_id(request_id)
        start = perf_counter()

        try:
            response = await call_next(request)
            elapsed_ms = (perf_counter() - start) * 1000
            logger.info("%s %s %s %.1fms", request.method, request.url.path, response.status_code, elapsed_ms)
        except Exception:
            elapsed_ms = (perf_counter() - start) * 1000
            logger.exception("%s %s failed after %.1fms", request.method, request.url.path, elapsed_ms)
            raise
        finally:
            request_id_ctx_var.reset(token)

        response.headers["X-Request-Id"] = request_id
        return response

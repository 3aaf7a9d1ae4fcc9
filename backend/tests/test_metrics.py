"""Tests for metrics and tracing helpers."""
from __future__ import annotations

from typing import Any, Dict

import pytest

from dailystride.core.context import request_id_ctx_var, set_request_id
from dailystride.observability import metrics
from dailystride.observability import tracing


class _DummyTrace:
    def __init__(self, name: str, metadata: Dict[str, Any]):
        self.name = name
        self.metadata = metadata
        self.errors: list[Dict[str, Any]] = []
        self.ended = False

    def update(self, metadata=None, error_info=None, **kwargs) -> None:
        if metadata:
            self.metadata.update(metadata)
        if error_info:
            self.errors.append(error_info)

    def end(self) -> None:
        self.ended = True


class _DummyClient:
    def __init__(self):
        self.traces: list[_DummyTrace] = []

    def trace(self, name: str, metadata: Dict[str, Any] | None = None):
        trace = _DummyTrace(name, metadata or {})
        self.traces.append(trace)
        return trace


def test_log_metric_records_value_and_metadata(monkeypatch) -> None:
    dummy_client = _DummyClient()
    monkeypatch.setattr(metrics, "get_opik_client", lambda: dummy_client)

    metrics.log_metric("demo_metric", 42, metadata={"foo": "bar"})

    assert dummy_client.traces[0].name == "metric:demo_metric"
    assert dummy_client.traces[0].metadata["value"] == 42
    assert dummy_client.traces[0].metadata["foo"] == "bar"


def test_log_metric_is_noop_without_client(monkeypatch) -> None:
    monkeypatch.setattr(metrics, "get_opik_client", lambda: None)

    metrics.log_metric("ignored", 1)


def test_trace_attaches_request_id_and_closes(monkeypatch) -> None:
    dummy_client = _DummyClient()
    monkeypatch.setattr(tracing, "get_opik_client", lambda: dummy_client)
    token = set_request_id("req-123")
    try:
        with tracing.trace("demo", metadata={"a": 1}, goal_id="goal-1") as span:
            span.update(metadata={"b": 2})
    finally:
        request_id_ctx_var.reset(token)

    recorded = dummy_client.traces[0]
    assert recorded.metadata == {"a": 1, "b": 2, "goal_id": "goal-1", "request_id": "req-123"}
    assert recorded.ended is True


def test_trace_records_errors_and_reraises(monkeypatch) -> None:
    dummy_client = _DummyClient()
    monkeypatch.setattr(tracing, "get_opik_client", lambda: dummy_client)

    with pytest.raises(RuntimeError):
        with tracing.trace("failing"):
            raise RuntimeError("nope")

    recorded = dummy_client.traces[0]
    assert recorded.errors == [{"exception_type": "RuntimeError", "message": "nope"}]
    assert recorded.ended is True

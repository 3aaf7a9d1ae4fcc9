from __future__ import annotations

from datetime import timedelta
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from dailystride.api.deps import get_task_composer
from dailystride.core.dates import today_utc
from dailystride.db.base import Base
from dailystride.db.deps import get_db
from dailystride.db.models.goal import Goal
from dailystride.db.models.user import User
from dailystride.main import app
from dailystride.observability import client as client_module
from dailystride.services.content.disabled import DisabledContentGenerator
from dailystride.services.task_composer import TaskComposer


class _DummyTrace:
    def __init__(self, name=None, metadata=None, **kwargs):
        self.name = name
        self.metadata = dict(metadata or {})

    def update(self, metadata=None, **kwargs):
        if metadata:
            self.metadata.update(metadata)

    def end(self):
        pass


class _DummyOpik:
    instances: list["_DummyOpik"] = []

    def __init__(self, *args, **kwargs):
        self.kwargs = kwargs
        self.traces = []
        _DummyOpik.instances.append(self)

    def trace(self, **kwargs):
        trace = _DummyTrace(**kwargs)
        self.traces.append(trace)
        return trace


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(engine, "connect")
    def set_fk(conn, record):  # pragma: no cover - sqlite setup
        cursor = conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def test_generation_is_traced_when_opik_enabled(monkeypatch, session_factory):
    monkeypatch.setattr(client_module.settings, "opik_enabled", True)
    monkeypatch.setattr(client_module.settings, "opik_api_key", "test-key")
    monkeypatch.setattr(client_module.settings, "opik_project", "dailystride-test")
    monkeypatch.setattr(client_module, "Opik", _DummyOpik)
    client_module.reset_opik_client()

    session = session_factory()
    user = User(email=f"{uuid4().hex}@example.com")
    session.add(user)
    session.flush()
    goal = Goal(user_id=user.id, title="Ship a side project", deadline=today_utc() + timedelta(days=20))
    session.add(goal)
    session.commit()
    goal_id = goal.id
    session.close()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_task_composer] = lambda: TaskComposer(DisabledContentGenerator("tests"))
    try:
        with TestClient(app) as test_client:
            resp = test_client.post(f"/goals/{goal_id}/generate-tasks", headers={"X-Request-Id": "trace-me"})
            assert resp.status_code == 200
    finally:
        app.dependency_overrides.clear()
        client_module.reset_opik_client()

    opik = _DummyOpik.instances[-1]
    assert opik.kwargs["project_name"] == "dailystride-test"
    names = [trace.name for trace in opik.traces]
    assert "daily_tasks.generate" in names
    assert "daily_tasks.compose" in names
    assert "metric:daily_tasks.generated" in names
    generate_trace = next(trace for trace in opik.traces if trace.name == "daily_tasks.generate")
    assert generate_trace.metadata["request_id"] == "trace-me"
    assert generate_trace.metadata["plan"]["final_task_count"] == 3
    assert generate_trace.metadata["plan_metrics"] == {
        "window_size": 0.0,
        "avg_difficulty": 2.0,
        "avg_task_count": 3.0,
        "urgency_multiplier": 1.0,
    }

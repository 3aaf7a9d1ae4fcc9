from __future__ import annotations

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from dailystride.db.base import Base
from dailystride.db.deps import get_db
from dailystride.main import app


@pytest.fixture()
def client():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):  # pragma: no cover - sqlite setup
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    Base.metadata.create_all(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _create_user(client: TestClient) -> str:
    resp = client.post("/users", json={"email": f"{uuid4().hex}@example.com"})
    assert resp.status_code == 201
    return resp.json()["id"]


def _create_goal(client: TestClient, user_id: str, **overrides) -> dict:
    payload = {"user_id": user_id, "title": "Run a marathon", "deadline": "2026-12-31T00:00:00Z"}
    payload.update(overrides)
    resp = client.post("/goals", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_create_goal_parses_deadline_and_defaults(client):
    user_id = _create_user(client)

    goal = _create_goal(client, user_id, description="Sub 4 hours")

    assert goal["deadline"] == "2026-12-31"
    assert goal["progress"] == 0
    assert goal["planning_mode"] is None
    assert goal["description"] == "Sub 4 hours"


def test_create_goal_for_unknown_user_returns_404(client):
    resp = client.post(
        "/goals",
        json={"user_id": str(uuid4()), "title": "Orphan", "deadline": "2026-12-31"},
    )

    assert resp.status_code == 404


@pytest.mark.parametrize(
    "overrides",
    [
        {"deadline": "someday"},
        {"progress": 150},
        {"planning_mode": "chaotic"},
        {"title": ""},
    ],
)
def test_create_goal_validates_input(client, overrides):
    user_id = _create_user(client)
    payload = {"user_id": user_id, "title": "Goal", "deadline": "2026-12-31"}
    payload.update(overrides)

    resp = client.post("/goals", json=payload)

    assert resp.status_code == 422


def test_list_goals_for_user(client):
    user_id = _create_user(client)
    first = _create_goal(client, user_id, title="First")
    second = _create_goal(client, user_id, title="Second")
    _create_goal(client, _create_user(client), title="Someone else")

    resp = client.get("/goals", params={"user_id": user_id})

    assert resp.status_code == 200
    assert {goal["id"] for goal in resp.json()} == {first["id"], second["id"]}


def test_update_goal_progress_and_mode(client):
    goal = _create_goal(client, _create_user(client))

    resp = client.patch(f"/goals/{goal['id']}", json={"progress": 40, "planning_mode": "legacy"})
    assert resp.status_code == 200
    assert resp.json()["progress"] == 40
    assert resp.json()["planning_mode"] == "legacy"

    cleared = client.patch(f"/goals/{goal['id']}", json={"planning_mode": None})
    assert cleared.status_code == 200
    assert cleared.json()["planning_mode"] is None
    assert cleared.json()["progress"] == 40


def test_delete_goal(client):
    goal = _create_goal(client, _create_user(client))

    resp = client.delete(f"/goals/{goal['id']}")
    assert resp.status_code == 204

    assert client.get(f"/goals/{goal['id']}").status_code == 404
    assert client.delete(f"/goals/{goal['id']}").status_code == 404
    assert client.patch(f"/goals/{goal['id']}", json={"progress": 10}).status_code == 404

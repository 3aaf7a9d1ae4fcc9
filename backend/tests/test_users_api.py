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


def test_create_user_normalizes_email(client):
    resp = client.post("/users", json={"email": "  Ana@Example.com ", "name": "Ana"})

    assert resp.status_code == 201
    body = resp.json()
    assert body["email"] == "ana@example.com"
    assert body["name"] == "Ana"
    assert resp.headers.get("X-Request-Id")


def test_duplicate_email_conflicts(client):
    assert client.post("/users", json={"email": "sam@example.com"}).status_code == 201

    resp = client.post("/users", json={"email": "SAM@example.com"})

    assert resp.status_code == 409
    assert "already exists" in resp.json()["detail"]


def test_invalid_email_rejected(client):
    resp = client.post("/users", json={"email": "not-an-email"})

    assert resp.status_code == 422


def test_get_user_includes_goals(client):
    user_id = client.post("/users", json={"email": "lee@example.com"}).json()["id"]
    goal_resp = client.post(
        "/goals",
        json={"user_id": user_id, "title": "Read 12 books", "deadline": "2026-12-31"},
    )
    assert goal_resp.status_code == 201

    resp = client.get(f"/users/{user_id}")

    assert resp.status_code == 200
    body = resp.json()
    assert body["email"] == "lee@example.com"
    assert [goal["title"] for goal in body["goals"]] == ["Read 12 books"]


def test_get_unknown_user_returns_404(client):
    missing = uuid4()
    resp = client.get(f"/users/{missing}")

    assert resp.status_code == 404
    assert resp.json()["detail"] == f"User with ID {missing} not found"

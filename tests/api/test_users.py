"""
API tests for user directory endpoints.

Uses FastAPI TestClient against an app built on a temporary database.
"""

import pytest
from fastapi.testclient import TestClient

from socialgraph.api.main import create_app


@pytest.fixture
def client(tmp_path):
    app = create_app(db_path=str(tmp_path / "users.db"), cache_enabled=False)
    with TestClient(app) as client:
        yield client
    app.state.services.close()


class TestUserEndpoints:
    """Tests for POST /api/users and GET /api/users/{user_id}."""

    def test_create_user(self, client):
        """POST /api/users creates a user and returns 200 with user data."""
        payload = {
            "user_id": "alice",
            "name": "Alice Chen",
            "department": "Computer Science",
            "year": 2026,
            "college": "north",
        }
        r = client.post("/api/users", json=payload)
        assert r.status_code == 200
        data = r.json()
        assert data["user_id"] == "alice"
        assert data["department"] == "Computer Science"
        assert data["year"] == 2026
        assert data["is_active"] is True
        assert data["followers_count"] == 0
        assert data["following_count"] == 0

    def test_create_user_minimal(self, client):
        """POST /api/users accepts year and college omitted."""
        r = client.post("/api/users", json={"user_id": "prof_ng", "name": "Dr. Ng", "department": "Physics"})
        assert r.status_code == 200
        data = r.json()
        assert data["year"] is None
        assert data["college"] is None

    def test_create_user_invalid_id(self, client):
        """POST /api/users with a malformed id fails validation."""
        r = client.post("/api/users", json={"user_id": "bad id!", "name": "X", "department": "Physics"})
        assert r.status_code == 422

    def test_create_user_invalid_year(self, client):
        r = client.post("/api/users", json={"user_id": "x", "name": "X", "department": "Physics", "year": 0})
        assert r.status_code == 422

    def test_create_duplicate_user(self, client):
        payload = {"user_id": "alice", "name": "Alice", "department": "Physics"}
        assert client.post("/api/users", json=payload).status_code == 200
        r = client.post("/api/users", json=payload)
        assert r.status_code == 409

    def test_get_user(self, client):
        """GET /api/users/{user_id} returns user when exists."""
        client.post("/api/users", json={"user_id": "bob", "name": "Bob", "department": "Mathematics"})
        r = client.get("/api/users/bob")
        assert r.status_code == 200
        assert r.json()["name"] == "Bob"

    def test_get_user_not_found(self, client):
        """GET /api/users/{user_id} returns 404 when user does not exist."""
        r = client.get("/api/users/ghost")
        assert r.status_code == 404


class TestSystemEndpoints:

    def test_root(self, client):
        r = client.get("/")
        assert r.status_code == 200
        assert r.json()["docs"] == "/docs"

    def test_health(self, client):
        client.post("/api/users", json={"user_id": "alice", "name": "Alice", "department": "Physics"})
        r = client.get("/api/health")
        assert r.status_code == 200
        data = r.json()
        assert data["status"] == "healthy"
        assert data["users"] == 1
        assert data["edges"] == 0
        assert data["adjacency_cache"] is None

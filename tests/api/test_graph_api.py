"""
API tests for follow graph and suggestion endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from socialgraph.api.main import create_app
from socialgraph.core.exceptions import Unavailable


USERS = [
    ("alice", "Alice", "Computer Science", 2026),
    ("bob", "Bob", "Computer Science", 2026),
    ("carol", "Carol", "Mathematics", 2026),
    ("dan", "Dan", "Computer Science", 2025),
    ("erin", "Erin", "Physics", 2024),
]


@pytest.fixture
def app(tmp_path):
    app = create_app(db_path=str(tmp_path / "graph.db"), cache_enabled=True)
    yield app
    app.state.services.close()


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        for user_id, name, department, year in USERS:
            r = client.post(
                "/api/users",
                json={"user_id": user_id, "name": name, "department": department, "year": year},
            )
            assert r.status_code == 200
        yield client


def as_user(user_id):
    return {"X-User-Id": user_id}


class TestAuth:

    def test_missing_caller_header(self, client):
        r = client.post("/api/graph/follow/bob")
        assert r.status_code == 401

    def test_malformed_caller_header(self, client):
        r = client.post("/api/graph/follow/bob", headers=as_user("not valid!"))
        assert r.status_code == 400


class TestFollowEndpoints:

    def test_follow(self, client):
        r = client.post("/api/graph/follow/bob", headers=as_user("alice"))
        assert r.status_code == 200
        assert r.json() == {"is_following": True, "follower_count": 1, "following_count": 1}

    def test_follow_twice_is_idempotent(self, client):
        client.post("/api/graph/follow/bob", headers=as_user("alice"))
        r = client.post("/api/graph/follow/bob", headers=as_user("alice"))
        assert r.status_code == 200
        assert r.json()["follower_count"] == 1

    def test_self_follow(self, client):
        r = client.post("/api/graph/follow/alice", headers=as_user("alice"))
        assert r.status_code == 400

    def test_follow_unknown_user(self, client):
        r = client.post("/api/graph/follow/ghost", headers=as_user("alice"))
        assert r.status_code == 404

    def test_follow_from_unknown_caller(self, client):
        r = client.post("/api/graph/follow/bob", headers=as_user("ghost"))
        assert r.status_code == 404

    def test_self_unfollow_is_noop(self, client):
        r = client.delete("/api/graph/follow/alice", headers=as_user("alice"))
        assert r.status_code == 200
        assert r.json()["is_following"] is False

    def test_unfollow(self, client):
        client.post("/api/graph/follow/bob", headers=as_user("alice"))
        r = client.delete("/api/graph/follow/bob", headers=as_user("alice"))
        assert r.status_code == 200
        assert r.json() == {"is_following": False, "follower_count": 0, "following_count": 0}

    def test_unfollow_not_following(self, client):
        r = client.delete("/api/graph/follow/bob", headers=as_user("alice"))
        assert r.status_code == 200
        assert r.json()["is_following"] is False

    def test_store_outage_maps_to_503(self, client, app, monkeypatch):
        def down(*args, **kwargs):
            raise Unavailable("upsert_edge unavailable after 3 attempts", attempts=3)

        monkeypatch.setattr(app.state.services.graph.edge_store, "upsert_edge", down)
        r = client.post("/api/graph/follow/bob", headers=as_user("alice"))
        assert r.status_code == 503


class TestInteractionEndpoints:

    def test_record_interaction(self, client):
        client.post("/api/graph/follow/bob", headers=as_user("alice"))
        r = client.post(
            "/api/graph/interactions",
            json={"target_id": "bob", "interaction_type": "message"},
            headers=as_user("alice"),
        )
        assert r.status_code == 200
        data = r.json()
        assert data["recorded"] is True
        assert data["interaction_type"] == "message"

    def test_interaction_without_follow_not_recorded(self, client):
        r = client.post(
            "/api/graph/interactions",
            json={"target_id": "bob", "interaction_type": "like"},
            headers=as_user("alice"),
        )
        assert r.status_code == 200
        assert r.json()["recorded"] is False

    def test_invalid_interaction_type(self, client):
        r = client.post(
            "/api/graph/interactions",
            json={"target_id": "bob", "interaction_type": "poke"},
            headers=as_user("alice"),
        )
        assert r.status_code == 422


class TestRelationshipEndpoints:

    def test_one_way(self, client):
        client.post("/api/graph/follow/bob", headers=as_user("alice"))

        r = client.get("/api/graph/relationship/bob", headers=as_user("alice"))
        assert r.status_code == 200
        data = r.json()
        assert data["is_following"] is True
        assert data["is_followed_by"] is False
        assert data["is_mutual"] is False
        assert data["category"] == "weak"
        assert data["weight"] == 0.05
        assert data["description"] == "You follow them, but they don't follow back"

    def test_mutual(self, client):
        client.post("/api/graph/follow/bob", headers=as_user("alice"))
        client.post("/api/graph/follow/alice", headers=as_user("bob"))

        data = client.get("/api/graph/relationship/alice", headers=as_user("bob")).json()
        assert data["is_mutual"] is True
        assert data["category"] == "moderate"

    def test_mutual_connections(self, client):
        for follower in ("alice", "bob"):
            client.post("/api/graph/follow/carol", headers=as_user(follower))
            client.post("/api/graph/follow/dan", headers=as_user(follower))
        client.post("/api/graph/follow/erin", headers=as_user("alice"))

        r = client.get("/api/graph/mutual/bob", headers=as_user("alice"))
        assert r.status_code == 200
        data = r.json()
        assert data["type"] == "mutual_following"
        assert data["count"] == 2
        assert [u["user_id"] for u in data["users"]] == ["carol", "dan"]

    def test_mutual_followers(self, client):
        client.post("/api/graph/follow/alice", headers=as_user("carol"))
        client.post("/api/graph/follow/bob", headers=as_user("carol"))

        data = client.get("/api/graph/mutual/bob?type=followers", headers=as_user("alice")).json()
        assert data["type"] == "mutual_followers"
        assert [u["user_id"] for u in data["users"]] == ["carol"]

    def test_mutual_bad_type(self, client):
        r = client.get("/api/graph/mutual/bob?type=everyone", headers=as_user("alice"))
        assert r.status_code == 422


class TestConnectionLists:

    def test_followers_list(self, client):
        for follower in ("bob", "carol", "dan"):
            client.post("/api/graph/follow/alice", headers=as_user(follower))
        client.post("/api/graph/follow/bob", headers=as_user("alice"))

        r = client.get("/api/graph/users/alice/followers?limit=2", headers=as_user("alice"))
        assert r.status_code == 200
        data = r.json()
        assert data["user_id"] == "alice"
        assert len(data["items"]) == 2
        assert data["pagination"] == {"total": 3, "limit": 2, "offset": 0, "has_more": True}

        # Equal weights: newest follow first, so bob lands on the second page
        assert [i["user"]["user_id"] for i in data["items"]] == ["dan", "carol"]
        assert all(i["is_followed_by_me"] is False for i in data["items"])

        rest = client.get("/api/graph/users/alice/followers?limit=2&offset=2", headers=as_user("alice")).json()
        assert [i["user"]["user_id"] for i in rest["items"]] == ["bob"]
        assert rest["items"][0]["is_followed_by_me"] is True

    def test_pages_concatenate(self, client):
        for follower in ("bob", "carol", "dan", "erin"):
            client.post("/api/graph/follow/alice", headers=as_user(follower))

        full = client.get("/api/graph/users/alice/followers?limit=4", headers=as_user("bob")).json()
        first = client.get("/api/graph/users/alice/followers?limit=2&offset=0", headers=as_user("bob")).json()
        second = client.get("/api/graph/users/alice/followers?limit=2&offset=2", headers=as_user("bob")).json()

        ids = lambda page: [i["user"]["user_id"] for i in page["items"]]
        assert ids(first) + ids(second) == ids(full)
        assert second["pagination"]["has_more"] is False

    def test_following_list(self, client):
        client.post("/api/graph/follow/bob", headers=as_user("alice"))
        data = client.get("/api/graph/users/alice/following", headers=as_user("carol")).json()
        assert [i["user"]["user_id"] for i in data["items"]] == ["bob"]
        assert data["items"][0]["is_followed_by_me"] is False

    @pytest.mark.parametrize("query", ["limit=0", "limit=101", "offset=-1"])
    def test_page_bounds(self, client, query):
        r = client.get(f"/api/graph/users/alice/followers?{query}", headers=as_user("alice"))
        assert r.status_code == 422


class TestStats:

    def test_stats(self, client):
        client.post("/api/graph/follow/bob", headers=as_user("alice"))
        client.post("/api/graph/follow/alice", headers=as_user("bob"))
        client.post("/api/graph/follow/alice", headers=as_user("carol"))

        data = client.get("/api/graph/stats", headers=as_user("alice")).json()
        assert data["global_stats"]["total_users"] == 5
        assert data["global_stats"]["total_connections"] == 3
        assert data["user"] == {"user_id": "alice", "followers": 2, "following": 1, "engagement_ratio": 2.0}


class TestSuggestionEndpoints:

    def test_suggestions(self, client):
        client.post("/api/graph/follow/bob", headers=as_user("alice"))
        client.post("/api/graph/follow/carol", headers=as_user("bob"))

        r = client.get("/api/graph/suggestions?limit=5", headers=as_user("alice"))
        assert r.status_code == 200
        data = r.json()
        assert data["user_id"] == "alice"
        assert data["n"] == len(data["suggestions"])
        top = data["suggestions"][0]
        assert top["user"]["user_id"] == "carol"
        assert top["mutual_connections"] == 1
        assert top["reason"] == "Followed by Bob"

    def test_cold_start_suggestions(self, client):
        data = client.get("/api/graph/suggestions", headers=as_user("dan")).json()
        ids = [s["user"]["user_id"] for s in data["suggestions"]]
        assert ids
        assert set(ids) <= {"alice", "bob"}

    def test_same_department_filter(self, client):
        client.post("/api/graph/follow/bob", headers=as_user("alice"))
        client.post("/api/graph/follow/carol", headers=as_user("bob"))

        data = client.get("/api/graph/suggestions?same_department=true", headers=as_user("alice")).json()
        assert all(s["user"]["department"] == "Computer Science" for s in data["suggestions"])

    def test_unknown_caller(self, client):
        r = client.get("/api/graph/suggestions", headers=as_user("ghost"))
        assert r.status_code == 404

    def test_limit_bounds(self, client):
        r = client.get("/api/graph/suggestions?limit=51", headers=as_user("alice"))
        assert r.status_code == 422

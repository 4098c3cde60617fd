"""HTTP-level tests for the idea topic and idea routes."""

import logging
import uuid

import pytest
from fastapi.testclient import TestClient

from ideahub.main import app
from ideahub.services.ideas import IdeasService

API = "/api/v1"


@pytest.fixture
def topic(client, auth_headers):
    response = client.post(
        f"{API}/idea-topics",
        json={"name": "Startups", "description": "Things to build", "tags": ["saas"]},
        headers=auth_headers,
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def idea(client, auth_headers, topic):
    response = client.post(
        f"{API}/ideas",
        json={
            "name": "Invoice bot",
            "description": "Chases unpaid invoices",
            "tags": ["fintech"],
            "idea_topic_id": topic["id"],
        },
        headers=auth_headers,
    )
    assert response.status_code == 201
    return response.json()


# =============================================================================
# Authentication
# =============================================================================

class TestAuthRequired:
    @pytest.mark.parametrize(
        "method, path",
        [
            ("get", "/idea-topics"),
            ("post", "/idea-topics"),
            ("get", f"/idea-topics/{uuid.uuid4()}"),
            ("get", "/ideas"),
            ("post", f"/ideas/{uuid.uuid4()}/feedback"),
        ],
    )
    def test_missing_session_is_401(self, client, method, path):
        response = getattr(client, method)(f"{API}{path}")
        assert response.status_code == 401
        assert response.json() == {"error": "Authentication required"}

    def test_garbage_token_is_401(self, client):
        response = client.get(
            f"{API}/ideas", headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == 401

    def test_cookie_session_is_accepted(self, client, register):
        register("cookie@example.com")
        client.post(
            f"{API}/auth/login",
            json={"email": "cookie@example.com", "password": "Secret123"},
        )
        response = client.get(f"{API}/idea-topics")
        assert response.status_code == 200
        assert response.json() == []


# =============================================================================
# Idea topics
# =============================================================================

class TestIdeaTopicRoutes:
    def test_create_returns_owner(self, client, auth_headers, topic):
        me = client.get(f"{API}/auth/me", headers=auth_headers).json()
        assert topic["user_id"] == me["id"]
        assert topic["tags"] == ["saas"]

    def test_create_validation_error_is_itemized(self, client, auth_headers):
        response = client.post(
            f"{API}/idea-topics",
            json={"name": "", "description": "x" * 501},
            headers=auth_headers,
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Invalid input data"
        assert {d["field"] for d in body["details"]} == {"name", "description"}

    def test_list_and_search(self, client, auth_headers, topic):
        listed = client.get(f"{API}/idea-topics", headers=auth_headers).json()
        assert [t["id"] for t in listed] == [topic["id"]]

        found = client.get(
            f"{API}/idea-topics", params={"search": "BUILD"}, headers=auth_headers
        ).json()
        assert len(found) == 1

        empty = client.get(
            f"{API}/idea-topics", params={"search": "nothing"}, headers=auth_headers
        )
        assert empty.status_code == 200
        assert empty.json() == []

    def test_filter_by_tags(self, client, auth_headers, topic):
        found = client.get(
            f"{API}/idea-topics", params={"tags": ["saas"]}, headers=auth_headers
        ).json()
        assert [t["id"] for t in found] == [topic["id"]]

        none = client.get(
            f"{API}/idea-topics", params={"tags": ["saas", "b2b"]}, headers=auth_headers
        ).json()
        assert none == []

    def test_empty_tags_param_lists_everything(self, client, auth_headers, topic):
        response = client.get(
            f"{API}/idea-topics", params={"tags": ""}, headers=auth_headers
        )
        assert response.status_code == 200
        assert [t["id"] for t in response.json()] == [topic["id"]]

    def test_get_missing_is_404(self, client, auth_headers):
        response = client.get(f"{API}/idea-topics/{uuid.uuid4()}", headers=auth_headers)
        assert response.status_code == 404
        assert response.json() == {"error": "Idea topic not found"}

    def test_get_malformed_id_is_400(self, client, auth_headers):
        response = client.get(f"{API}/idea-topics/not-a-uuid", headers=auth_headers)
        assert response.status_code == 400

    def test_other_user_sees_not_found(self, client, register, topic):
        other = register()
        response = client.get(f"{API}/idea-topics/{topic['id']}", headers=other)
        assert response.status_code == 404
        assert client.get(f"{API}/idea-topics", headers=other).json() == []

    def test_partial_update(self, client, auth_headers, topic):
        response = client.put(
            f"{API}/idea-topics/{topic['id']}",
            json={"description": "Updated"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["description"] == "Updated"
        assert body["name"] == topic["name"]
        assert body["tags"] == topic["tags"]

    def test_update_rejects_null_fields(self, client, auth_headers, topic):
        response = client.put(
            f"{API}/idea-topics/{topic['id']}",
            json={"name": None, "tags": None},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert {d["field"] for d in response.json()["details"]} == {"name", "tags"}

    def test_update_missing_is_404(self, client, auth_headers):
        response = client.put(
            f"{API}/idea-topics/{uuid.uuid4()}", json={"name": "x"}, headers=auth_headers
        )
        assert response.status_code == 404

    def test_delete(self, client, auth_headers, topic):
        response = client.delete(f"{API}/idea-topics/{topic['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {"message": "Idea topic deleted successfully"}
        assert client.get(
            f"{API}/idea-topics/{topic['id']}", headers=auth_headers
        ).status_code == 404

    def test_delete_missing_succeeds(self, client, auth_headers):
        response = client.delete(f"{API}/idea-topics/{uuid.uuid4()}", headers=auth_headers)
        assert response.status_code == 200

    def test_delete_with_ideas_conflicts(self, client, auth_headers, topic, idea):
        response = client.delete(f"{API}/idea-topics/{topic['id']}", headers=auth_headers)
        assert response.status_code == 409
        assert "idea" in response.json()["error"]

    def test_topic_ideas(self, client, auth_headers, topic, idea):
        response = client.get(
            f"{API}/idea-topics/{topic['id']}/ideas", headers=auth_headers
        )
        assert response.status_code == 200
        assert [i["id"] for i in response.json()] == [idea["id"]]

        searched = client.get(
            f"{API}/idea-topics/{topic['id']}/ideas",
            params={"search": "unpaid"},
            headers=auth_headers,
        ).json()
        assert len(searched) == 1


# =============================================================================
# Ideas
# =============================================================================

class TestIdeaRoutes:
    def test_create_defaults(self, idea, topic):
        assert idea["rating"] == 0
        assert idea["feedback"] is None
        assert idea["idea_topic_id"] == topic["id"]

    def test_create_in_unknown_topic_is_404(self, client, auth_headers):
        response = client.post(
            f"{API}/ideas",
            json={"name": "x", "description": "y", "idea_topic_id": str(uuid.uuid4())},
            headers=auth_headers,
        )
        assert response.status_code == 404

    def test_create_with_invalid_topic_id_is_400(self, client, auth_headers):
        response = client.post(
            f"{API}/ideas",
            json={"name": "x", "description": "y", "idea_topic_id": "nope"},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "idea_topic_id"

    def test_list_and_search(self, client, auth_headers, idea):
        assert len(client.get(f"{API}/ideas", headers=auth_headers).json()) == 1
        assert client.get(
            f"{API}/ideas", params={"search": "nomatch"}, headers=auth_headers
        ).json() == []

    def test_update_rating_bounds(self, client, auth_headers, idea):
        for rating in (0, 5):
            response = client.put(
                f"{API}/ideas/{idea['id']}", json={"rating": rating}, headers=auth_headers
            )
            assert response.status_code == 200
            assert response.json()["rating"] == rating

        for rating in (-1, 6):
            response = client.put(
                f"{API}/ideas/{idea['id']}", json={"rating": rating}, headers=auth_headers
            )
            assert response.status_code == 400

    def test_update_accepts_whole_float_rating(self, client, auth_headers, idea):
        response = client.put(
            f"{API}/ideas/{idea['id']}", json={"rating": 3.0}, headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json()["rating"] == 3

    @pytest.mark.parametrize("rating", ["3", True, 2.5])
    def test_update_rejects_non_numeric_rating(self, client, auth_headers, idea, rating):
        response = client.put(
            f"{API}/ideas/{idea['id']}", json={"rating": rating}, headers=auth_headers
        )
        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "rating"

    def test_update_rejects_null_fields(self, client, auth_headers, idea):
        response = client.put(
            f"{API}/ideas/{idea['id']}",
            json={"rating": None, "name": None},
            headers=auth_headers,
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Invalid input data"
        assert {d["field"] for d in body["details"]} == {"rating", "name"}
        assert client.get(
            f"{API}/ideas/{idea['id']}", headers=auth_headers
        ).json()["name"] == idea["name"]

    def test_null_feedback_clears_it(self, client, auth_headers, idea):
        path = f"{API}/ideas/{idea['id']}"
        client.post(
            f"{path}/feedback", json={"rating": 4, "feedback": "good"}, headers=auth_headers
        )

        response = client.put(path, json={"feedback": None}, headers=auth_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["feedback"] is None
        assert body["rating"] == 4

    def test_empty_tags_param_lists_everything(self, client, auth_headers, idea):
        response = client.get(f"{API}/ideas", params={"tags": ""}, headers=auth_headers)
        assert response.status_code == 200
        assert [i["id"] for i in response.json()] == [idea["id"]]

    def test_update_keeps_other_fields(self, client, auth_headers, idea):
        response = client.put(
            f"{API}/ideas/{idea['id']}", json={"tags": ["new"]}, headers=auth_headers
        )
        body = response.json()
        assert body["tags"] == ["new"]
        assert body["name"] == idea["name"]
        assert body["description"] == idea["description"]

    def test_feedback(self, client, auth_headers, idea):
        response = client.post(
            f"{API}/ideas/{idea['id']}/feedback",
            json={"rating": 4, "feedback": "Worth a prototype"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["rating"] == 4
        assert body["feedback"] == "Worth a prototype"

    @pytest.mark.parametrize(
        "payload",
        [
            {"rating": 0, "feedback": "x"},
            {"rating": 6, "feedback": "x"},
            {"rating": 3, "feedback": ""},
            {"rating": 3},
        ],
    )
    def test_feedback_validation(self, client, auth_headers, idea, payload):
        response = client.post(
            f"{API}/ideas/{idea['id']}/feedback", json=payload, headers=auth_headers
        )
        assert response.status_code == 400

    def test_feedback_on_missing_idea_is_404(self, client, auth_headers):
        response = client.post(
            f"{API}/ideas/{uuid.uuid4()}/feedback",
            json={"rating": 3, "feedback": "ok"},
            headers=auth_headers,
        )
        assert response.status_code == 404

    def test_other_user_cannot_touch_idea(self, client, register, auth_headers, idea):
        other = register()
        path = f"{API}/ideas/{idea['id']}"
        assert client.get(path, headers=other).status_code == 404
        assert client.put(path, json={"name": "x"}, headers=other).status_code == 404
        assert client.delete(path, headers=other).status_code == 200
        assert client.get(path, headers=auth_headers).status_code == 200

    def test_delete(self, client, auth_headers, idea):
        path = f"{API}/ideas/{idea['id']}"
        response = client.delete(path, headers=auth_headers)
        assert response.json() == {"message": "Idea deleted successfully"}
        assert client.get(path, headers=auth_headers).status_code == 404


# =============================================================================
# Unexpected failures
# =============================================================================

class TestUnhandledErrors:
    def test_unexpected_error_is_500_and_logged(
        self, client, auth_headers, monkeypatch, caplog
    ):
        async def broken_find_all(*args, **kwargs):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(IdeasService, "find_all", broken_find_all)
        failing_client = TestClient(app, raise_server_exceptions=False)

        with caplog.at_level(logging.ERROR, logger="ideahub.main"):
            response = failing_client.get(f"{API}/ideas", headers=auth_headers)

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
        records = [r for r in caplog.records if r.name == "ideahub.main"]
        assert len(records) == 1
        assert records[0].levelno == logging.ERROR
        assert records[0].getMessage() == "Unhandled error on GET /api/v1/ideas"
        assert records[0].exc_info[0] is RuntimeError

"""
StackIt Backend — API Integration Tests
=========================================

What:  Full HTTP round trips through middleware, dependencies, services and
       the exception handlers.
How:   HTTPX AsyncClient on the ASGI app; the session dependency points at
       the per-test SQLite database (see conftest.py).

What we test:
    ✅ Register → ask → answer → vote → accept → notifications, end to end
    ✅ Responses are camelCase
    ✅ Every error uses {"error", "message", "details", "request_id"}
    ✅ 401 without a token, 403 for non-admins on /api/admin
    ✅ Request validation failures are 400 validation_failed with fields
    ✅ /health reports the database and realtime state
"""

import pytest


async def register(client, username):
    response = await client.post(
        "/api/auth/register",
        json={"username": username, "email": f"{username}@example.com", "password": "secret123"},
    )
    assert response.status_code == 201, response.text
    return response.json()["token"]


def auth(token):
    return {"Authorization": f"Bearer {token}"}


async def ask(client, token, title="How do I cancel an asyncio task cleanly?"):
    response = await client.post(
        "/api/questions",
        json={
            "title": title,
            "description": "Calling cancel() leaves half-written files behind on shutdown.",
            "tags": ["Python", "asyncio"],
        },
        headers=auth(token),
    )
    assert response.status_code == 201, response.text
    return response.json()["question"]


class TestAuthEndpoints:
    @pytest.mark.asyncio
    async def test_register_login_me(self, test_client):
        token = await register(test_client, "alice")

        login = await test_client.post(
            "/api/auth/login", json={"email": "ALICE@example.com", "password": "secret123"}
        )
        me = await test_client.get("/api/auth/me", headers=auth(token))

        assert login.status_code == 200
        assert login.json()["message"] == "Login successful"
        assert me.status_code == 200
        assert me.json()["user"]["username"] == "alice"
        assert me.json()["user"]["email"] == "alice@example.com"
        assert "passwordHash" not in me.json()["user"]

    @pytest.mark.asyncio
    async def test_duplicate_registration_conflicts(self, test_client):
        await register(test_client, "alice")

        response = await test_client.post(
            "/api/auth/register",
            json={"username": "Alice", "email": "new@example.com", "password": "secret123"},
        )

        assert response.status_code == 409
        assert response.json()["error"] == "conflict"
        assert response.json()["message"] == "Username is already taken"

    @pytest.mark.asyncio
    async def test_wrong_password(self, test_client):
        await register(test_client, "alice")

        response = await test_client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": "nope-nope"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"


class TestErrorShape:
    @pytest.mark.asyncio
    async def test_missing_token(self, test_client):
        response = await test_client.post(
            "/api/questions", json={"title": "x", "description": "y", "tags": []}
        )

        body = response.json()
        assert response.status_code in (400, 401)
        assert set(body) == {"error", "message", "details", "request_id"}

    @pytest.mark.asyncio
    async def test_unauthenticated_write_is_401(self, test_client):
        response = await test_client.delete(
            "/api/questions/00000000-0000-0000-0000-000000000000",
            headers={"X-Request-ID": "req-123"},
        )

        assert response.status_code == 401
        assert response.json() == {
            "error": "unauthorized",
            "message": "No token, authorization denied",
            "details": None,
            "request_id": "req-123",
        }
        assert response.headers["X-Request-ID"] == "req-123"

    @pytest.mark.asyncio
    async def test_garbage_token_is_401(self, test_client):
        response = await test_client.get("/api/auth/me", headers=auth("not.a.jwt"))

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token"

    @pytest.mark.asyncio
    async def test_validation_failure_lists_fields(self, test_client):
        token = await register(test_client, "alice")

        response = await test_client.post(
            "/api/questions",
            json={"title": "short", "description": "too short", "tags": ["python"]},
            headers=auth(token),
        )

        body = response.json()
        assert response.status_code == 400
        assert body["error"] == "validation_failed"
        fields = {f["field"] for f in body["details"]["fields"]}
        assert {"title", "description"} <= fields

    @pytest.mark.asyncio
    async def test_padded_title_update_rejected(self, test_client):
        token = await register(test_client, "alice")
        qid = (await ask(test_client, token))["id"]

        response = await test_client.put(
            f"/api/questions/{qid}", json={"title": "    abc     "}, headers=auth(token)
        )
        detail = await test_client.get(f"/api/questions/{qid}")

        assert response.status_code == 400
        assert response.json()["error"] == "validation_failed"
        assert detail.json()["question"]["title"] == "How do I cancel an asyncio task cleanly?"

    @pytest.mark.asyncio
    async def test_unknown_question_is_404(self, test_client):
        response = await test_client.get("/api/questions/00000000-0000-0000-0000-000000000000")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"
        assert response.json()["details"]["resource"] == "question"

    @pytest.mark.asyncio
    async def test_admin_routes_need_admin(self, test_client):
        token = await register(test_client, "alice")

        response = await test_client.get("/api/admin/dashboard", headers=auth(token))

        assert response.status_code == 403
        assert response.json()["message"] == "Admin access required"


class TestQuestionFlow:
    @pytest.mark.asyncio
    async def test_end_to_end(self, test_client):
        alice = await register(test_client, "alice")
        bob = await register(test_client, "bob")
        question = await ask(test_client, alice)
        qid = question["id"]

        assert question["voteCount"] == 0
        assert question["tags"] == ["python", "asyncio"]
        assert question["hasAcceptedAnswer"] is False

        vote = await test_client.post(
            f"/api/questions/{qid}/vote", json={"voteType": "upvote"}, headers=auth(bob)
        )
        assert vote.status_code == 200
        assert vote.json()["voteCount"] == 1

        own_vote = await test_client.post(
            f"/api/questions/{qid}/vote", json={"voteType": "upvote"}, headers=auth(alice)
        )
        assert own_vote.status_code == 403

        answer = await test_client.post(
            "/api/answers",
            json={"questionId": qid, "content": "Shield the cleanup with asyncio.shield()."},
            headers=auth(bob),
        )
        assert answer.status_code == 201, answer.text
        aid = answer.json()["answer"]["id"]

        duplicate = await test_client.post(
            "/api/answers",
            json={"questionId": qid, "content": "Another approach using try/finally blocks."},
            headers=auth(bob),
        )
        assert duplicate.status_code == 409

        accepted = await test_client.post(f"/api/answers/{aid}/accept", headers=auth(alice))
        assert accepted.status_code == 200
        assert accepted.json()["answer"]["isAccepted"] is True

        detail = await test_client.get(f"/api/questions/{qid}", headers=auth(bob))
        assert set(detail.json()) == {"question"}
        body = detail.json()["question"]
        assert body["acceptedAnswerId"] == aid
        assert body["answerCount"] == 1
        assert body["views"] == 1
        assert [a["id"] for a in body["answers"]] == [aid]

        bob_inbox = await test_client.get("/api/notifications", headers=auth(bob))
        alice_count = await test_client.get("/api/notifications/unread-count", headers=auth(alice))
        assert [n["type"] for n in bob_inbox.json()["notifications"]] == ["accept"]
        assert bob_inbox.json()["unreadCount"] == 1
        assert alice_count.json() == {"unreadCount": 1}

    @pytest.mark.asyncio
    async def test_comment_mentions(self, test_client):
        alice = await register(test_client, "alice")
        bob = await register(test_client, "bob")
        carol = await register(test_client, "carol")
        qid = (await ask(test_client, alice))["id"]
        answer = await test_client.post(
            "/api/answers",
            json={"questionId": qid, "content": "Wrap the cleanup in a finally block."},
            headers=auth(bob),
        )
        aid = answer.json()["answer"]["id"]

        comment = await test_client.post(
            f"/api/answers/{aid}/comments",
            json={"content": "agreed, @alice should try this"},
            headers=auth(carol),
        )

        assert comment.status_code == 200, comment.text
        assert comment.json()["answer"]["comments"][0]["author"]["username"] == "carol"

        alice_inbox = await test_client.get("/api/notifications", headers=auth(alice))
        bob_inbox = await test_client.get("/api/notifications", headers=auth(bob))
        assert sorted(n["type"] for n in alice_inbox.json()["notifications"]) == ["answer", "mention"]
        assert [n["type"] for n in bob_inbox.json()["notifications"]] == ["comment"]

    @pytest.mark.asyncio
    async def test_list_and_popular_tags(self, test_client):
        alice = await register(test_client, "alice")
        await ask(test_client, alice)
        await ask(test_client, alice, title="Is asyncio.gather order preserved?")

        listing = await test_client.get("/api/questions", params={"sort": "votes"})
        tags = await test_client.get("/api/questions/tags/popular")

        assert listing.status_code == 200
        assert len(listing.json()["questions"]) == 2
        assert listing.json()["pagination"]["hasNext"] is False
        assert tags.json()["tags"][0] == {"name": "asyncio", "count": 2}


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["realtime_connections"] == 0

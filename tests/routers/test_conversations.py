from typing import Callable, Dict
from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from app.identity import SESSION_COOKIE_NAME

AsUser = Callable[[str], Dict[str, str]]


class TestConversationsRouter:
    """Tests for the conversations endpoints."""

    def test_requires_session(self, client: TestClient) -> None:
        response = client.get("/api/conversations")
        assert response.status_code == 401
        assert response.json() == {"message": "Unauthorized"}

    def test_rejects_forged_session(self, client: TestClient) -> None:
        forged = f"{SESSION_COOKIE_NAME}=u-alice.deadbeef"
        response = client.get("/api/conversations", headers={"Cookie": forged})
        assert response.status_code == 401

    def test_empty_list(self, client: TestClient, as_user: AsUser) -> None:
        response = client.get("/api/conversations", headers=as_user("u-alice"))
        assert response.status_code == 200
        assert response.json() == []

    def test_create_then_get(self, client: TestClient, as_user: AsUser) -> None:
        response = client.post(
            "/api/conversations",
            json={"participantId": "u-bob"},
            headers=as_user("u-alice"),
        )
        assert response.status_code == 201
        conversation = response.json()
        assert conversation["isGroup"] is False
        assert conversation["name"] is None

        response = client.get(
            f"/api/conversations/{conversation['id']}", headers=as_user("u-alice")
        )
        assert response.status_code == 200
        members = {m["id"] for m in response.json()["members"]}
        assert members == {"u-alice", "u-bob"}

    def test_create_existing_pair_returns_200(
        self, client: TestClient, as_user: AsUser
    ) -> None:
        first = client.post(
            "/api/conversations",
            json={"participantId": "u-bob"},
            headers=as_user("u-alice"),
        )
        second = client.post(
            "/api/conversations",
            json={"participantId": "u-alice"},
            headers=as_user("u-bob"),
        )
        assert first.status_code == 201
        assert second.status_code == 200
        assert second.json()["id"] == first.json()["id"]

    def test_create_with_self_is_400(self, client: TestClient, as_user: AsUser) -> None:
        response = client.post(
            "/api/conversations",
            json={"participantId": "u-alice"},
            headers=as_user("u-alice"),
        )
        assert response.status_code == 400
        assert response.json()["field"] == "participantId"

    def test_create_with_unknown_participant_is_400(
        self, client: TestClient, as_user: AsUser
    ) -> None:
        response = client.post(
            "/api/conversations",
            json={"participantId": "u-ghost"},
            headers=as_user("u-alice"),
        )
        assert response.status_code == 400

    def test_create_missing_body_field_is_400(
        self, client: TestClient, as_user: AsUser
    ) -> None:
        response = client.post(
            "/api/conversations", json={}, headers=as_user("u-alice")
        )
        assert response.status_code == 400
        assert response.json()["field"] == "participantId"

    def test_get_missing_is_404(self, client: TestClient, as_user: AsUser) -> None:
        response = client.get("/api/conversations/999", headers=as_user("u-alice"))
        assert response.status_code == 404
        assert response.json() == {"message": "Conversation not found"}

    def test_get_as_non_member_is_401(
        self, client: TestClient, as_user: AsUser
    ) -> None:
        created = client.post(
            "/api/conversations",
            json={"participantId": "u-bob"},
            headers=as_user("u-alice"),
        ).json()

        response = client.get(
            f"/api/conversations/{created['id']}", headers=as_user("u-carol")
        )
        assert response.status_code == 401

    def test_list_is_enriched(self, client: TestClient, as_user: AsUser) -> None:
        created = client.post(
            "/api/conversations",
            json={"participantId": "u-bob"},
            headers=as_user("u-alice"),
        ).json()
        client.post(
            f"/api/conversations/{created['id']}/messages",
            json={"content": "hello bob"},
            headers=as_user("u-alice"),
        )

        response = client.get("/api/conversations", headers=as_user("u-bob"))

        assert response.status_code == 200
        [summary] = response.json()
        assert summary["id"] == created["id"]
        assert summary["lastMessage"]["content"] == "hello bob"
        assert summary["otherMember"]["id"] == "u-alice"
        assert summary["unreadCount"] == 0

    def test_unexpected_error_is_500_without_detail(
        self, client: TestClient, as_user: AsUser
    ) -> None:
        with patch(
            "app.services.list_conversations_service"
            ".ListConversationsService.list_conversations",
            new_callable=AsyncMock,
            side_effect=RuntimeError("db exploded"),
        ):
            response = client.get("/api/conversations", headers=as_user("u-alice"))

        assert response.status_code == 500
        assert response.json() == {"message": "Internal server error"}

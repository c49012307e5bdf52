from typing import Callable, Dict

from fastapi.testclient import TestClient

AsUser = Callable[[str], Dict[str, str]]


class TestUsersRouter:
    """Tests for the user endpoints."""

    def test_me(self, client: TestClient, as_user: AsUser) -> None:
        response = client.get("/api/users/me", headers=as_user("u-bob"))
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == "u-bob"
        assert data["firstName"] == "Bob"

    def test_me_unknown_user_is_401(self, client: TestClient, as_user: AsUser) -> None:
        response = client.get("/api/users/me", headers=as_user("u-ghost"))
        assert response.status_code == 401

    def test_search_empty_query(self, client: TestClient, as_user: AsUser) -> None:
        response = client.get("/api/users/search?query=", headers=as_user("u-alice"))
        assert response.status_code == 200
        assert response.json() == []

    def test_search_no_match(self, client: TestClient, as_user: AsUser) -> None:
        response = client.get(
            "/api/users/search?query=zzz_no_such_user", headers=as_user("u-alice")
        )
        assert response.json() == []

    def test_search_by_handle(self, client: TestClient, as_user: AsUser) -> None:
        response = client.get("/api/users/search?query=car", headers=as_user("u-alice"))
        assert response.status_code == 200
        results = response.json()
        assert len(results) <= 10
        assert "u-carol" in [u["id"] for u in results]

    def test_search_requires_session(self, client: TestClient) -> None:
        assert client.get("/api/users/search?query=bob").status_code == 401

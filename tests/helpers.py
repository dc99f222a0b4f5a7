from __future__ import annotations

from fastapi.testclient import TestClient


def create_user(client: TestClient, name: str, email: str | None = None) -> str:
    resp = client.post("/v1/users", json={"name": name, "email": email or f"{name}@example.com"})
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]


def post_score(
    client: TestClient,
    user_id: str,
    score: float,
    is_win: bool,
    attempts: int = 3,
    time_spent: float = 30,
    **extra,
):
    return client.post(
        f"/v1/users/{user_id}/scores",
        json={
            "score": score,
            "is_win": is_win,
            "attempts": attempts,
            "time_spent": time_spent,
            **extra,
        },
    )


def play(client: TestClient, user_id: str, games: list[tuple[float, bool]]) -> None:
    for score, is_win in games:
        resp = post_score(client, user_id, score, is_win)
        assert resp.status_code == 201, resp.text

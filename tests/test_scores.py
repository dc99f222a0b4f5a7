from __future__ import annotations

from helpers import create_user, post_score


def test_record_score_assigns_id_timestamp_and_points(client):
    user_id = create_user(client, "alice")

    response = post_score(
        client,
        user_id,
        score=80,
        is_win=True,
        attempts=3,
        time_spent=60,
        target_number=42,
        guessed_number=42,
        hints=["higher", "lower"],
    )
    assert response.status_code == 201

    body = response.json()
    assert body["id"]
    assert body["created_at"]
    assert body["user_id"] == user_id
    assert body["game_type"] == "number_guessing"
    assert body["difficulty"] == "medium"
    assert body["hints"] == ["higher", "lower"]
    # (100 + 70 attempt bonus + 24 time bonus) * 1.5 medium multiplier
    assert body["points"] == 291


def test_record_score_for_unknown_user_appends_nothing(client):
    response = post_score(client, "ghost", score=10, is_win=True)
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "USER_NOT_FOUND"

    stats = client.get("/v1/leaderboard/stats").json()
    assert stats["total_games"] == 0
    assert stats["total_players"] == 0


def test_record_score_rejects_invalid_fields(client):
    user_id = create_user(client, "alice")

    assert post_score(client, user_id, score=10, is_win=True, attempts=0).status_code == 400
    assert post_score(client, user_id, score=-1, is_win=True).status_code == 400
    assert post_score(client, user_id, score=10, is_win=True, difficulty="extreme").status_code == 400
    assert post_score(client, user_id, score=10, is_win=True, game_type="chess").status_code == 400


def test_record_score_rejects_non_finite_numbers(client):
    user_id = create_user(client, "alice")

    for body in (
        '{"score": Infinity, "is_win": true, "attempts": 1, "time_spent": 1}',
        '{"score": 5, "is_win": true, "attempts": 1, "time_spent": NaN}',
        '{"score": 5, "is_win": true, "attempts": 1, "time_spent": 1, "target_number": -Infinity}',
    ):
        response = client.post(
            f"/v1/users/{user_id}/scores",
            content=body,
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    stats = client.get(f"/v1/users/{user_id}/stats").json()["stats"]
    assert stats["total_games"] == 0
    assert client.get("/v1/leaderboard/stats").json()["top_score"] == 0


def test_history_second_page_of_twenty_five(client):
    user_id = create_user(client, "alice")
    for i in range(25):
        assert post_score(client, user_id, score=i, is_win=i % 2 == 0).status_code == 201

    response = client.get(f"/v1/users/{user_id}/history", params={"page": 2, "limit": 20})
    assert response.status_code == 200

    body = response.json()
    assert len(body["games"]) == 5
    assert body["pagination"] == {
        "current_page": 2,
        "total_pages": 2,
        "total_records": 25,
        "has_next": False,
        "has_prev": True,
    }
    # Newest first: page two holds the five oldest records.
    assert [g["score"] for g in body["games"]] == [4, 3, 2, 1, 0]


def test_history_first_page_is_newest_first(client):
    user_id = create_user(client, "alice")
    for i in range(3):
        post_score(client, user_id, score=i, is_win=True)

    body = client.get(f"/v1/users/{user_id}/history").json()
    assert [g["score"] for g in body["games"]] == [2, 1, 0]
    assert body["pagination"]["has_next"] is False
    assert body["pagination"]["has_prev"] is False


def test_history_for_unknown_user_returns_404(client):
    response = client.get("/v1/users/ghost/history")
    assert response.status_code == 404

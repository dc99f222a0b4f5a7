from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from guessgame.models.domain import (
    GameRecord,
    LeaderboardEntry,
    compute_points,
    paginate,
    round_half_up,
)
from guessgame.services.leaderboard import assign_ranks, group_by_user, select_candidates
from guessgame.services.stats import longest_win_streak, summarize_records

START = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_record(index: int, is_win: bool, score: float = 10, user_id: str = "u1", **extra) -> GameRecord:
    return GameRecord(
        id=f"r{index}",
        user_id=user_id,
        score=score,
        attempts=extra.pop("attempts", 3),
        time_spent=extra.pop("time_spent", 30),
        is_win=is_win,
        created_at=extra.pop("created_at", START + timedelta(minutes=index)),
        **extra,
    )


def make_entry(user_id: str, streak: int, wins: int) -> LeaderboardEntry:
    return LeaderboardEntry(
        user_id=user_id,
        name=user_id,
        email=f"{user_id}@example.com",
        total_games=wins,
        total_wins=wins,
        total_score=0,
        win_rate=100.0,
        average_attempts=1.0,
        average_time=1,
        best_score=0,
        last_played=START,
        longest_streak=streak,
    )


@pytest.mark.parametrize(
    "outcomes, expected",
    [
        ([], 0),
        ([False, False], 0),
        ([True, True, False, True], 2),
        ([True, False, True, True, True], 3),
        ([True] * 4, 4),
    ],
)
def test_longest_win_streak(outcomes, expected):
    records = [make_record(i, won) for i, won in enumerate(outcomes)]
    assert longest_win_streak(records) == expected


def test_longest_win_streak_sorts_by_created_at():
    # Stored out of order; chronologically it is win, win, loss.
    records = [
        make_record(2, False),
        make_record(0, True),
        make_record(1, True),
    ]
    assert longest_win_streak(records) == 2


def test_longest_win_streak_keeps_store_order_for_equal_timestamps():
    records = [
        make_record(0, True, created_at=START),
        make_record(1, False, created_at=START),
        make_record(2, True, created_at=START),
    ]
    assert longest_win_streak(records) == 1


def test_summarize_empty_records_is_all_zero():
    stats = summarize_records([])
    assert stats.total_games == 0
    assert stats.win_rate == 0
    assert stats.longest_streak == 0


def test_summarize_rounds_half_up():
    records = [make_record(0, True, attempts=1, time_spent=1), make_record(1, False, attempts=2, time_spent=2)]
    stats = summarize_records(records)
    assert stats.win_rate == 50
    assert stats.average_attempts == 1.5
    # 1.5 seconds rounds up, not to the even neighbour.
    assert stats.average_time == 2


@pytest.mark.parametrize(
    "value, digits, expected",
    [(0.5, 0, 1), (2.5, 0, 3), (66.666, 0, 67), (1.25, 1, 1.3), (3.44, 1, 3.4)],
)
def test_round_half_up(value, digits, expected):
    assert round_half_up(value, digits) == expected


@pytest.mark.parametrize(
    "is_win, attempts, time_spent, difficulty, expected",
    [
        (False, 1, 0, "hard", 0),
        (True, 3, 60, "medium", 291),
        (True, 12, 400, "hard", 200),
        (True, 5, 295, "easy", 151),
    ],
)
def test_compute_points(is_win, attempts, time_spent, difficulty, expected):
    assert compute_points(is_win, attempts, time_spent, difficulty) == expected


def test_select_candidates_orders_by_best_score_then_wins_then_rate():
    records = [
        make_record(0, True, score=50, user_id="a"),
        make_record(1, True, score=80, user_id="b"),
        make_record(2, True, score=80, user_id="c"),
        make_record(3, True, score=10, user_id="c"),
        make_record(4, True, score=80, user_id="d"),
        make_record(5, False, score=10, user_id="d"),
        make_record(6, True, score=10, user_id="d"),
    ]
    groups = list(group_by_user(records).values())

    ordered = select_candidates(groups, None)
    # d and c tie on best score and wins; c wins on rate (100 vs 66.7).
    assert [g.user_id for g in ordered] == ["c", "d", "b", "a"]
    assert [g.user_id for g in select_candidates(groups, 2)] == ["c", "d"]


def test_assign_ranks_orders_by_streak_then_wins():
    entries = [make_entry("a", 1, 5), make_entry("b", 3, 3), make_entry("c", 1, 7)]
    ranked = assign_ranks(entries)
    assert [e.user_id for e in ranked] == ["b", "c", "a"]
    assert [e.rank for e in ranked] == [1, 2, 3]


def test_paginate():
    info = paginate(page=2, page_size=20, total=25)
    assert (info.total_pages, info.has_next, info.has_prev) == (2, False, True)
    empty = paginate(page=1, page_size=20, total=0)
    assert (empty.total_pages, empty.has_next, empty.has_prev) == (0, False, False)

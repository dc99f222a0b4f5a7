"""Global leaderboard, rank lookup and summary statistics.

The leaderboard is built in two stages with different orderings. Candidate
selection sorts every player on cheap aggregates (best score, wins, win rate)
and truncates to the requested limit. Only the survivors get the per-user
streak scan, and the final ranking sorts them by streak and then wins. The
first stage therefore decides *who* is listed and the second decides *where*.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

from guessgame.models.domain import (
    GameRecord,
    LeaderboardEntry,
    LeaderboardStats,
    round_half_up,
)
from guessgame.services.errors import UserNotFoundError
from guessgame.services.stats import longest_win_streak, win_rate
from guessgame.storage.records import GameRecordStore
from guessgame.storage.users import UserDirectory

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PlayerAggregate:
    user_id: str
    records: list[GameRecord] = field(default_factory=list)
    total_wins: int = 0
    total_score: float = 0
    best_score: float = 0
    attempts_sum: int = 0
    time_sum: float = 0
    last_played: datetime | None = None

    @property
    def total_games(self) -> int:
        return len(self.records)

    @property
    def win_rate(self) -> float:
        return win_rate(self.total_wins, self.total_games)

    def add(self, record: GameRecord) -> None:
        if not self.records or record.score > self.best_score:
            self.best_score = record.score
        self.records.append(record)
        self.total_wins += 1 if record.is_win else 0
        self.total_score += record.score
        self.attempts_sum += record.attempts
        self.time_sum += record.time_spent
        if self.last_played is None or record.created_at > self.last_played:
            self.last_played = record.created_at


def group_by_user(records: Sequence[GameRecord]) -> dict[str, PlayerAggregate]:
    groups: dict[str, PlayerAggregate] = {}
    for record in records:
        group = groups.get(record.user_id)
        if group is None:
            group = groups[record.user_id] = PlayerAggregate(user_id=record.user_id)
        group.add(record)
    return groups


def candidate_sort_key(group: PlayerAggregate) -> tuple[float, int, float]:
    return (-group.best_score, -group.total_wins, -group.win_rate)


def ranking_sort_key(entry: LeaderboardEntry) -> tuple[int, int]:
    return (-entry.longest_streak, -entry.total_wins)


def select_candidates(
    groups: Sequence[PlayerAggregate],
    limit: int | None,
) -> list[PlayerAggregate]:
    ordered = sorted(groups, key=candidate_sort_key)
    return ordered if limit is None else ordered[:limit]


def assign_ranks(entries: list[LeaderboardEntry]) -> list[LeaderboardEntry]:
    entries.sort(key=ranking_sort_key)
    for rank, entry in enumerate(entries, start=1):
        entry.rank = rank
    return entries


class LeaderboardBuilder:
    def __init__(self, records: GameRecordStore, users: UserDirectory):
        self.records = records
        self.users = users

    async def build_leaderboard(self, limit: int | None) -> list[LeaderboardEntry]:
        """Ranked leaderboard; ``limit=None`` keeps every player."""
        groups = group_by_user(await self.records.all())
        directory = await self.users.find_many(groups.keys())

        joined: list[PlayerAggregate] = []
        for user_id, group in groups.items():
            if user_id in directory:
                joined.append(group)
            else:
                logger.warning("leaderboard: dropping %d records for unknown user=%s", group.total_games, user_id)

        candidates = select_candidates(joined, limit)
        entries = []
        for group in candidates:
            user = directory[group.user_id]
            entries.append(
                LeaderboardEntry(
                    user_id=group.user_id,
                    name=user.name,
                    email=user.email,
                    total_games=group.total_games,
                    total_wins=group.total_wins,
                    total_score=group.total_score,
                    win_rate=round_half_up(group.win_rate, 1),
                    average_attempts=round_half_up(group.attempts_sum / group.total_games, 1),
                    average_time=round_half_up(group.time_sum / group.total_games),
                    best_score=group.best_score,
                    last_played=group.last_played,
                    longest_streak=longest_win_streak(group.records),
                )
            )

        logger.debug(
            "leaderboard: players=%d joined=%d listed=%d limit=%s",
            len(groups),
            len(joined),
            len(entries),
            limit,
        )
        return assign_ranks(entries)

    async def get_leaderboard_stats(self) -> LeaderboardStats:
        records = await self.records.all()
        player_ids = await self.records.distinct_user_ids()
        if not records:
            return LeaderboardStats(total_players=len(player_ids))

        total_games = len(records)
        total_wins = sum(1 for r in records if r.is_win)
        groups = group_by_user(records)
        return LeaderboardStats(
            total_players=len(player_ids),
            total_games=total_games,
            total_wins=total_wins,
            win_rate=round_half_up(win_rate(total_wins, total_games)),
            top_score=max(r.score for r in records),
            average_score=round_half_up(sum(r.score for r in records) / total_games),
            average_attempts=round_half_up(sum(r.attempts for r in records) / total_games, 1),
            average_time=round_half_up(sum(r.time_spent for r in records) / total_games),
            longest_streak=max(longest_win_streak(g.records) for g in groups.values()),
        )


class RankLookup:
    def __init__(
        self,
        builder: LeaderboardBuilder,
        records: GameRecordStore,
        users: UserDirectory,
        limit: int | None = None,
    ):
        self.builder = builder
        self.records = records
        self.users = users
        self.limit = limit

    async def get_user_rank(self, user_id: str) -> LeaderboardEntry | None:
        if not await self.users.exists(user_id):
            raise UserNotFoundError(user_id)

        # Never played: unranked, which is not the same as unknown.
        if await self.records.count_by_user(user_id) == 0:
            return None

        for entry in await self.builder.build_leaderboard(self.limit):
            if entry.user_id == user_id:
                return entry
        return None

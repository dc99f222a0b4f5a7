"""Per-user statistics and the win-streak scan shared with the leaderboard."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from guessgame.models.domain import GameRecord, User, UserStats, round_half_up
from guessgame.services.errors import UserNotFoundError
from guessgame.storage.records import GameRecordStore
from guessgame.storage.users import UserDirectory


@dataclass(slots=True)
class UserStatsResult:
    user: User
    stats: UserStats


def longest_win_streak(records: Iterable[GameRecord]) -> int:
    """Longest run of consecutive wins in chronological order.

    ``sorted`` is stable, so records sharing a ``created_at`` keep the order
    the store returned them in.
    """
    longest = 0
    current = 0
    for record in sorted(records, key=lambda r: r.created_at):
        if record.is_win:
            current += 1
            longest = max(longest, current)
        else:
            current = 0
    return longest


def win_rate(total_wins: int, total_games: int) -> float:
    if total_games <= 0:
        return 0.0
    return total_wins / total_games * 100


def summarize_records(records: Sequence[GameRecord]) -> UserStats:
    if not records:
        return UserStats()

    total_games = len(records)
    total_wins = sum(1 for r in records if r.is_win)
    return UserStats(
        total_games=total_games,
        total_wins=total_wins,
        total_score=sum(r.score for r in records),
        win_rate=round_half_up(win_rate(total_wins, total_games)),
        average_attempts=round_half_up(sum(r.attempts for r in records) / total_games, 1),
        average_time=round_half_up(sum(r.time_spent for r in records) / total_games),
        best_score=max(r.score for r in records),
        longest_streak=longest_win_streak(records),
    )


class StatsAggregator:
    def __init__(self, records: GameRecordStore, users: UserDirectory):
        self.records = records
        self.users = users

    async def compute_user_stats(self, user_id: str) -> UserStats:
        if not await self.users.exists(user_id):
            raise UserNotFoundError(user_id)
        return await self._summarize(user_id)

    async def get_user_stats(self, user_id: str) -> UserStatsResult:
        user = await self.users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return UserStatsResult(user=user, stats=await self._summarize(user.id))

    async def _summarize(self, user_id: str) -> UserStats:
        return summarize_records(await self.records.find_by_user(user_id))

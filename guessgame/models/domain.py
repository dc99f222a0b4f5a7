"""Domain records shared by the storage layer and the aggregation services."""

from __future__ import annotations

import json
import math
from dataclasses import asdict, dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

GAME_TYPES = ("number_guessing", "word_guessing", "general")
DIFFICULTIES = ("easy", "medium", "hard")
ROLES = ("user", "admin")

DIFFICULTY_MULTIPLIER = {"easy": 1.0, "medium": 1.5, "hard": 2.0}
MAX_BONUS_ATTEMPTS = 10
MAX_BONUS_SECONDS = 300


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like JavaScript Math.round: halves go up, not to even."""
    quantum = Decimal(1).scaleb(-digits)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return int(rounded) if digits == 0 else float(rounded)


@dataclass(slots=True)
class User:
    id: str
    name: str
    email: str
    role: str = "user"
    is_active: bool = True
    created_at: datetime | None = None

    def to_mapping(self) -> dict[str, str]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "is_active": "1" if self.is_active else "0",
            "created_at": self.created_at.isoformat() if self.created_at else "",
        }

    @classmethod
    def from_mapping(cls, data: dict[str, str]) -> User:
        created_at = data.get("created_at")
        return cls(
            id=data["id"],
            name=data["name"],
            email=data["email"],
            role=data.get("role", "user"),
            is_active=data.get("is_active", "1") == "1",
            created_at=datetime.fromisoformat(created_at) if created_at else None,
        )


@dataclass(slots=True)
class NewGameScore:
    """A completed round as submitted by a client, before it is stored."""

    user_id: str
    score: float
    attempts: int
    time_spent: float
    is_win: bool
    game_type: str = "number_guessing"
    difficulty: str = "medium"
    target_number: float | None = None
    guessed_number: float | None = None
    hints: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class GameRecord:
    id: str
    user_id: str
    score: float
    attempts: int
    time_spent: float
    is_win: bool
    created_at: datetime
    game_type: str = "number_guessing"
    difficulty: str = "medium"
    target_number: float | None = None
    guessed_number: float | None = None
    hints: tuple[str, ...] = ()

    @property
    def points(self) -> int:
        return compute_points(self.is_win, self.attempts, self.time_spent, self.difficulty)

    def to_json(self) -> str:
        payload = asdict(self)
        payload["created_at"] = self.created_at.isoformat()
        payload["hints"] = list(self.hints)
        return json.dumps(payload)

    @classmethod
    def from_json(cls, raw: str) -> GameRecord:
        payload: dict[str, Any] = json.loads(raw)
        payload["created_at"] = datetime.fromisoformat(payload["created_at"])
        payload["hints"] = tuple(payload.get("hints") or ())
        return cls(**payload)


def compute_points(is_win: bool, attempts: int, time_spent: float, difficulty: str) -> int:
    """Performance points for one round; losses are worth nothing."""
    if not is_win:
        return 0

    points = 100.0
    points += max(0, (MAX_BONUS_ATTEMPTS - attempts) * 10)
    points += round_half_up(max(0.0, (MAX_BONUS_SECONDS - time_spent) / 10))
    points *= DIFFICULTY_MULTIPLIER.get(difficulty, 1.0)
    return int(round_half_up(points))


@dataclass(slots=True)
class UserStats:
    total_games: int = 0
    total_wins: int = 0
    total_score: float = 0
    win_rate: float = 0
    average_attempts: float = 0
    average_time: float = 0
    best_score: float = 0
    longest_streak: int = 0


@dataclass(slots=True)
class LeaderboardEntry:
    user_id: str
    name: str
    email: str
    total_games: int
    total_wins: int
    total_score: float
    win_rate: float
    average_attempts: float
    average_time: float
    best_score: float
    last_played: datetime
    longest_streak: int = 0
    rank: int = 0


@dataclass(slots=True)
class LeaderboardStats:
    total_players: int = 0
    total_games: int = 0
    total_wins: int = 0
    win_rate: float = 0
    top_score: float = 0
    average_score: float = 0
    average_attempts: float = 0
    average_time: float = 0
    longest_streak: int = 0


@dataclass(slots=True)
class PaginationInfo:
    current_page: int
    total_pages: int
    total_records: int
    has_next: bool
    has_prev: bool


def paginate(page: int, page_size: int, total: int) -> PaginationInfo:
    total_pages = math.ceil(total / page_size) if page_size > 0 else 0
    return PaginationInfo(
        current_page=page,
        total_pages=total_pages,
        total_records=total,
        has_next=page < total_pages,
        has_prev=page > 1,
    )


@dataclass(slots=True)
class GameHistory:
    records: list[GameRecord]
    pagination: PaginationInfo

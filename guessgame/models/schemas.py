"""Pydantic request/response schemas for the public game API.

These models define input validation and response contracts used by routes
and exception handlers. Responses are built straight from the domain
dataclasses via ``from_attributes``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints

IDENTIFIER_PATTERN = r"^[A-Za-z0-9_-]{1,64}$"
NAME_PATTERN = r"^[A-Za-z0-9\s_-]+$"
Identifier = Annotated[str, StringConstraints(pattern=IDENTIFIER_PATTERN)]
DisplayName = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=2, max_length=50, pattern=NAME_PATTERN),
]

GameType = Literal["number_guessing", "word_guessing", "general"]
Difficulty = Literal["easy", "medium", "hard"]


class ErrorBody(BaseModel):
    code: str
    message: str
    details: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    error: ErrorBody


class UserCreate(BaseModel):
    name: DisplayName
    email: EmailStr
    role: Literal["user", "admin"] = "user"


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    role: str
    is_active: bool
    created_at: datetime | None = None


class UserUpdate(BaseModel):
    name: DisplayName | None = None
    email: EmailStr | None = None
    role: Literal["user", "admin"] | None = None


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str


class ScoreSubmission(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    game_type: GameType = "number_guessing"
    score: float = Field(ge=0)
    attempts: int = Field(ge=1)
    time_spent: float = Field(ge=0)
    difficulty: Difficulty = "medium"
    is_win: bool
    target_number: float | None = None
    guessed_number: float | None = None
    hints: list[str] = Field(default_factory=list)


class GameRecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    game_type: str
    score: float
    attempts: int
    time_spent: float
    difficulty: str
    is_win: bool
    target_number: float | None = None
    guessed_number: float | None = None
    hints: list[str]
    points: int
    created_at: datetime


class UserStatsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_games: int
    total_wins: int
    total_score: float
    win_rate: int
    average_attempts: float
    average_time: int
    best_score: float
    longest_streak: int


class UserStatsResponse(BaseModel):
    user: UserSummary
    stats: UserStatsOut


class PaginationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    current_page: int
    total_pages: int
    total_records: int
    has_next: bool
    has_prev: bool


class GameHistoryResponse(BaseModel):
    games: list[GameRecordOut]
    pagination: PaginationOut


class UserListResponse(BaseModel):
    users: list[UserOut]
    pagination: PaginationOut


class LeaderboardRow(UserStatsOut):
    win_rate: float
    rank: int
    user_id: str
    name: str
    email: str
    last_played: datetime


class LeaderboardResponse(BaseModel):
    limit: int
    results: list[LeaderboardRow]


class UserRankResponse(BaseModel):
    user_id: str
    ranked: bool
    entry: LeaderboardRow | None = None


class LeaderboardStatsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_players: int
    total_games: int
    total_wins: int
    win_rate: int
    top_score: float
    average_score: int
    average_attempts: float
    average_time: int
    longest_streak: int


class HealthResponse(BaseModel):
    status: Literal["ok"]


class ReadyResponse(BaseModel):
    status: Literal["ok"]

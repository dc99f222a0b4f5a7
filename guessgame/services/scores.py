"""Score recording and per-user game history."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from datetime import datetime, timezone

from guessgame.models.domain import (
    DIFFICULTIES,
    GAME_TYPES,
    GameHistory,
    GameRecord,
    NewGameScore,
    paginate,
)
from guessgame.services.errors import ScoreValidationError, UserNotFoundError
from guessgame.storage.records import GameRecordStore, new_record_id
from guessgame.storage.users import UserDirectory

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def validate_game_score(game: NewGameScore) -> None:
    if not game.user_id:
        raise ScoreValidationError("user_id is required")
    if game.game_type not in GAME_TYPES:
        raise ScoreValidationError(f"game_type must be one of: {', '.join(GAME_TYPES)}")
    if game.difficulty not in DIFFICULTIES:
        raise ScoreValidationError(f"difficulty must be one of: {', '.join(DIFFICULTIES)}")
    for name in ("score", "time_spent", "target_number", "guessed_number"):
        value = getattr(game, name)
        if value is not None and not math.isfinite(value):
            raise ScoreValidationError(f"{name} must be a finite number")
    if game.score < 0:
        raise ScoreValidationError("score must be a non-negative number")
    if game.attempts < 1:
        raise ScoreValidationError("attempts must be a positive integer")
    if game.time_spent < 0:
        raise ScoreValidationError("time_spent must be a non-negative number")


class ScoreRecorder:
    def __init__(
        self,
        records: GameRecordStore,
        users: UserDirectory,
        clock: Clock = utc_now,
    ):
        self.records = records
        self.users = users
        self.clock = clock

    async def record_score(self, game: NewGameScore) -> GameRecord:
        validate_game_score(game)
        if not await self.users.exists(game.user_id):
            raise UserNotFoundError(game.user_id)

        record = GameRecord(
            id=new_record_id(),
            user_id=game.user_id,
            score=game.score,
            attempts=game.attempts,
            time_spent=game.time_spent,
            is_win=game.is_win,
            created_at=self.clock(),
            game_type=game.game_type,
            difficulty=game.difficulty,
            target_number=game.target_number,
            guessed_number=game.guessed_number,
            hints=tuple(game.hints),
        )
        await self.records.append(record)
        logger.info(
            "score recorded id=%s user=%s score=%s win=%s",
            record.id,
            record.user_id,
            record.score,
            record.is_win,
        )
        return record

    async def get_user_game_history(self, user_id: str, page: int, page_size: int) -> GameHistory:
        if not await self.users.exists(user_id):
            raise UserNotFoundError(user_id)
        if page < 1 or page_size < 1:
            raise ScoreValidationError("page and page_size must be positive integers")

        records, total = await self.records.find_by_user_paged(user_id, page, page_size)
        return GameHistory(records=records, pagination=paginate(page, page_size, total))

"""Runtime settings loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_REDIS_URL = "redis://localhost:6379/0"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


def _optional_int_env(name: str) -> int | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return int(raw)


@dataclass(frozen=True, slots=True)
class Settings:
    redis_url: str = DEFAULT_REDIS_URL
    log_level: str = "INFO"
    leaderboard_default_limit: int = 50
    leaderboard_max_limit: int = 100
    history_page_size: int = 20
    # None ranks every player; a number reproduces a capped lookup.
    rank_lookup_limit: int | None = None


def get_settings() -> Settings:
    return Settings(
        redis_url=os.getenv("REDIS_URL", DEFAULT_REDIS_URL),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        leaderboard_default_limit=_int_env("LEADERBOARD_DEFAULT_LIMIT", 50),
        leaderboard_max_limit=_int_env("LEADERBOARD_MAX_LIMIT", 100),
        history_page_size=_int_env("HISTORY_PAGE_SIZE", 20),
        rank_lookup_limit=_optional_int_env("RANK_LOOKUP_LIMIT"),
    )

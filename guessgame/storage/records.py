"""Append-only game record storage on Redis.

Each record is a JSON document under ``game:{id}``. Two sorted sets keyed by
the ``created_at`` timestamp index it: one per user and one global. A set
tracks which users have played at all. An append writes all four keys in a
single MULTI/EXEC so readers never observe a half-written record.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable

from redis.asyncio import Redis

from guessgame.models.domain import GameRecord

ALL_GAMES_KEY = "games:all"
PLAYERS_KEY = "games:players"


def game_key(record_id: str) -> str:
    return f"game:{record_id}"


def user_games_key(user_id: str) -> str:
    return f"games:user:{user_id}"


def new_record_id() -> str:
    return uuid.uuid4().hex


class GameRecordStore:
    def __init__(self, redis_client: Redis):
        self.redis = redis_client

    async def append(self, record: GameRecord) -> GameRecord:
        timestamp = record.created_at.timestamp()
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.set(game_key(record.id), record.to_json())
            pipe.zadd(user_games_key(record.user_id), {record.id: timestamp})
            pipe.zadd(ALL_GAMES_KEY, {record.id: timestamp})
            pipe.sadd(PLAYERS_KEY, record.user_id)
            await pipe.execute()
        return record

    async def find_by_user(self, user_id: str) -> list[GameRecord]:
        """Every record for a user, oldest first."""
        ids = await self.redis.zrange(user_games_key(user_id), 0, -1)
        return await self._load(ids)

    async def find_by_user_paged(
        self,
        user_id: str,
        page: int,
        page_size: int,
    ) -> tuple[list[GameRecord], int]:
        """One page of a user's records, newest first, plus the user's total."""
        key = user_games_key(user_id)
        start = (page - 1) * page_size
        end = start + page_size - 1
        ids = await self.redis.zrevrange(key, start, end)
        total = await self.redis.zcard(key)
        return await self._load(ids), int(total)

    async def count_by_user(self, user_id: str) -> int:
        return int(await self.redis.zcard(user_games_key(user_id)))

    async def all(self) -> list[GameRecord]:
        """Every stored record, oldest first."""
        ids = await self.redis.zrange(ALL_GAMES_KEY, 0, -1)
        return await self._load(ids)

    async def distinct_user_ids(self) -> set[str]:
        return set(await self.redis.smembers(PLAYERS_KEY))

    async def _load(self, ids: Iterable[str]) -> list[GameRecord]:
        keys = [game_key(record_id) for record_id in ids]
        if not keys:
            return []
        documents = await self.redis.mget(keys)
        return [GameRecord.from_json(doc) for doc in documents if doc is not None]

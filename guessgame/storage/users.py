"""User directory on Redis.

Each user is a hash under ``user:{id}``. ``users:email`` maps normalized
emails to ids, and ``users:active`` is a sorted set of active user ids keyed
by creation time for newest-first listings. Deactivation is a soft delete:
the hash and the email claim stay, only the active index entry goes.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from redis.asyncio import Redis
from redis.exceptions import RedisError

from guessgame.models.domain import User

EMAIL_INDEX_KEY = "users:email"
ACTIVE_USERS_KEY = "users:active"


def user_key(user_id: str) -> str:
    return f"user:{user_id}"


def normalize_email(email: str) -> str:
    return email.strip().lower()


class EmailTakenError(Exception):
    """Raised when an email is already bound to another user."""


class UserDirectory:
    def __init__(self, redis_client: Redis, clock: Callable[[], datetime] | None = None):
        self.redis = redis_client
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    async def create(self, name: str, email: str, role: str = "user") -> User:
        user = User(
            id=uuid.uuid4().hex,
            name=name,
            email=normalize_email(email),
            role=role,
            created_at=self.clock(),
        )
        await self._claim_email(user.email, user.id)
        try:
            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.hset(user_key(user.id), mapping=user.to_mapping())
                pipe.zadd(ACTIVE_USERS_KEY, {user.id: user.created_at.timestamp()})
                await pipe.execute()
        except RedisError:
            await self.redis.hdel(EMAIL_INDEX_KEY, user.email)
            raise
        return user

    async def update(
        self,
        user_id: str,
        name: str | None = None,
        email: str | None = None,
        role: str | None = None,
    ) -> User | None:
        user = await self.find_by_id(user_id)
        if user is None:
            return None

        old_email = user.email
        new_email = normalize_email(email) if email is not None else old_email
        if new_email != old_email:
            await self._claim_email(new_email, user.id)

        user.name = name if name is not None else user.name
        user.email = new_email
        user.role = role if role is not None else user.role
        try:
            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.hset(user_key(user.id), mapping=user.to_mapping())
                if new_email != old_email:
                    pipe.hdel(EMAIL_INDEX_KEY, old_email)
                await pipe.execute()
        except RedisError:
            if new_email != old_email:
                await self.redis.hdel(EMAIL_INDEX_KEY, new_email)
            raise
        return user

    async def deactivate(self, user_id: str) -> User | None:
        user = await self.find_by_id(user_id)
        if user is None:
            return None
        user.is_active = False
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.hset(user_key(user_id), "is_active", "0")
            pipe.zrem(ACTIVE_USERS_KEY, user_id)
            await pipe.execute()
        return user

    async def list_active(self, page: int, page_size: int) -> tuple[list[User], int]:
        """One page of active users, newest first, plus the active total."""
        start = (page - 1) * page_size
        end = start + page_size - 1
        ids = await self.redis.zrevrange(ACTIVE_USERS_KEY, start, end)
        total = await self.redis.zcard(ACTIVE_USERS_KEY)
        found = await self.find_many(ids)
        return [found[user_id] for user_id in ids if user_id in found], int(total)

    async def find_by_id(self, user_id: str) -> User | None:
        data = await self.redis.hgetall(user_key(user_id))
        if not data:
            return None
        return User.from_mapping(data)

    async def exists(self, user_id: str) -> bool:
        return bool(await self.redis.exists(user_key(user_id)))

    async def find_many(self, user_ids: Iterable[str]) -> dict[str, User]:
        ids = list(user_ids)
        if not ids:
            return {}
        async with self.redis.pipeline(transaction=False) as pipe:
            for user_id in ids:
                pipe.hgetall(user_key(user_id))
            rows = await pipe.execute()
        return {user_id: User.from_mapping(row) for user_id, row in zip(ids, rows) if row}

    async def _claim_email(self, email: str, user_id: str) -> None:
        # HSETNX claims the email atomically; a concurrent duplicate loses here.
        if not await self.redis.hsetnx(EMAIL_INDEX_KEY, email, user_id):
            raise EmailTakenError(email)

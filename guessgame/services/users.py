"""User registration, lookup, listing, updates and soft deletion."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from guessgame.models.domain import PaginationInfo, User, paginate
from guessgame.services.errors import EmailAlreadyRegisteredError, UserNotFoundError
from guessgame.storage.users import EmailTakenError, UserDirectory

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class UserPage:
    users: list[User]
    pagination: PaginationInfo


class UserService:
    def __init__(self, users: UserDirectory):
        self.users = users

    async def create_user(self, name: str, email: str, role: str = "user") -> User:
        try:
            user = await self.users.create(name=name.strip(), email=email, role=role)
        except EmailTakenError as exc:
            raise EmailAlreadyRegisteredError(email) from exc
        logger.info("user created id=%s", user.id)
        return user

    async def get_user(self, user_id: str) -> User:
        user = await self.users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def list_users(self, page: int, page_size: int) -> UserPage:
        """Active users only; deactivated accounts drop out of listings."""
        users, total = await self.users.list_active(page, page_size)
        return UserPage(users=users, pagination=paginate(page, page_size, total))

    async def update_user(
        self,
        user_id: str,
        name: str | None = None,
        email: str | None = None,
        role: str | None = None,
    ) -> User:
        try:
            user = await self.users.update(
                user_id,
                name=name.strip() if name is not None else None,
                email=email,
                role=role,
            )
        except EmailTakenError as exc:
            raise EmailAlreadyRegisteredError(email) from exc
        if user is None:
            raise UserNotFoundError(user_id)
        logger.info("user updated id=%s", user_id)
        return user

    async def deactivate_user(self, user_id: str) -> User:
        user = await self.users.deactivate(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        logger.info("user deactivated id=%s", user_id)
        return user

"""
users_api.db.repositories.users

Repository for `User` entities.

Responsibilities:
- List, fetch, create, update and delete users.
- Look users up by e-mail for login.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from users_api.db.models import User

# Columns a caller may set through `create`/`update`.
_MUTABLE_FIELDS = frozenset(
    {
        "email",
        "password_hash",
        "first_name",
        "last_name",
        "date_of_birth",
        "home_phone_number",
        "cell_phone_number",
        "current_address",
        "previous_address",
        "role_id",
    }
)


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_all(self) -> list[User]:
        stmt = select(User).order_by(User.id)
        return list((await self._session.execute(stmt)).scalars().all())

    async def get(self, user_id: int) -> User | None:
        return await self._session.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def create(self, *, fields: dict[str, Any]) -> User:
        user = User(**_only_mutable(fields))
        self._session.add(user)
        # Flush surfaces unique-email violations (IntegrityError) to the caller.
        await self._session.flush()
        return user

    async def update(self, user_id: int, *, fields: dict[str, Any]) -> User | None:
        user = await self._session.get(User, user_id, with_for_update=True)
        if user is None:
            return None
        for key, value in _only_mutable(fields).items():
            setattr(user, key, value)
        user.updated_at = datetime.utcnow()
        await self._session.flush()
        return user

    async def delete(self, user_id: int) -> User | None:
        user = await self._session.get(User, user_id)
        if user is None:
            return None
        await self._session.delete(user)
        await self._session.flush()
        return user


def _only_mutable(fields: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in fields.items() if k in _MUTABLE_FIELDS}

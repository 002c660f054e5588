"""
users_api.db.repositories.roles

Repository for `Role` and `Permission` entities.

Responsibilities:
- Look roles up by id or name (permissions eagerly loaded).
- Provision a role with an exact permission set (idempotent).
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from users_api.db.models import Permission, Role


class RoleRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, role_id: int) -> Role | None:
        return await self._session.get(Role, role_id)

    async def get_by_name(self, name: str) -> Role | None:
        stmt = select(Role).where(Role.name == name)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def ensure(self, *, name: str, permissions: Iterable[tuple[str, str | None]]) -> Role:
        """
        Create the role if missing and make its permission set equal to `permissions`.
        """

        wanted = set(permissions)
        role = await self.get_by_name(name)
        if role is None:
            role = Role(name=name, permissions=[])
            self._session.add(role)
            await self._session.flush()

        existing = {(p.action, p.scope): p for p in role.permissions}
        for key, perm in existing.items():
            if key not in wanted:
                role.permissions.remove(perm)
        for action, scope in sorted(wanted - existing.keys(), key=lambda k: (k[0], k[1] or "")):
            role.permissions.append(Permission(action=action, scope=scope))
        await self._session.flush()
        return role

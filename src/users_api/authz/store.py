"""
users_api.authz.store

Role/permission store boundary used by the authorization engine.

Responsibilities:
- Define the immutable `RoleRecord` snapshot and the `RoleStore` protocol.
- Provide the SQLAlchemy-backed store, optionally fronted by the process-wide `RoleCache`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from users_api.authz.cache import RoleCache
from users_api.authz.policy import Grant
from users_api.authz.scope import Scope
from users_api.db.models import Role
from users_api.db.repositories.roles import RoleRepo


@dataclass(frozen=True, slots=True)
class RoleRecord:
    """
    Read-only view of a role and its grants, detached from the ORM session.
    """

    id: int
    name: str
    grants: frozenset[Grant]

    @classmethod
    def from_model(cls, role: Role) -> RoleRecord:
        return cls(
            id=role.id,
            name=role.name,
            grants=frozenset(Grant(p.action, Scope.parse(p.scope)) for p in role.permissions),
        )


class RoleStore(Protocol):
    async def get_role(self, role_id: int) -> RoleRecord | None: ...

    async def get_role_by_name(self, name: str) -> RoleRecord | None: ...


class SqlRoleStore:
    def __init__(self, session: AsyncSession, *, cache: RoleCache | None = None) -> None:
        self._roles = RoleRepo(session)
        self._cache = cache

    async def get_role(self, role_id: int) -> RoleRecord | None:
        if self._cache is not None:
            hit = self._cache.get_by_id(role_id)
            if hit is not None:
                return hit
        return self._remember(await self._roles.get(role_id))

    async def get_role_by_name(self, name: str) -> RoleRecord | None:
        if self._cache is not None:
            hit = self._cache.get_by_name(name)
            if hit is not None:
                return hit
        return self._remember(await self._roles.get_by_name(name))

    def _remember(self, role: Role | None) -> RoleRecord | None:
        if role is None:
            return None
        record = RoleRecord.from_model(role)
        if self._cache is not None:
            self._cache.put(record)
        return record


# --- Module Notes -----------------------------------------------------------
# Database errors raised by the repository propagate unchanged: an unreachable store is an
# infrastructure fault, not a policy decision.

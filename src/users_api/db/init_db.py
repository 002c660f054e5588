"""
users_api.db.init_db

DB initialization helpers (dev/test convenience).

Responsibilities:
- Create tables for local development and tests.
- Provision roles and permissions from a declarative policy table.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from users_api.authz.policy import Grant
from users_api.db.base import Base
from users_api.db.repositories.roles import RoleRepo
from users_api.observability.logging import get_logger

log = get_logger(__name__)


async def init_db(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def provision_roles(
    session_factory: async_sessionmaker[AsyncSession],
    policy: Mapping[str, Sequence[Grant]],
) -> None:
    """
    Make the roles table match `policy`. Safe to run repeatedly; roles absent from
    `policy` are left untouched.
    """

    async with session_factory() as session:
        roles = RoleRepo(session)
        for name, grants in policy.items():
            await roles.ensure(
                name=name,
                permissions=[(str(g.action), g.scope.to_db()) for g in grants],
            )
        await session.commit()
    log.info("roles.provisioned", roles=sorted(policy))


# --- Module Notes -----------------------------------------------------------
# Production deployments provision roles out-of-band; the app only calls these helpers
# when `provision_default_roles` is set outside prod.

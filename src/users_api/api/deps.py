"""
users_api.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings, DB sessions and the authorization engine.
- Encapsulate app.state access patterns (settings/sessionmaker/role cache).
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from users_api.auth.passwords import PasswordHasher
from users_api.authz.cache import RoleCache
from users_api.authz.engine import AuthorizationEngine
from users_api.authz.store import SqlRoleStore
from users_api.settings import Settings


def settings_dep(request: Request) -> Settings:
    # Settings are attached in `users_api.api.app.create_app`.
    return request.app.state.settings  # type: ignore[attr-defined]


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


def role_cache_from_app(request: Request) -> RoleCache:
    return request.app.state.role_cache  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Commit/rollback is managed explicitly by the service layer.
    async with session_factory() as session:
        yield session


def authz_engine(
    session: AsyncSession = Depends(db_session),
    cache: RoleCache = Depends(role_cache_from_app),
    settings: Settings = Depends(settings_dep),
) -> AuthorizationEngine:
    return AuthorizationEngine(
        store=SqlRoleStore(session, cache=cache),
        anonymous_role=settings.anonymous_role,
    )


def password_hasher(settings: Settings = Depends(settings_dep)) -> PasswordHasher:
    return PasswordHasher(rounds=settings.bcrypt_rounds)


# --- Module Notes -----------------------------------------------------------
# FastAPI caches dependencies per request, so the engine and the handler share one session.

"""
tests.conftest

Shared fixtures.

Responsibilities:
- Build a test-mode app on a per-test sqlite file with its lifespan started.
- Provide an in-memory role store for engine-level tests.
- Seed users and mint bearer headers via the login endpoint.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Iterable, Mapping
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from users_api.api.app import create_app
from users_api.auth.passwords import PasswordHasher
from users_api.authz.policy import Grant
from users_api.authz.store import RoleRecord
from users_api.db.repositories.roles import RoleRepo
from users_api.db.repositories.users import UserRepo
from users_api.settings import Settings

PASSWORD = "correct-horse-battery"


class InMemoryRoleStore:
    def __init__(self, roles: Mapping[str, Iterable[Grant]]) -> None:
        self._by_id = {
            i: RoleRecord(id=i, name=name, grants=frozenset(grants))
            for i, (name, grants) in enumerate(roles.items(), start=1)
        }
        self.lookups = 0

    def role_id(self, name: str) -> int:
        return next(r.id for r in self._by_id.values() if r.name == name)

    async def get_role(self, role_id: int) -> RoleRecord | None:
        self.lookups += 1
        return self._by_id.get(role_id)

    async def get_role_by_name(self, name: str) -> RoleRecord | None:
        self.lookups += 1
        return next((r for r in self._by_id.values() if r.name == name), None)


@pytest.fixture
def make_role_store() -> Callable[[Mapping[str, Iterable[Grant]]], InMemoryRoleStore]:
    return InMemoryRoleStore


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        env="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'users.db'}",
        bcrypt_rounds=4,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncIterator[FastAPI]:
    application = create_app(settings=settings)
    # httpx ASGITransport does not run lifespan; drive it explicitly.
    async with application.router.lifespan_context(application):
        yield application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


async def _role_id(app: FastAPI, name: str) -> int:
    async with app.state.sessionmaker() as session:
        role = await RoleRepo(session).get_by_name(name)
        assert role is not None, name
        return role.id


@pytest.fixture
def role_id(app: FastAPI):
    async def _lookup(name: str) -> int:
        return await _role_id(app, name)

    return _lookup


@pytest.fixture
def seed_user(app: FastAPI):
    hasher = PasswordHasher(rounds=4)

    async def _seed(*, email: str, role: str, first_name: str = "Test") -> int:
        rid = await _role_id(app, role)
        async with app.state.sessionmaker() as session:
            user = await UserRepo(session).create(
                fields={
                    "email": email,
                    "password_hash": hasher.hash(PASSWORD),
                    "first_name": first_name,
                    "last_name": "User",
                    "role_id": rid,
                }
            )
            await session.commit()
            return user.id

    return _seed


@pytest.fixture
def login(client: httpx.AsyncClient):
    async def _login(email: str, password: str = PASSWORD) -> dict[str, str]:
        r = await client.post("/v1/auth/token", json={"email": email, "password": password})
        assert r.status_code == 200, r.text
        return {"Authorization": f"Bearer {r.json()['access_token']}"}

    return _login

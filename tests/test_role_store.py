"""
tests.test_role_store

SQL-backed role store, role provisioning and the process-wide role cache.
"""

from __future__ import annotations

import pytest
from fastapi import FastAPI

from users_api.authz.cache import RoleCache
from users_api.authz.policy import DEFAULT_POLICY, Grant
from users_api.authz.scope import SELF, Scope
from users_api.authz.store import RoleRecord, SqlRoleStore
from users_api.db.init_db import provision_roles


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


@pytest.mark.asyncio
async def test_default_roles_are_provisioned(app: FastAPI) -> None:
    async with app.state.sessionmaker() as session:
        store = SqlRoleStore(session)
        for name, grants in DEFAULT_POLICY.items():
            record = await store.get_role_by_name(name)
            assert record is not None
            assert record.grants == frozenset(grants)
            assert await store.get_role(record.id) == record


@pytest.mark.asyncio
async def test_provisioning_is_idempotent_and_replaces_grants(app: FastAPI) -> None:
    await provision_roles(app.state.sessionmaker, DEFAULT_POLICY)
    await provision_roles(
        app.state.sessionmaker,
        {"member": (Grant("See", SELF), Grant("SeeAnyUser", Scope.for_role("member")))},
    )

    async with app.state.sessionmaker() as session:
        store = SqlRoleStore(session)
        member = await store.get_role_by_name("member")
        admin = await store.get_role_by_name("admin")

    assert member is not None and admin is not None
    assert member.grants == {Grant("See", SELF), Grant("SeeAnyUser", Scope.for_role("member"))}
    assert admin.grants == frozenset(DEFAULT_POLICY["admin"])


@pytest.mark.asyncio
async def test_missing_roles_resolve_to_none(app: FastAPI) -> None:
    async with app.state.sessionmaker() as session:
        store = SqlRoleStore(session)
        assert await store.get_role(9999) is None
        assert await store.get_role_by_name("nobody") is None


@pytest.mark.asyncio
async def test_store_fills_and_reads_the_cache(app: FastAPI) -> None:
    cache = RoleCache(ttl_seconds=60)
    async with app.state.sessionmaker() as session:
        store = SqlRoleStore(session, cache=cache)
        record = await store.get_role_by_name("admin")

    assert record is not None
    assert cache.get_by_id(record.id) == record
    assert cache.get_by_name("admin") == record


def test_cache_entries_expire() -> None:
    clock = FakeClock()
    cache = RoleCache(ttl_seconds=10, clock=clock)
    record = RoleRecord(id=1, name="admin", grants=frozenset())
    cache.put(record)

    clock.now += 9
    assert cache.get_by_id(1) == record
    clock.now += 1
    assert cache.get_by_id(1) is None
    assert cache.get_by_name("admin") is None


def test_cache_invalidate_and_disabled() -> None:
    cache = RoleCache(ttl_seconds=10)
    cache.put(RoleRecord(id=1, name="admin", grants=frozenset()))
    cache.invalidate()
    assert cache.get_by_name("admin") is None

    disabled = RoleCache(ttl_seconds=0)
    disabled.put(RoleRecord(id=1, name="admin", grants=frozenset()))
    assert disabled.enabled is False
    assert disabled.get_by_id(1) is None

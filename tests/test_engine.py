"""
tests.test_engine

Authorization engine decisions against an in-memory role store.
"""

from __future__ import annotations

import pytest

from users_api.auth.models import Principal
from users_api.authz.engine import AuthorizationEngine
from users_api.authz.policy import DEFAULT_POLICY, Grant, UserAction
from users_api.authz.scope import ANY, SELF, Scope

ADMIN_AND_MEMBER = {
    "admin": (
        Grant("SeeAnyUser"),
        Grant("AddUser"),
        Grant("UpdateAnyUser"),
        Grant("DeleteAnyUser"),
    ),
    "member": (Grant("Update", SELF),),
}


def _engine(store, anonymous_role: str = "guest") -> AuthorizationEngine:
    return AuthorizationEngine(store=store, anonymous_role=anonymous_role)


@pytest.mark.asyncio
async def test_no_configured_permission_denies(make_role_store) -> None:
    store = make_role_store({"member": ()})
    actor = Principal(id=1, role_id=store.role_id("member"))
    engine = _engine(store)

    for action in ("SeeAnyUser", "AddUser", "Update", "NoSuchAction", ""):
        assert await engine.can_do(actor, action) is False
        assert await engine.can_do(actor, action, "member") is False


@pytest.mark.asyncio
async def test_self_grant_only_matches_exact_self_scope(make_role_store) -> None:
    store = make_role_store({"member": (Grant("Update", SELF),)})
    actor = Principal(id=7, role_id=store.role_id("member"))
    engine = _engine(store)

    assert await engine.can_do(actor, "Update", "Self") is True
    assert await engine.can_do(actor, "Update", SELF) is True
    assert await engine.can_do(actor, "Update") is False
    assert await engine.can_do(actor, "Update", "member") is False
    assert await engine.can_do(actor, "Update", "self") is False


@pytest.mark.asyncio
async def test_unscoped_grant_covers_every_scope(make_role_store) -> None:
    store = make_role_store({"viewer": (Grant("SeeAnyUser", Scope.parse(None)),)})
    actor = Principal(id=3, role_id=store.role_id("viewer"))
    engine = _engine(store)

    assert await engine.can_do(actor, "SeeAnyUser", "admin") is True
    assert await engine.can_do(actor, "SeeAnyUser") is True
    assert await engine.can_do(actor, "SeeAnyUser", "Self") is True


@pytest.mark.asyncio
async def test_role_scoped_grant_does_not_answer_an_unscoped_request(make_role_store) -> None:
    store = make_role_store({"support": (Grant("SeeAnyUser", Scope.for_role("member")),)})
    actor = Principal(id=3, role_id=store.role_id("support"))
    engine = _engine(store)

    assert await engine.can_do(actor, "SeeAnyUser", "member") is True
    assert await engine.can_do(actor, "SeeAnyUser", "admin") is False
    assert await engine.can_do(actor, "SeeAnyUser") is False


@pytest.mark.asyncio
async def test_role_change_needs_add_into_new_role(make_role_store) -> None:
    store = make_role_store(
        {
            "editor": (
                Grant("UpdateAnyUser", Scope.for_role("member")),
                Grant("AddUser", Scope.for_role("member")),
            ),
            "member": (),
            "admin": (),
        }
    )
    actor = Principal(id=2, role_id=store.role_id("editor"))
    engine = _engine(store)

    # Step one passes, step two does not: the whole change must be refused by the caller.
    assert await engine.can_do(actor, "UpdateAnyUser", "member") is True
    assert await engine.can_assign_role(actor, "admin") is False
    assert await engine.can_assign_role(actor, "member") is True


@pytest.mark.asyncio
async def test_repeated_evaluation_is_stable(make_role_store) -> None:
    store = make_role_store(ADMIN_AND_MEMBER)
    actor = Principal(id=5, role_id=store.role_id("member"))
    engine = _engine(store)

    results = {await engine.can_do(actor, "Update", "Self") for _ in range(5)}
    assert results == {True}
    results = {await engine.can_do(actor, "DeleteAnyUser", "member") for _ in range(5)}
    assert results == {False}


@pytest.mark.asyncio
async def test_anonymous_actor_uses_guest_role(make_role_store) -> None:
    with_grant = _engine(make_role_store({"guest": (Grant("SeeAnyUser"),)}))
    assert await with_grant.can_do(None, "SeeAnyUser") is True

    without_grant = _engine(make_role_store({"guest": ()}))
    assert await without_grant.can_do(None, "SeeAnyUser") is False

    # No guest role configured at all: deny by default.
    no_guest_role = _engine(make_role_store({"admin": (Grant("SeeAnyUser"),)}))
    assert await no_guest_role.can_do(None, "SeeAnyUser") is False


@pytest.mark.asyncio
async def test_admin_and_member_end_to_end(make_role_store) -> None:
    store = make_role_store(ADMIN_AND_MEMBER)
    engine = _engine(store)
    member = Principal(id=5, role_id=store.role_id("member"))
    admin = Principal(id=1, role_id=store.role_id("admin"))

    target_id = 5
    scope = "Self" if member.id == target_id else "member"
    assert await engine.can_do(member, "Update", scope) is True
    assert await engine.can_do(member, "DeleteAnyUser", "member") is False

    for action in ("SeeAnyUser", "AddUser", "UpdateAnyUser", "DeleteAnyUser"):
        assert await engine.can_do(admin, action, "member") is True
        assert await engine.can_do(admin, action) is True


@pytest.mark.asyncio
async def test_overlapping_grants_combine_with_or(make_role_store) -> None:
    store = make_role_store(
        {"member": (Grant("Update", SELF), Grant("Update", Scope.for_role("member")))}
    )
    actor = Principal(id=1, role_id=store.role_id("member"))
    engine = _engine(store)

    assert await engine.can_do(actor, "Update", "Self") is True
    assert await engine.can_do(actor, "Update", "member") is True


@pytest.mark.asyncio
async def test_unknown_actor_role_denies(make_role_store) -> None:
    engine = _engine(make_role_store(ADMIN_AND_MEMBER))
    assert await engine.can_do(Principal(id=1, role_id=999), "SeeAnyUser") is False


@pytest.mark.asyncio
async def test_unresolved_target_role_denies_even_with_wildcard(make_role_store) -> None:
    store = make_role_store(ADMIN_AND_MEMBER)
    engine = _engine(store)
    admin = Principal(id=1, role_id=store.role_id("admin"))

    assert await engine.resolve_role_name(999) == ""
    assert await engine.can_do(admin, "DeleteAnyUser", await engine.resolve_role_name(999)) is False
    assert await engine.can_assign_role(admin, "") is False


@pytest.mark.asyncio
async def test_resolve_role_name(make_role_store) -> None:
    store = make_role_store(ADMIN_AND_MEMBER)
    engine = _engine(store)
    assert await engine.resolve_role_name(store.role_id("member")) == "member"


@pytest.mark.asyncio
async def test_store_faults_propagate() -> None:
    class BrokenStore:
        async def get_role(self, role_id: int):
            raise ConnectionError("database unavailable")

        async def get_role_by_name(self, name: str):
            raise ConnectionError("database unavailable")

    engine = _engine(BrokenStore())
    with pytest.raises(ConnectionError):
        await engine.can_do(Principal(id=1, role_id=1), "SeeAnyUser")
    with pytest.raises(ConnectionError):
        await engine.can_do(None, "SeeAnyUser")


@pytest.mark.asyncio
async def test_default_policy(make_role_store) -> None:
    store = make_role_store(DEFAULT_POLICY)
    engine = _engine(store)
    member = Principal(id=5, role_id=store.role_id("member"))

    assert await engine.can_do(member, UserAction.see, SELF) is True
    assert await engine.can_do(member, UserAction.update, SELF) is True
    assert await engine.can_do(member, UserAction.delete, SELF) is False
    assert await engine.can_do(member, UserAction.see_any) is False
    assert await engine.can_do(None, UserAction.add, "member") is True
    assert await engine.can_do(None, UserAction.add, "admin") is False
    assert await engine.can_do(None, UserAction.see_any) is False
    assert ANY.covers(None)

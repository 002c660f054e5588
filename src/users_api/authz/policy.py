"""
users_api.authz.policy

Declarative policy table and the pure evaluation function.

Responsibilities:
- Name the actions the users API checks.
- Define the default role -> grants table provisioned in dev/test.
- Evaluate a set of grants against an (action, scope) request.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from users_api.authz.scope import ANY, SELF, Scope


class UserAction(enum.StrEnum):
    # Actions against someone else (scoped by the target's role name).
    see_any = "SeeAnyUser"
    add = "AddUser"
    update_any = "UpdateAnyUser"
    delete_any = "DeleteAnyUser"
    # Actions against the actor's own record (scoped "Self").
    see = "See"
    update = "Update"
    delete = "Delete"


@dataclass(frozen=True, slots=True)
class Grant:
    action: str
    scope: Scope = ANY

    def __post_init__(self) -> None:
        # Store plain strings so enum-built and DB-loaded grants hash alike.
        object.__setattr__(self, "action", str(self.action))


def evaluate(grants: Iterable[Grant], action: str, scope: Scope | None) -> bool:
    # Overlapping grants combine with OR; no grant means deny.
    return any(g.action == action and g.scope.covers(scope) for g in grants)


DEFAULT_POLICY: Mapping[str, tuple[Grant, ...]] = {
    "admin": (
        Grant(UserAction.see_any),
        Grant(UserAction.add),
        Grant(UserAction.update_any),
        Grant(UserAction.delete_any),
    ),
    "member": (
        Grant(UserAction.see, SELF),
        Grant(UserAction.update, SELF),
    ),
    # Anonymous callers may only sign up as members.
    "guest": (Grant(UserAction.add, Scope.for_role("member")),),
}


# --- Module Notes -----------------------------------------------------------
# Role hierarchies are not modeled; a role that should include another role's grants
# lists them explicitly in this table.

"""
users_api.authz.targets

Caller-side half of the authorization protocol for target-bearing actions.

Responsibilities:
- Compare actor and target identity.
- Pick the action name and scope the engine should be asked about.
"""

from __future__ import annotations

import enum

from users_api.auth.models import Principal
from users_api.authz.policy import UserAction
from users_api.authz.scope import SELF, Scope


class Verb(enum.StrEnum):
    see = "see"
    update = "update"
    delete = "delete"


_SELF_ACTIONS = {
    Verb.see: UserAction.see,
    Verb.update: UserAction.update,
    Verb.delete: UserAction.delete,
}
_ANY_ACTIONS = {
    Verb.see: UserAction.see_any,
    Verb.update: UserAction.update_any,
    Verb.delete: UserAction.delete_any,
}


def is_self(actor: Principal | None, target_id: int) -> bool:
    return actor is not None and actor.id == target_id


def target_request(
    actor: Principal | None,
    verb: Verb,
    *,
    target_id: int,
    target_role_name: str,
) -> tuple[UserAction, Scope]:
    """
    Acting on yourself asks for the "Self" variant of the action; acting on anyone else
    asks for the "Any" variant scoped to the target's role name.
    """

    if is_self(actor, target_id):
        return _SELF_ACTIONS[verb], SELF
    return _ANY_ACTIONS[verb], Scope.for_role(target_role_name)

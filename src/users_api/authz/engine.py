"""
users_api.authz.engine

Authorization engine: evaluates (actor, action, scope) against the role/permission store.

Responsibilities:
- Resolve the actor's role (or the anonymous role when there is no actor).
- Answer allow/deny with a single pure evaluation over the role's grants.
- Resolve role names for target scopes.
"""

from __future__ import annotations

from users_api.auth.models import Principal
from users_api.authz.policy import UserAction, evaluate
from users_api.authz.scope import Scope, coerce_scope
from users_api.authz.store import RoleRecord, RoleStore
from users_api.observability.logging import get_logger

log = get_logger(__name__)


class AuthorizationEngine:
    """
    Stateless decision point. Never raises for unknown actions or scopes: anything not
    explicitly granted is denied. Store faults propagate.
    """

    def __init__(self, *, store: RoleStore, anonymous_role: str) -> None:
        self._store = store
        self._anonymous_role = anonymous_role

    async def can_do(
        self,
        actor: Principal | None,
        action: str,
        scope: Scope | str | None = None,
    ) -> bool:
        requested = coerce_scope(scope)
        role = await self._actor_role(actor)
        if role is None:
            log.warning(
                "authz.role_missing",
                actor_id=actor.id if actor else None,
                role_id=actor.role_id if actor else None,
                anonymous_role=None if actor else self._anonymous_role,
            )
            return False

        allowed = evaluate(role.grants, action, requested)
        # Denials are operationally interesting; grants are only traced at debug level.
        (log.debug if allowed else log.info)(
            "authz.allowed" if allowed else "authz.denied",
            actor_id=actor.id if actor else None,
            role=role.name,
            action=action,
            scope=None if requested is None else str(requested),
        )
        return allowed

    async def can_assign_role(self, actor: Principal | None, role_name: str) -> bool:
        # Placing a user into a role requires the right to create users of that role.
        return await self.can_do(actor, UserAction.add, Scope.for_role(role_name))

    async def resolve_role_name(self, role_id: int) -> str:
        """
        Role id -> name. Unknown ids resolve to "" which matches no grant.
        """

        role = await self._store.get_role(role_id)
        if role is None:
            log.warning("authz.role_unresolved", role_id=role_id)
            return ""
        return role.name

    async def _actor_role(self, actor: Principal | None) -> RoleRecord | None:
        if actor is None:
            return await self._store.get_role_by_name(self._anonymous_role)
        return await self._store.get_role(actor.role_id)


# --- Module Notes -----------------------------------------------------------
# The engine does not compare identities. Callers decide between a "Self" scope and the
# target's role name (see `authz.targets`) before asking.

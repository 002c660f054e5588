"""
users_api.services.user_service

User lifecycle service (authorization protocol + transaction owner).

Responsibilities:
- For every operation: resolve the target and its role, derive the scope, ask the engine.
- Enforce the two-step check when a user's role changes.
- Persist changes through `UserRepo` and commit.
- Verify credentials for login.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from users_api.auth.models import Principal
from users_api.auth.passwords import PasswordHasher
from users_api.authz.engine import AuthorizationEngine
from users_api.authz.policy import UserAction
from users_api.authz.scope import Scope
from users_api.authz.targets import Verb, target_request
from users_api.db.models import User
from users_api.db.repositories.roles import RoleRepo
from users_api.db.repositories.users import UserRepo
from users_api.observability.logging import get_logger

log = get_logger(__name__)

_REQUIRED_FIELDS = frozenset({"email", "password", "first_name", "last_name", "role_id"})


class AccessDeniedError(Exception):
    pass


class UserNotFoundError(Exception):
    pass


class UserConflictError(Exception):
    pass


class UserService:
    def __init__(
        self,
        *,
        session: AsyncSession,
        engine: AuthorizationEngine,
        hasher: PasswordHasher,
        default_role: str,
    ) -> None:
        self._session = session
        self._engine = engine
        self._hasher = hasher
        self._default_role = default_role

        self._users = UserRepo(session)
        self._roles = RoleRepo(session)

    async def list_users(self, actor: Principal | None) -> list[User]:
        # Collection-level read: no target, so no scope.
        await self._require(actor, UserAction.see_any)
        return await self._users.list_all()

    async def get_user(self, actor: Principal | None, user_id: int) -> User:
        user = await self._target(user_id)
        await self._require_on_target(actor, Verb.see, user)
        return user

    async def create_user(self, actor: Principal | None, fields: dict[str, Any]) -> User:
        fields = dict(fields)
        role_id = fields.get("role_id")
        if role_id is None:
            default = await self._roles.get_by_name(self._default_role)
            # A missing default role leaves role_id unset; the name "" below then denies.
            role_id = default.id if default is not None else None
            role_name = default.name if default is not None else ""
        else:
            role_name = await self._engine.resolve_role_name(role_id)

        if not await self._engine.can_assign_role(actor, role_name):
            raise AccessDeniedError(UserAction.add)

        fields["role_id"] = role_id
        fields["password_hash"] = self._hasher.hash(fields.pop("password"))
        try:
            user = await self._users.create(fields=fields)
            await self._session.commit()
        except IntegrityError as e:
            await self._session.rollback()
            raise UserConflictError("A user with that email already exists.") from e
        log.info("user.created", user_id=user.id, role=role_name, actor_id=_actor_id(actor))
        return user

    async def update_user(
        self, actor: Principal | None, user_id: int, fields: dict[str, Any]
    ) -> User:
        user = await self._target(user_id)
        await self._require_on_target(actor, Verb.update, user)

        # An explicit null only clears optional columns.
        fields = {k: v for k, v in fields.items() if v is not None or k not in _REQUIRED_FIELDS}
        new_role_id = fields.get("role_id")
        if new_role_id is not None and new_role_id != user.role_id:
            # Step two: editing the user is not enough, the actor must also be allowed to
            # create users in the role being assigned.
            new_role_name = await self._engine.resolve_role_name(new_role_id)
            if not await self._engine.can_assign_role(actor, new_role_name):
                raise AccessDeniedError(UserAction.add)

        if fields.get("password") is not None:
            fields["password_hash"] = self._hasher.hash(fields.pop("password"))
        try:
            updated = await self._users.update(user_id, fields=fields)
            await self._session.commit()
        except IntegrityError as e:
            await self._session.rollback()
            raise UserConflictError("A user with that email already exists.") from e
        if updated is None:
            raise UserNotFoundError(user_id)
        log.info("user.updated", user_id=user_id, fields=sorted(fields), actor_id=_actor_id(actor))
        return updated

    async def delete_user(self, actor: Principal | None, user_id: int) -> User:
        user = await self._target(user_id)
        await self._require_on_target(actor, Verb.delete, user)
        deleted = await self._users.delete(user_id)
        await self._session.commit()
        if deleted is None:
            raise UserNotFoundError(user_id)
        log.info("user.deleted", user_id=user_id, actor_id=_actor_id(actor))
        return deleted

    async def authenticate(self, *, email: str, password: str) -> User | None:
        user = await self._users.get_by_email(email)
        if user is None or not self._hasher.verify(password, user.password_hash):
            log.info("auth.login_failed")
            return None
        return user

    async def _target(self, user_id: int) -> User:
        user = await self._users.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def _require(
        self, actor: Principal | None, action: str, scope: Scope | None = None
    ) -> None:
        if not await self._engine.can_do(actor, action, scope):
            raise AccessDeniedError(action)

    async def _require_on_target(self, actor: Principal | None, verb: Verb, target: User) -> None:
        target_role = await self._engine.resolve_role_name(target.role_id)
        action, scope = target_request(
            actor, verb, target_id=target.id, target_role_name=target_role
        )
        await self._require(actor, action, scope)


def _actor_id(actor: Principal | None) -> int | None:
    return actor.id if actor is not None else None


# --- Module Notes -----------------------------------------------------------
# The target is fetched before authorization so a missing user surfaces as 404, distinct
# from a denial.

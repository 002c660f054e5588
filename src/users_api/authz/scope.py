"""
users_api.authz.scope

Explicit scope type for permission grants and authorization requests.

Responsibilities:
- Model a scope as a tagged value: ANY (every target), SELF (the actor itself) or ROLE(name).
- Convert between the stored string form and the tagged form.
- Decide whether a granted scope covers a requested one.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

SELF_SCOPE = "Self"
WILDCARD_SCOPE = "*"


class ScopeKind(enum.StrEnum):
    any = "ANY"
    self_ = "SELF"
    role = "ROLE"


@dataclass(frozen=True, slots=True)
class Scope:
    kind: ScopeKind
    role: str = ""

    @classmethod
    def for_role(cls, name: str) -> Scope:
        return cls(kind=ScopeKind.role, role=name)

    @classmethod
    def parse(cls, raw: str | None) -> Scope:
        """
        Stored/wire form -> tagged form.

        NULL and "*" are the wildcard, "Self" is the self scope, any other string is a
        role name. The empty string stays an (unmatchable) role scope.
        """

        if raw is None or raw == WILDCARD_SCOPE:
            return ANY
        if raw == SELF_SCOPE:
            return SELF
        return cls.for_role(raw)

    def to_db(self) -> str | None:
        if self.kind is ScopeKind.any:
            return None
        if self.kind is ScopeKind.self_:
            return SELF_SCOPE
        return self.role

    def covers(self, requested: Scope | None) -> bool:
        """True when a grant with this scope satisfies `requested` (None = scope omitted)."""

        if requested is not None and requested.kind is ScopeKind.role and not requested.role:
            # Unresolved target role: nothing covers it, not even a wildcard.
            return False
        if self.kind is ScopeKind.any:
            return True
        if requested is None:
            # An omitted scope asks for all targets; only a wildcard grant answers that.
            return False
        if self.kind is ScopeKind.self_:
            return requested.kind is ScopeKind.self_
        return requested.kind is ScopeKind.role and bool(self.role) and requested.role == self.role

    def __str__(self) -> str:
        if self.kind is ScopeKind.role:
            return self.role
        return SELF_SCOPE if self.kind is ScopeKind.self_ else WILDCARD_SCOPE


ANY = Scope(kind=ScopeKind.any)
SELF = Scope(kind=ScopeKind.self_)


def coerce_scope(scope: Scope | str | None) -> Scope | None:
    # Request-side convenience: callers may pass "Self" or a role name directly.
    if scope is None or isinstance(scope, Scope):
        return scope
    return Scope.parse(scope)

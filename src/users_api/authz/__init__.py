"""
users_api.authz

Authorization package.

Responsibilities:
- Scope type and declarative policy table.
- Role/permission store boundary and its process-wide cache.
- The authorization engine and caller-side target protocol helpers.
"""

from users_api.authz.engine import AuthorizationEngine
from users_api.authz.policy import DEFAULT_POLICY, Grant, UserAction
from users_api.authz.scope import ANY, SELF, Scope

__all__ = ["ANY", "DEFAULT_POLICY", "SELF", "AuthorizationEngine", "Grant", "Scope", "UserAction"]

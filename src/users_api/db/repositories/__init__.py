"""
users_api.db.repositories

Repository package.

Responsibilities:
- Group data-access repositories for users and roles.
"""

# Package marker; repositories are imported directly from submodules.


# --- Module Notes -----------------------------------------------------------
# Repositories are intentionally thin; authorization decisions belong in `authz` and services.

"""
users_api.auth

Authentication package.

Responsibilities:
- JWT helpers and validation.
- Password hashing.
- FastAPI dependency that turns a bearer token into an optional `Principal`.
"""

# Package marker.

"""
users_api.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide ORM models, engine/session setup, role provisioning and repositories.
"""

# Package marker.

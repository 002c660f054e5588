"""
users_api.db.models

Persistence schema for users and the role/permission model.

Responsibilities:
- Define ORM models:
  - Role: named category owning a set of permissions
  - Permission: (action, scope) grant bound to a role
  - User: the CRUD resource; each user belongs to exactly one role
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from users_api.db.base import Base


def _utcnow() -> datetime:
    # Persist naive UTC timestamps; sqlite has no tz-aware column type.
    return datetime.utcnow()


class Role(Base):
    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    permissions: Mapped[list[Permission]] = relationship(
        back_populates="role", cascade="all, delete-orphan", lazy="selectin"
    )


class Permission(Base):
    __tablename__ = "permissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    role_id: Mapped[int] = mapped_column(
        ForeignKey("roles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    action: Mapped[str] = mapped_column(String(64), nullable=False)
    # NULL or "*" grants every target, "Self" the actor itself, anything else a role name.
    scope: Mapped[str | None] = mapped_column(String(64), nullable=True)

    role: Mapped[Role] = relationship(back_populates="permissions")

    __table_args__ = (UniqueConstraint("role_id", "action", "scope"),)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)

    first_name: Mapped[str] = mapped_column(String(128), nullable=False)
    last_name: Mapped[str] = mapped_column(String(128), nullable=False)
    date_of_birth: Mapped[str | None] = mapped_column(String(32), nullable=True)
    home_phone_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    cell_phone_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    current_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    previous_address: Mapped[str | None] = mapped_column(Text, nullable=True)

    role_id: Mapped[int] = mapped_column(ForeignKey("roles.id"), nullable=False)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (Index("ix_users_role_id", "role_id"),)


# --- Module Notes -----------------------------------------------------------
# Roles and permissions are provisioned out-of-band (see `db.init_db.provision_roles`);
# the request path only ever reads them.

"""
users_api.api.routers.users

CRUD endpoints for the users resource.

Responsibilities:
- Validate request bodies and shape `{"status": "ok", "data": [...]}` responses.
- Delegate the authorization protocol and persistence to `UserService`.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from users_api.api.deps import authz_engine, db_session, password_hasher, settings_dep
from users_api.auth.deps import get_principal
from users_api.auth.models import Principal
from users_api.auth.passwords import BCRYPT_MAX_BYTES, PasswordHasher
from users_api.authz.engine import AuthorizationEngine
from users_api.db.models import User
from users_api.services.user_service import UserService
from users_api.settings import Settings

router = APIRouter(prefix="/v1/users", tags=["users"])


def _check_password_bytes(v: str | None) -> str | None:
    # bcrypt's limit is in bytes; max_length above only counts characters.
    if v is not None and len(v.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes when UTF-8 encoded")
    return v


class UserCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: str = Field(min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=8, max_length=BCRYPT_MAX_BYTES)
    first_name: str = Field(min_length=1, max_length=128)
    last_name: str = Field(min_length=1, max_length=128)
    date_of_birth: str | None = Field(default=None, max_length=32)
    home_phone_number: str | None = Field(default=None, max_length=32)
    cell_phone_number: str | None = Field(default=None, max_length=32)
    current_address: str | None = None
    previous_address: str | None = None
    role_id: int | None = None

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        return _check_password_bytes(v)


class UserUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: str | None = Field(default=None, min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str | None = Field(default=None, min_length=8, max_length=BCRYPT_MAX_BYTES)
    first_name: str | None = Field(default=None, min_length=1, max_length=128)
    last_name: str | None = Field(default=None, min_length=1, max_length=128)
    date_of_birth: str | None = Field(default=None, max_length=32)
    home_phone_number: str | None = Field(default=None, max_length=32)
    cell_phone_number: str | None = Field(default=None, max_length=32)
    current_address: str | None = None
    previous_address: str | None = None
    role_id: int | None = None

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str | None) -> str | None:
        return _check_password_bytes(v)


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    first_name: str
    last_name: str
    date_of_birth: str | None
    home_phone_number: str | None
    cell_phone_number: str | None
    current_address: str | None
    previous_address: str | None
    role_id: int
    created_at: datetime
    updated_at: datetime


class UsersEnvelope(BaseModel):
    status: Literal["ok"] = "ok"
    data: list[UserResponse]


def user_service(
    session: AsyncSession = Depends(db_session),
    engine: AuthorizationEngine = Depends(authz_engine),
    hasher: PasswordHasher = Depends(password_hasher),
    settings: Settings = Depends(settings_dep),
) -> UserService:
    return UserService(
        session=session,
        engine=engine,
        hasher=hasher,
        default_role=settings.default_role,
    )


def _envelope(*users: User) -> UsersEnvelope:
    return UsersEnvelope(data=[UserResponse.model_validate(u) for u in users])


@router.get("", response_model=UsersEnvelope)
async def list_users(
    principal: Principal | None = Depends(get_principal),
    service: UserService = Depends(user_service),
) -> UsersEnvelope:
    return _envelope(*await service.list_users(principal))


@router.get("/{user_id}", response_model=UsersEnvelope)
async def get_user(
    user_id: int,
    principal: Principal | None = Depends(get_principal),
    service: UserService = Depends(user_service),
) -> UsersEnvelope:
    return _envelope(await service.get_user(principal, user_id))


@router.post("", response_model=UsersEnvelope, status_code=HTTP_201_CREATED)
async def create_user(
    body: UserCreateRequest,
    principal: Principal | None = Depends(get_principal),
    service: UserService = Depends(user_service),
) -> UsersEnvelope:
    return _envelope(await service.create_user(principal, body.model_dump()))


@router.put("/{user_id}", response_model=UsersEnvelope)
async def update_user(
    user_id: int,
    body: UserUpdateRequest,
    principal: Principal | None = Depends(get_principal),
    service: UserService = Depends(user_service),
) -> UsersEnvelope:
    # Only fields present in the body are written.
    fields = body.model_dump(exclude_unset=True)
    return _envelope(await service.update_user(principal, user_id, fields))


@router.delete("/{user_id}", response_model=UsersEnvelope)
async def delete_user(
    user_id: int,
    principal: Principal | None = Depends(get_principal),
    service: UserService = Depends(user_service),
) -> UsersEnvelope:
    return _envelope(await service.delete_user(principal, user_id))


# --- Module Notes -----------------------------------------------------------
# This router intentionally holds no permission logic; every check lives in UserService
# and the authorization engine.

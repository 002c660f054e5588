"""
users_api.api.routers.auth

Login endpoint issuing bearer tokens.

Responsibilities:
- Verify e-mail/password through `UserService.authenticate`.
- Mint a short-lived JWT whose subject is the user id (the role is never embedded).
"""

from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from starlette.status import HTTP_401_UNAUTHORIZED

from users_api.api.deps import settings_dep
from users_api.api.routers.users import user_service
from users_api.auth.jwt import JwtConfig, issue_token
from users_api.services.user_service import UserService
from users_api.settings import Settings

router = APIRouter(prefix="/v1/auth", tags=["auth"])


class TokenRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=1, max_length=72)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


@router.post("/token", response_model=TokenResponse)
async def login(
    body: TokenRequest,
    service: UserService = Depends(user_service),
    settings: Settings = Depends(settings_dep),
) -> TokenResponse:
    user = await service.authenticate(email=body.email, password=body.password)
    if user is None:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid email or password")

    ttl = timedelta(minutes=settings.token_ttl_minutes)
    token = issue_token(cfg=JwtConfig.from_settings(settings), user_id=user.id, ttl=ttl)
    return TokenResponse(access_token=token, expires_in=int(ttl.total_seconds()))


# --- Module Notes -----------------------------------------------------------
# Unknown e-mail and wrong password return the same 401 body.

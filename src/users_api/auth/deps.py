"""
users_api.auth.deps

FastAPI dependency functions for authentication.

Responsibilities:
- Convert an optional bearer token into `Principal | None` (None = anonymous).
- Reject invalid tokens and tokens whose user no longer exists.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_401_UNAUTHORIZED

from users_api.api.deps import db_session, settings_dep
from users_api.auth.jwt import JwtConfig, JwtValidationError, decode_and_validate, subject_user_id
from users_api.auth.models import Principal
from users_api.db.repositories.users import UserRepo
from users_api.settings import Settings

_bearer = HTTPBearer(auto_error=False)


async def get_principal(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(settings_dep),
    session: AsyncSession = Depends(db_session),
) -> Principal | None:
    # No credentials is a valid identity: the anonymous caller.
    if creds is None or not creds.credentials:
        return None

    try:
        payload = decode_and_validate(cfg=JwtConfig.from_settings(settings), token=creds.credentials)
        user_id = subject_user_id(payload)
    except JwtValidationError as e:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail=f"Invalid token: {e}") from e

    # Read the role from the database so role changes apply without re-login.
    user = await UserRepo(session).get(user_id)
    if user is None:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Unknown token subject")
    return Principal(id=user.id, role_id=user.role_id)

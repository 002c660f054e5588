"""
users_api.api.errors

Error envelope and exception-to-response mapping.

Responsibilities:
- Render every failure as `{"status": "error", "message": ...}`.
- Map service exceptions to HTTP status codes (401 denied, 404 missing, 400 invalid/conflict).
"""

from __future__ import annotations

from typing import Literal

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from users_api.observability.logging import get_logger
from users_api.services.user_service import (
    AccessDeniedError,
    UserConflictError,
    UserNotFoundError,
)

log = get_logger(__name__)

ACCESS_DENIED_MESSAGE = "User does not have the necessary permissions to perform this action."
NOT_FOUND_MESSAGE = "That user does not exist."
INTERNAL_ERROR_MESSAGE = "Sorry, an error has occurred."


class ErrorEnvelope(BaseModel):
    status: Literal["error"] = "error"
    message: str


def error_response(
    status_code: int, message: str, headers: dict[str, str] | None = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorEnvelope(message=message).model_dump(),
        headers=headers,
    )


async def _access_denied(_: Request, exc: AccessDeniedError) -> JSONResponse:
    return error_response(HTTP_401_UNAUTHORIZED, ACCESS_DENIED_MESSAGE)


async def _not_found(_: Request, exc: UserNotFoundError) -> JSONResponse:
    return error_response(HTTP_404_NOT_FOUND, NOT_FOUND_MESSAGE)


async def _conflict(_: Request, exc: UserConflictError) -> JSONResponse:
    return error_response(HTTP_400_BAD_REQUEST, str(exc))


async def _invalid_request(_: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
        for err in exc.errors()
    )
    return error_response(HTTP_400_BAD_REQUEST, f"Invalid request: {details}")


async def _http_error(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail), headers=exc.headers)


def internal_error_response() -> JSONResponse:
    return error_response(HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


async def _unhandled(_: Request, exc: Exception) -> JSONResponse:
    # Route faults are rendered by RequestContextMiddleware; this covers anything raised outside it.
    log.exception("request.failed", error=str(exc))
    return internal_error_response()


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AccessDeniedError, _access_denied)
    app.add_exception_handler(UserNotFoundError, _not_found)
    app.add_exception_handler(UserConflictError, _conflict)
    app.add_exception_handler(RequestValidationError, _invalid_request)
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(Exception, _unhandled)

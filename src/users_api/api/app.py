"""
users_api.api.app

FastAPI app factory for the users service.

Responsibilities:
- Build the FastAPI application and register routers/middleware/error handlers.
- Initialize and dispose shared infrastructure (DB engine, session factory, role cache).
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from users_api import __version__
from users_api.api.errors import internal_error_response, register_exception_handlers
from users_api.api.routers.auth import router as auth_router
from users_api.api.routers.health import router as health_router
from users_api.api.routers.users import router as users_router
from users_api.authz.cache import RoleCache
from users_api.authz.policy import DEFAULT_POLICY
from users_api.db.init_db import init_db, provision_roles
from users_api.db.session import create_engine, create_sessionmaker
from users_api.observability.logging import configure_logging, get_logger
from users_api.observability.middleware import RequestContextMiddleware
from users_api.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(
        service_name=settings.service_name,
        level=settings.log_level,
        json_logs=settings.log_json,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            # Dev/test convenience: create tables and the default roles. Prod provisions out-of-band.
            await init_db(engine)
            if settings.provision_default_roles:
                await provision_roles(app.state.sessionmaker, DEFAULT_POLICY)
                app.state.role_cache.invalidate()
        try:
            yield
        finally:
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Users API",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    # Process-wide, read-mostly; request-scoped role stores consult it before the database.
    app.state.role_cache = RoleCache(ttl_seconds=settings.role_cache_ttl_seconds)

    app.add_middleware(RequestContextMiddleware, on_error=internal_error_response)
    register_exception_handlers(app)
    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router)
    app.include_router(users_router)

    return app


# --- Module Notes -----------------------------------------------------------
# This file is intentionally small: app composition stays here; authorization logic stays
# in `authz` and `services`.

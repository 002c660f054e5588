"""
users_api.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (e.g., JWT secret).
- Offer a cached settings instance for the process entrypoint.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="USERS_API_", case_sensitive=False)

    # Environment controls toggle behavior like auto-init DB tables and role provisioning.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "users-api"
    log_level: str = "INFO"
    log_json: bool = True

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Auth
    jwt_alg: str = "HS256"
    jwt_issuer: str = "users-api"
    jwt_audience: str = "users-api"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)
    token_ttl_minutes: int = Field(default=60, ge=1, le=24 * 60)
    bcrypt_rounds: int = Field(default=12, ge=4, le=20)

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./users.db"

    # Authorization
    anonymous_role: str = "guest"
    default_role: str = "member"
    provision_default_roles: bool = True
    role_cache_ttl_seconds: float = Field(default=30.0, ge=0)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Request handlers read settings from `app.state.settings` (see `api.deps.settings_dep`)
# so tests can build an app around a non-default Settings instance.

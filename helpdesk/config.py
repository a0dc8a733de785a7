"""Application configuration settings."""
from __future__ import annotations

import os
from functools import lru_cache

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Runtime toggles -----------------------------------------------------
# Execution environment: "dev" | "local" | "test" | "staging" | "prod"
ENV = os.getenv("HELPDESK_ENV", "dev").lower()

# Environments where a weak session secret and create_all() are tolerated.
DEV_ENVS = {"dev", "local", "test"}

MIN_SESSION_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Environment configuration for the helpdesk backend."""

    app_env: str = ENV
    database_url: str = "sqlite:///helpdesk.db"
    LOG_LEVEL: str = "INFO"
    HOST: str = "127.0.0.1"
    PORT: int = Field(default=8000, gt=0, lt=65536)

    SESSION_SECRET: str = "change-me"
    SESSION_COOKIE_NAME: str = "helpdesk.sid"
    SESSION_MAX_AGE_SECONDS: int = Field(default=24 * 60 * 60, gt=0)
    SESSION_COOKIE_SECURE: bool | None = None
    SESSION_PRUNE_ENABLED: bool = False
    SESSION_PRUNE_INTERVAL_MINUTES: int = Field(default=15, gt=0)

    BCRYPT_ROUNDS: int = Field(default=10, ge=4, le=31)
    MAX_LOGIN_ATTEMPTS: int = Field(default=5, gt=0)

    ALLOW_DB_CREATE_ALL: bool = False
    CORS_ALLOW_ORIGINS: list[str] = ["http://localhost:3000"]
    SENTRY_DSN: str | None = None
    PROMETHEUS_ENABLED: bool = False

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("SENTRY_DSN")
    @classmethod
    def _strip_empty_dsn(cls, value: str | None) -> str | None:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None

    @property
    def is_dev(self) -> bool:
        return self.app_env.lower() in DEV_ENVS

    @property
    def session_cookie_secure(self) -> bool:
        """Secure cookies default to on in production only."""

        if self.SESSION_COOKIE_SECURE is not None:
            return self.SESSION_COOKIE_SECURE
        return self.app_env.lower() == "prod"


class AppInfo(BaseModel):
    name: str = "helpdesk-auth"
    version: str = "0.1.0"


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()


__all__ = [
    "ENV",
    "DEV_ENVS",
    "MIN_SESSION_SECRET_LENGTH",
    "Settings",
    "AppInfo",
    "get_settings",
]

"""Process configuration loaded via Pydantic settings."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed configuration sourced from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Directive file describing controllers, permissions, and templates
    DIRECTIVES_PATH: Path = Field(default=Path("directives.json"))
    DATA_DIR: Path = Field(default=Path("data"))
    TEMPLATES_DIR: Path = Field(default=Path("templates"))
    ACTION_DISPATCH_LOG_LEVEL: str = Field(default="info")
    ACTION_DISPATCH_LOG_DIR: Path | None = Field(default=None)

    # Web transport
    SESSION_COOKIE_NAME: str = Field(default="dispatch_session")
    SERVE_CLIENT_APP: bool = Field(default=False)
    ENABLE_HEALTHCHECK_AUTH: bool = Field(default=False)
    HEALTHCHECK_API_TOKEN: str | None = Field(default=None)

    # Interactive monitor
    CLI_PROMPT: str = Field(default="dispatch> ")

    # Seed account created by `init-db` when a password is configured
    BOOTSTRAP_ADMIN_LOGIN: str = Field(default="admin")
    BOOTSTRAP_ADMIN_PASSWORD: str | None = Field(default=None)


settings = Settings()
config = settings  # Alias used by modules that patch `config` in tests


__all__ = ["Settings", "settings", "config"]

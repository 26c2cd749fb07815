"""Configuration management for the address book service."""
from __future__ import annotations

import os
from functools import lru_cache
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.engine import URL

load_dotenv()


class Settings(BaseModel):
    """Application configuration loaded from environment variables."""

    app_env: str = "dev"
    database_url: str = "sqlite:///./address_book.db"
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    version: str = "0.1.0"
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, value: Any) -> list[str]:
        if isinstance(value, str):
            if not value:
                return []
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        if isinstance(value, list):
            return value
        return []

    @field_validator("log_level")
    @classmethod
    def normalise_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def async_database_url(self) -> str:
        if self.database_url.startswith("sqlite+aiosqlite://"):
            return self.database_url
        if self.database_url.startswith("sqlite:///"):
            return self.database_url.replace("sqlite:///", "sqlite+aiosqlite:///")
        if self.database_url.startswith("sqlite://"):
            return self.database_url.replace("sqlite://", "sqlite+aiosqlite://")
        if self.database_url.startswith("postgresql://"):
            return self.database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if self.database_url.startswith("postgres://"):
            return self.database_url.replace("postgres://", "postgresql+asyncpg://", 1)
        return self.database_url


def _postgres_url_from_env() -> str | None:
    """Assemble a database URL from the ``PG_*`` variables, if configured."""

    hostname = os.getenv("PG_HOSTNAME")
    if not hostname:
        return None

    port = os.getenv("PG_PORT")
    url = URL.create(
        "postgresql+asyncpg",
        username=os.getenv("PG_USERNAME") or None,
        password=os.getenv("PG_PASSWORD") or None,
        host=hostname,
        port=int(port) if port else None,
        database=os.getenv("PG_DATABASE") or None,
    )
    return url.render_as_string(hide_password=False)


def _build_settings() -> Settings:
    raw_values: dict[str, Any] = {
        "app_env": os.getenv("APP_ENV"),
        "database_url": os.getenv("DATABASE_URL") or _postgres_url_from_env(),
        "cors_origins": os.getenv("CORS_ORIGINS"),
        "version": os.getenv("APP_VERSION"),
        "host": os.getenv("HOST"),
        "port": os.getenv("PORT"),
        "log_level": os.getenv("LOG_LEVEL"),
    }
    filtered_values = {key: value for key, value in raw_values.items() if value is not None}
    return Settings(**filtered_values)


@lru_cache()
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return _build_settings()

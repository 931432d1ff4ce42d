"""
Application configuration module.

Loads settings from environment variables (or .env file) using pydantic-settings.
The connection target is resolved in priority order:

1. ``SQLALCHEMY_DATABASE_URI`` — an explicit async SQLAlchemy URL.
2. ``POSTGRES_*`` — PostgreSQL via asyncpg, when ``POSTGRES_SERVER`` is set.
3. ``SQLITE_PATH`` — a local file-backed SQLite database (the default).
"""

from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for the Fund Registry API."""

    PROJECT_NAME: str = "Fund Registry API"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"

    # ── Connection target ──
    SQLALCHEMY_DATABASE_URI: Optional[str] = None
    SQLITE_PATH: str = "funds.db"

    POSTGRES_USER: str = ""
    POSTGRES_PASSWORD: str = ""
    POSTGRES_SERVER: str = ""
    POSTGRES_DB: str = ""
    POSTGRES_PORT: int = 5432

    @model_validator(mode="after")
    def _require_pg_credentials_with_server(self) -> "Settings":
        """Fail fast when a PostgreSQL server is configured without credentials."""
        if self.POSTGRES_SERVER and not self.SQLALCHEMY_DATABASE_URI:
            missing = [
                name
                for name in ("POSTGRES_USER", "POSTGRES_PASSWORD", "POSTGRES_DB")
                if not getattr(self, name)
            ]
            if missing:
                raise ValueError(
                    f"POSTGRES_SERVER is set but these environment variables are "
                    f"missing: {', '.join(missing)}.\n\n"
                    f"Either provide them, e.g.\n"
                    f"    POSTGRES_USER=funds POSTGRES_PASSWORD=funds POSTGRES_DB=funds\n"
                    f"or unset POSTGRES_SERVER to fall back to the local SQLite file "
                    f"({self.SQLITE_PATH})."
                )
        return self

    # ── Connection pool tuning (server databases only) ──
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30  # seconds to wait for a connection from the pool
    DB_POOL_RECYCLE: int = 1800

    # ── Logging ──
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = True
    LOG_FILE_MAX_BYTES: int = 10 * 1024 * 1024
    LOG_FILE_BACKUP_COUNT: int = 5

    # ── CORS ──
    # Comma-separated list of allowed origins.
    CORS_ORIGINS: str = "*"

    DEBUG: bool = False

    @property
    def DATABASE_URL(self) -> str:
        """The async database DSN resolved from the settings above."""
        if self.SQLALCHEMY_DATABASE_URI:
            return self.SQLALCHEMY_DATABASE_URI
        if self.POSTGRES_SERVER:
            return (
                f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
                f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
            )
        return f"sqlite+aiosqlite:///{self.SQLITE_PATH}"

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()

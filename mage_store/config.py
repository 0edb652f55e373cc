"""
Application configuration using Pydantic Settings.

Single source of configuration for the local store.
Loads from environment variables (prefix ``MAGE_``) with .env file support.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Store settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = "WARNING"
    sql_echo: bool = False  # Log all SQL statements (very verbose)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept log levels in any case."""
        return str(v).upper()

    # Database - SQLite (on-device default)
    sqlite_path: str = "mage_store.db"
    use_sqlite: bool = True

    # Database - PostgreSQL
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "mage"
    postgres_password: str = "mage"
    postgres_db: str = "mage"

    @computed_field
    @property
    def postgres_dsn(self) -> str:
        """Build PostgreSQL connection string."""
        return f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"

    @computed_field
    @property
    def sqlite_dsn(self) -> str:
        """Build SQLite connection string."""
        return f"sqlite+aiosqlite:///{self.sqlite_path}"

    @computed_field
    @property
    def database_url(self) -> str:
        """Get the active database URL based on configuration."""
        if self.use_sqlite:
            return self.sqlite_dsn
        return self.postgres_dsn


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

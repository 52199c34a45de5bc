"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All store credentials come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - DATABASE_URL, when set, wins over the DB_* parts

Design Decisions:
    - Pool defaults to 10 connections with no overflow; extra requests queue for a
      free connection
    - database_pool_timeout (default 30s) is a deliberate bound on that queue:
      the store driver alone would let a waiting request hang indefinitely.
      Reaching it is a transient failure (HTTP 500); raise it to wait longer
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Store
    db_host: str = "localhost"
    db_port: int = 5432
    db_user: str = "accounts"
    db_password: str = "accounts"
    db_database: str = "accounts"
    db_ssl: bool = True
    db_driver: str = "postgresql+asyncpg"

    database_url: str | None = None

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v):
        """Hosting platforms provide postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v or None

    database_pool_size: int = 10
    database_max_overflow: int = 0
    database_pool_timeout: float = 30

    # HTTP
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: list[str] = ["*"]

    # Listing
    mask_passwords: bool = False

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    def resolved_database_url(self) -> str:
        """SQLAlchemy URL for the store, built from DB_* unless DATABASE_URL is set."""
        if self.database_url:
            return self.database_url
        return URL.create(
            self.db_driver,
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_database,
        ).render_as_string(hide_password=False)

    def store_host(self) -> str | None:
        """Host the service actually connects to, honouring DATABASE_URL."""
        return make_url(self.resolved_database_url()).host


@lru_cache
def get_settings() -> Settings:
    return Settings()

"""Application settings loaded from environment variables.

Hey future me - every setting can be overridden with MERCH_<GROUP>__<FIELD>,
e.g. MERCH_DATABASE__URL or MERCH_CATALOG__SLUG_MAX_ATTEMPTS. Nested groups keep
related knobs together so call sites read like settings.database.url.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseModel):
    """Database connection settings."""

    url: str = "sqlite+aiosqlite:///./merch_archive.db"
    echo: bool = False
    pool_pre_ping: bool = True
    # Pool settings only apply to PostgreSQL (see Database.__init__)
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 3600
    # Create tables on startup. Handy for SQLite dev setups, use Alembic in prod.
    create_tables: bool = True


class APISettings(BaseModel):
    """HTTP server settings."""

    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = Field(default_factory=list)


class AuthSettings(BaseModel):
    """Password auth and session settings."""

    session_max_age: int = 60 * 60 * 24 * 30
    min_password_length: int = 6
    cookie_name: str = "session_id"
    cookie_secure: bool = False


class StorageSettings(BaseModel):
    """Photo storage settings."""

    photo_path: Path = Path("./media")
    public_base_url: str = "/media"
    max_upload_bytes: int = 10 * 1024 * 1024


class CatalogSettings(BaseModel):
    """Catalog behaviour knobs."""

    # Probe ceiling for the -2, -3, ... slug search before the timestamp fallback
    slug_max_attempts: int = 50
    # Duplicate artist names need BOTH country and genre when True, at least one when False
    require_full_disambiguation: bool = True
    public_profile_item_limit: int = 60


class Settings(BaseSettings):
    """Root settings object."""

    model_config = SettingsConfigDict(
        env_prefix="MERCH_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    app_name: str = "Merch Archive"
    app_version: str = "0.1.0"
    log_level: str = "INFO"
    log_json: bool = False

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    api: APISettings = Field(default_factory=APISettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)

    def sqlite_db_path(self) -> Path | None:
        """File path of a SQLite database URL, None for other databases or :memory:."""
        url = self.database.url
        if not url.startswith("sqlite"):
            return None
        _, _, path = url.partition(":///")
        if not path or path == ":memory:":
            return None
        return Path(path)


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()

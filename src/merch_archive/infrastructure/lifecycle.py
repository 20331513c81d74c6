"""Application lifecycle management for startup and shutdown tasks.

This module holds the FastAPI lifespan context manager. Startup configures
logging, validates the SQLite location, opens the database (creating tables
when configured) and builds the photo storage. Shutdown disposes the engine.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from merch_archive.config import Settings, get_settings
from merch_archive.domain.exceptions import ConfigurationError
from merch_archive.infrastructure.observability import configure_logging
from merch_archive.infrastructure.persistence import Database
from merch_archive.infrastructure.storage import LocalPhotoStorage

logger = logging.getLogger(__name__)


# Hey future me, this validates SQLite paths BEFORE we create the DB engine. SQLite needs to
# create temp files (-journal, -wal) next to the .db file, so the parent directory must exist and
# be writable. We DON'T pre-create the .db file itself - SQLite initializes it on first connect.
# Returns early for PostgreSQL and in-memory URLs.
def _validate_sqlite_path(settings: Settings) -> None:
    """Validate SQLite database path accessibility before engine creation.

    Raises:
        ConfigurationError: Directory can't be created or written to
    """
    db_path = settings.sqlite_db_path()
    if db_path is None:
        return

    try:
        if db_path.parent and str(db_path.parent) != ".":
            db_path.parent.mkdir(parents=True, exist_ok=True)
            logger.debug("Ensured SQLite parent directory exists: %s", db_path.parent)
    except OSError as exc:
        raise ConfigurationError(
            f"Unable to create SQLite database directory '{db_path.parent}': {exc}. "
            "Update MERCH_DATABASE__URL or adjust directory permissions."
        ) from exc

    try:
        test_file = db_path.parent / f".{db_path.stem}_write_test"
        test_file.write_bytes(b"test")
        test_file.unlink()
    except OSError as exc:
        raise ConfigurationError(
            f"Unable to write files in database directory '{db_path.parent}': {exc}. "
            "SQLite requires write permissions to create database and journal files."
        ) from exc


def _ensure_photo_root(settings: Settings) -> None:
    """Create the photo storage root directory."""
    try:
        settings.storage.photo_path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigurationError(
            f"Unable to create photo directory '{settings.storage.photo_path}': {exc}. "
            "Update MERCH_STORAGE__PHOTO_PATH or adjust directory permissions."
        ) from exc


# Listen future me, @asynccontextmanager makes this a CONTEXT MANAGER for FastAPI lifespan!
# Everything before `yield` runs at STARTUP, everything after runs at SHUTDOWN. The try/finally
# makes sure the engine is disposed even when startup fails halfway. Resources live on app.state
# so dependencies can reach them.
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings: Settings = getattr(app.state, "settings", None) or get_settings()
    app.state.settings = settings

    configure_logging(
        log_level=settings.log_level,
        json_format=settings.log_json,
        app_name=settings.app_name,
    )
    logger.info("Starting application: %s", settings.app_name)

    try:
        _validate_sqlite_path(settings)
        _ensure_photo_root(settings)

        db = Database(settings)
        app.state.db = db
        logger.info("Database initialized: %s", settings.database.url)

        if settings.database.create_tables:
            await db.create_tables()
            logger.info("Database tables ensured")

        app.state.storage = LocalPhotoStorage(
            settings.storage.photo_path, settings.storage.public_base_url
        )
        logger.info(
            "Photo storage ready at %s (served under %s)",
            settings.storage.photo_path,
            settings.storage.public_base_url,
        )

        yield
    finally:
        logger.info("Shutting down application")
        if hasattr(app.state, "db"):
            await app.state.db.close()
            logger.info("Database connection closed")

"""FastAPI application factory and entry point.

Hey future me - create_app() takes an optional Settings so tests can spin up a fully wired app
against a temp SQLite file and a temp media directory. Production uses the cached
get_settings() (environment / .env) through the module-level `app`.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from merch_archive.api.exception_handlers import register_exception_handlers
from merch_archive.api.routers import api_router
from merch_archive.config import Settings, get_settings
from merch_archive.infrastructure.lifecycle import lifespan
from merch_archive.infrastructure.observability import RequestLoggingMiddleware

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Settings to run with (defaults to get_settings())

    Returns:
        Configured FastAPI app
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Community archive of band merch designs and personal collections",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Order matters: the last middleware added runs first, so request logging wraps CORS
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)
    app.include_router(api_router, prefix="/api")

    # StaticFiles checks the directory lazily (check_dir=False); lifespan creates it on startup
    app.mount(
        settings.storage.public_base_url,
        StaticFiles(directory=settings.storage.photo_path, check_dir=False),
        name="media",
    )
    return app


app = create_app()


def run() -> None:
    """Run the API server with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "merch_archive.main:app",
        host=settings.api.host,
        port=settings.api.port,
        log_config=None,
    )

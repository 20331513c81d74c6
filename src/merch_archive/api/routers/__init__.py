"""API router initialization."""

# Hey future me, this is the MAIN API router aggregator. Every sub-router carries its own prefix
# ("/artists", "/collection", ...) and main.py mounts api_router under /api, so endpoints end up
# as /api/artists, /api/collection/export.csv and so on.

from fastapi import APIRouter

from merch_archive.api.routers import (
    admin,
    artists,
    auth,
    collection,
    designs,
    health,
    profiles,
    search,
    stats,
    variants,
    wantlist,
)

api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(artists.router)
api_router.include_router(designs.router)
api_router.include_router(variants.router)
api_router.include_router(collection.router)
api_router.include_router(wantlist.router)
api_router.include_router(profiles.router)
api_router.include_router(admin.router)
api_router.include_router(search.router)
api_router.include_router(stats.router)
api_router.include_router(health.router)

__all__ = ["api_router"]

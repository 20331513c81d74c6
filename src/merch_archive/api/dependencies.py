"""Dependency injection for API endpoints."""

import logging
from collections.abc import AsyncGenerator
from typing import cast

from fastapi import Depends, Header, HTTPException, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from merch_archive.application.services import (
    AdminService,
    ArtistService,
    AuthService,
    CatalogService,
    CollectionService,
    ProfileService,
    SearchService,
    SlugService,
    StatsService,
    WantlistService,
)
from merch_archive.config import Settings
from merch_archive.domain.entities import Identity, PhotoUpload
from merch_archive.domain.exceptions import ValidationException
from merch_archive.domain.ports import IPhotoStorage
from merch_archive.infrastructure.persistence.database import Database
from merch_archive.infrastructure.persistence.repositories import (
    AdminProcedures,
    ArtistRepository,
    AuthSessionRepository,
    DesignRepository,
    OwnershipRepository,
    PhotoRepository,
    ProfileRepository,
    SqlExistenceProbe,
    UserRepository,
    VariantRepository,
    WantlistRepository,
)

logger = logging.getLogger(__name__)


# Hey future me, settings live on app.state (set by create_app), NOT the lru_cached
# get_settings(). That way tests can build an app with their own Settings (temp DB, temp media
# dir) without clearing caches or monkeypatching env vars.
def get_app_settings(request: Request) -> Settings:
    """Get the settings the running app was created with."""
    return cast(Settings, request.app.state.settings)


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get database session from app state.

    Uses session_scope() so the whole request is one transaction: committed
    after the endpoint returns, rolled back if it raises.
    """
    db: Database = request.app.state.db
    async with db.session_scope() as session:
        yield session


def get_photo_storage(request: Request) -> IPhotoStorage:
    """Get the photo storage built during startup."""
    if not hasattr(request.app.state, "storage"):
        raise HTTPException(status_code=503, detail="Photo storage not initialized")
    return cast(IPhotoStorage, request.app.state.storage)


# --- Repositories: one instance per request, sharing the request session ---


def get_user_repository(session: AsyncSession = Depends(get_db_session)) -> UserRepository:
    """Get user repository instance."""
    return UserRepository(session)


def get_auth_session_repository(
    session: AsyncSession = Depends(get_db_session),
) -> AuthSessionRepository:
    """Get login session repository instance."""
    return AuthSessionRepository(session)


def get_artist_repository(
    session: AsyncSession = Depends(get_db_session),
) -> ArtistRepository:
    """Get artist repository instance."""
    return ArtistRepository(session)


def get_design_repository(
    session: AsyncSession = Depends(get_db_session),
) -> DesignRepository:
    """Get design repository instance."""
    return DesignRepository(session)


def get_variant_repository(
    session: AsyncSession = Depends(get_db_session),
) -> VariantRepository:
    """Get variant repository instance."""
    return VariantRepository(session)


def get_photo_repository(session: AsyncSession = Depends(get_db_session)) -> PhotoRepository:
    """Get photo row repository instance."""
    return PhotoRepository(session)


def get_ownership_repository(
    session: AsyncSession = Depends(get_db_session),
) -> OwnershipRepository:
    """Get ownership repository instance."""
    return OwnershipRepository(session)


def get_wantlist_repository(
    session: AsyncSession = Depends(get_db_session),
) -> WantlistRepository:
    """Get wantlist repository instance."""
    return WantlistRepository(session)


def get_profile_repository(
    session: AsyncSession = Depends(get_db_session),
) -> ProfileRepository:
    """Get profile repository instance."""
    return ProfileRepository(session)


def get_existence_probe(session: AsyncSession = Depends(get_db_session)) -> SqlExistenceProbe:
    """Get the existence prober for slug/username collision checks."""
    return SqlExistenceProbe(session)


# --- Auth ---


def get_auth_service(
    users: UserRepository = Depends(get_user_repository),
    sessions: AuthSessionRepository = Depends(get_auth_session_repository),
    settings: Settings = Depends(get_app_settings),
) -> AuthService:
    """Get auth service instance."""
    return AuthService(users, sessions, settings.auth)


def parse_bearer_token(authorization: str) -> str:
    """Strip an optional (case-insensitive) "Bearer " prefix from a header value."""
    if authorization.lower().startswith("bearer "):
        return authorization[7:].strip()
    return authorization.strip()


# Hey future me, the Authorization header wins over the cookie (explicit > implicit). A blank
# header falls back to the cookie, otherwise "Authorization: " would log browsers out.
async def get_session_token(
    request: Request,
    authorization: str | None = Header(None),
    settings: Settings = Depends(get_app_settings),
) -> str | None:
    """Extract the session token from Authorization header or cookie."""
    if authorization and authorization.strip():
        return parse_bearer_token(authorization)
    return request.cookies.get(settings.auth.cookie_name)


async def get_current_identity(
    token: str | None = Depends(get_session_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> Identity | None:
    """Resolve the caller. None means anonymous; services decide whether that's OK."""
    return await auth_service.resolve(token)


# --- Services ---


def get_slug_service(
    probe: SqlExistenceProbe = Depends(get_existence_probe),
    settings: Settings = Depends(get_app_settings),
) -> SlugService:
    """Get slug availability search."""
    return SlugService(probe, settings.catalog.slug_max_attempts)


def get_artist_service(
    artists: ArtistRepository = Depends(get_artist_repository),
    probe: SqlExistenceProbe = Depends(get_existence_probe),
    slug_service: SlugService = Depends(get_slug_service),
    storage: IPhotoStorage = Depends(get_photo_storage),
    settings: Settings = Depends(get_app_settings),
) -> ArtistService:
    """Get artist creation service."""
    return ArtistService(
        artists, probe, storage, settings.catalog, slug_service=slug_service
    )


def get_catalog_service(
    artists: ArtistRepository = Depends(get_artist_repository),
    designs: DesignRepository = Depends(get_design_repository),
    variants: VariantRepository = Depends(get_variant_repository),
    photos: PhotoRepository = Depends(get_photo_repository),
    storage: IPhotoStorage = Depends(get_photo_storage),
) -> CatalogService:
    """Get catalog service."""
    return CatalogService(artists, designs, variants, photos, storage)


def get_collection_service(
    ownership: OwnershipRepository = Depends(get_ownership_repository),
    variants: VariantRepository = Depends(get_variant_repository),
    photos: PhotoRepository = Depends(get_photo_repository),
    storage: IPhotoStorage = Depends(get_photo_storage),
) -> CollectionService:
    """Get collection service."""
    return CollectionService(ownership, variants, photos, storage)


def get_wantlist_service(
    wantlist: WantlistRepository = Depends(get_wantlist_repository),
    variants: VariantRepository = Depends(get_variant_repository),
    ownership: OwnershipRepository = Depends(get_ownership_repository),
    collection: CollectionService = Depends(get_collection_service),
) -> WantlistService:
    """Get wantlist service."""
    return WantlistService(wantlist, variants, ownership, collection)


def get_profile_service(
    profiles: ProfileRepository = Depends(get_profile_repository),
    ownership: OwnershipRepository = Depends(get_ownership_repository),
    slug_service: SlugService = Depends(get_slug_service),
    storage: IPhotoStorage = Depends(get_photo_storage),
    settings: Settings = Depends(get_app_settings),
) -> ProfileService:
    """Get profile service."""
    return ProfileService(profiles, ownership, slug_service, storage, settings.catalog)


def get_search_service(
    artists: ArtistRepository = Depends(get_artist_repository),
    designs: DesignRepository = Depends(get_design_repository),
) -> SearchService:
    """Get search service."""
    return SearchService(artists, designs)


def get_stats_service(
    artists: ArtistRepository = Depends(get_artist_repository),
    designs: DesignRepository = Depends(get_design_repository),
    variants: VariantRepository = Depends(get_variant_repository),
    ownership: OwnershipRepository = Depends(get_ownership_repository),
) -> StatsService:
    """Get stats service."""
    return StatsService(artists, designs, variants, ownership)


def get_admin_service(
    profiles: ProfileRepository = Depends(get_profile_repository),
    artists: ArtistRepository = Depends(get_artist_repository),
    designs: DesignRepository = Depends(get_design_repository),
    variants: VariantRepository = Depends(get_variant_repository),
    session: AsyncSession = Depends(get_db_session),
) -> AdminService:
    """Get admin service."""
    return AdminService(profiles, artists, designs, variants, AdminProcedures(session))


async def get_viewer_is_admin(
    identity: Identity | None = Depends(get_current_identity),
    admin_service: AdminService = Depends(get_admin_service),
) -> bool:
    """Whether the caller may see hidden catalog rows."""
    return await admin_service.is_admin(identity)


async def read_photo_upload(
    file: UploadFile | None, settings: Settings
) -> PhotoUpload | None:
    """Read an optional multipart photo into memory.

    Raises:
        ValidationException: File larger than storage.max_upload_bytes
    """
    if file is None or not file.filename:
        return None
    content = await file.read()
    if len(content) > settings.storage.max_upload_bytes:
        raise ValidationException("That photo is too large.")
    if not content:
        return None
    return PhotoUpload(
        filename=file.filename, content=content, content_type=file.content_type
    )

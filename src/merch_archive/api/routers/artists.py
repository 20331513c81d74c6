"""Artist catalog endpoints.

Hey future me - creating an artist is the tricky one. Two bands can share a name (there is
more than one "Nirvana"), so the slug is not just the name: when the name already exists the
service wants country + genre and builds something like "weezer-us-alternative-rock", then
walks -2, -3 ... until it finds a free slug. The add-artist form calls /slug-preview while
the user types so they see the URL before submitting.
"""

import logging

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from pydantic import BaseModel, Field

from merch_archive.api.dependencies import (
    get_app_settings,
    get_artist_service,
    get_catalog_service,
    get_current_identity,
    get_viewer_is_admin,
    read_photo_upload,
)
from merch_archive.api.schemas.catalog import (
    ArtistResponse,
    DesignResponse,
    artist_to_response,
    design_to_response,
)
from merch_archive.application.services import ArtistService, CatalogService
from merch_archive.config import Settings
from merch_archive.domain.entities import Identity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/artists", tags=["Artists"])


class ArtistListResponse(BaseModel):
    """Response model for listing artists."""

    artists: list[ArtistResponse] = Field(..., description="Artists A-Z")
    total_count: int = Field(..., description="Number of artists returned")


class SlugPreviewResponse(BaseModel):
    """What the add-artist form shows under the name field."""

    name_exists: bool = Field(..., description="An artist with this exact name exists")
    suggested_slug: str = Field(..., description="Slug the artist would most likely get")


class ArtistPageResponse(BaseModel):
    """An artist with its designs, oldest first."""

    artist: ArtistResponse
    designs: list[DesignResponse] = Field(..., description="Designs matching the query")
    total_designs: int = Field(..., description="Designs before filtering")


@router.get("", response_model=ArtistListResponse)
async def list_artists(
    q: str | None = Query(None, description="Filter by name substring"),
    viewer_is_admin: bool = Depends(get_viewer_is_admin),
    service: CatalogService = Depends(get_catalog_service),
) -> ArtistListResponse:
    """List artists alphabetically. Hidden artists only show up for admins."""
    artists = await service.list_artists(q, viewer_is_admin=viewer_is_admin)
    return ArtistListResponse(
        artists=[artist_to_response(a) for a in artists],
        total_count=len(artists),
    )


@router.get("/slug-preview", response_model=SlugPreviewResponse)
async def preview_slug(
    name: str = Query("", description="Artist name as typed"),
    origin_country: str | None = Query(None, description="Country, e.g. US"),
    primary_genre: str | None = Query(None, description="Genre, e.g. alternative rock"),
    service: ArtistService = Depends(get_artist_service),
) -> SlugPreviewResponse:
    """Suggest the slug for an artist that is about to be created."""
    preview = await service.preview_slug(name, origin_country, primary_genre)
    return SlugPreviewResponse(
        name_exists=preview.name_exists, suggested_slug=preview.suggested_slug
    )


@router.post("", response_model=ArtistResponse, status_code=201)
async def create_artist(
    name: str = Form("", description="Artist name"),
    origin_country: str | None = Form(None, description="Country of origin"),
    primary_genre: str | None = Form(None, description="Primary genre"),
    slug: str | None = Form(None, description="Manually edited slug"),
    photo: UploadFile | None = File(None, description="Optional artist photo"),
    identity: Identity | None = Depends(get_current_identity),
    service: ArtistService = Depends(get_artist_service),
    settings: Settings = Depends(get_app_settings),
) -> ArtistResponse:
    """Create an artist (multipart form so a photo can come along)."""
    upload = await read_photo_upload(photo, settings)
    artist = await service.create_artist(
        identity,
        name,
        origin_country=origin_country,
        primary_genre=primary_genre,
        slug_override=slug,
        photo=upload,
    )
    return artist_to_response(artist)


@router.get("/{slug}", response_model=ArtistPageResponse)
async def get_artist(
    slug: str,
    q: str | None = Query(None, description='Filter designs by "year title"'),
    viewer_is_admin: bool = Depends(get_viewer_is_admin),
    service: CatalogService = Depends(get_catalog_service),
) -> ArtistPageResponse:
    """Artist page: the artist plus its designs."""
    page = await service.get_artist_page(slug, q, viewer_is_admin=viewer_is_admin)
    return ArtistPageResponse(
        artist=artist_to_response(page.artist),
        designs=[design_to_response(d) for d in page.designs],
        total_designs=page.total_designs,
    )

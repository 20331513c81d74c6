"""Collector profile endpoints.

Hey future me - /profiles/me must be declared BEFORE /profiles/{username}, otherwise "me" gets
treated as a username. Saving a profile is multipart (avatar upload), and every form field is
optional: a missing field keeps its current value, an empty bio/link clears it.
"""

import logging

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from pydantic import BaseModel, Field

from merch_archive.api.dependencies import (
    get_app_settings,
    get_current_identity,
    get_profile_service,
    read_photo_upload,
)
from merch_archive.api.schemas.catalog import (
    CollectionItemResponse,
    ProfileResponse,
    collection_item_to_response,
    profile_to_response,
)
from merch_archive.application.services import ProfileService
from merch_archive.config import Settings
from merch_archive.domain.entities import Identity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profiles", tags=["Profiles"])


class TopBandResponse(BaseModel):
    """Artist the collector owns the most items of."""

    name: str
    count: int


class PublicProfileResponse(BaseModel):
    """A collector's public page."""

    profile: ProfileResponse
    owned_count: int = Field(..., description="Always visible, even for private collections")
    can_see_collection: bool = Field(..., description="Public collection or the owner looking")
    items: list[CollectionItemResponse] = Field(default_factory=list)
    top_band: TopBandResponse | None = None


class CollectorResponse(BaseModel):
    """One row of the collectors directory."""

    profile: ProfileResponse
    item_count: int | None = Field(None, description="None for private collections")


class CollectorListResponse(BaseModel):
    """The collectors directory."""

    collectors: list[CollectorResponse]
    total_count: int


@router.get("", response_model=CollectorListResponse)
async def list_collectors(
    q: str | None = Query(None, description="Filter by username or bio"),
    service: ProfileService = Depends(get_profile_service),
) -> CollectorListResponse:
    """List collectors A-Z."""
    collectors = await service.list_collectors(q)
    return CollectorListResponse(
        collectors=[
            CollectorResponse(profile=profile_to_response(c.profile), item_count=c.item_count)
            for c in collectors
        ],
        total_count=len(collectors),
    )


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    identity: Identity | None = Depends(get_current_identity),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    """The caller's own profile (404 until they save one)."""
    return profile_to_response(await service.get_my_profile(identity))


@router.put("/me", response_model=ProfileResponse)
async def save_my_profile(
    username: str | None = Form(None, description="Wanted username"),
    bio: str | None = Form(None, description="Short bio"),
    link_url: str | None = Form(None, description="http(s) link"),
    is_collection_public: bool | None = Form(None, description="Show items publicly"),
    avatar: UploadFile | None = File(None, description="Optional avatar image"),
    identity: Identity | None = Depends(get_current_identity),
    service: ProfileService = Depends(get_profile_service),
    settings: Settings = Depends(get_app_settings),
) -> ProfileResponse:
    """Create or update the caller's profile."""
    upload = await read_photo_upload(avatar, settings)
    profile = await service.save_profile(
        identity,
        username=username,
        bio=bio,
        link_url=link_url,
        is_collection_public=is_collection_public,
        avatar=upload,
    )
    return profile_to_response(profile)


@router.get("/{username}", response_model=PublicProfileResponse)
async def get_public_profile(
    username: str,
    identity: Identity | None = Depends(get_current_identity),
    service: ProfileService = Depends(get_profile_service),
) -> PublicProfileResponse:
    """A collector's public profile."""
    public = await service.get_public_profile(username, viewer=identity)
    return PublicProfileResponse(
        profile=profile_to_response(public.profile),
        owned_count=public.owned_count,
        can_see_collection=public.can_see_collection,
        items=[collection_item_to_response(i) for i in public.items],
        top_band=(
            TopBandResponse(name=public.top_band.name, count=public.top_band.count)
            if public.top_band
            else None
        ),
    )

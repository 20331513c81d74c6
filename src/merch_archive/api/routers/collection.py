"""Collection endpoints: the caller's owned items, their photos, CSV export.

Hey future me - sorting/filtering happens in the service over the full list (collections are
a few hundred items at most). Stats are ALWAYS over the whole collection, not the filtered
view, so the "42 items" headline doesn't jump around while the user types in the search box.
"""

import logging

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile
from pydantic import BaseModel, Field

from merch_archive.api.dependencies import (
    get_app_settings,
    get_collection_service,
    get_current_identity,
    read_photo_upload,
)
from merch_archive.api.schemas.catalog import (
    CollectionItemResponse,
    PhotoResponse,
    collection_item_to_response,
    photo_to_response,
)
from merch_archive.application.services import CollectionService
from merch_archive.config import Settings
from merch_archive.domain.entities import CollectionSort, Identity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/collection", tags=["Collection"])


class CollectionStatsResponse(BaseModel):
    """Headline numbers over the whole collection."""

    total_items: int
    with_photos: int
    unique_artists: int


class ArtistGroupResponse(BaseModel):
    """Items of one artist (only filled when group=true)."""

    artist_name: str
    items: list[CollectionItemResponse]


class CollectionResponse(BaseModel):
    """The caller's collection."""

    items: list[CollectionItemResponse] = Field(..., description="Sorted, filtered items")
    stats: CollectionStatsResponse
    groups: list[ArtistGroupResponse] = Field(default_factory=list)


@router.get("", response_model=CollectionResponse)
async def get_collection(
    sort: CollectionSort = Query(CollectionSort.RECENT, description="recent, artist or year"),
    q: str | None = Query(None, description="Search artist/design/color/manufacturer"),
    only_with_photos: bool = Query(False, description="Only items with photos"),
    group: bool = Query(False, description="Also group the items by artist"),
    identity: Identity | None = Depends(get_current_identity),
    service: CollectionService = Depends(get_collection_service),
) -> CollectionResponse:
    """List what the caller owns."""
    view = await service.get_collection(
        identity, sort=sort, query=q, only_with_photos=only_with_photos, group=group
    )
    return CollectionResponse(
        items=[collection_item_to_response(i) for i in view.items],
        stats=CollectionStatsResponse(
            total_items=view.stats.total_items,
            with_photos=view.stats.with_photos,
            unique_artists=view.stats.unique_artists,
        ),
        groups=[
            ArtistGroupResponse(
                artist_name=name, items=[collection_item_to_response(i) for i in items]
            )
            for name, items in view.groups
        ],
    )


@router.get("/export.csv")
async def export_collection(
    identity: Identity | None = Depends(get_current_identity),
    service: CollectionService = Depends(get_collection_service),
) -> Response:
    """Download the whole collection as CSV."""
    export = await service.export_csv(identity)
    return Response(
        content=export.content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )


@router.post("/{ownership_id}/photos", response_model=PhotoResponse, status_code=201)
async def upload_item_photo(
    ownership_id: str,
    photo: UploadFile | None = File(None, description="Image file"),
    label: str | None = Form(None, description="Optional caption"),
    identity: Identity | None = Depends(get_current_identity),
    service: CollectionService = Depends(get_collection_service),
    settings: Settings = Depends(get_app_settings),
) -> PhotoResponse:
    """Attach a photo of one of the caller's own items."""
    upload = await read_photo_upload(photo, settings)
    row = await service.add_ownership_photo(identity, ownership_id, upload, label)
    return photo_to_response(row)

"""Admin endpoints: activity dashboard and hide/unhide moderation.

Hey future me - every endpoint here goes through AdminService.require_admin(), which reads
the is_admin flag from the caller's profile. There is NO API to set that flag; promote an
admin directly in the database.
"""

import logging

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel, Field

from merch_archive.api.dependencies import get_admin_service, get_current_identity
from merch_archive.api.schemas.catalog import (
    ArtistResponse,
    DesignResponse,
    VariantResponse,
    artist_to_response,
    design_to_response,
    variant_to_response,
)
from merch_archive.application.services import AdminService
from merch_archive.application.services.admin_service import TimelineEntry, filter_rows
from merch_archive.domain.entities import HideableTable, Identity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


class ActivityCountsResponse(BaseModel):
    """Rows created in the last 24 hours / 7 days."""

    artists_24h: int
    designs_24h: int
    variants_24h: int
    artists_7d: int
    designs_7d: int
    variants_7d: int


class TimelineEntryResponse(BaseModel):
    """One line of the recent activity feed."""

    type: str = Field(..., description="artist, design or variant")
    created_at: str
    title: str
    href: str
    subtitle: str | None = None
    created_by: str | None = None
    creator_username: str | None = None


class AdminOverviewResponse(BaseModel):
    """Admin dashboard payload."""

    counts: ActivityCountsResponse
    artists: list[ArtistResponse]
    designs: list[DesignResponse]
    variants: list[VariantResponse]
    timeline: list[TimelineEntryResponse]


class SetHiddenRequest(BaseModel):
    """Hide or unhide one catalog row."""

    table: HideableTable = Field(..., description="artists, designs or variants")
    row_id: str = Field(..., description="Row UUID")
    hide: bool = Field(True, description="True hides, False unhides")


def _timeline_entry_to_response(entry: TimelineEntry) -> TimelineEntryResponse:
    return TimelineEntryResponse(
        type=entry.type,
        created_at=entry.created_at.isoformat(),
        title=entry.title,
        href=entry.href,
        subtitle=entry.subtitle,
        created_by=entry.created_by,
        creator_username=entry.creator_username,
    )


@router.get("/overview", response_model=AdminOverviewResponse)
async def get_overview(
    q: str | None = Query(None, description="Filter the artist/design/variant tabs"),
    identity: Identity | None = Depends(get_current_identity),
    service: AdminService = Depends(get_admin_service),
) -> AdminOverviewResponse:
    """Activity counts, recent rows and the merged timeline."""
    overview = await service.overview(identity)
    counts = overview.counts
    return AdminOverviewResponse(
        counts=ActivityCountsResponse(
            artists_24h=counts.artists_24h,
            designs_24h=counts.designs_24h,
            variants_24h=counts.variants_24h,
            artists_7d=counts.artists_7d,
            designs_7d=counts.designs_7d,
            variants_7d=counts.variants_7d,
        ),
        artists=[artist_to_response(a) for a in filter_rows(overview.artists, q)],
        designs=[design_to_response(d) for d in filter_rows(overview.designs, q)],
        variants=[variant_to_response(v) for v in filter_rows(overview.variants, q)],
        timeline=[_timeline_entry_to_response(e) for e in overview.timeline],
    )


@router.post("/hidden", status_code=204)
async def set_hidden(
    body: SetHiddenRequest,
    identity: Identity | None = Depends(get_current_identity),
    service: AdminService = Depends(get_admin_service),
) -> Response:
    """Hide or unhide an artist, design or variant."""
    await service.set_hidden(identity, body.table, body.row_id, body.hide)
    return Response(status_code=204)

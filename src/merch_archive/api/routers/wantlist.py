"""Wantlist endpoints: list, remove, and "I got it!" (move to collection)."""

import logging

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field

from merch_archive.api.dependencies import get_current_identity, get_wantlist_service
from merch_archive.api.schemas.catalog import (
    OwnershipRequest,
    OwnershipResponse,
    WantlistItemResponse,
    ownership_to_response,
    wantlist_item_to_response,
)
from merch_archive.application.services import WantlistService
from merch_archive.domain.entities import Identity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/wantlist", tags=["Wantlist"])


class WantlistResponse(BaseModel):
    """The caller's wantlist, newest first."""

    items: list[WantlistItemResponse]
    total_count: int = Field(..., description="Number of wanted variants")


@router.get("", response_model=WantlistResponse)
async def list_wantlist(
    identity: Identity | None = Depends(get_current_identity),
    service: WantlistService = Depends(get_wantlist_service),
) -> WantlistResponse:
    """List the caller's wanted variants."""
    items = await service.list_wantlist(identity)
    return WantlistResponse(
        items=[wantlist_item_to_response(i) for i in items], total_count=len(items)
    )


@router.delete("/{item_id}", status_code=204)
async def remove_from_wantlist(
    item_id: str,
    identity: Identity | None = Depends(get_current_identity),
    service: WantlistService = Depends(get_wantlist_service),
) -> Response:
    """Remove one of the caller's wantlist entries."""
    await service.remove(identity, item_id)
    return Response(status_code=204)


@router.post("/{item_id}/move", response_model=OwnershipResponse, status_code=201)
async def move_to_collection(
    item_id: str,
    body: OwnershipRequest,
    identity: Identity | None = Depends(get_current_identity),
    service: WantlistService = Depends(get_wantlist_service),
) -> OwnershipResponse:
    """Mark a wanted variant as owned and drop it from the wantlist."""
    ownership = await service.move_to_collection(
        identity, item_id, body.size, body.memory, body.setlist_url
    )
    return ownership_to_response(ownership)

"""Global search endpoint (artists + designs)."""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from merch_archive.api.dependencies import get_search_service
from merch_archive.api.schemas.catalog import (
    ArtistResponse,
    DesignResponse,
    artist_to_response,
    design_to_response,
)
from merch_archive.application.services import SearchService

router = APIRouter(prefix="/search", tags=["Search"])


class SearchResponse(BaseModel):
    """Search hits."""

    query: str = Field(..., description="The query as received")
    artists: list[ArtistResponse] = Field(default_factory=list, description="Max 10, A-Z")
    designs: list[DesignResponse] = Field(default_factory=list, description="Max 20, newest first")


@router.get("", response_model=SearchResponse)
async def search(
    q: str = Query("", description="Space-separated search terms"),
    service: SearchService = Depends(get_search_service),
) -> SearchResponse:
    """Search artists by name and designs by "artist title"."""
    results = await service.search(q)
    return SearchResponse(
        query=q,
        artists=[artist_to_response(a) for a in results.artists],
        designs=[design_to_response(d) for d in results.designs],
    )

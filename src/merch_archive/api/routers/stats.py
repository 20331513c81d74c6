"""Home page stats endpoint."""

from typing import Any

from fastapi import APIRouter, Depends

from merch_archive.api.dependencies import get_current_identity, get_stats_service
from merch_archive.application.services import StatsService
from merch_archive.domain.entities import Identity

router = APIRouter(prefix="/stats", tags=["Stats"])


# Yo, "owned" is null for anonymous visitors and the caller's own item count otherwise.
@router.get("")
async def get_stats(
    identity: Identity | None = Depends(get_current_identity),
    service: StatsService = Depends(get_stats_service),
) -> dict[str, Any]:
    """Catalog counts plus the caller's owned count."""
    stats = await service.home_stats(identity)
    return stats.to_dict()

"""Stats Service - headline counts for the home page.

Hey future me - routers call this instead of running count queries themselves, so
the numbers are computed the same way everywhere.
"""

from dataclasses import dataclass
from typing import Any

from merch_archive.domain.entities import Identity
from merch_archive.domain.ports import (
    IArtistRepository,
    IDesignRepository,
    IOwnershipRepository,
    IVariantRepository,
)


@dataclass
class HomeStats:
    """Catalog size plus the viewer's own item count."""

    artists: int
    designs: int
    variants: int
    owned: int | None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON responses."""
        return {
            "artists": self.artists,
            "designs": self.designs,
            "variants": self.variants,
            "owned": self.owned,
        }


class StatsService:
    """Catalog-wide counts."""

    def __init__(
        self,
        artists: IArtistRepository,
        designs: IDesignRepository,
        variants: IVariantRepository,
        ownership: IOwnershipRepository,
    ) -> None:
        """Initialize stats service."""
        self._artists = artists
        self._designs = designs
        self._variants = variants
        self._ownership = ownership

    async def home_stats(self, viewer: Identity | None = None) -> HomeStats:
        """Counts of artists, designs, variants and (when signed in) owned items.

        Only visible catalog rows count, so the numbers match what visitors can browse.
        """
        owned = None
        if viewer is not None:
            owned = await self._ownership.count_for_user(viewer.user_id)
        return HomeStats(
            artists=await self._artists.count_all(include_hidden=False),
            designs=await self._designs.count_all(include_hidden=False),
            variants=await self._variants.count_all(include_hidden=False),
            owned=owned,
        )

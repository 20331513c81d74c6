"""Admin moderation: activity overview and hiding catalog rows."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TypeVar

from merch_archive.application.services.auth_service import require_signed_in
from merch_archive.domain.entities import (
    Artist,
    Design,
    HideableTable,
    Identity,
    Profile,
    Variant,
)
from merch_archive.domain.exceptions import AuthorizationError
from merch_archive.domain.ports import (
    IAdminProcedures,
    IArtistRepository,
    IDesignRepository,
    IProfileRepository,
    IVariantRepository,
)

logger = logging.getLogger(__name__)

RECENT_ROWS_LIMIT = 50
TIMELINE_LIMIT = 40
NOT_AN_ADMIN = "Not authorized. Admins only."

CatalogRow = TypeVar("CatalogRow", Artist, Design, Variant)


@dataclass
class ActivityCounts:
    """Rows created in the last 24 hours / 7 days."""

    artists_24h: int = 0
    designs_24h: int = 0
    variants_24h: int = 0
    artists_7d: int = 0
    designs_7d: int = 0
    variants_7d: int = 0


@dataclass
class TimelineEntry:
    """One line of the "recent activity" feed."""

    type: str
    created_at: datetime
    title: str
    href: str
    subtitle: str | None = None
    created_by: str | None = None
    creator_username: str | None = None


@dataclass
class AdminOverview:
    """Everything the admin dashboard shows."""

    counts: ActivityCounts
    artists: list[Artist] = field(default_factory=list)
    designs: list[Design] = field(default_factory=list)
    variants: list[Variant] = field(default_factory=list)
    timeline: list[TimelineEntry] = field(default_factory=list)


def _year_text(design: Design | None) -> str:
    year = design.display_year if design else None
    return str(year) if year else "—"


def _design_heading(design: Design | None) -> str:
    artist_name = design.artist.name if design and design.artist else "Unknown artist"
    title = design.title if design else "Unknown design"
    return f"{artist_name} — {_year_text(design)} – {title}"


def artist_entry(artist: Artist) -> TimelineEntry:
    """Timeline line for a new artist."""
    subtitle = f"/{artist.slug}" + (" • hidden" if artist.is_hidden else "")
    return TimelineEntry(
        type="artist",
        created_at=artist.created_at,
        created_by=artist.created_by,
        title=artist.name,
        subtitle=subtitle,
        href=f"/artists/{artist.slug}",
    )


def design_entry(design: Design) -> TimelineEntry:
    """Timeline line for a new design."""
    return TimelineEntry(
        type="design",
        created_at=design.created_at,
        created_by=design.created_by,
        title=_design_heading(design),
        subtitle="hidden" if design.is_hidden else None,
        href=f"/designs/{design.id}",
    )


def variant_entry(variant: Variant) -> TimelineEntry:
    """Timeline line for a new variant."""
    subtitle = f"{variant.base_color} {variant.garment_type} — {variant.manufacturer}"
    if variant.is_hidden:
        subtitle += " • hidden"
    return TimelineEntry(
        type="variant",
        created_at=variant.created_at,
        created_by=variant.created_by,
        title=_design_heading(variant.design),
        subtitle=subtitle,
        href=f"/designs/{variant.design_id}",
    )


def build_timeline(
    artists: Sequence[Artist],
    designs: Sequence[Design],
    variants: Sequence[Variant],
    limit: int = TIMELINE_LIMIT,
) -> list[TimelineEntry]:
    """Merge recent rows into one feed, newest first."""
    entries = [artist_entry(a) for a in artists]
    entries += [design_entry(d) for d in designs]
    entries += [variant_entry(v) for v in variants]
    entries.sort(key=lambda e: e.created_at, reverse=True)
    return entries[:limit]


def admin_search_text(row: Artist | Design | Variant) -> str:
    """Text an admin tab filters a row by."""
    if isinstance(row, Artist):
        return f"{row.name} {row.slug}".lower()
    if isinstance(row, Design):
        artist_name = row.artist.name if row.artist else ""
        return f"{artist_name} {row.display_year or ''} {row.title}".lower()
    design_text = admin_search_text(row.design) if row.design else ""
    return (
        f"{design_text} {row.base_color} {row.garment_type} {row.manufacturer}"
    ).lower()


def filter_rows(rows: Sequence[CatalogRow], query: str | None) -> list[CatalogRow]:
    """Case-insensitive substring filter used by the admin tabs."""
    q = (query or "").strip().lower()
    if not q:
        return list(rows)
    return [row for row in rows if q in admin_search_text(row)]


class AdminService:
    """Admin-only dashboard and moderation."""

    def __init__(
        self,
        profiles: IProfileRepository,
        artists: IArtistRepository,
        designs: IDesignRepository,
        variants: IVariantRepository,
        procedures: IAdminProcedures,
    ) -> None:
        """Initialize admin service."""
        self._profiles = profiles
        self._artists = artists
        self._designs = designs
        self._variants = variants
        self._procedures = procedures

    async def require_admin(self, actor: Identity | None) -> Profile:
        """Return the caller's profile if it carries the admin flag.

        Raises:
            AuthenticationError: Caller not signed in
            AuthorizationError: Caller is not an admin
        """
        actor = require_signed_in(actor)
        profile = await self._profiles.get_by_user_id(actor.user_id)
        if profile is None or not profile.is_admin:
            logger.warning("Admin access denied", extra={"user_id": actor.user_id})
            raise AuthorizationError(NOT_AN_ADMIN)
        return profile

    async def is_admin(self, actor: Identity | None) -> bool:
        """Non-raising variant of require_admin for read paths."""
        if actor is None:
            return False
        profile = await self._profiles.get_by_user_id(actor.user_id)
        return bool(profile and profile.is_admin)

    async def overview(
        self, actor: Identity | None, now: datetime | None = None
    ) -> AdminOverview:
        """Recent activity counts, recent rows and the merged timeline."""
        await self.require_admin(actor)

        now = now or datetime.now(UTC)
        since_24h = now - timedelta(days=1)
        since_7d = now - timedelta(days=7)
        counts = ActivityCounts(
            artists_24h=await self._artists.count_all(since=since_24h),
            designs_24h=await self._designs.count_all(since=since_24h),
            variants_24h=await self._variants.count_all(since=since_24h),
            artists_7d=await self._artists.count_all(since=since_7d),
            designs_7d=await self._designs.count_all(since=since_7d),
            variants_7d=await self._variants.count_all(since=since_7d),
        )

        artists = await self._artists.list_recent(RECENT_ROWS_LIMIT)
        designs = await self._designs.list_recent(RECENT_ROWS_LIMIT)
        variants = await self._variants.list_recent(RECENT_ROWS_LIMIT)

        timeline = build_timeline(artists, designs, variants)
        creator_ids = sorted({e.created_by for e in timeline if e.created_by})
        usernames = await self._profiles.usernames_by_user_id(creator_ids)
        for entry in timeline:
            if entry.created_by:
                entry.creator_username = usernames.get(entry.created_by)

        return AdminOverview(
            counts=counts,
            artists=artists,
            designs=designs,
            variants=variants,
            timeline=timeline,
        )

    async def set_hidden(
        self, actor: Identity | None, table: HideableTable, row_id: str, hide: bool
    ) -> None:
        """Hide or unhide a catalog row.

        Raises:
            AuthenticationError / AuthorizationError: Caller is not an admin
            EntityNotFoundException: Unknown row
        """
        profile = await self.require_admin(actor)
        await self._procedures.set_hidden(HideableTable(table), row_id, hide)
        logger.info(
            "%s %s/%s", "Hid" if hide else "Unhid", HideableTable(table).value, row_id,
            extra={"user_id": profile.user_id},
        )

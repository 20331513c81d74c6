"""Collector profiles: usernames, public pages and the collectors directory."""

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

from merch_archive.application.services.auth_service import require_signed_in
from merch_archive.application.services.slug_service import (
    MonotonicMillisClock,
    SlugService,
    millis_clock,
)
from merch_archive.config import CatalogSettings
from merch_archive.domain.entities import CollectionItem, Identity, PhotoUpload, Profile
from merch_archive.domain.exceptions import (
    DuplicateEntityException,
    EntityNotFoundException,
    UniqueViolationError,
    ValidationException,
)
from merch_archive.domain.ports import (
    IOwnershipRepository,
    IPhotoStorage,
    IProfileRepository,
)
from merch_archive.domain.value_objects import normalize_slug
from merch_archive.infrastructure.storage import Bucket, extension_from_filename

logger = logging.getLogger(__name__)

_HTTP_URL_RE = re.compile(r"^https?://\S+$", re.IGNORECASE)

USERNAME_TAKEN = "That username is taken."
NO_PROFILE_YET = "No profile found yet. Please create one in Edit Profile."
FALLBACK_USERNAME = "collector"


@dataclass(frozen=True)
class TopBand:
    """Artist a collector owns the most items of."""

    name: str
    count: int


@dataclass
class PublicProfile:
    """Everything the /u/<username> page shows."""

    profile: Profile
    owned_count: int
    can_see_collection: bool
    items: list[CollectionItem] = field(default_factory=list)
    top_band: TopBand | None = None


@dataclass
class CollectorSummary:
    """One row of the collectors directory. item_count is None for private collections."""

    profile: Profile
    item_count: int | None


def top_band(items: Sequence[CollectionItem]) -> TopBand | None:
    """Artist with the most items; on a tie the one seen first wins."""
    counts: dict[str, int] = {}
    for item in items:
        name = item.details.artist_name
        if name:
            counts[name] = counts.get(name, 0) + 1

    best: TopBand | None = None
    for name, count in counts.items():
        if best is None or count > best.count:
            best = TopBand(name=name, count=count)
    return best


def username_from_email(email: str) -> str:
    """Derive a username candidate from the local part of an email."""
    local = email.split("@", 1)[0]
    return normalize_slug(local) or FALLBACK_USERNAME


class ProfileService:
    """Create/edit profiles and read them publicly."""

    def __init__(
        self,
        profiles: IProfileRepository,
        ownership: IOwnershipRepository,
        slug_service: SlugService,
        storage: IPhotoStorage,
        settings: CatalogSettings,
        clock: MonotonicMillisClock | None = None,
    ) -> None:
        """Initialize profile service.

        Args:
            profiles: Profile repository
            ownership: Ownership repository (counts and public items)
            slug_service: Availability search for derived usernames
            storage: Photo storage for avatars
            settings: Catalog settings (public item limit)
            clock: Millisecond clock for avatar file names
        """
        self._profiles = profiles
        self._ownership = ownership
        self._slugs = slug_service
        self._storage = storage
        self._settings = settings
        self._clock = clock or millis_clock

    async def _resolve_username(
        self, actor: Identity, requested: str | None, existing: Profile | None
    ) -> str:
        if requested is not None and requested.strip():
            username = normalize_slug(requested)
            if not username:
                raise ValidationException("Please use letters or numbers in your username.")
            holder = await self._profiles.get_by_username(username)
            if holder is not None and holder.user_id != actor.user_id:
                raise DuplicateEntityException("Profile", username, USERNAME_TAKEN)
            return username

        if existing is not None:
            return existing.username

        # First save without a username: derive one and let the search add -2, -3, ...
        return await self._slugs.find_available_slug(
            "profiles", "username", username_from_email(actor.email)
        )

    async def save_profile(
        self,
        actor: Identity | None,
        username: str | None = None,
        bio: str | None = None,
        link_url: str | None = None,
        is_collection_public: bool | None = None,
        avatar: PhotoUpload | None = None,
    ) -> Profile:
        """Create or update the caller's profile.

        Fields left as None keep their current value; an empty string clears
        bio/link.

        Raises:
            AuthenticationError: Caller not signed in
            ValidationException: Unusable username or non-http(s) link
            DuplicateEntityException: Username held by someone else
            UniqueViolationError: Username grabbed concurrently
            StorageError: Avatar upload failed
        """
        actor = require_signed_in(actor)
        existing = await self._profiles.get_by_user_id(actor.user_id)

        final_username = await self._resolve_username(actor, username, existing)

        final_link = existing.link_url if existing and link_url is None else link_url
        final_link = (final_link or "").strip() or None
        if final_link and not _HTTP_URL_RE.match(final_link):
            raise ValidationException("Please enter a link starting with http:// or https://")

        final_bio = existing.bio if existing and bio is None else bio
        final_bio = (final_bio or "").strip() or None

        if is_collection_public is None:
            is_collection_public = existing.is_collection_public if existing else True

        avatar_url = existing.avatar_url if existing else None
        if avatar is not None and avatar.content:
            ext = extension_from_filename(avatar.filename)
            avatar_url = await self._storage.upload(
                Bucket.AVATARS,
                f"{actor.user_id}/{self._clock()}.{ext}",
                avatar.content,
                upsert=True,
            )

        now = datetime.now(UTC)
        profile = Profile(
            user_id=actor.user_id,
            username=final_username,
            bio=final_bio,
            avatar_url=avatar_url,
            link_url=final_link,
            is_collection_public=is_collection_public,
            is_admin=existing.is_admin if existing else False,
            created_at=existing.created_at if existing else now,
            updated_at=now,
        )
        try:
            await self._profiles.save(profile)
        except UniqueViolationError as e:
            raise UniqueViolationError(
                "Profile", "username", final_username, USERNAME_TAKEN
            ) from e

        logger.info(
            "Saved profile %r", final_username, extra={"user_id": actor.user_id}
        )
        return profile

    async def get_my_profile(self, actor: Identity | None) -> Profile:
        """The caller's profile.

        Raises:
            EntityNotFoundException: No profile created yet
        """
        actor = require_signed_in(actor)
        profile = await self._profiles.get_by_user_id(actor.user_id)
        if profile is None:
            raise EntityNotFoundException("Profile", actor.user_id, NO_PROFILE_YET)
        return profile

    async def get_my_username(self, actor: Identity | None) -> str:
        """Username of the caller, for the "my profile" redirect."""
        return (await self.get_my_profile(actor)).username

    # Hey future me - the owned COUNT is always public, only the item list and top band are
    # private. That matches what collectors expect from the directory ("42 items" even when the
    # shelf itself is locked). The owner always sees their own items.
    async def get_public_profile(
        self, username: str, viewer: Identity | None = None
    ) -> PublicProfile:
        """Public view of a collector.

        Raises:
            EntityNotFoundException: Unknown username
        """
        profile = await self._profiles.get_by_username(username)
        if profile is None:
            raise EntityNotFoundException("Profile", username, "Profile not found.")

        owned_count = await self._ownership.count_for_user(profile.user_id)
        is_owner = viewer is not None and viewer.user_id == profile.user_id
        can_see = profile.is_collection_public or is_owner
        if not can_see:
            return PublicProfile(profile=profile, owned_count=owned_count, can_see_collection=False)

        items = await self._ownership.list_items(
            profile.user_id, limit=self._settings.public_profile_item_limit
        )
        return PublicProfile(
            profile=profile,
            owned_count=owned_count,
            can_see_collection=True,
            items=items,
            top_band=top_band(items),
        )

    async def list_collectors(self, query: str | None = None) -> list[CollectorSummary]:
        """Collectors A-Z with item counts, filtered by username/bio substring."""
        profiles = await self._profiles.list_all()
        q = (query or "").strip().lower()
        if q:
            profiles = [
                p for p in profiles if q in f"{p.username} {p.bio or ''}".lower()
            ]

        counts = await self._ownership.item_counts([p.user_id for p in profiles])
        return [
            CollectorSummary(
                profile=p,
                item_count=counts.get(p.user_id, 0) if p.is_collection_public else None,
            )
            for p in profiles
        ]

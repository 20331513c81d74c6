"""A collector's own items: marking owned, browsing, photos and CSV export."""

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from merch_archive.application.services.auth_service import require_signed_in
from merch_archive.application.services.csv_export import (
    collection_to_csv,
    export_filename,
)
from merch_archive.application.services.slug_service import (
    MonotonicMillisClock,
    millis_clock,
)
from merch_archive.domain.entities import (
    CollectionItem,
    CollectionSort,
    Identity,
    Ownership,
    Photo,
    PhotoUpload,
)
from merch_archive.domain.exceptions import (
    AuthorizationError,
    DuplicateEntityException,
    EntityNotFoundException,
    UniqueViolationError,
    ValidationException,
)
from merch_archive.domain.ports import (
    IOwnershipRepository,
    IPhotoRepository,
    IPhotoStorage,
    IVariantRepository,
)
from merch_archive.infrastructure.storage import Bucket, extension_from_filename

logger = logging.getLogger(__name__)

SETLIST_URL_RE = re.compile(r"^https?://(www\.)?setlist\.fm/", re.IGNORECASE)

ALREADY_OWNED = "Already in your collection."
SIZE_REQUIRED = "Size is required to add to your collection."
INVALID_SETLIST_URL = "Please enter a valid Setlist.fm link (it should start with setlist.fm)."
NOTHING_TO_EXPORT = "Nothing to export yet."


@dataclass(frozen=True)
class OwnershipInput:
    """Validated size/memory/setlist triple."""

    size: str
    memory: str | None
    setlist_url: str | None


def validate_ownership_input(
    size: str | None, memory: str | None = None, setlist_url: str | None = None
) -> OwnershipInput:
    """Clean and check what a collector types when adding an item.

    Raises:
        ValidationException: Missing size or a non-setlist.fm link
    """
    final_size = (size or "").strip()
    if not final_size:
        raise ValidationException(SIZE_REQUIRED)
    link = (setlist_url or "").strip()
    if link and not SETLIST_URL_RE.match(link):
        raise ValidationException(INVALID_SETLIST_URL)
    return OwnershipInput(
        size=final_size,
        memory=(memory or "").strip() or None,
        setlist_url=link or None,
    )


@dataclass
class CollectionStats:
    """Headline numbers, always over the whole collection."""

    total_items: int
    with_photos: int
    unique_artists: int


@dataclass
class CollectionView:
    """What the collection page renders."""

    items: list[CollectionItem]
    stats: CollectionStats
    groups: list[tuple[str, list[CollectionItem]]] = field(default_factory=list)


@dataclass
class CsvExport:
    """A ready-to-download CSV file."""

    filename: str
    content: str


def sort_items(
    items: Sequence[CollectionItem], mode: CollectionSort
) -> list[CollectionItem]:
    """Sort by recently added, artist A-Z or design year new -> old."""
    if mode == CollectionSort.ARTIST:
        return sorted(items, key=lambda i: i.details.artist_name.lower())
    if mode == CollectionSort.YEAR:
        return sorted(items, key=lambda i: i.details.design_year or 0, reverse=True)
    return sorted(items, key=lambda i: i.ownership.created_at, reverse=True)


def filter_items(
    items: Sequence[CollectionItem],
    query: str | None = None,
    only_with_photos: bool = False,
) -> list[CollectionItem]:
    """Substring search over artist/design/color/manufacturer plus the photo toggle."""
    q = (query or "").lower()
    return [
        item for item in items
        if q in item.search_text and (not only_with_photos or item.photos)
    ]


def group_by_artist(
    items: Sequence[CollectionItem],
) -> list[tuple[str, list[CollectionItem]]]:
    """Group items by artist name, groups in first-seen order."""
    groups: dict[str, list[CollectionItem]] = {}
    for item in items:
        groups.setdefault(item.details.artist_name, []).append(item)
    return list(groups.items())


def collection_stats(items: Sequence[CollectionItem]) -> CollectionStats:
    """Count items, items with photos and distinct artists."""
    return CollectionStats(
        total_items=len(items),
        with_photos=sum(1 for item in items if item.photos),
        unique_artists=len({item.details.artist_name for item in items}),
    )


class CollectionService:
    """Ownership records of the signed-in collector."""

    def __init__(
        self,
        ownership: IOwnershipRepository,
        variants: IVariantRepository,
        photos: IPhotoRepository,
        storage: IPhotoStorage,
        clock: MonotonicMillisClock | None = None,
    ) -> None:
        """Initialize collection service.

        Args:
            ownership: Ownership repository
            variants: Variant repository (existence checks)
            photos: Photo row repository
            storage: Photo storage
            clock: Millisecond clock for photo file names
        """
        self._ownership = ownership
        self._variants = variants
        self._photos = photos
        self._storage = storage
        self._clock = clock or millis_clock

    # Hey future me, the "already owned" lookup is only for the friendly message. Two tabs
    # clicking "I own this" at once both pass it; the (user_id, variant_id) unique constraint
    # stops the second insert and we map that to the same message.
    async def mark_owned(
        self,
        actor: Identity | None,
        variant_id: str,
        size: str | None,
        memory: str | None = None,
        setlist_url: str | None = None,
    ) -> Ownership:
        """Add a variant to the caller's collection.

        Raises:
            AuthenticationError: Caller not signed in
            EntityNotFoundException: Unknown variant
            DuplicateEntityException: Already owned
            ValidationException: Missing size or bad setlist link
        """
        actor = require_signed_in(actor)

        if await self._variants.get_by_id(variant_id) is None:
            raise EntityNotFoundException("Variant", variant_id, "Variant not found")
        if await self._ownership.get_for_user_and_variant(actor.user_id, variant_id):
            raise DuplicateEntityException("Ownership", variant_id, ALREADY_OWNED)

        data = validate_ownership_input(size, memory, setlist_url)
        return await self.insert_ownership(actor, variant_id, data)

    async def insert_ownership(
        self, actor: Identity, variant_id: str, data: OwnershipInput
    ) -> Ownership:
        """Insert an already-validated ownership row."""
        ownership = Ownership(
            user_id=actor.user_id,
            variant_id=variant_id,
            size=data.size,
            memory=data.memory,
            setlist_url=data.setlist_url,
        )
        try:
            await self._ownership.add(ownership)
        except UniqueViolationError as e:
            raise DuplicateEntityException("Ownership", variant_id, ALREADY_OWNED) from e
        logger.info(
            "Variant added to collection",
            extra={"user_id": actor.user_id, "variant_id": variant_id},
        )
        return ownership

    async def _load_items(self, user_id: str) -> list[CollectionItem]:
        items = await self._ownership.list_items(user_id)
        photos = await self._photos.list_ownership_photos([i.id for i in items])
        for item in items:
            item.photos = photos.get(item.id, [])
        return items

    async def get_collection(
        self,
        actor: Identity | None,
        sort: CollectionSort = CollectionSort.RECENT,
        query: str | None = None,
        only_with_photos: bool = False,
        group: bool = False,
    ) -> CollectionView:
        """The caller's collection, sorted/filtered, with stats over everything."""
        actor = require_signed_in(actor)

        items = await self._load_items(actor.user_id)
        visible = filter_items(sort_items(items, sort), query, only_with_photos)
        return CollectionView(
            items=visible,
            stats=collection_stats(items),
            groups=group_by_artist(visible) if group else [],
        )

    async def add_ownership_photo(
        self,
        actor: Identity | None,
        ownership_id: str,
        photo: PhotoUpload | None,
        label: str | None = None,
    ) -> Photo:
        """Attach a photo of the caller's own item.

        Raises:
            AuthenticationError: Caller not signed in
            ValidationException: No file
            EntityNotFoundException: Unknown ownership row
            AuthorizationError: Row belongs to someone else
            StorageError: Upload failed
        """
        actor = require_signed_in(actor)
        if photo is None or not photo.content:
            raise ValidationException("Please choose an image file.")

        ownership = await self._ownership.get_by_id(ownership_id)
        if ownership is None:
            raise EntityNotFoundException("Ownership", ownership_id, "Item not found")
        if ownership.user_id != actor.user_id:
            raise AuthorizationError("You can only add photos to your own items.")

        ext = extension_from_filename(photo.filename)
        url = await self._storage.upload(
            Bucket.OWNERSHIP_PHOTOS,
            f"ownership-{ownership.id}-{self._clock()}.{ext}",
            photo.content,
        )
        row = Photo(
            parent_id=ownership.id, url=url, label=(label or "").strip() or None
        )
        await self._photos.add_ownership_photo(row)
        return row

    async def export_csv(self, actor: Identity | None) -> CsvExport:
        """Whole collection (newest first) as CSV.

        Raises:
            AuthenticationError: Caller not signed in
            ValidationException: Collection is empty
        """
        actor = require_signed_in(actor)
        items = await self._ownership.list_items(actor.user_id)
        if not items:
            raise ValidationException(NOTHING_TO_EXPORT)
        return CsvExport(filename=export_filename(), content=collection_to_csv(items))

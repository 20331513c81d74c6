"""Catalog browsing and contributions: artists, designs, variants, variant photos."""

import logging
import math
from dataclasses import dataclass, field

from merch_archive.application.services.auth_service import require_signed_in
from merch_archive.application.services.slug_service import (
    MonotonicMillisClock,
    millis_clock,
)
from merch_archive.domain.entities import (
    Artist,
    Design,
    Identity,
    Photo,
    PhotoUpload,
    Variant,
)
from merch_archive.domain.exceptions import EntityNotFoundException, ValidationException
from merch_archive.domain.ports import (
    IArtistRepository,
    IDesignRepository,
    IPhotoRepository,
    IPhotoStorage,
    IVariantRepository,
)
from merch_archive.infrastructure.storage import Bucket, extension_from_filename

logger = logging.getLogger(__name__)

CIRCA_MIN = 1900
CIRCA_MAX = 2100

DESIGN_FIELDS_REQUIRED = "Please fill in Artist and Design title."
CIRCA_OUT_OF_RANGE = "Circa must be a reasonable year (e.g., 1998)."
VARIANT_FIELDS_REQUIRED = "Please fill in garment type, color, cut, and manufacturer."
PHOTO_REQUIRED = "Please choose an image file."


@dataclass
class ArtistPage:
    """An artist with its (filtered) designs."""

    artist: Artist
    designs: list[Design]
    total_designs: int


@dataclass
class VariantListing:
    """A variant as shown on its design page."""

    variant: Variant
    owned_count: int = 0
    photos: list[Photo] = field(default_factory=list)


@dataclass
class DesignPage:
    """A design with its variants, owned counts, photos and filter choices."""

    design: Design
    variants: list[VariantListing]
    total_variants: int
    colors: list[str]
    garment_types: list[str]
    manufacturers: list[str]


def parse_circa(value: str | int | float | None) -> int | None:
    """Validate an optional circa year.

    Blank means "unknown". Anything else must be a finite number within
    1900..2100; fractions are truncated ("1998.7" -> 1998).

    Raises:
        ValidationException: Not a number or out of range
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ValidationException(CIRCA_OUT_OF_RANGE) from e
    if not math.isfinite(number) or number < CIRCA_MIN or number > CIRCA_MAX:
        raise ValidationException(CIRCA_OUT_OF_RANGE)
    return math.trunc(number)


def _optional(value: str | None) -> str | None:
    cleaned = (value or "").strip()
    return cleaned or None


def _distinct_sorted(values: list[str]) -> list[str]:
    return sorted({v for v in values if v})


class CatalogService:
    """Read and extend the shared merch catalog."""

    def __init__(
        self,
        artists: IArtistRepository,
        designs: IDesignRepository,
        variants: IVariantRepository,
        photos: IPhotoRepository,
        storage: IPhotoStorage,
        clock: MonotonicMillisClock | None = None,
    ) -> None:
        """Initialize catalog service.

        Args:
            artists: Artist repository
            designs: Design repository
            variants: Variant repository
            photos: Photo row repository
            storage: Photo storage
            clock: Millisecond clock for photo file names
        """
        self._artists = artists
        self._designs = designs
        self._variants = variants
        self._photos = photos
        self._storage = storage
        self._clock = clock or millis_clock

    async def list_artists(
        self, query: str | None = None, viewer_is_admin: bool = False
    ) -> list[Artist]:
        """Artists A-Z, optionally filtered by a name substring."""
        artists = await self._artists.list_all(include_hidden=viewer_is_admin)
        q = (query or "").strip().lower()
        if not q:
            return artists
        return [a for a in artists if q in a.name.lower()]

    async def get_artist_page(
        self, slug: str, query: str | None = None, viewer_is_admin: bool = False
    ) -> ArtistPage:
        """Artist by slug plus its designs, oldest first.

        The query filters designs by "year title" text, so typing "1998" or a
        word from the title both work.

        Raises:
            EntityNotFoundException: Unknown slug (or hidden, for non-admins)
        """
        artist = await self._artists.get_by_slug(slug)
        if artist is None or (artist.is_hidden and not viewer_is_admin):
            raise EntityNotFoundException("Artist", slug, "Artist not found")

        designs = await self._designs.list_by_artist(
            artist.id, include_hidden=viewer_is_admin
        )
        q = (query or "").strip().lower()
        filtered = designs
        if q:
            filtered = [
                d for d in designs
                if q in f"{d.display_year or ''} {d.title}".lower()
            ]
        return ArtistPage(artist=artist, designs=filtered, total_designs=len(designs))

    async def create_design(
        self,
        actor: Identity | None,
        artist_id: str | None,
        title: str | None,
        circa: str | int | float | None = None,
        photo: PhotoUpload | None = None,
    ) -> Design:
        """Add a design under an artist.

        New designs never set the legacy year column; circa is the only date.

        Raises:
            AuthenticationError: Caller not signed in
            ValidationException: Missing artist/title or bad circa
            EntityNotFoundException: Unknown artist
            StorageError: Photo upload failed
        """
        actor = require_signed_in(actor)

        final_title = (title or "").strip()
        if not artist_id or not final_title:
            raise ValidationException(DESIGN_FIELDS_REQUIRED)
        circa_year = parse_circa(circa)

        artist = await self._artists.get_by_id(artist_id)
        if artist is None:
            raise EntityNotFoundException("Artist", artist_id, "Artist not found")

        photo_url = None
        if photo is not None and photo.content:
            ext = extension_from_filename(photo.filename)
            photo_url = await self._storage.upload(
                Bucket.DESIGN_PHOTOS, f"design-{self._clock()}.{ext}", photo.content
            )

        design = Design(
            artist_id=artist.id,
            title=final_title,
            year=None,
            circa=circa_year,
            primary_photo_url=photo_url,
            created_by=actor.user_id,
        )
        await self._designs.add(design)
        logger.info(
            "Created design %r for %s", design.title, artist.slug,
            extra={"design_id": design.id, "user_id": actor.user_id},
        )
        return design

    async def create_variant(
        self,
        actor: Identity | None,
        design_id: str | None,
        garment_type: str | None,
        base_color: str | None,
        cut: str | None,
        manufacturer: str | None,
        print_method: str | None = None,
        notes: str | None = None,
    ) -> Variant:
        """Add a garment variant to a design.

        Raises:
            AuthenticationError: Caller not signed in
            ValidationException: Missing design or garment fields
            EntityNotFoundException: Unknown design
        """
        actor = require_signed_in(actor)

        if not design_id:
            raise ValidationException("Please select a design.")
        required = [_optional(v) for v in (garment_type, base_color, cut, manufacturer)]
        if not all(required):
            raise ValidationException(VARIANT_FIELDS_REQUIRED)

        design = await self._designs.get_by_id(design_id)
        if design is None:
            raise EntityNotFoundException("Design", design_id, "Design not found")

        garment, color, final_cut, maker = required
        variant = Variant(
            design_id=design.id,
            garment_type=garment,
            base_color=color,
            cut=final_cut,
            manufacturer=maker,
            print_method=_optional(print_method),
            notes=_optional(notes),
            created_by=actor.user_id,
        )
        await self._variants.add(variant)
        logger.info(
            "Created variant %s/%s for design %s", color, garment, design.id,
            extra={"variant_id": variant.id, "user_id": actor.user_id},
        )
        return variant

    # Hey future me - the filters are EXACT matches (they come from dropdowns built out of the
    # same variant list), and the dropdown choices are computed over the UNFILTERED variants so
    # picking a color never makes the other colors vanish from the menu.
    async def get_design_page(
        self,
        design_id: str,
        color: str | None = None,
        garment_type: str | None = None,
        manufacturer: str | None = None,
        viewer_is_admin: bool = False,
    ) -> DesignPage:
        """Design with variants, owned counts and photos.

        Raises:
            EntityNotFoundException: Unknown design, or design/artist hidden from non-admins
        """
        design = await self._designs.get_by_id(design_id)
        hidden = design is not None and (
            design.is_hidden or (design.artist is not None and design.artist.is_hidden)
        )
        if design is None or (hidden and not viewer_is_admin):
            raise EntityNotFoundException("Design", design_id, "Design not found")

        variants = await self._variants.list_by_design(
            design.id, include_hidden=viewer_is_admin
        )
        variant_ids = [v.id for v in variants]
        owned = await self._variants.owned_counts(variant_ids)
        photos = await self._photos.list_variant_photos(variant_ids)

        filtered = [
            v for v in variants
            if (not color or v.base_color == color)
            and (not garment_type or v.garment_type == garment_type)
            and (not manufacturer or v.manufacturer == manufacturer)
        ]
        return DesignPage(
            design=design,
            variants=[
                VariantListing(
                    variant=v,
                    owned_count=owned.get(v.id, 0),
                    photos=photos.get(v.id, []),
                )
                for v in filtered
            ],
            total_variants=len(variants),
            colors=_distinct_sorted([v.base_color for v in variants]),
            garment_types=_distinct_sorted([v.garment_type for v in variants]),
            manufacturers=_distinct_sorted([v.manufacturer for v in variants]),
        )

    async def add_variant_photo(
        self,
        actor: Identity | None,
        variant_id: str,
        photo: PhotoUpload | None,
        label: str | None = None,
    ) -> Photo:
        """Upload a community photo of a variant.

        Raises:
            AuthenticationError: Caller not signed in
            ValidationException: No file
            EntityNotFoundException: Unknown variant
            StorageError: Upload failed
        """
        actor = require_signed_in(actor)
        if photo is None or not photo.content:
            raise ValidationException(PHOTO_REQUIRED)

        variant = await self._variants.get_by_id(variant_id)
        if variant is None:
            raise EntityNotFoundException("Variant", variant_id, "Variant not found")

        ext = extension_from_filename(photo.filename)
        url = await self._storage.upload(
            Bucket.VARIANT_PHOTOS,
            f"variant-{variant.id}-{self._clock()}.{ext}",
            photo.content,
        )
        row = Photo(parent_id=variant.id, url=url, label=_optional(label))
        await self._photos.add_variant_photo(row)
        logger.info(
            "Uploaded variant photo", extra={"variant_id": variant.id, "user_id": actor.user_id}
        )
        return row

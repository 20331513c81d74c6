"""Artist creation: slug derivation, name disambiguation and photo upload.

Hey future me - this is where the "second Weezer" problem is solved. Artist NAMES are not
unique, artist SLUGS are. When a name already exists the new row must carry enough
attributes (country of origin, primary genre) to tell the two apart, and those attributes
are baked into the slug: "weezer" vs "weezer-us-alternative-rock".

The flow in create_artist() runs strictly in order:
1. caller signed in?
2. name non-empty?
3. does the name already exist? (probe failure ABORTS here, see _name_exists)
4. duplicate -> disambiguating attributes required, slug = name + country + genre
5. unique name -> slug = normalized override or normalized name
6. availability search (-2, -3, ... / timestamp)
7. optional photo upload
8. insert; a unique clash becomes a friendly UniqueViolationError
"""

import logging
from dataclasses import dataclass

from merch_archive.application.services.auth_service import require_signed_in
from merch_archive.application.services.slug_service import (
    MonotonicMillisClock,
    SlugService,
    millis_clock,
)
from merch_archive.config import CatalogSettings
from merch_archive.domain.entities import Artist, Identity, PhotoUpload
from merch_archive.domain.exceptions import (
    AmbiguousIdentityError,
    ExternalServiceError,
    ProbeError,
    UniqueViolationError,
    ValidationException,
)
from merch_archive.domain.ports import IArtistRepository, IExistenceProbe, IPhotoStorage
from merch_archive.domain.value_objects import (
    disambiguate,
    normalize_country,
    normalize_slug,
)
from merch_archive.infrastructure.storage import Bucket, extension_from_filename

logger = logging.getLogger(__name__)

NAME_REQUIRED = "Please enter an artist name."
DUPLICATE_NAME_NEEDS_DETAILS = (
    "That artist name already exists. "
    "Please add Country of origin and Primary genre to distinguish it."
)
SLUG_TAKEN = "That artist URL already exists. Please tweak country/genre and try again."
NO_USABLE_SLUG = "Please use letters or numbers in the artist name."


@dataclass(frozen=True)
class SlugPreview:
    """What the add-artist form should show as the suggested URL."""

    name_exists: bool
    suggested_slug: str


def _clean(value: str | None) -> str:
    return (value or "").strip()


class ArtistService:
    """Create artists with unique, human-readable slugs."""

    def __init__(
        self,
        artists: IArtistRepository,
        probe: IExistenceProbe,
        storage: IPhotoStorage,
        settings: CatalogSettings,
        slug_service: SlugService | None = None,
        clock: MonotonicMillisClock | None = None,
    ) -> None:
        """Initialize artist service.

        Args:
            artists: Artist repository
            probe: Existence prober (artists.name / artists.slug)
            storage: Photo storage
            settings: Catalog settings (attempt ceiling, disambiguation rule)
            slug_service: Availability search, built from probe when omitted
            clock: Millisecond clock for photo file names
        """
        self._artists = artists
        self._probe = probe
        self._storage = storage
        self._settings = settings
        self._clock = clock or millis_clock
        self._slugs = slug_service or SlugService(
            probe, settings.slug_max_attempts, self._clock
        )

    async def _name_exists(self, name: str) -> bool:
        # Unlike the slug loop, a failed probe here is NOT "best effort": treating it as "no
        # duplicate" would let a second Weezer in without country/genre.
        try:
            return await self._probe.exists_by_column("artists", "name", name)
        except ProbeError as e:
            logger.error("Duplicate-name check failed for %r: %s", name, e)
            raise ExternalServiceError(
                "database", "Could not check for existing artists. Please try again."
            ) from e

    def _missing_attributes(self, country: str, genre: str) -> list[str]:
        missing = []
        if not normalize_slug(country):
            missing.append("origin_country")
        if not normalize_slug(genre):
            missing.append("primary_genre")
        if self._settings.require_full_disambiguation:
            return missing
        # Relaxed mode: one attribute is enough
        return missing if len(missing) == 2 else []

    def _disambiguated_slug(self, base: str, country: str, genre: str) -> str:
        return disambiguate(base, [normalize_country(country), genre])

    async def create_artist(
        self,
        actor: Identity | None,
        name: str,
        origin_country: str | None = None,
        primary_genre: str | None = None,
        slug_override: str | None = None,
        photo: PhotoUpload | None = None,
    ) -> Artist:
        """Create an artist with a unique slug.

        Args:
            actor: Signed-in caller
            name: Display name, e.g. "Weezer"
            origin_country: Optional country (required when the name is taken)
            primary_genre: Optional genre (required when the name is taken)
            slug_override: Manually edited slug; ignored for duplicate names
            photo: Optional artist photo

        Returns:
            The stored artist

        Raises:
            AuthenticationError: Caller not signed in
            ValidationException: Empty name, or nothing slug-able in the input
            AmbiguousIdentityError: Name taken and attributes missing
            ExternalServiceError: Duplicate-name check failed
            StorageError: Photo upload failed
            UniqueViolationError: Slug taken at insert time (lost a race)
        """
        actor = require_signed_in(actor)

        final_name = _clean(name)
        if not final_name:
            raise ValidationException(NAME_REQUIRED)

        country = _clean(origin_country)
        genre = _clean(primary_genre)
        base = normalize_slug(final_name)
        if not base:
            raise ValidationException(NO_USABLE_SLUG)

        if await self._name_exists(final_name):
            missing = self._missing_attributes(country, genre)
            if missing:
                raise AmbiguousIdentityError(DUPLICATE_NAME_NEEDS_DETAILS, missing)
            desired = self._disambiguated_slug(base, country, genre)
            if desired == base:
                raise AmbiguousIdentityError(
                    DUPLICATE_NAME_NEEDS_DETAILS, ["origin_country", "primary_genre"]
                )
            logger.info(
                "Duplicate artist name %r, disambiguating as %r", final_name, desired
            )
        elif _clean(slug_override):
            desired = normalize_slug(slug_override)
            if not desired:
                raise ValidationException(NO_USABLE_SLUG)
        else:
            desired = base

        slug = await self._slugs.find_available_slug("artists", "slug", desired)

        photo_url = None
        if photo is not None and photo.content:
            ext = extension_from_filename(photo.filename)
            photo_url = await self._storage.upload(
                Bucket.ARTIST_PHOTOS, f"{slug}/{self._clock()}.{ext}", photo.content, upsert=True
            )

        artist = Artist(
            name=final_name,
            slug=slug,
            origin_country=country or None,
            primary_genre=genre or None,
            photo_url=photo_url,
            created_by=actor.user_id,
        )
        try:
            await self._artists.add(artist)
        except UniqueViolationError as e:
            logger.warning("Artist slug %r taken at insert time", slug)
            raise UniqueViolationError("Artist", "slug", slug, SLUG_TAKEN) from e

        logger.info(
            "Created artist %r (%s)", artist.name, artist.slug,
            extra={"artist_id": artist.id, "user_id": actor.user_id},
        )
        return artist

    async def preview_slug(
        self,
        name: str,
        origin_country: str | None = None,
        primary_genre: str | None = None,
    ) -> SlugPreview:
        """Suggest a slug for the add-artist form without writing anything.

        A failed name probe is reported as name_exists=False; create_artist()
        re-checks strictly anyway.
        """
        final_name = _clean(name)
        base = normalize_slug(final_name)
        if not base:
            return SlugPreview(name_exists=False, suggested_slug="")

        try:
            name_exists = await self._probe.exists_by_column("artists", "name", final_name)
        except ProbeError as e:
            logger.warning("Name probe failed during slug preview: %s", e)
            name_exists = False

        if not name_exists:
            return SlugPreview(name_exists=False, suggested_slug=base)
        return SlugPreview(
            name_exists=True,
            suggested_slug=self._disambiguated_slug(
                base, _clean(origin_country), _clean(primary_genre)
            ),
        )

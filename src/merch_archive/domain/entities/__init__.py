"""Domain entities."""

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum


def _new_id() -> str:
    return str(uuid.uuid4())


def _utc_now() -> datetime:
    return datetime.now(UTC)


# Hey future me, HideableTable is the whitelist for the admin hide/unhide procedure. Only these
# three catalog tables carry is_hidden; the procedure refuses anything else, so never build the
# table name from raw request input without going through this enum.
class HideableTable(str, Enum):
    """Catalog tables an admin may hide rows in."""

    ARTISTS = "artists"
    DESIGNS = "designs"
    VARIANTS = "variants"


class CollectionSort(str, Enum):
    """Sort modes for a collector's items."""

    RECENT = "recent"  # Recently added first
    ARTIST = "artist"  # Artist name A-Z
    YEAR = "year"  # Design year, new -> old


@dataclass(frozen=True)
class Identity:
    """The authenticated caller of an operation.

    Hey future me - this is passed EXPLICITLY into every service method that needs to know
    who is acting. There is no ambient "current user" lookup anywhere in the domain; the API
    layer resolves the session token once and hands the Identity down.
    """

    user_id: str
    email: str


@dataclass
class User:
    """Registered account (email + password)."""

    email: str
    password_hash: str
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=_utc_now)


@dataclass
class AuthSession:
    """Server-side login session keyed by an opaque token."""

    token: str
    user_id: str
    expires_at: datetime
    created_at: datetime = field(default_factory=_utc_now)

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check whether the session has run out."""
        return (now or datetime.now(UTC)) >= self.expires_at


# Yo, Artist is the DOMAIN ENTITY, not the ORM model! slug is computed once at creation time
# (normalize -> disambiguate -> availability search) and never recomputed afterwards. The
# origin_country/primary_genre fields are optional unless the name collides with an existing
# artist; then they're the disambiguating attributes baked into the slug.
@dataclass
class Artist:
    """Band or performer whose merch is catalogued."""

    name: str
    slug: str
    id: str = field(default_factory=_new_id)
    origin_country: str | None = None
    primary_genre: str | None = None
    photo_url: str | None = None
    is_hidden: bool = False
    created_by: str | None = None
    created_at: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        """Validate artist data."""
        if not self.name or not self.name.strip():
            raise ValueError("Artist name cannot be empty")


@dataclass(frozen=True)
class ArtistRef:
    """Minimal artist reference embedded in joined rows."""

    id: str
    name: str
    slug: str
    is_hidden: bool = False


@dataclass
class Design:
    """A print/graphic released on merch by an artist.

    year is the legacy field; new rows only set circa. Display code falls back
    from circa to year so old rows still show a date.
    """

    artist_id: str
    title: str
    id: str = field(default_factory=_new_id)
    year: int | None = None
    circa: int | None = None
    primary_photo_url: str | None = None
    is_hidden: bool = False
    created_by: str | None = None
    created_at: datetime = field(default_factory=_utc_now)
    artist: ArtistRef | None = None

    @property
    def display_year(self) -> int | None:
        """Circa if known, else the legacy year."""
        return self.circa or self.year

    @property
    def circa_label(self) -> str:
        """Human label like "Circa 1998", or "" when no date is known."""
        year = self.display_year
        return f"Circa {year}" if year else ""


@dataclass
class Variant:
    """A concrete garment a design was printed on."""

    design_id: str
    garment_type: str
    base_color: str
    cut: str
    manufacturer: str
    id: str = field(default_factory=_new_id)
    print_method: str | None = None
    notes: str | None = None
    is_hidden: bool = False
    created_by: str | None = None
    created_at: datetime = field(default_factory=_utc_now)
    design: Design | None = None


@dataclass
class Photo:
    """Uploaded photo attached to a variant or an ownership record."""

    parent_id: str
    url: str
    id: str = field(default_factory=_new_id)
    label: str | None = None
    created_at: datetime = field(default_factory=_utc_now)


@dataclass(frozen=True)
class PhotoUpload:
    """An uploaded photo file on its way to storage."""

    filename: str | None
    content: bytes
    content_type: str | None = None


@dataclass(frozen=True)
class VariantDetails:
    """Flattened variant -> design -> artist chain for list views and exports."""

    variant_id: str
    base_color: str
    garment_type: str
    manufacturer: str
    design_id: str
    design_title: str
    design_year: int | None
    artist_id: str
    artist_name: str
    artist_slug: str


@dataclass
class Ownership:
    """A collector owning one variant."""

    user_id: str
    variant_id: str
    size: str
    id: str = field(default_factory=_new_id)
    memory: str | None = None
    setlist_url: str | None = None
    created_at: datetime = field(default_factory=_utc_now)


@dataclass
class CollectionItem:
    """Ownership row joined with what was owned and its photos."""

    ownership: Ownership
    details: VariantDetails
    photos: list[Photo] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.ownership.id

    @property
    def search_text(self) -> str:
        """Text the collection search box matches against."""
        d = self.details
        return f"{d.artist_name} {d.design_title} {d.base_color} {d.manufacturer}".lower()


@dataclass
class WantlistItem:
    """A variant a collector is looking for."""

    user_id: str
    variant_id: str
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=_utc_now)
    details: VariantDetails | None = None


@dataclass
class Profile:
    """Public collector profile, one per user."""

    user_id: str
    username: str
    bio: str | None = None
    avatar_url: str | None = None
    link_url: str | None = None
    is_collection_public: bool = True
    is_admin: bool = False
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)


__all__ = [
    "Artist",
    "ArtistRef",
    "AuthSession",
    "CollectionItem",
    "CollectionSort",
    "Design",
    "HideableTable",
    "Identity",
    "Ownership",
    "Photo",
    "PhotoUpload",
    "Profile",
    "User",
    "Variant",
    "VariantDetails",
    "WantlistItem",
]

"""API schemas shared by the catalog, collection and profile routers."""

from pydantic import BaseModel, Field

from merch_archive.domain.entities import (
    Artist,
    CollectionItem,
    Design,
    Ownership,
    Photo,
    Profile,
    Variant,
    VariantDetails,
    WantlistItem,
)


class ArtistResponse(BaseModel):
    """Response model for an artist."""

    id: str = Field(..., description="Artist UUID")
    name: str = Field(..., description="Display name")
    slug: str = Field(..., description="Unique URL token, e.g. weezer-us-alternative-rock")
    origin_country: str | None = Field(None, description="Country of origin")
    primary_genre: str | None = Field(None, description="Primary genre")
    photo_url: str | None = Field(None, description="Public photo URL")
    is_hidden: bool = Field(False, description="Hidden by an admin")
    created_at: str = Field(..., description="ISO 8601 timestamp")


class ArtistRefResponse(BaseModel):
    """Minimal artist reference inside a design."""

    id: str
    name: str
    slug: str


class DesignResponse(BaseModel):
    """Response model for a design."""

    id: str = Field(..., description="Design UUID")
    artist_id: str = Field(..., description="Owning artist")
    title: str = Field(..., description="Design title")
    year: int | None = Field(None, description="Legacy year (old rows only)")
    circa: int | None = Field(None, description="Approximate year")
    circa_label: str = Field("", description='Display label, e.g. "Circa 1998"')
    primary_photo_url: str | None = Field(None, description="Public photo URL")
    is_hidden: bool = Field(False, description="Hidden by an admin")
    created_at: str = Field(..., description="ISO 8601 timestamp")
    artist: ArtistRefResponse | None = Field(None, description="Artist reference")


class VariantResponse(BaseModel):
    """Response model for a garment variant."""

    id: str = Field(..., description="Variant UUID")
    design_id: str = Field(..., description="Owning design")
    garment_type: str
    base_color: str
    cut: str
    manufacturer: str
    print_method: str | None = None
    notes: str | None = None
    is_hidden: bool = False
    created_at: str = Field(..., description="ISO 8601 timestamp")


class PhotoResponse(BaseModel):
    """Response model for an uploaded photo."""

    id: str
    url: str
    label: str | None = None
    created_at: str


class VariantDetailsResponse(BaseModel):
    """Flattened variant -> design -> artist info."""

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


class CollectionItemResponse(BaseModel):
    """An owned item with what it is and its photos."""

    id: str = Field(..., description="Ownership UUID")
    size: str
    memory: str | None = None
    setlist_url: str | None = None
    created_at: str
    details: VariantDetailsResponse
    photos: list[PhotoResponse] = Field(default_factory=list)


class OwnershipRequest(BaseModel):
    """What a collector fills in when adding an item."""

    size: str | None = Field(None, description="Required, e.g. L")
    memory: str | None = Field(None, description="Where/when it was bought")
    setlist_url: str | None = Field(None, description="setlist.fm link of the show")


class OwnershipResponse(BaseModel):
    """A freshly created ownership row."""

    id: str = Field(..., description="Ownership UUID")
    variant_id: str
    size: str
    memory: str | None = None
    setlist_url: str | None = None
    created_at: str


class WantlistItemResponse(BaseModel):
    """A wanted variant."""

    id: str = Field(..., description="Wantlist entry UUID")
    variant_id: str
    created_at: str
    details: VariantDetailsResponse | None = None


class ProfileResponse(BaseModel):
    """Public profile fields."""

    user_id: str
    username: str
    bio: str | None = None
    avatar_url: str | None = None
    link_url: str | None = None
    is_collection_public: bool = True


def artist_to_response(artist: Artist) -> ArtistResponse:
    """Convert domain Artist to ArtistResponse DTO."""
    return ArtistResponse(
        id=artist.id,
        name=artist.name,
        slug=artist.slug,
        origin_country=artist.origin_country,
        primary_genre=artist.primary_genre,
        photo_url=artist.photo_url,
        is_hidden=artist.is_hidden,
        created_at=artist.created_at.isoformat(),
    )


def design_to_response(design: Design) -> DesignResponse:
    """Convert domain Design to DesignResponse DTO."""
    artist = design.artist
    return DesignResponse(
        id=design.id,
        artist_id=design.artist_id,
        title=design.title,
        year=design.year,
        circa=design.circa,
        circa_label=design.circa_label,
        primary_photo_url=design.primary_photo_url,
        is_hidden=design.is_hidden,
        created_at=design.created_at.isoformat(),
        artist=(
            ArtistRefResponse(id=artist.id, name=artist.name, slug=artist.slug)
            if artist
            else None
        ),
    )


def variant_to_response(variant: Variant) -> VariantResponse:
    """Convert domain Variant to VariantResponse DTO."""
    return VariantResponse(
        id=variant.id,
        design_id=variant.design_id,
        garment_type=variant.garment_type,
        base_color=variant.base_color,
        cut=variant.cut,
        manufacturer=variant.manufacturer,
        print_method=variant.print_method,
        notes=variant.notes,
        is_hidden=variant.is_hidden,
        created_at=variant.created_at.isoformat(),
    )


def photo_to_response(photo: Photo) -> PhotoResponse:
    """Convert domain Photo to PhotoResponse DTO."""
    return PhotoResponse(
        id=photo.id,
        url=photo.url,
        label=photo.label,
        created_at=photo.created_at.isoformat(),
    )


def details_to_response(details: VariantDetails) -> VariantDetailsResponse:
    """Convert VariantDetails to its DTO."""
    return VariantDetailsResponse(
        variant_id=details.variant_id,
        base_color=details.base_color,
        garment_type=details.garment_type,
        manufacturer=details.manufacturer,
        design_id=details.design_id,
        design_title=details.design_title,
        design_year=details.design_year,
        artist_id=details.artist_id,
        artist_name=details.artist_name,
        artist_slug=details.artist_slug,
    )


def collection_item_to_response(item: CollectionItem) -> CollectionItemResponse:
    """Convert a CollectionItem to its DTO."""
    o = item.ownership
    return CollectionItemResponse(
        id=o.id,
        size=o.size,
        memory=o.memory,
        setlist_url=o.setlist_url,
        created_at=o.created_at.isoformat(),
        details=details_to_response(item.details),
        photos=[photo_to_response(p) for p in item.photos],
    )


def profile_to_response(profile: Profile) -> ProfileResponse:
    """Convert domain Profile to ProfileResponse DTO."""
    return ProfileResponse(
        user_id=profile.user_id,
        username=profile.username,
        bio=profile.bio,
        avatar_url=profile.avatar_url,
        link_url=profile.link_url,
        is_collection_public=profile.is_collection_public,
    )


def ownership_to_response(ownership: Ownership) -> OwnershipResponse:
    """Convert domain Ownership to OwnershipResponse DTO."""
    return OwnershipResponse(
        id=ownership.id,
        variant_id=ownership.variant_id,
        size=ownership.size,
        memory=ownership.memory,
        setlist_url=ownership.setlist_url,
        created_at=ownership.created_at.isoformat(),
    )


def wantlist_item_to_response(item: WantlistItem) -> WantlistItemResponse:
    """Convert a WantlistItem to its DTO."""
    return WantlistItemResponse(
        id=item.id,
        variant_id=item.variant_id,
        created_at=item.created_at.isoformat(),
        details=details_to_response(item.details) if item.details else None,
    )

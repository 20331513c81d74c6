"""Repository implementations for domain entities."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import Select, func, literal, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute, selectinload

from merch_archive.domain.entities import (
    Artist,
    ArtistRef,
    AuthSession,
    CollectionItem,
    Design,
    HideableTable,
    Ownership,
    Photo,
    Profile,
    User,
    Variant,
    VariantDetails,
    WantlistItem,
)
from merch_archive.domain.exceptions import (
    EntityNotFoundException,
    ProbeError,
    UniqueViolationError,
)
from merch_archive.domain.ports import (
    IAdminProcedures,
    IArtistRepository,
    IAuthSessionRepository,
    IDesignRepository,
    IExistenceProbe,
    IOwnershipRepository,
    IPhotoRepository,
    IProfileRepository,
    IUserRepository,
    IVariantRepository,
    IWantlistRepository,
)

from .models import (
    ArtistModel,
    AuthSessionModel,
    DesignModel,
    OwnershipModel,
    OwnershipPhotoModel,
    ProfileModel,
    UserModel,
    VariantModel,
    VariantPhotoModel,
    WantlistModel,
    ensure_utc_aware,
)

logger = logging.getLogger(__name__)

# SQLSTATE for unique_violation (PostgreSQL); SQLite only gives us the message text
_UNIQUE_VIOLATION_SQLSTATE = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    """Tell unique-constraint failures apart from other integrity errors (FK, NOT NULL)."""
    orig = exc.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code == _UNIQUE_VIOLATION_SQLSTATE:
        return True
    text = str(orig).lower()
    return "unique constraint" in text or "duplicate key" in text


# Hey future me, this is the ONE place where inserts meet the unique indexes! We flush right
# away so the IntegrityError surfaces inside the repository call (not later at commit time in
# the dependency teardown, where nobody could translate it). A unique clash becomes a typed
# UniqueViolationError; everything else is re-raised untouched. The session is rolled back
# either way because a failed flush leaves it unusable.
async def _flush_or_raise(
    session: AsyncSession, entity_type: str, column: str, value: Any
) -> None:
    try:
        await session.flush()
    except IntegrityError as e:
        await session.rollback()
        if is_unique_violation(e):
            logger.info(
                "Unique violation on %s.%s=%r", entity_type, column, value,
                extra={"entity_type": entity_type, "column": column},
            )
            raise UniqueViolationError(entity_type, column, value) from e
        raise


def _artist_from_model(model: ArtistModel) -> Artist:
    return Artist(
        id=model.id,
        name=model.name,
        slug=model.slug,
        origin_country=model.origin_country,
        primary_genre=model.primary_genre,
        photo_url=model.photo_url,
        is_hidden=model.is_hidden,
        created_by=model.created_by,
        created_at=ensure_utc_aware(model.created_at),
    )


def _design_from_model(model: DesignModel, with_artist: bool = False) -> Design:
    artist_ref = None
    if with_artist and model.artist is not None:
        artist_ref = ArtistRef(
            id=model.artist.id,
            name=model.artist.name,
            slug=model.artist.slug,
            is_hidden=model.artist.is_hidden,
        )
    return Design(
        id=model.id,
        artist_id=model.artist_id,
        title=model.title,
        year=model.year,
        circa=model.circa,
        primary_photo_url=model.primary_photo_url,
        is_hidden=model.is_hidden,
        created_by=model.created_by,
        created_at=ensure_utc_aware(model.created_at),
        artist=artist_ref,
    )


def _variant_from_model(model: VariantModel, with_design: bool = False) -> Variant:
    return Variant(
        id=model.id,
        design_id=model.design_id,
        garment_type=model.garment_type,
        base_color=model.base_color,
        cut=model.cut,
        manufacturer=model.manufacturer,
        print_method=model.print_method,
        notes=model.notes,
        is_hidden=model.is_hidden,
        created_by=model.created_by,
        created_at=ensure_utc_aware(model.created_at),
        design=_design_from_model(model.design, with_artist=True) if with_design else None,
    )


def _details_from_variant(model: VariantModel) -> VariantDetails:
    design = model.design
    artist = design.artist
    return VariantDetails(
        variant_id=model.id,
        base_color=model.base_color,
        garment_type=model.garment_type,
        manufacturer=model.manufacturer,
        design_id=design.id,
        design_title=design.title,
        design_year=design.circa or design.year,
        artist_id=artist.id,
        artist_name=artist.name,
        artist_slug=artist.slug,
    )


def _ownership_from_model(model: OwnershipModel) -> Ownership:
    return Ownership(
        id=model.id,
        user_id=model.user_id,
        variant_id=model.variant_id,
        size=model.size,
        memory=model.memory,
        setlist_url=model.setlist_url,
        created_at=ensure_utc_aware(model.created_at),
    )


def _profile_from_model(model: ProfileModel) -> Profile:
    return Profile(
        user_id=model.user_id,
        username=model.username,
        bio=model.bio,
        avatar_url=model.avatar_url,
        link_url=model.link_url,
        is_collection_public=model.is_collection_public,
        is_admin=model.is_admin,
        created_at=ensure_utc_aware(model.created_at),
        updated_at=ensure_utc_aware(model.updated_at),
    )


# Loader chain shared by ownership and wantlist queries: row -> variant -> design -> artist
_VARIANT_CHAIN = (
    selectinload(VariantModel.design).selectinload(DesignModel.artist),
)


# Hey future me - hiding an artist hides everything under it. A design is only visible
# when both the design row AND its artist row are unhidden.
def _visible_designs(stmt: Select[Any]) -> Select[Any]:
    return stmt.join(ArtistModel, DesignModel.artist_id == ArtistModel.id).where(
        DesignModel.is_hidden.is_(False), ArtistModel.is_hidden.is_(False)
    )


class SqlExistenceProbe(IExistenceProbe):
    """LIMIT 1 existence checks against whitelisted columns."""

    # Hey future me - the whitelist is NOT optional. Table/column come from service code, but
    # mapping them to real ORM columns here means a typo fails loudly (ValueError) instead of
    # probing the wrong thing and silently minting duplicate slugs.
    _COLUMNS: dict[tuple[str, str], InstrumentedAttribute[Any]] = {
        ("artists", "slug"): ArtistModel.slug,
        ("artists", "name"): ArtistModel.name,
        ("profiles", "username"): ProfileModel.username,
    }

    def __init__(self, session: AsyncSession) -> None:
        """Initialize probe with session."""
        self.session = session

    async def exists_by_column(self, table: str, column: str, value: str) -> bool:
        """Return True when at least one row has column == value."""
        target = self._COLUMNS.get((table, column))
        if target is None:
            raise ValueError(f"Existence probe not allowed for {table}.{column}")

        stmt = select(literal(1)).where(target == value).limit(1)
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise ProbeError(f"Existence check on {table}.{column} failed: {e}") from e
        return result.first() is not None


class UserRepository(IUserRepository):
    """SQLAlchemy implementation of User repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def add(self, user: User) -> None:
        """Add a new user."""
        self.session.add(
            UserModel(
                id=user.id,
                email=user.email,
                password_hash=user.password_hash,
                created_at=user.created_at,
            )
        )
        await _flush_or_raise(self.session, "User", "email", user.email)

    async def get_by_id(self, user_id: str) -> User | None:
        """Get a user by ID."""
        model = await self.session.get(UserModel, user_id)
        return self._to_entity(model) if model else None

    async def get_by_email(self, email: str) -> User | None:
        """Get a user by normalized email."""
        stmt = select(UserModel).where(UserModel.email == email)
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=model.id,
            email=model.email,
            password_hash=model.password_hash,
            created_at=ensure_utc_aware(model.created_at),
        )


class AuthSessionRepository(IAuthSessionRepository):
    """SQLAlchemy implementation of login session storage."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def add(self, session: AuthSession) -> None:
        """Store a new session."""
        self.session.add(
            AuthSessionModel(
                token=session.token,
                user_id=session.user_id,
                expires_at=session.expires_at,
                created_at=session.created_at,
            )
        )
        await self.session.flush()

    async def get(self, token: str) -> AuthSession | None:
        """Get a session by token."""
        model = await self.session.get(AuthSessionModel, token)
        if model is None:
            return None
        return AuthSession(
            token=model.token,
            user_id=model.user_id,
            expires_at=ensure_utc_aware(model.expires_at),
            created_at=ensure_utc_aware(model.created_at),
        )

    async def delete(self, token: str) -> None:
        """Delete a session (no-op when missing)."""
        model = await self.session.get(AuthSessionModel, token)
        if model is not None:
            await self.session.delete(model)
            await self.session.flush()


class ArtistRepository(IArtistRepository):
    """SQLAlchemy implementation of Artist repository."""

    # Hey future me, this is the Repository pattern! The session is injected per request and NOT
    # committed here - Database.session_scope() commits when the request finishes. add() flushes
    # eagerly only so a slug clash turns into UniqueViolationError right here.
    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def add(self, artist: Artist) -> None:
        """Insert an artist."""
        self.session.add(
            ArtistModel(
                id=artist.id,
                name=artist.name,
                slug=artist.slug,
                origin_country=artist.origin_country,
                primary_genre=artist.primary_genre,
                photo_url=artist.photo_url,
                is_hidden=artist.is_hidden,
                created_by=artist.created_by,
                created_at=artist.created_at,
            )
        )
        await _flush_or_raise(self.session, "Artist", "slug", artist.slug)

    async def get_by_id(self, artist_id: str) -> Artist | None:
        """Get an artist by ID."""
        model = await self.session.get(ArtistModel, artist_id)
        return _artist_from_model(model) if model else None

    async def get_by_slug(self, slug: str) -> Artist | None:
        """Get an artist by slug."""
        stmt = select(ArtistModel).where(ArtistModel.slug == slug)
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return _artist_from_model(model) if model else None

    async def list_all(self, include_hidden: bool = False) -> list[Artist]:
        """List artists ordered by name."""
        stmt = select(ArtistModel).order_by(
            func.lower(ArtistModel.name), ArtistModel.created_at
        )
        if not include_hidden:
            stmt = stmt.where(ArtistModel.is_hidden.is_(False))
        result = await self.session.execute(stmt)
        return [_artist_from_model(m) for m in result.scalars().all()]

    async def list_recent(self, limit: int = 50) -> list[Artist]:
        """Newest artists first, hidden included."""
        stmt = select(ArtistModel).order_by(ArtistModel.created_at.desc()).limit(limit)
        result = await self.session.execute(stmt)
        return [_artist_from_model(m) for m in result.scalars().all()]

    async def count_all(
        self, since: datetime | None = None, include_hidden: bool = True
    ) -> int:
        """Count artists, optionally only recent or visible ones."""
        stmt = select(func.count(ArtistModel.id))
        if not include_hidden:
            stmt = stmt.where(ArtistModel.is_hidden.is_(False))
        if since is not None:
            stmt = stmt.where(ArtistModel.created_at >= since)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())


class DesignRepository(IDesignRepository):
    """SQLAlchemy implementation of Design repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def add(self, design: Design) -> None:
        """Insert a design."""
        self.session.add(
            DesignModel(
                id=design.id,
                artist_id=design.artist_id,
                title=design.title,
                year=design.year,
                circa=design.circa,
                primary_photo_url=design.primary_photo_url,
                is_hidden=design.is_hidden,
                created_by=design.created_by,
                created_at=design.created_at,
            )
        )
        await _flush_or_raise(self.session, "Design", "id", design.id)

    async def get_by_id(self, design_id: str) -> Design | None:
        """Get a design with its artist reference."""
        stmt = (
            select(DesignModel)
            .where(DesignModel.id == design_id)
            .options(selectinload(DesignModel.artist))
        )
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return _design_from_model(model, with_artist=True) if model else None

    async def list_by_artist(
        self, artist_id: str, include_hidden: bool = False
    ) -> list[Design]:
        """Designs ordered by year ascending, undated ones last."""
        year_expr = func.coalesce(DesignModel.circa, DesignModel.year)
        stmt = (
            select(DesignModel)
            .where(DesignModel.artist_id == artist_id)
            .order_by(year_expr.is_(None), year_expr, DesignModel.created_at)
        )
        if not include_hidden:
            stmt = stmt.where(DesignModel.is_hidden.is_(False))
        result = await self.session.execute(stmt)
        return [_design_from_model(m) for m in result.scalars().all()]

    async def list_all(self, include_hidden: bool = False) -> list[Design]:
        """All designs with artist references, newest first."""
        stmt = (
            select(DesignModel)
            .options(selectinload(DesignModel.artist))
            .order_by(DesignModel.created_at.desc())
        )
        if not include_hidden:
            stmt = _visible_designs(stmt)
        result = await self.session.execute(stmt)
        return [_design_from_model(m, with_artist=True) for m in result.scalars().all()]

    async def list_recent(self, limit: int = 50) -> list[Design]:
        """Newest designs first, hidden included."""
        stmt = (
            select(DesignModel)
            .options(selectinload(DesignModel.artist))
            .order_by(DesignModel.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [_design_from_model(m, with_artist=True) for m in result.scalars().all()]

    async def count_all(
        self, since: datetime | None = None, include_hidden: bool = True
    ) -> int:
        """Count designs, optionally only recent or visible ones."""
        stmt = select(func.count(DesignModel.id))
        if not include_hidden:
            stmt = _visible_designs(stmt)
        if since is not None:
            stmt = stmt.where(DesignModel.created_at >= since)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())


class VariantRepository(IVariantRepository):
    """SQLAlchemy implementation of Variant repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def add(self, variant: Variant) -> None:
        """Insert a variant."""
        self.session.add(
            VariantModel(
                id=variant.id,
                design_id=variant.design_id,
                garment_type=variant.garment_type,
                base_color=variant.base_color,
                cut=variant.cut,
                manufacturer=variant.manufacturer,
                print_method=variant.print_method,
                notes=variant.notes,
                is_hidden=variant.is_hidden,
                created_by=variant.created_by,
                created_at=variant.created_at,
            )
        )
        await _flush_or_raise(self.session, "Variant", "id", variant.id)

    async def get_by_id(self, variant_id: str) -> Variant | None:
        """Get a variant by ID."""
        model = await self.session.get(VariantModel, variant_id)
        return _variant_from_model(model) if model else None

    async def list_by_design(
        self, design_id: str, include_hidden: bool = False
    ) -> list[Variant]:
        """Variants of one design, oldest first."""
        stmt = (
            select(VariantModel)
            .where(VariantModel.design_id == design_id)
            .order_by(VariantModel.created_at)
        )
        if not include_hidden:
            stmt = stmt.where(VariantModel.is_hidden.is_(False))
        result = await self.session.execute(stmt)
        return [_variant_from_model(m) for m in result.scalars().all()]

    async def list_recent(self, limit: int = 50) -> list[Variant]:
        """Newest variants with design and artist references."""
        stmt = (
            select(VariantModel)
            .options(*_VARIANT_CHAIN)
            .order_by(VariantModel.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [_variant_from_model(m, with_design=True) for m in result.scalars().all()]

    async def count_all(
        self, since: datetime | None = None, include_hidden: bool = True
    ) -> int:
        """Count variants, optionally only recent or visible ones."""
        stmt = select(func.count(VariantModel.id))
        if not include_hidden:
            stmt = _visible_designs(
                stmt.join(DesignModel, VariantModel.design_id == DesignModel.id).where(
                    VariantModel.is_hidden.is_(False)
                )
            )
        if since is not None:
            stmt = stmt.where(VariantModel.created_at >= since)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    # Hey future me - this is the "variant_owned_counts" aggregation. One GROUP BY query for
    # the whole design page instead of N count queries. Variants nobody owns are simply absent
    # from the result; callers default to 0.
    async def owned_counts(self, variant_ids: list[str]) -> dict[str, int]:
        """Aggregate how many collectors own each variant."""
        if not variant_ids:
            return {}
        stmt = (
            select(OwnershipModel.variant_id, func.count(OwnershipModel.id))
            .where(OwnershipModel.variant_id.in_(variant_ids))
            .group_by(OwnershipModel.variant_id)
        )
        result = await self.session.execute(stmt)
        return {variant_id: int(count) for variant_id, count in result.all()}


class PhotoRepository(IPhotoRepository):
    """SQLAlchemy implementation of photo rows."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def add_variant_photo(self, photo: Photo) -> None:
        """Attach a photo row to a variant."""
        self.session.add(
            VariantPhotoModel(
                id=photo.id,
                variant_id=photo.parent_id,
                url=photo.url,
                label=photo.label,
                created_at=photo.created_at,
            )
        )
        await self.session.flush()

    async def add_ownership_photo(self, photo: Photo) -> None:
        """Attach a photo row to an ownership record."""
        self.session.add(
            OwnershipPhotoModel(
                id=photo.id,
                ownership_id=photo.parent_id,
                url=photo.url,
                label=photo.label,
                created_at=photo.created_at,
            )
        )
        await self.session.flush()

    async def list_variant_photos(self, variant_ids: list[str]) -> dict[str, list[Photo]]:
        """Photos grouped by variant ID, oldest first."""
        if not variant_ids:
            return {}
        stmt = (
            select(VariantPhotoModel)
            .where(VariantPhotoModel.variant_id.in_(variant_ids))
            .order_by(VariantPhotoModel.created_at)
        )
        result = await self.session.execute(stmt)
        grouped: dict[str, list[Photo]] = {}
        for m in result.scalars().all():
            grouped.setdefault(m.variant_id, []).append(
                Photo(
                    id=m.id,
                    parent_id=m.variant_id,
                    url=m.url,
                    label=m.label,
                    created_at=ensure_utc_aware(m.created_at),
                )
            )
        return grouped

    async def list_ownership_photos(
        self, ownership_ids: list[str]
    ) -> dict[str, list[Photo]]:
        """Photos grouped by ownership ID, oldest first."""
        if not ownership_ids:
            return {}
        stmt = (
            select(OwnershipPhotoModel)
            .where(OwnershipPhotoModel.ownership_id.in_(ownership_ids))
            .order_by(OwnershipPhotoModel.created_at)
        )
        result = await self.session.execute(stmt)
        grouped: dict[str, list[Photo]] = {}
        for m in result.scalars().all():
            grouped.setdefault(m.ownership_id, []).append(
                Photo(
                    id=m.id,
                    parent_id=m.ownership_id,
                    url=m.url,
                    label=m.label,
                    created_at=ensure_utc_aware(m.created_at),
                )
            )
        return grouped


class OwnershipRepository(IOwnershipRepository):
    """SQLAlchemy implementation of ownership records."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def add(self, ownership: Ownership) -> None:
        """Insert an ownership row."""
        self.session.add(
            OwnershipModel(
                id=ownership.id,
                user_id=ownership.user_id,
                variant_id=ownership.variant_id,
                size=ownership.size,
                memory=ownership.memory,
                setlist_url=ownership.setlist_url,
                created_at=ownership.created_at,
            )
        )
        await _flush_or_raise(
            self.session, "Ownership", "variant_id", ownership.variant_id
        )

    async def get_by_id(self, ownership_id: str) -> Ownership | None:
        """Get an ownership row by ID."""
        model = await self.session.get(OwnershipModel, ownership_id)
        return _ownership_from_model(model) if model else None

    async def get_for_user_and_variant(
        self, user_id: str, variant_id: str
    ) -> Ownership | None:
        """Get the ownership row of a user for a variant, if any."""
        stmt = select(OwnershipModel).where(
            OwnershipModel.user_id == user_id,
            OwnershipModel.variant_id == variant_id,
        )
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return _ownership_from_model(model) if model else None

    async def list_items(
        self, user_id: str, limit: int | None = None
    ) -> list[CollectionItem]:
        """Collection items of a user, newest first."""
        stmt = (
            select(OwnershipModel)
            .where(OwnershipModel.user_id == user_id)
            .options(selectinload(OwnershipModel.variant).options(*_VARIANT_CHAIN))
            .order_by(OwnershipModel.created_at.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return [
            CollectionItem(
                ownership=_ownership_from_model(m),
                details=_details_from_variant(m.variant),
            )
            for m in result.scalars().all()
        ]

    async def count_for_user(self, user_id: str | None = None) -> int:
        """Count ownership rows of a user (or all)."""
        stmt = select(func.count(OwnershipModel.id))
        if user_id is not None:
            stmt = stmt.where(OwnershipModel.user_id == user_id)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def item_counts(self, user_ids: list[str]) -> dict[str, int]:
        """Aggregate item counts per user."""
        if not user_ids:
            return {}
        stmt = (
            select(OwnershipModel.user_id, func.count(OwnershipModel.id))
            .where(OwnershipModel.user_id.in_(user_ids))
            .group_by(OwnershipModel.user_id)
        )
        result = await self.session.execute(stmt)
        return {user_id: int(count) for user_id, count in result.all()}


class WantlistRepository(IWantlistRepository):
    """SQLAlchemy implementation of wantlist entries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def add(self, item: WantlistItem) -> None:
        """Insert a wantlist entry."""
        self.session.add(
            WantlistModel(
                id=item.id,
                user_id=item.user_id,
                variant_id=item.variant_id,
                created_at=item.created_at,
            )
        )
        await _flush_or_raise(self.session, "WantlistItem", "variant_id", item.variant_id)

    async def get_by_id(self, item_id: str) -> WantlistItem | None:
        """Get a wantlist entry by ID."""
        stmt = (
            select(WantlistModel)
            .where(WantlistModel.id == item_id)
            .options(selectinload(WantlistModel.variant).options(*_VARIANT_CHAIN))
        )
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_for_user_and_variant(
        self, user_id: str, variant_id: str
    ) -> WantlistItem | None:
        """Get the wantlist entry of a user for a variant, if any."""
        stmt = select(WantlistModel).where(
            WantlistModel.user_id == user_id,
            WantlistModel.variant_id == variant_id,
        )
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        if model is None:
            return None
        return WantlistItem(
            id=model.id,
            user_id=model.user_id,
            variant_id=model.variant_id,
            created_at=ensure_utc_aware(model.created_at),
        )

    async def list_items(self, user_id: str) -> list[WantlistItem]:
        """Wantlist entries of a user, newest first."""
        stmt = (
            select(WantlistModel)
            .where(WantlistModel.user_id == user_id)
            .options(selectinload(WantlistModel.variant).options(*_VARIANT_CHAIN))
            .order_by(WantlistModel.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return [self._to_entity(m) for m in result.scalars().all()]

    async def delete(self, item_id: str) -> None:
        """Delete a wantlist entry."""
        model = await self.session.get(WantlistModel, item_id)
        if model is None:
            raise EntityNotFoundException("WantlistItem", item_id)
        await self.session.delete(model)
        await self.session.flush()

    @staticmethod
    def _to_entity(model: WantlistModel) -> WantlistItem:
        return WantlistItem(
            id=model.id,
            user_id=model.user_id,
            variant_id=model.variant_id,
            created_at=ensure_utc_aware(model.created_at),
            details=_details_from_variant(model.variant),
        )


class ProfileRepository(IProfileRepository):
    """SQLAlchemy implementation of collector profiles."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def get_by_user_id(self, user_id: str) -> Profile | None:
        """Get the profile of a user."""
        model = await self.session.get(ProfileModel, user_id)
        return _profile_from_model(model) if model else None

    async def get_by_username(self, username: str) -> Profile | None:
        """Get a profile by username."""
        stmt = select(ProfileModel).where(ProfileModel.username == username)
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return _profile_from_model(model) if model else None

    async def save(self, profile: Profile) -> None:
        """Insert or update a profile.

        is_admin is never written from here - it's granted out of band (SQL/migration),
        so a user can't promote themselves through a profile edit.
        """
        model = await self.session.get(ProfileModel, profile.user_id)
        if model is None:
            model = ProfileModel(
                user_id=profile.user_id,
                created_at=profile.created_at,
            )
            self.session.add(model)
        model.username = profile.username
        model.bio = profile.bio
        model.avatar_url = profile.avatar_url
        model.link_url = profile.link_url
        model.is_collection_public = profile.is_collection_public
        model.updated_at = profile.updated_at
        await _flush_or_raise(self.session, "Profile", "username", profile.username)

    async def list_all(self) -> list[Profile]:
        """All profiles ordered by username."""
        stmt = select(ProfileModel).order_by(ProfileModel.username)
        result = await self.session.execute(stmt)
        return [_profile_from_model(m) for m in result.scalars().all()]

    async def usernames_by_user_id(self, user_ids: list[str]) -> dict[str, str]:
        """Map user IDs to usernames."""
        if not user_ids:
            return {}
        stmt = select(ProfileModel.user_id, ProfileModel.username).where(
            ProfileModel.user_id.in_(user_ids)
        )
        result = await self.session.execute(stmt)
        return {user_id: username for user_id, username in result.all() if username}


class AdminProcedures(IAdminProcedures):
    """Privileged catalog procedures (admin_set_hidden)."""

    _MODELS: dict[HideableTable, type[ArtistModel | DesignModel | VariantModel]] = {
        HideableTable.ARTISTS: ArtistModel,
        HideableTable.DESIGNS: DesignModel,
        HideableTable.VARIANTS: VariantModel,
    }

    def __init__(self, session: AsyncSession) -> None:
        """Initialize procedures with session."""
        self.session = session

    async def set_hidden(self, table: HideableTable, row_id: str, hide: bool) -> None:
        """Flip is_hidden on one catalog row."""
        model = self._MODELS[table]
        stmt = update(model).where(model.id == row_id).values(is_hidden=hide)
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            raise EntityNotFoundException(table.value, row_id)
        logger.info(
            "Admin set is_hidden=%s on %s/%s", hide, table.value, row_id,
            extra={"table": table.value, "row_id": row_id, "hide": hide},
        )

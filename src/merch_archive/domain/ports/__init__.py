"""Domain ports (interfaces) for dependency inversion."""

from abc import ABC, abstractmethod
from datetime import datetime

from merch_archive.domain.entities import (
    Artist,
    AuthSession,
    CollectionItem,
    Design,
    HideableTable,
    Identity,
    Ownership,
    Photo,
    Profile,
    User,
    Variant,
    WantlistItem,
)


# Hey future me, IExistenceProbe is the collision prober! It answers "does ANY row hold this
# value?" with a LIMIT 1 query - never a full fetch. Implementations raise ProbeError when the
# backend fails; they must NEVER return False to paper over an error. SlugService decides what a
# failed probe means (best effort), ArtistService decides differently for the name check (abort).
class IExistenceProbe(ABC):
    """Existence checks against a whitelisted table/column."""

    @abstractmethod
    async def exists_by_column(self, table: str, column: str, value: str) -> bool:
        """Return True when at least one row has column == value."""
        pass


class IIdentityProvider(ABC):
    """Resolves an opaque session token into the caller's identity."""

    @abstractmethod
    async def resolve(self, token: str | None) -> Identity | None:
        """Return the identity behind token, or None when anonymous/expired."""
        pass


class IPhotoStorage(ABC):
    """Binary object storage for photos."""

    @abstractmethod
    async def upload(
        self, bucket: str, path: str, data: bytes, upsert: bool = False
    ) -> str:
        """Store data at bucket/path and return its public URL."""
        pass


class IUserRepository(ABC):
    """Repository interface for accounts."""

    @abstractmethod
    async def add(self, user: User) -> None:
        """Add a new user. Raises UniqueViolationError on duplicate email."""
        pass

    @abstractmethod
    async def get_by_id(self, user_id: str) -> User | None:
        """Get a user by ID."""
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> User | None:
        """Get a user by normalized email."""
        pass


class IAuthSessionRepository(ABC):
    """Repository interface for login sessions."""

    @abstractmethod
    async def add(self, session: AuthSession) -> None:
        """Store a new session."""
        pass

    @abstractmethod
    async def get(self, token: str) -> AuthSession | None:
        """Get a session by token."""
        pass

    @abstractmethod
    async def delete(self, token: str) -> None:
        """Delete a session (no-op when missing)."""
        pass


class IArtistRepository(ABC):
    """Repository interface for Artist entities."""

    @abstractmethod
    async def add(self, artist: Artist) -> None:
        """Insert an artist. Raises UniqueViolationError when the slug is taken."""
        pass

    @abstractmethod
    async def get_by_id(self, artist_id: str) -> Artist | None:
        """Get an artist by ID."""
        pass

    @abstractmethod
    async def get_by_slug(self, slug: str) -> Artist | None:
        """Get an artist by slug."""
        pass

    @abstractmethod
    async def list_all(self, include_hidden: bool = False) -> list[Artist]:
        """List artists ordered by name."""
        pass

    @abstractmethod
    async def list_recent(self, limit: int = 50) -> list[Artist]:
        """Newest artists first, hidden included (admin view)."""
        pass

    @abstractmethod
    async def count_all(
        self, since: datetime | None = None, include_hidden: bool = True
    ) -> int:
        """Count artists, optionally only those created at/after since.

        include_hidden=False counts only what anonymous visitors can browse.
        """
        pass


class IDesignRepository(ABC):
    """Repository interface for Design entities."""

    @abstractmethod
    async def add(self, design: Design) -> None:
        """Insert a design."""
        pass

    @abstractmethod
    async def get_by_id(self, design_id: str) -> Design | None:
        """Get a design (with its artist reference) by ID."""
        pass

    @abstractmethod
    async def list_by_artist(
        self, artist_id: str, include_hidden: bool = False
    ) -> list[Design]:
        """Designs of one artist ordered by year ascending."""
        pass

    @abstractmethod
    async def list_all(self, include_hidden: bool = False) -> list[Design]:
        """All designs with artist references, newest first."""
        pass

    @abstractmethod
    async def list_recent(self, limit: int = 50) -> list[Design]:
        """Newest designs first, hidden included (admin view)."""
        pass

    @abstractmethod
    async def count_all(
        self, since: datetime | None = None, include_hidden: bool = True
    ) -> int:
        """Count designs, optionally only those created at/after since.

        include_hidden=False counts only what anonymous visitors can browse.
        """
        pass


class IVariantRepository(ABC):
    """Repository interface for Variant entities."""

    @abstractmethod
    async def add(self, variant: Variant) -> None:
        """Insert a variant."""
        pass

    @abstractmethod
    async def get_by_id(self, variant_id: str) -> Variant | None:
        """Get a variant by ID."""
        pass

    @abstractmethod
    async def list_by_design(
        self, design_id: str, include_hidden: bool = False
    ) -> list[Variant]:
        """Variants of one design, oldest first."""
        pass

    @abstractmethod
    async def list_recent(self, limit: int = 50) -> list[Variant]:
        """Newest variants first with design/artist references (admin view)."""
        pass

    @abstractmethod
    async def count_all(
        self, since: datetime | None = None, include_hidden: bool = True
    ) -> int:
        """Count variants, optionally only those created at/after since.

        include_hidden=False counts only what anonymous visitors can browse.
        """
        pass

    @abstractmethod
    async def owned_counts(self, variant_ids: list[str]) -> dict[str, int]:
        """Aggregate how many collectors own each variant."""
        pass


class IPhotoRepository(ABC):
    """Repository interface for variant and ownership photos."""

    @abstractmethod
    async def add_variant_photo(self, photo: Photo) -> None:
        """Attach a photo row to a variant."""
        pass

    @abstractmethod
    async def add_ownership_photo(self, photo: Photo) -> None:
        """Attach a photo row to an ownership record."""
        pass

    @abstractmethod
    async def list_variant_photos(self, variant_ids: list[str]) -> dict[str, list[Photo]]:
        """Photos grouped by variant ID, oldest first."""
        pass

    @abstractmethod
    async def list_ownership_photos(
        self, ownership_ids: list[str]
    ) -> dict[str, list[Photo]]:
        """Photos grouped by ownership ID, oldest first."""
        pass


class IOwnershipRepository(ABC):
    """Repository interface for ownership records."""

    @abstractmethod
    async def add(self, ownership: Ownership) -> None:
        """Insert an ownership row. Raises UniqueViolationError on (user, variant) twins."""
        pass

    @abstractmethod
    async def get_by_id(self, ownership_id: str) -> Ownership | None:
        """Get an ownership row by ID."""
        pass

    @abstractmethod
    async def get_for_user_and_variant(
        self, user_id: str, variant_id: str
    ) -> Ownership | None:
        """Get the ownership row of a user for a variant, if any."""
        pass

    @abstractmethod
    async def list_items(
        self, user_id: str, limit: int | None = None
    ) -> list[CollectionItem]:
        """Collection items of a user, newest first, with variant details (no photos)."""
        pass

    @abstractmethod
    async def count_for_user(self, user_id: str | None = None) -> int:
        """Count ownership rows of a user (or all when user_id is None)."""
        pass

    @abstractmethod
    async def item_counts(self, user_ids: list[str]) -> dict[str, int]:
        """Aggregate item counts per user."""
        pass


class IWantlistRepository(ABC):
    """Repository interface for wantlist entries."""

    @abstractmethod
    async def add(self, item: WantlistItem) -> None:
        """Insert a wantlist entry."""
        pass

    @abstractmethod
    async def get_by_id(self, item_id: str) -> WantlistItem | None:
        """Get a wantlist entry by ID."""
        pass

    @abstractmethod
    async def get_for_user_and_variant(
        self, user_id: str, variant_id: str
    ) -> WantlistItem | None:
        """Get the wantlist entry of a user for a variant, if any."""
        pass

    @abstractmethod
    async def list_items(self, user_id: str) -> list[WantlistItem]:
        """Wantlist entries of a user, newest first, with variant details."""
        pass

    @abstractmethod
    async def delete(self, item_id: str) -> None:
        """Delete a wantlist entry."""
        pass


class IProfileRepository(ABC):
    """Repository interface for collector profiles."""

    @abstractmethod
    async def get_by_user_id(self, user_id: str) -> Profile | None:
        """Get the profile of a user."""
        pass

    @abstractmethod
    async def get_by_username(self, username: str) -> Profile | None:
        """Get a profile by username."""
        pass

    @abstractmethod
    async def save(self, profile: Profile) -> None:
        """Insert or update a profile. Raises UniqueViolationError on username clash."""
        pass

    @abstractmethod
    async def list_all(self) -> list[Profile]:
        """All profiles ordered by username."""
        pass

    @abstractmethod
    async def usernames_by_user_id(self, user_ids: list[str]) -> dict[str, str]:
        """Map user IDs to usernames (users without profile are omitted)."""
        pass


# Hey future me - this is the "privileged procedure" side of the catalog. Regular writes go
# through the entity repositories; hiding rows is an admin-only operation that the admin service
# gates BEFORE calling in here. Keep the surface tiny.
class IAdminProcedures(ABC):
    """Privileged catalog procedures."""

    @abstractmethod
    async def set_hidden(self, table: HideableTable, row_id: str, hide: bool) -> None:
        """Flip is_hidden on one row. Raises EntityNotFoundException when missing."""
        pass


__all__ = [
    "IAdminProcedures",
    "IArtistRepository",
    "IAuthSessionRepository",
    "IDesignRepository",
    "IExistenceProbe",
    "IIdentityProvider",
    "IOwnershipRepository",
    "IPhotoRepository",
    "IPhotoStorage",
    "IProfileRepository",
    "IUserRepository",
    "IVariantRepository",
    "IWantlistRepository",
]

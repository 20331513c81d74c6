"""Wantlist: variants a collector is still hunting for."""

import logging

from merch_archive.application.services.auth_service import require_signed_in
from merch_archive.application.services.collection_service import (
    ALREADY_OWNED,
    CollectionService,
    validate_ownership_input,
)
from merch_archive.domain.entities import Identity, Ownership, WantlistItem
from merch_archive.domain.exceptions import (
    AuthorizationError,
    DuplicateEntityException,
    EntityNotFoundException,
    UniqueViolationError,
)
from merch_archive.domain.ports import (
    IOwnershipRepository,
    IVariantRepository,
    IWantlistRepository,
)

logger = logging.getLogger(__name__)

ALREADY_WANTED = "Already in your wantlist."


class WantlistService:
    """Manage the signed-in collector's wantlist."""

    def __init__(
        self,
        wantlist: IWantlistRepository,
        variants: IVariantRepository,
        ownership: IOwnershipRepository,
        collection: CollectionService,
    ) -> None:
        """Initialize wantlist service.

        Args:
            wantlist: Wantlist repository
            variants: Variant repository (existence checks)
            ownership: Ownership repository (already-owned checks)
            collection: Collection service that performs the actual ownership insert
        """
        self._wantlist = wantlist
        self._variants = variants
        self._ownership = ownership
        self._collection = collection

    async def mark_wanted(self, actor: Identity | None, variant_id: str) -> WantlistItem:
        """Put a variant on the caller's wantlist.

        Raises:
            AuthenticationError: Caller not signed in
            EntityNotFoundException: Unknown variant
            DuplicateEntityException: Already on the wantlist
        """
        actor = require_signed_in(actor)

        if await self._variants.get_by_id(variant_id) is None:
            raise EntityNotFoundException("Variant", variant_id, "Variant not found")
        if await self._wantlist.get_for_user_and_variant(actor.user_id, variant_id):
            raise DuplicateEntityException("WantlistItem", variant_id, ALREADY_WANTED)

        item = WantlistItem(user_id=actor.user_id, variant_id=variant_id)
        try:
            await self._wantlist.add(item)
        except UniqueViolationError as e:
            raise DuplicateEntityException("WantlistItem", variant_id, ALREADY_WANTED) from e
        logger.info(
            "Variant added to wantlist",
            extra={"user_id": actor.user_id, "variant_id": variant_id},
        )
        return item

    async def list_wantlist(self, actor: Identity | None) -> list[WantlistItem]:
        """The caller's wantlist, newest first."""
        actor = require_signed_in(actor)
        return await self._wantlist.list_items(actor.user_id)

    async def _own_item(self, actor: Identity, item_id: str) -> WantlistItem:
        item = await self._wantlist.get_by_id(item_id)
        if item is None:
            raise EntityNotFoundException("WantlistItem", item_id, "Wantlist item not found")
        if item.user_id != actor.user_id:
            raise AuthorizationError("That wantlist item belongs to someone else.")
        return item

    async def remove(self, actor: Identity | None, item_id: str) -> None:
        """Delete one of the caller's wantlist entries."""
        actor = require_signed_in(actor)
        item = await self._own_item(actor, item_id)
        await self._wantlist.delete(item.id)

    # Yo, the ownership insert and the wantlist delete share the request transaction, so a
    # failure in either one rolls back both - no "moved but still on the wantlist" leftovers.
    async def move_to_collection(
        self,
        actor: Identity | None,
        item_id: str,
        size: str | None,
        memory: str | None = None,
        setlist_url: str | None = None,
    ) -> Ownership:
        """Turn a wantlist entry into an ownership record.

        Raises:
            AuthenticationError: Caller not signed in
            EntityNotFoundException: Unknown wantlist entry
            AuthorizationError: Entry belongs to someone else
            ValidationException: Missing size or bad setlist link
            DuplicateEntityException: Variant already owned
        """
        actor = require_signed_in(actor)
        item = await self._own_item(actor, item_id)

        data = validate_ownership_input(size, memory, setlist_url)
        if await self._ownership.get_for_user_and_variant(actor.user_id, item.variant_id):
            raise DuplicateEntityException("Ownership", item.variant_id, ALREADY_OWNED)

        ownership = await self._collection.insert_ownership(actor, item.variant_id, data)
        await self._wantlist.delete(item.id)
        logger.info(
            "Moved wantlist item to collection",
            extra={"user_id": actor.user_id, "variant_id": item.variant_id},
        )
        return ownership

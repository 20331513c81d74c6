"""Tests for WantlistService."""

from unittest.mock import AsyncMock

import pytest

from merch_archive.application.services.collection_service import (
    ALREADY_OWNED,
    CollectionService,
)
from merch_archive.application.services.wantlist_service import (
    ALREADY_WANTED,
    WantlistService,
)
from merch_archive.domain.entities import Identity, Ownership, Variant, WantlistItem
from merch_archive.domain.exceptions import (
    AuthorizationError,
    DuplicateEntityException,
    EntityNotFoundException,
    ValidationException,
)

ACTOR = Identity(user_id="user-1", email="collector@example.com")


@pytest.fixture
def wantlist() -> AsyncMock:
    repo = AsyncMock()
    repo.get_for_user_and_variant.return_value = None
    return repo


@pytest.fixture
def variants() -> AsyncMock:
    repo = AsyncMock()
    repo.get_by_id.return_value = Variant(
        design_id="d-1",
        garment_type="t-shirt",
        base_color="black",
        cut="unisex",
        manufacturer="Gildan",
        id="v-1",
    )
    return repo


@pytest.fixture
def ownership() -> AsyncMock:
    repo = AsyncMock()
    repo.get_for_user_and_variant.return_value = None
    return repo


@pytest.fixture
def service(wantlist, variants, ownership) -> WantlistService:
    collection = CollectionService(ownership, variants, AsyncMock(), AsyncMock())
    return WantlistService(wantlist, variants, ownership, collection)


class TestMarkWanted:
    """Test mark_wanted()."""

    @pytest.mark.asyncio
    async def test_adds_item(self, service, wantlist) -> None:
        item = await service.mark_wanted(ACTOR, "v-1")

        assert item.user_id == "user-1"
        assert item.variant_id == "v-1"
        wantlist.add.assert_awaited_once_with(item)

    @pytest.mark.asyncio
    async def test_already_wanted(self, service, wantlist) -> None:
        wantlist.get_for_user_and_variant.return_value = WantlistItem(
            user_id="user-1", variant_id="v-1"
        )
        with pytest.raises(DuplicateEntityException) as exc_info:
            await service.mark_wanted(ACTOR, "v-1")
        assert exc_info.value.message == ALREADY_WANTED

    @pytest.mark.asyncio
    async def test_unknown_variant(self, service, variants) -> None:
        variants.get_by_id.return_value = None
        with pytest.raises(EntityNotFoundException):
            await service.mark_wanted(ACTOR, "nope")


class TestRemove:
    """Test remove()."""

    @pytest.mark.asyncio
    async def test_removes_own_item(self, service, wantlist) -> None:
        wantlist.get_by_id.return_value = WantlistItem(
            user_id="user-1", variant_id="v-1", id="w-1"
        )
        await service.remove(ACTOR, "w-1")
        wantlist.delete.assert_awaited_once_with("w-1")

    @pytest.mark.asyncio
    async def test_cannot_remove_someone_elses_item(self, service, wantlist) -> None:
        wantlist.get_by_id.return_value = WantlistItem(
            user_id="other", variant_id="v-1", id="w-1"
        )
        with pytest.raises(AuthorizationError):
            await service.remove(ACTOR, "w-1")
        wantlist.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_item(self, service, wantlist) -> None:
        wantlist.get_by_id.return_value = None
        with pytest.raises(EntityNotFoundException):
            await service.remove(ACTOR, "w-404")


class TestMoveToCollection:
    """Test move_to_collection()."""

    @pytest.mark.asyncio
    async def test_moves_item(self, service, wantlist, ownership) -> None:
        wantlist.get_by_id.return_value = WantlistItem(
            user_id="user-1", variant_id="v-1", id="w-1"
        )

        owned = await service.move_to_collection(ACTOR, "w-1", "XL", "Finally found it")

        assert owned.variant_id == "v-1"
        assert owned.size == "XL"
        ownership.add.assert_awaited_once_with(owned)
        wantlist.delete.assert_awaited_once_with("w-1")

    @pytest.mark.asyncio
    async def test_already_owned_keeps_wantlist_row(self, service, wantlist, ownership) -> None:
        wantlist.get_by_id.return_value = WantlistItem(
            user_id="user-1", variant_id="v-1", id="w-1"
        )
        ownership.get_for_user_and_variant.return_value = Ownership(
            user_id="user-1", variant_id="v-1", size="M"
        )

        with pytest.raises(DuplicateEntityException) as exc_info:
            await service.move_to_collection(ACTOR, "w-1", "XL")

        assert exc_info.value.message == ALREADY_OWNED
        wantlist.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_size_required(self, service, wantlist) -> None:
        wantlist.get_by_id.return_value = WantlistItem(
            user_id="user-1", variant_id="v-1", id="w-1"
        )
        with pytest.raises(ValidationException):
            await service.move_to_collection(ACTOR, "w-1", "")
        wantlist.delete.assert_not_awaited()

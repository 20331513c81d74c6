"""Tests for ProfileService and its helpers."""

from unittest.mock import AsyncMock

import pytest

from merch_archive.application.services.profile_service import (
    USERNAME_TAKEN,
    ProfileService,
    top_band,
    username_from_email,
)
from merch_archive.application.services.slug_service import SlugService
from merch_archive.config import CatalogSettings
from merch_archive.domain.entities import (
    CollectionItem,
    Identity,
    Ownership,
    PhotoUpload,
    Profile,
    VariantDetails,
)
from merch_archive.domain.exceptions import (
    AuthenticationError,
    DuplicateEntityException,
    EntityNotFoundException,
    UniqueViolationError,
    ValidationException,
)

ACTOR = Identity(user_id="user-1", email="Anna.Smith@example.com")
VIEWER = Identity(user_id="user-2", email="bob@example.com")


def _item(artist: str) -> CollectionItem:
    return CollectionItem(
        ownership=Ownership(user_id="user-1", variant_id="v", size="L"),
        details=VariantDetails(
            variant_id="v",
            base_color="black",
            garment_type="t-shirt",
            manufacturer="Gildan",
            design_id="d",
            design_title="t",
            design_year=None,
            artist_id="a",
            artist_name=artist,
            artist_slug=artist.lower(),
        ),
    )


class TestHelpers:
    """Test top_band() and username_from_email()."""

    def test_top_band_counts_items(self) -> None:
        band = top_band([_item("Weezer"), _item("Nirvana"), _item("Nirvana")])
        assert band is not None
        assert (band.name, band.count) == ("Nirvana", 2)

    def test_top_band_tie_goes_to_first_seen(self) -> None:
        band = top_band([_item("Weezer"), _item("Nirvana")])
        assert band is not None
        assert band.name == "Weezer"

    def test_top_band_empty(self) -> None:
        assert top_band([]) is None

    def test_username_from_email(self) -> None:
        assert username_from_email("Anna.Smith@example.com") == "anna-smith"
        assert username_from_email("!!!@example.com") == "collector"


class FakeProfiles:
    """In-memory profile repository keyed by user_id."""

    def __init__(self, *profiles: Profile) -> None:
        self.rows = {p.user_id: p for p in profiles}
        self.saved: list[Profile] = []

    async def get_by_user_id(self, user_id: str) -> Profile | None:
        return self.rows.get(user_id)

    async def get_by_username(self, username: str) -> Profile | None:
        return next((p for p in self.rows.values() if p.username == username), None)

    async def save(self, profile: Profile) -> None:
        self.saved.append(profile)
        self.rows[profile.user_id] = profile

    async def list_all(self) -> list[Profile]:
        return sorted(self.rows.values(), key=lambda p: p.username)


class UsernameProbe:
    """Existence probe backed by FakeProfiles."""

    def __init__(self, profiles: FakeProfiles) -> None:
        self.profiles = profiles

    async def exists_by_column(self, table: str, column: str, value: str) -> bool:
        return await self.profiles.get_by_username(value) is not None


def _service(
    profiles: FakeProfiles,
    ownership: AsyncMock | None = None,
    storage: AsyncMock | None = None,
    settings: CatalogSettings | None = None,
) -> ProfileService:
    return ProfileService(
        profiles,
        ownership or AsyncMock(),
        SlugService(UsernameProbe(profiles)),
        storage or AsyncMock(),
        settings or CatalogSettings(),
    )


class TestSaveProfile:
    """Test save_profile()."""

    @pytest.mark.asyncio
    async def test_first_save_derives_username_from_email(self) -> None:
        profiles = FakeProfiles()

        profile = await _service(profiles).save_profile(ACTOR)

        assert profile.username == "anna-smith"
        assert profile.is_collection_public is True
        assert profile.is_admin is False

    @pytest.mark.asyncio
    async def test_derived_username_avoids_collisions(self) -> None:
        profiles = FakeProfiles(Profile(user_id="other", username="anna-smith"))

        profile = await _service(profiles).save_profile(ACTOR)

        assert profile.username == "anna-smith-2"

    @pytest.mark.asyncio
    async def test_requested_username_is_normalized(self) -> None:
        profiles = FakeProfiles()

        profile = await _service(profiles).save_profile(ACTOR, username="  Blue Shirts ")

        assert profile.username == "blue-shirts"

    @pytest.mark.asyncio
    async def test_requested_username_taken_by_someone_else(self) -> None:
        profiles = FakeProfiles(Profile(user_id="other", username="weezerfan"))

        with pytest.raises(DuplicateEntityException) as exc_info:
            await _service(profiles).save_profile(ACTOR, username="weezerfan")

        assert exc_info.value.message == USERNAME_TAKEN

    @pytest.mark.asyncio
    async def test_unusable_username(self) -> None:
        with pytest.raises(ValidationException):
            await _service(FakeProfiles()).save_profile(ACTOR, username="!!!")

    @pytest.mark.asyncio
    async def test_none_keeps_and_empty_clears(self) -> None:
        profiles = FakeProfiles(
            Profile(
                user_id="user-1",
                username="anna",
                bio="Old bio",
                link_url="https://example.com",
                is_collection_public=False,
                is_admin=True,
            )
        )

        profile = await _service(profiles).save_profile(ACTOR, bio="", link_url=None)

        assert profile.username == "anna"
        assert profile.bio is None
        assert profile.link_url == "https://example.com"
        assert profile.is_collection_public is False
        assert profile.is_admin is True

    @pytest.mark.asyncio
    async def test_link_must_be_http(self) -> None:
        with pytest.raises(ValidationException):
            await _service(FakeProfiles()).save_profile(ACTOR, link_url="javascript:alert(1)")

    @pytest.mark.asyncio
    async def test_avatar_upload(self) -> None:
        storage = AsyncMock()
        storage.upload.return_value = "/media/avatars/user-1/1.png"

        profile = await _service(FakeProfiles(), storage=storage).save_profile(
            ACTOR, avatar=PhotoUpload(filename="me.png", content=b"img")
        )

        bucket, path, _ = storage.upload.await_args.args
        assert bucket == "avatars"
        assert path.startswith("user-1/")
        assert storage.upload.await_args.kwargs == {"upsert": True}
        assert profile.avatar_url == "/media/avatars/user-1/1.png"

    @pytest.mark.asyncio
    async def test_username_race_becomes_friendly_error(self) -> None:
        profiles = FakeProfiles()
        profiles.save = AsyncMock(side_effect=UniqueViolationError("Profile"))

        with pytest.raises(UniqueViolationError) as exc_info:
            await _service(profiles).save_profile(ACTOR, username="anna")

        assert exc_info.value.message == USERNAME_TAKEN

    @pytest.mark.asyncio
    async def test_requires_sign_in(self) -> None:
        with pytest.raises(AuthenticationError):
            await _service(FakeProfiles()).save_profile(None)


class TestReads:
    """Test get_my_profile(), get_public_profile() and list_collectors()."""

    @pytest.mark.asyncio
    async def test_my_profile_missing(self) -> None:
        with pytest.raises(EntityNotFoundException):
            await _service(FakeProfiles()).get_my_profile(ACTOR)

    @pytest.mark.asyncio
    async def test_my_username(self) -> None:
        profiles = FakeProfiles(Profile(user_id="user-1", username="anna"))

        assert await _service(profiles).get_my_username(ACTOR) == "anna"

    @pytest.mark.asyncio
    async def test_private_profile_shows_count_but_no_items(self) -> None:
        profiles = FakeProfiles(
            Profile(user_id="user-1", username="anna", is_collection_public=False)
        )
        ownership = AsyncMock()
        ownership.count_for_user.return_value = 7

        public = await _service(profiles, ownership).get_public_profile("anna", VIEWER)

        assert public.owned_count == 7
        assert public.can_see_collection is False
        assert public.items == []
        assert public.top_band is None
        ownership.list_items.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_owner_sees_private_collection(self) -> None:
        profiles = FakeProfiles(
            Profile(user_id="user-1", username="anna", is_collection_public=False)
        )
        ownership = AsyncMock()
        ownership.count_for_user.return_value = 1
        ownership.list_items.return_value = [_item("Weezer")]

        public = await _service(
            profiles, ownership, settings=CatalogSettings(public_profile_item_limit=12)
        ).get_public_profile("anna", ACTOR)

        assert public.can_see_collection is True
        assert public.top_band is not None
        assert public.top_band.name == "Weezer"
        ownership.list_items.assert_awaited_once_with("user-1", limit=12)

    @pytest.mark.asyncio
    async def test_unknown_username(self) -> None:
        with pytest.raises(EntityNotFoundException):
            await _service(FakeProfiles()).get_public_profile("ghost")

    @pytest.mark.asyncio
    async def test_collectors_hide_private_counts(self) -> None:
        profiles = FakeProfiles(
            Profile(user_id="u1", username="anna", bio="Weezer nerd"),
            Profile(user_id="u2", username="bob", is_collection_public=False),
        )
        ownership = AsyncMock()
        ownership.item_counts.return_value = {"u1": 4, "u2": 9}

        collectors = await _service(profiles, ownership).list_collectors()
        filtered = await _service(profiles, ownership).list_collectors("WEEZER")

        assert [(c.profile.username, c.item_count) for c in collectors] == [
            ("anna", 4),
            ("bob", None),
        ]
        assert [c.profile.username for c in filtered] == ["anna"]

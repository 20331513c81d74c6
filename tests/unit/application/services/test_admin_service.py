"""Tests for AdminService and the timeline helpers."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from merch_archive.application.services.admin_service import (
    NOT_AN_ADMIN,
    AdminService,
    build_timeline,
    design_entry,
    filter_rows,
    variant_entry,
)
from merch_archive.domain.entities import (
    Artist,
    ArtistRef,
    Design,
    HideableTable,
    Identity,
    Profile,
    Variant,
)
from merch_archive.domain.exceptions import AuthenticationError, AuthorizationError

ADMIN = Identity(user_id="admin-1", email="admin@example.com")
MEMBER = Identity(user_id="user-1", email="member@example.com")
T0 = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)

WEEZER = Artist(name="Weezer", slug="weezer", id="a-1", created_at=T0)
BLUE = Design(
    artist_id="a-1",
    title="Blue Album",
    id="d-1",
    circa=1994,
    created_at=T0 + timedelta(minutes=1),
    artist=ArtistRef(id="a-1", name="Weezer", slug="weezer"),
)
BLACK_TEE = Variant(
    design_id="d-1",
    garment_type="t-shirt",
    base_color="black",
    cut="unisex",
    manufacturer="Gildan",
    id="v-1",
    created_by="user-1",
    created_at=T0 + timedelta(minutes=2),
    design=BLUE,
)


class TestTimeline:
    """Test timeline and filter helpers."""

    def test_design_title(self) -> None:
        assert design_entry(BLUE).title == "Weezer — 1994 – Blue Album"

    def test_design_without_year_or_artist(self) -> None:
        entry = design_entry(Design(artist_id="a-1", title="Pinkerton", is_hidden=True))
        assert entry.title == "Unknown artist — — – Pinkerton"
        assert entry.subtitle == "hidden"

    def test_variant_subtitle_and_link(self) -> None:
        entry = variant_entry(BLACK_TEE)
        assert entry.subtitle == "black t-shirt — Gildan"
        assert entry.href == "/designs/d-1"

    def test_newest_first_and_limited(self) -> None:
        timeline = build_timeline([WEEZER], [BLUE], [BLACK_TEE])
        assert [e.type for e in timeline] == ["variant", "design", "artist"]
        assert len(build_timeline([WEEZER], [BLUE], [BLACK_TEE], limit=2)) == 2

    def test_filter_rows(self) -> None:
        assert filter_rows([BLACK_TEE], "WEEZER") == [BLACK_TEE]
        assert filter_rows([BLUE], "1994") == [BLUE]
        assert filter_rows([WEEZER], "nirvana") == []
        assert filter_rows([WEEZER], "  ") == [WEEZER]


def _service(profile: Profile | None) -> tuple[AdminService, AsyncMock, AsyncMock]:
    profiles = AsyncMock()
    profiles.get_by_user_id.return_value = profile
    profiles.usernames_by_user_id.return_value = {"user-1": "anna"}
    artists, designs, variants = AsyncMock(), AsyncMock(), AsyncMock()
    for repo in (artists, designs, variants):
        repo.count_all.return_value = 1
    artists.list_recent.return_value = [WEEZER]
    designs.list_recent.return_value = [BLUE]
    variants.list_recent.return_value = [BLACK_TEE]
    procedures = AsyncMock()
    service = AdminService(profiles, artists, designs, variants, procedures)
    return service, procedures, artists


class TestAdminService:
    """Test AdminService."""

    @pytest.mark.asyncio
    async def test_require_admin(self) -> None:
        service, _, _ = _service(Profile(user_id="admin-1", username="boss", is_admin=True))
        profile = await service.require_admin(ADMIN)
        assert profile.username == "boss"

    @pytest.mark.asyncio
    async def test_non_admin_rejected(self) -> None:
        service, _, _ = _service(Profile(user_id="user-1", username="anna"))
        with pytest.raises(AuthorizationError) as exc_info:
            await service.require_admin(MEMBER)
        assert exc_info.value.message == NOT_AN_ADMIN

    @pytest.mark.asyncio
    async def test_anonymous_rejected(self) -> None:
        service, _, _ = _service(None)
        with pytest.raises(AuthenticationError):
            await service.require_admin(None)
        assert await service.is_admin(None) is False

    @pytest.mark.asyncio
    async def test_overview(self) -> None:
        service, _, artists = _service(
            Profile(user_id="admin-1", username="boss", is_admin=True)
        )

        overview = await service.overview(ADMIN, now=T0 + timedelta(hours=1))

        assert overview.counts.artists_24h == 1
        assert overview.counts.variants_7d == 1
        assert artists.count_all.await_args_list[0].kwargs == {
            "since": T0 + timedelta(hours=1) - timedelta(days=1)
        }
        assert overview.timeline[0].creator_username == "anna"
        assert overview.timeline[1].creator_username is None

    @pytest.mark.asyncio
    async def test_set_hidden(self) -> None:
        service, procedures, _ = _service(
            Profile(user_id="admin-1", username="boss", is_admin=True)
        )

        await service.set_hidden(ADMIN, HideableTable.DESIGNS, "d-1", True)

        procedures.set_hidden.assert_awaited_once_with(HideableTable.DESIGNS, "d-1", True)

    @pytest.mark.asyncio
    async def test_set_hidden_requires_admin(self) -> None:
        service, procedures, _ = _service(Profile(user_id="user-1", username="anna"))
        with pytest.raises(AuthorizationError):
            await service.set_hidden(MEMBER, HideableTable.ARTISTS, "a-1", True)
        procedures.set_hidden.assert_not_awaited()

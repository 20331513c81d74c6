"""Tests for SearchService and StatsService."""

from unittest.mock import AsyncMock

import pytest

from merch_archive.application.services.search_service import SearchService, tokenize
from merch_archive.application.services.stats_service import StatsService
from merch_archive.domain.entities import Artist, ArtistRef, Design, Identity

WEEZER_REF = ArtistRef(id="a-1", name="Weezer", slug="weezer")


@pytest.fixture
def search_service() -> SearchService:
    artists = AsyncMock()
    artists.list_all.return_value = [
        Artist(name="Nirvana", slug="nirvana"),
        Artist(name="Weezer", slug="weezer", id="a-1"),
    ]
    designs = AsyncMock()
    designs.list_all.return_value = [
        Design(artist_id="a-1", title="Blue Album", circa=1994, artist=WEEZER_REF),
        Design(artist_id="a-1", title="Pinkerton", circa=1996, artist=WEEZER_REF),
    ]
    return SearchService(artists, designs)


class TestSearch:
    """Test SearchService.search()."""

    def test_tokenize(self) -> None:
        assert tokenize("  Weezer   BLUE ") == ["weezer", "blue"]
        assert tokenize(None) == []

    @pytest.mark.asyncio
    async def test_all_tokens_must_match(self, search_service) -> None:
        results = await search_service.search("blue weezer")

        assert results.artists == []
        assert [d.title for d in results.designs] == ["Blue Album"]

    @pytest.mark.asyncio
    async def test_artist_match(self, search_service) -> None:
        results = await search_service.search("weez")

        assert [a.name for a in results.artists] == ["Weezer"]
        assert len(results.designs) == 2

    @pytest.mark.asyncio
    async def test_year_is_not_searched(self, search_service) -> None:
        results = await search_service.search("1994")
        assert results.designs == []

    @pytest.mark.asyncio
    async def test_blank_query(self, search_service) -> None:
        results = await search_service.search("   ")
        assert results.artists == [] and results.designs == []


class TestStats:
    """Test StatsService.home_stats()."""

    def _service(self) -> tuple[StatsService, AsyncMock]:
        artists, designs, variants, ownership = (AsyncMock() for _ in range(4))
        artists.count_all.return_value = 3
        designs.count_all.return_value = 5
        variants.count_all.return_value = 8
        ownership.count_for_user.return_value = 2
        return StatsService(artists, designs, variants, ownership), ownership

    @pytest.mark.asyncio
    async def test_counts_only_visible_rows(self) -> None:
        artists, designs, variants, ownership = (AsyncMock() for _ in range(4))
        for repo in (artists, designs, variants):
            repo.count_all.return_value = 0

        await StatsService(artists, designs, variants, ownership).home_stats()

        for repo in (artists, designs, variants):
            repo.count_all.assert_awaited_once_with(include_hidden=False)

    @pytest.mark.asyncio
    async def test_signed_in(self) -> None:
        service, ownership = self._service()

        stats = await service.home_stats(Identity(user_id="u1", email="a@b.c"))

        assert stats.to_dict() == {"artists": 3, "designs": 5, "variants": 8, "owned": 2}
        ownership.count_for_user.assert_awaited_once_with("u1")

    @pytest.mark.asyncio
    async def test_anonymous(self) -> None:
        service, ownership = self._service()

        stats = await service.home_stats()

        assert stats.owned is None
        ownership.count_for_user.assert_not_awaited()

"""Tests for collection helpers, CSV export and CollectionService."""

from datetime import UTC, date, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from merch_archive.application.services.collection_service import (
    ALREADY_OWNED,
    INVALID_SETLIST_URL,
    NOTHING_TO_EXPORT,
    SIZE_REQUIRED,
    CollectionService,
    collection_stats,
    filter_items,
    group_by_artist,
    sort_items,
    validate_ownership_input,
)
from merch_archive.application.services.csv_export import (
    CSV_HEADER,
    collection_to_csv,
    export_filename,
)
from merch_archive.domain.entities import (
    CollectionItem,
    CollectionSort,
    Identity,
    Ownership,
    Photo,
    PhotoUpload,
    Variant,
    VariantDetails,
)
from merch_archive.domain.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DuplicateEntityException,
    EntityNotFoundException,
    UniqueViolationError,
    ValidationException,
)

ACTOR = Identity(user_id="user-1", email="collector@example.com")
BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def make_item(
    artist: str = "Weezer",
    title: str = "Blue Album",
    year: int | None = 1994,
    color: str = "black",
    manufacturer: str = "Gildan",
    minutes_ago: int = 0,
    photos: int = 0,
    size: str = "L",
    memory: str | None = None,
    setlist_url: str | None = None,
    ownership_id: str | None = None,
) -> CollectionItem:
    ownership = Ownership(
        user_id="user-1",
        variant_id=f"v-{artist}-{title}",
        size=size,
        memory=memory,
        setlist_url=setlist_url,
        created_at=BASE_TIME - timedelta(minutes=minutes_ago),
    )
    if ownership_id:
        ownership.id = ownership_id
    details = VariantDetails(
        variant_id=ownership.variant_id,
        base_color=color,
        garment_type="t-shirt",
        manufacturer=manufacturer,
        design_id=f"d-{title}",
        design_title=title,
        design_year=year,
        artist_id=f"a-{artist}",
        artist_name=artist,
        artist_slug=artist.lower(),
    )
    return CollectionItem(
        ownership=ownership,
        details=details,
        photos=[Photo(parent_id=ownership.id, url=f"/p/{i}.jpg") for i in range(photos)],
    )


class TestValidateOwnershipInput:
    """Test validate_ownership_input()."""

    def test_trims_and_blanks_become_none(self) -> None:
        data = validate_ownership_input(" L ", "  ", "")
        assert data.size == "L"
        assert data.memory is None
        assert data.setlist_url is None

    def test_size_is_required(self) -> None:
        with pytest.raises(ValidationException) as exc_info:
            validate_ownership_input("  ")
        assert exc_info.value.message == SIZE_REQUIRED

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.setlist.fm/setlist/weezer/1994/x.html",
            "http://setlist.fm/setlist/abc",
            "HTTPS://SETLIST.FM/x",
        ],
    )
    def test_accepts_setlist_links(self, url: str) -> None:
        assert validate_ownership_input("M", setlist_url=url).setlist_url == url

    @pytest.mark.parametrize(
        "url", ["https://example.com/setlist.fm/", "setlist.fm/x", "ftp://setlist.fm/"]
    )
    def test_rejects_other_links(self, url: str) -> None:
        with pytest.raises(ValidationException) as exc_info:
            validate_ownership_input("M", setlist_url=url)
        assert exc_info.value.message == INVALID_SETLIST_URL


class TestCollectionHelpers:
    """Test the pure sort/filter/group/stats helpers."""

    def test_sort_recent_first(self) -> None:
        old = make_item(title="Old", minutes_ago=10)
        new = make_item(title="New", minutes_ago=1)
        assert [i.details.design_title for i in sort_items([old, new], CollectionSort.RECENT)] == [
            "New",
            "Old",
        ]

    def test_sort_by_artist_case_insensitive(self) -> None:
        items = [make_item(artist="weezer"), make_item(artist="Alkaline Trio")]
        result = sort_items(items, CollectionSort.ARTIST)
        assert [i.details.artist_name for i in result] == ["Alkaline Trio", "weezer"]

    def test_sort_by_year_new_to_old_unknown_last(self) -> None:
        items = [
            make_item(title="A", year=1994),
            make_item(title="B", year=None),
            make_item(title="C", year=2001),
        ]
        result = sort_items(items, CollectionSort.YEAR)
        assert [i.details.design_title for i in result] == ["C", "A", "B"]

    def test_filter_matches_any_field_case_insensitive(self) -> None:
        items = [
            make_item(artist="Weezer", color="black"),
            make_item(artist="Nirvana", title="Nevermind", color="white", manufacturer="Hanes"),
        ]
        assert len(filter_items(items, "HANES")) == 1
        assert len(filter_items(items, "weez")) == 1
        assert len(filter_items(items, "")) == 2

    def test_filter_only_with_photos(self) -> None:
        items = [make_item(title="A", photos=2), make_item(title="B")]
        result = filter_items(items, None, only_with_photos=True)
        assert [i.details.design_title for i in result] == ["A"]

    def test_group_by_artist_keeps_first_seen_order(self) -> None:
        items = [
            make_item(artist="Weezer", title="A"),
            make_item(artist="Nirvana", title="B"),
            make_item(artist="Weezer", title="C"),
        ]
        groups = group_by_artist(items)
        assert [name for name, _ in groups] == ["Weezer", "Nirvana"]
        assert [i.details.design_title for i in groups[0][1]] == ["A", "C"]

    def test_stats(self) -> None:
        items = [
            make_item(artist="Weezer", photos=1),
            make_item(artist="Weezer", title="Pinkerton"),
            make_item(artist="Nirvana", title="Bleach", photos=3),
        ]
        stats = collection_stats(items)
        assert stats.total_items == 3
        assert stats.with_photos == 2
        assert stats.unique_artists == 2


class TestCsvExport:
    """Test collection_to_csv() and export_filename()."""

    def test_header_only_for_no_items(self) -> None:
        assert collection_to_csv([]) == ",".join(CSV_HEADER)

    def test_row_layout(self) -> None:
        item = make_item(memory="First show", setlist_url="https://setlist.fm/x")
        lines = collection_to_csv([item]).split("\n")
        assert len(lines) == 2
        assert lines[1] == (
            "Weezer,Blue Album,1994,black,t-shirt,Gildan,L,First show,"
            "https://setlist.fm/x," + BASE_TIME.isoformat()
        )

    def test_quotes_commas_quotes_and_newlines(self) -> None:
        item = make_item(title='Say "It", Ain\'t So', memory="line one\nline two")
        text = collection_to_csv([item])
        assert '"Say ""It"", Ain\'t So"' in text
        assert '"line one\nline two"' in text

    def test_no_trailing_newline_and_unknown_year_blank(self) -> None:
        text = collection_to_csv([make_item(year=None)])
        assert not text.endswith("\n")
        assert ",Blue Album,,black," in text

    def test_export_filename(self) -> None:
        assert export_filename(date(2024, 5, 1)) == "merch-archive-collection-2024-05-01.csv"


@pytest.fixture
def ownership_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.get_for_user_and_variant.return_value = None
    repo.list_items.return_value = []
    return repo


@pytest.fixture
def variant_repo() -> AsyncMock:
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
def photo_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.list_ownership_photos.return_value = {}
    return repo


@pytest.fixture
def storage() -> AsyncMock:
    storage = AsyncMock()
    storage.upload.return_value = "/media/ownership-photos/x.jpg"
    return storage


@pytest.fixture
def service(ownership_repo, variant_repo, photo_repo, storage) -> CollectionService:
    return CollectionService(ownership_repo, variant_repo, photo_repo, storage)


class TestMarkOwned:
    """Test CollectionService.mark_owned()."""

    @pytest.mark.asyncio
    async def test_inserts_ownership(self, service, ownership_repo) -> None:
        ownership = await service.mark_owned(ACTOR, "v-1", "L", "Met the band", None)

        assert ownership.user_id == "user-1"
        assert ownership.variant_id == "v-1"
        assert ownership.size == "L"
        assert ownership.memory == "Met the band"
        ownership_repo.add.assert_awaited_once_with(ownership)

    @pytest.mark.asyncio
    async def test_requires_sign_in(self, service) -> None:
        with pytest.raises(AuthenticationError):
            await service.mark_owned(None, "v-1", "L")

    @pytest.mark.asyncio
    async def test_unknown_variant(self, service, variant_repo) -> None:
        variant_repo.get_by_id.return_value = None
        with pytest.raises(EntityNotFoundException):
            await service.mark_owned(ACTOR, "nope", "L")

    @pytest.mark.asyncio
    async def test_already_owned(self, service, ownership_repo) -> None:
        ownership_repo.get_for_user_and_variant.return_value = Ownership(
            user_id="user-1", variant_id="v-1", size="M"
        )
        with pytest.raises(DuplicateEntityException) as exc_info:
            await service.mark_owned(ACTOR, "v-1", "L")
        assert exc_info.value.message == ALREADY_OWNED
        ownership_repo.add.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_insert_race_maps_to_already_owned(self, service, ownership_repo) -> None:
        ownership_repo.add.side_effect = UniqueViolationError("Ownership")
        with pytest.raises(DuplicateEntityException) as exc_info:
            await service.mark_owned(ACTOR, "v-1", "L")
        assert exc_info.value.message == ALREADY_OWNED


class TestGetCollection:
    """Test CollectionService.get_collection()."""

    @pytest.mark.asyncio
    async def test_stats_cover_unfiltered_items(self, service, ownership_repo) -> None:
        ownership_repo.list_items.return_value = [
            make_item(artist="Weezer", title="Blue"),
            make_item(artist="Nirvana", title="Bleach"),
        ]

        view = await service.get_collection(ACTOR, query="nirvana", group=True)

        assert [i.details.artist_name for i in view.items] == ["Nirvana"]
        assert view.stats.total_items == 2
        assert view.stats.unique_artists == 2
        assert [name for name, _ in view.groups] == ["Nirvana"]

    @pytest.mark.asyncio
    async def test_attaches_photos(self, service, ownership_repo, photo_repo) -> None:
        item = make_item(ownership_id="own-1")
        ownership_repo.list_items.return_value = [item]
        photo_repo.list_ownership_photos.return_value = {
            "own-1": [Photo(parent_id="own-1", url="/media/x.jpg")]
        }

        view = await service.get_collection(ACTOR, only_with_photos=True)

        assert len(view.items) == 1
        assert view.stats.with_photos == 1


class TestAddOwnershipPhoto:
    """Test CollectionService.add_ownership_photo()."""

    @pytest.mark.asyncio
    async def test_owner_can_add_photo(self, service, ownership_repo, photo_repo, storage) -> None:
        ownership_repo.get_by_id.return_value = Ownership(
            user_id="user-1", variant_id="v-1", size="L", id="own-1"
        )

        photo = await service.add_ownership_photo(
            ACTOR, "own-1", PhotoUpload(filename="shirt.JPG", content=b"img"), " Front "
        )

        bucket, path, _ = storage.upload.await_args.args
        assert bucket == "ownership-photos"
        assert path.startswith("ownership-own-1-")
        assert path.endswith(".jpg")
        assert photo.label == "Front"
        photo_repo.add_ownership_photo.assert_awaited_once_with(photo)

    @pytest.mark.asyncio
    async def test_other_users_item_is_forbidden(self, service, ownership_repo) -> None:
        ownership_repo.get_by_id.return_value = Ownership(
            user_id="someone-else", variant_id="v-1", size="L", id="own-1"
        )
        with pytest.raises(AuthorizationError):
            await service.add_ownership_photo(
                ACTOR, "own-1", PhotoUpload(filename="a.jpg", content=b"img")
            )

    @pytest.mark.asyncio
    async def test_file_required(self, service) -> None:
        with pytest.raises(ValidationException):
            await service.add_ownership_photo(ACTOR, "own-1", None)


class TestExportCsv:
    """Test CollectionService.export_csv()."""

    @pytest.mark.asyncio
    async def test_empty_collection(self, service) -> None:
        with pytest.raises(ValidationException) as exc_info:
            await service.export_csv(ACTOR)
        assert exc_info.value.message == NOTHING_TO_EXPORT

    @pytest.mark.asyncio
    async def test_export(self, service, ownership_repo) -> None:
        ownership_repo.list_items.return_value = [make_item()]

        export = await service.export_csv(ACTOR)

        assert export.filename.startswith("merch-archive-collection-")
        assert export.filename.endswith(".csv")
        assert export.content.startswith("Artist,Design,Year")

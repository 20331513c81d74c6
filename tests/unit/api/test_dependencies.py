"""Tests for API dependencies: token extraction and photo uploads."""

from io import BytesIO
from unittest.mock import MagicMock

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from merch_archive.api.dependencies import (
    get_session_token,
    parse_bearer_token,
    read_photo_upload,
)
from merch_archive.config import Settings, StorageSettings
from merch_archive.domain.exceptions import ValidationException


def _upload(content: bytes, filename: str | None = "front.jpg") -> UploadFile:
    return UploadFile(
        file=BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": "image/jpeg"}),
    )


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        ("Bearer abc", "abc"),
        ("bearer  abc ", "abc"),
        ("abc", "abc"),
    ],
)
def test_parse_bearer_token(header: str, expected: str) -> None:
    assert parse_bearer_token(header) == expected


class TestGetSessionToken:
    """Header beats cookie; blank header falls back to the cookie."""

    def _request(self, cookies: dict[str, str]) -> MagicMock:
        request = MagicMock()
        request.cookies = cookies
        return request

    @pytest.mark.asyncio
    async def test_header_wins(self) -> None:
        token = await get_session_token(
            self._request({"session_id": "from-cookie"}), "Bearer from-header", Settings()
        )
        assert token == "from-header"

    @pytest.mark.asyncio
    async def test_blank_header_uses_cookie(self) -> None:
        token = await get_session_token(
            self._request({"session_id": "from-cookie"}), "   ", Settings()
        )
        assert token == "from-cookie"

    @pytest.mark.asyncio
    async def test_nothing(self) -> None:
        assert await get_session_token(self._request({}), None, Settings()) is None


class TestReadPhotoUpload:
    """Test read_photo_upload()."""

    @pytest.mark.asyncio
    async def test_reads_file(self) -> None:
        upload = await read_photo_upload(_upload(b"img"), Settings())

        assert upload is not None
        assert upload.filename == "front.jpg"
        assert upload.content == b"img"
        assert upload.content_type == "image/jpeg"

    @pytest.mark.asyncio
    async def test_missing_or_empty(self) -> None:
        assert await read_photo_upload(None, Settings()) is None
        assert await read_photo_upload(_upload(b""), Settings()) is None
        assert await read_photo_upload(_upload(b"img", filename=""), Settings()) is None

    @pytest.mark.asyncio
    async def test_too_large(self) -> None:
        settings = Settings(storage=StorageSettings(max_upload_bytes=2))
        with pytest.raises(ValidationException):
            await read_photo_upload(_upload(b"img"), settings)

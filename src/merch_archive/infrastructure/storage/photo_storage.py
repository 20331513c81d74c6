"""Local filesystem photo storage."""

import asyncio
import logging
from pathlib import Path, PurePosixPath

from merch_archive.domain.exceptions import StorageError
from merch_archive.domain.ports import IPhotoStorage

logger = logging.getLogger(__name__)


class Bucket:
    """Known photo buckets (top-level folders under the storage root)."""

    ARTIST_PHOTOS = "artist-photos"
    DESIGN_PHOTOS = "design-photos"
    VARIANT_PHOTOS = "variant-photos"
    OWNERSHIP_PHOTOS = "ownership-photos"
    AVATARS = "avatars"

    ALL = frozenset(
        {ARTIST_PHOTOS, DESIGN_PHOTOS, VARIANT_PHOTOS, OWNERSHIP_PHOTOS, AVATARS}
    )


def extension_from_filename(filename: str | None, default: str = "jpg") -> str:
    """Take the lowercase extension of an uploaded file name ("Front.PNG" -> "png")."""
    if not filename or "." not in filename:
        return default
    ext = filename.rsplit(".", 1)[-1].strip().lower()
    if not ext or not ext.isalnum():
        return default
    return ext


# Hey future me, this is the local stand-in for a hosted object store. Files land in
# <root>/<bucket>/<path> and are served by the StaticFiles mount in main.py, so the public URL is
# just <public_base_url>/<bucket>/<path>. Writes go through asyncio.to_thread
# so multi-MB photos never block the event loop.
class LocalPhotoStorage(IPhotoStorage):
    """Photo storage backed by a local directory."""

    def __init__(self, root: Path, public_base_url: str = "/media") -> None:
        """Initialize storage.

        Args:
            root: Directory that holds one subdirectory per bucket
            public_base_url: URL prefix the root directory is served under
        """
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")

    def public_url(self, bucket: str, path: str) -> str:
        """Build the public URL for a stored object."""
        return f"{self.public_base_url}/{bucket}/{path}"

    def _resolve(self, bucket: str, path: str) -> Path:
        if bucket not in Bucket.ALL:
            raise StorageError(f"Unknown storage bucket: {bucket}")
        relative = PurePosixPath(path)
        if relative.is_absolute() or ".." in relative.parts or not relative.parts:
            raise StorageError(f"Invalid storage path: {path}")
        return self.root / bucket / Path(*relative.parts)

    async def upload(
        self, bucket: str, path: str, data: bytes, upsert: bool = False
    ) -> str:
        """Store data at bucket/path and return its public URL.

        Args:
            bucket: One of the Bucket constants
            path: Relative object path inside the bucket, e.g. "weezer/1700000000000.jpg"
            data: File content
            upsert: Overwrite an existing object instead of failing

        Returns:
            Public URL of the stored object

        Raises:
            StorageError: Unknown bucket, unsafe path, existing object without
                upsert, or a filesystem failure
        """
        full_path = self._resolve(bucket, path)
        if full_path.exists() and not upsert:
            raise StorageError(f"Object already exists: {bucket}/{path}")

        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            await asyncio.to_thread(full_path.write_bytes, data)
        except OSError as e:
            raise StorageError(f"Failed to store {bucket}/{path}: {e}") from e

        logger.debug("Stored photo %s/%s (%d bytes)", bucket, path, len(data))
        return self.public_url(bucket, path)

"""Photo storage adapters."""

from merch_archive.infrastructure.storage.photo_storage import (
    Bucket,
    LocalPhotoStorage,
    extension_from_filename,
)

__all__ = ["Bucket", "LocalPhotoStorage", "extension_from_filename"]

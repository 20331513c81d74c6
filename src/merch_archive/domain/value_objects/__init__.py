"""Domain value objects."""

from merch_archive.domain.value_objects.slug import (
    SLUG_PATTERN,
    disambiguate,
    is_valid_slug,
    normalize_country,
    normalize_slug,
)

__all__ = [
    "SLUG_PATTERN",
    "disambiguate",
    "is_valid_slug",
    "normalize_country",
    "normalize_slug",
]

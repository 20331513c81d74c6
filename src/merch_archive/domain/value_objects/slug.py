"""URL slug normalization and disambiguation.

Hey future me - slugs are the public URL of an artist (/artists/<slug>) and the
handle of a collector (/u/<username>). Everything here is pure string work, the
database side (probing for collisions, the -2/-3 search) lives in SlugService.

The character class is deliberately pure ASCII: "Sigur Rós" becomes
"sigur-r-s", not "sigur-ros". Existing URLs were minted that way, so don't
swap in a transliterating slugifier.

Examples:
    >>> normalize_slug("  Sigur Rós!!  ")
    'sigur-r-s'
    >>> disambiguate("metallica", ["US", "Thrash Metal"])
    'metallica-us-thrash-metal'
"""

import re
from collections.abc import Iterable

# Straight and curly quotes are dropped, not hyphenated: "Don't" -> "dont".
_QUOTES_RE = re.compile(r"['\"‘’“”]")
_NON_SLUG_RE = re.compile(r"[^a-z0-9]+")

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")


def normalize_slug(text: str | None) -> str:
    """Convert display text into a URL-safe token.

    Args:
        text: Arbitrary display text (artist name, genre, username, ...)

    Returns:
        Lowercase token matching SLUG_PATTERN, or "" when nothing usable is left.
        Callers must treat "" as "no identifier could be derived".
    """
    if not text:
        return ""
    slug = text.strip().lower()
    slug = _QUOTES_RE.sub("", slug)
    slug = _NON_SLUG_RE.sub("-", slug)
    return slug.strip("-")


def is_valid_slug(value: str) -> bool:
    """Check whether value already is a well-formed slug."""
    return bool(SLUG_PATTERN.match(value))


def normalize_country(text: str | None) -> str:
    """Tidy a free-text country of origin.

    Two-letter input is treated as a country code and upper-cased ("us" -> "US"),
    anything longer is kept as typed ("United States").
    """
    value = (text or "").strip()
    if len(value) == 2:
        return value.upper()
    return value


def disambiguate(base: str, attributes: Iterable[str | None]) -> str:
    """Append normalized secondary attributes to a colliding slug.

    Attributes are normalized like the base and joined in the given order;
    empty ones are skipped. When every attribute is empty the base comes back
    unchanged, and the caller has to reject the operation rather than insert a
    second entity under the same identity.

    Args:
        base: Base slug that is known to collide
        attributes: Ordered secondary values, e.g. [origin_country, primary_genre]

    Returns:
        "base-attr1-attr2", or base when nothing could be appended
    """
    parts = [base]
    parts.extend(token for token in map(normalize_slug, attributes) if token)
    return "-".join(part for part in parts if part)

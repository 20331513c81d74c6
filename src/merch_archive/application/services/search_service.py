"""Global catalog search."""

from dataclasses import dataclass, field

from merch_archive.domain.entities import Artist, Design
from merch_archive.domain.ports import IArtistRepository, IDesignRepository

MAX_ARTIST_RESULTS = 10
MAX_DESIGN_RESULTS = 20


@dataclass
class SearchResults:
    """Matching artists and designs."""

    artists: list[Artist] = field(default_factory=list)
    designs: list[Design] = field(default_factory=list)


def tokenize(query: str | None) -> list[str]:
    """Lowercase whitespace-separated search tokens."""
    return (query or "").lower().split()


def _matches(text: str, tokens: list[str]) -> bool:
    return all(token in text for token in tokens)


# Hey future me - every token must appear somewhere in the text ("weezer blue" finds the Blue
# Album shirt), order doesn't matter. Designs match on "artist title" only, never the year.
class SearchService:
    """Token search over artists and designs."""

    def __init__(self, artists: IArtistRepository, designs: IDesignRepository) -> None:
        """Initialize search service."""
        self._artists = artists
        self._designs = designs

    async def search(self, query: str | None) -> SearchResults:
        """Search artists (A-Z, max 10) and designs (newest first, max 20)."""
        tokens = tokenize(query)
        if not tokens:
            return SearchResults()

        artists = [
            a for a in await self._artists.list_all() if _matches(a.name.lower(), tokens)
        ][:MAX_ARTIST_RESULTS]

        designs = []
        for design in await self._designs.list_all():
            artist_name = design.artist.name if design.artist else ""
            if _matches(f"{artist_name} {design.title}".lower(), tokens):
                designs.append(design)
                if len(designs) >= MAX_DESIGN_RESULTS:
                    break

        return SearchResults(artists=artists, designs=designs)

"""CSV export of a collection."""

import csv
import io
from collections.abc import Iterable
from datetime import UTC, date, datetime

from merch_archive.domain.entities import CollectionItem

CSV_HEADER = [
    "Artist",
    "Design",
    "Year",
    "Variant Color",
    "Garment Type",
    "Manufacturer",
    "Size",
    "Memory",
    "Setlist URL",
    "Added At",
]


def export_filename(today: date | None = None) -> str:
    """Download name, e.g. merch-archive-collection-2024-05-01.csv."""
    day = today or datetime.now(UTC).date()
    return f"merch-archive-collection-{day.isoformat()}.csv"


def _row(item: CollectionItem) -> list[str]:
    d = item.details
    o = item.ownership
    return [
        d.artist_name,
        d.design_title,
        "" if d.design_year is None else str(d.design_year),
        d.base_color,
        d.garment_type,
        d.manufacturer,
        o.size,
        o.memory or "",
        o.setlist_url or "",
        o.created_at.isoformat(),
    ]


# Yo, QUOTE_MINIMAL quotes only values holding a quote, comma or newline, and it
# doubles embedded quotes. Rows are joined with a bare "\n", no trailing newline.
def collection_to_csv(items: Iterable[CollectionItem]) -> str:
    """Render collection items as CSV text, header first."""
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for item in items:
        writer.writerow(_row(item))
    text = output.getvalue()
    return text[:-1] if text.endswith("\n") else text

"""
Feed Filtering

Composes the three feed filters over an already ordered note list:

    1. Active date filters (logical AND over ``created_at``)
    2. Content-type filter (notes, images, PDFs, links, audio)
    3. Case-insensitive substring search over note and attachment text

Every stage is a plain predicate applied with a stable filter, so the
incoming order (newest first) is never changed and the result equals the
AND of the three predicates regardless of application order.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Sequence
from typing import NamedTuple

from thoughtstream.models import AttachmentKind, Note
from thoughtstream.search.dates import DateFilter, parse_date_expressions


class ContentFilter(enum.StrEnum):
    """Content-type filter chips shown above the feed."""

    ALL = "all"
    NOTES = "notes"
    IMAGES = "images"
    PDFS = "pdfs"
    LINKS = "links"
    AUDIO = "audio"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def attachment_kind(self) -> AttachmentKind | None:
        """Attachment kind required by this filter, if it is a kind filter."""
        return _KINDS.get(self)

    def accepts(self, note: Note) -> bool:
        """Whether a note passes this content-type filter."""
        if self is ContentFilter.ALL:
            return True
        if self is ContentFilter.NOTES:
            # Text content counts even when the note also has attachments
            return bool(note.content)
        kind = self.attachment_kind
        return any(a.kind == kind for a in note.attachments or ())


_LABELS: dict[ContentFilter, str] = {
    ContentFilter.ALL: "All",
    ContentFilter.NOTES: "Notes",
    ContentFilter.IMAGES: "Images",
    ContentFilter.PDFS: "PDFs",
    ContentFilter.LINKS: "Links",
    ContentFilter.AUDIO: "Audio",
}

_KINDS: dict[ContentFilter, AttachmentKind] = {
    ContentFilter.IMAGES: AttachmentKind.IMAGE,
    ContentFilter.PDFS: AttachmentKind.PDF,
    ContentFilter.LINKS: AttachmentKind.LINK,
    ContentFilter.AUDIO: AttachmentKind.AUDIO,
}


class SearchOutcome(NamedTuple):
    """Result of evaluating a search string against the feed."""

    residual: str
    detected_filters: list[DateFilter]
    notes: list[Note]


def matches_dates(note: Note, active_filters: Iterable[DateFilter]) -> bool:
    """True when the note's creation time satisfies every active filter."""
    return all(f.matches(note.created_at) for f in active_filters)


def searchable_fields(note: Note) -> Iterable[str | None]:
    """Every text field free-text search looks at, in lookup order."""
    yield note.content
    yield note.extracted_text
    for attachment in note.attachments or ():
        yield attachment.extracted_text
        yield attachment.link_url
        yield attachment.filename


def matches_text(note: Note, query: str) -> bool:
    """Case-insensitive substring match over note and attachment text."""
    needle = query.lower()
    return any(field and needle in field.lower() for field in searchable_fields(note))


def filter_notes(
    notes: Sequence[Note],
    query: str = "",
    content_filter: ContentFilter = ContentFilter.ALL,
    active_filters: Sequence[DateFilter] = (),
) -> list[Note]:
    """
    Apply date, content-type and text filters in that order.

    Args:
        notes: Notes ordered newest first.
        query: Text to search for. Surrounding whitespace is stripped
            before matching, so a blank or whitespace-only query means no
            text filtering and " milk " matches like "milk".
        content_filter: Selected content-type chip.
        active_filters: Date filters the user switched on.

    Returns:
        The matching notes in their original order.
    """
    results = list(notes)

    if active_filters:
        results = [n for n in results if matches_dates(n, active_filters)]

    if content_filter is not ContentFilter.ALL:
        results = [n for n in results if content_filter.accepts(n)]

    query = query.strip()
    if query:
        results = [n for n in results if matches_text(n, query)]

    return results


def search_notes(
    notes: Sequence[Note],
    raw_query: str,
    content_filter: ContentFilter = ContentFilter.ALL,
    active_filters: Sequence[DateFilter] = (),
) -> SearchOutcome:
    """
    Evaluate a raw search string against the feed.

    Date expressions are parsed out of ``raw_query``. When any are found the
    residual text is used for text matching; detection alone never narrows
    the results, only ``active_filters`` do.
    """
    parsed = parse_date_expressions(raw_query)
    text_query = parsed.residual if parsed.filters else raw_query

    matched = filter_notes(
        notes,
        query=text_query,
        content_filter=content_filter,
        active_filters=active_filters,
    )
    return SearchOutcome(
        residual=parsed.residual,
        detected_filters=parsed.filters,
        notes=matched,
    )


def empty_state_message(query: str, content_filter: ContentFilter) -> tuple[str, str]:
    """Title and hint shown when the filtered feed is empty."""
    if query:
        return "No results found", "Try a different search term or filter"
    if content_filter is not ContentFilter.ALL:
        name = content_filter.label.lower()
        return f"No {name} yet", f"Add some {name} to see them here"
    return "No thoughts yet", "Capture your first thought to see it here"

"""Search package - date expression parsing and feed filtering."""

from thoughtstream.search.dates import DateFilter, DateParseResult, parse_date_expressions
from thoughtstream.search.filters import (
    ContentFilter,
    SearchOutcome,
    filter_notes,
    search_notes,
)

__all__ = [
    "ContentFilter",
    "DateFilter",
    "DateParseResult",
    "SearchOutcome",
    "filter_notes",
    "parse_date_expressions",
    "search_notes",
]

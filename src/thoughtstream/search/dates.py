"""
Date Expression Parser

Pulls calendar filters out of a free-text search string.

Recognized tokens (whitespace-delimited, case-insensitive):
    - Years: a run of digits in [MIN_YEAR, MAX_YEAR], e.g. "2024"
    - Months: full or abbreviated English names, e.g. "june", "jun", "sept"

Adjacent month/year pairs ("June 2024", "2024 June") become a single
combined filter. A year binds to the month *before* it when there is
one, so "June 2024 July" yields "June 2024" and "July".

Usage::

    result = parse_date_expressions("receipts june 2024")
    result.residual  # "receipts"
    result.filters   # [DateFilter(label="June 2024", year=2024, month=6)]
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Final, NamedTuple

MIN_YEAR: Final[int] = 1900
MAX_YEAR: Final[int] = 2100

MONTH_NAMES: Final[tuple[str, ...]] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

MONTH_LOOKUP: Final[dict[str, int]] = {
    "january": 1,
    "jan": 1,
    "february": 2,
    "feb": 2,
    "march": 3,
    "mar": 3,
    "april": 4,
    "apr": 4,
    "may": 5,
    "june": 6,
    "jun": 6,
    "july": 7,
    "jul": 7,
    "august": 8,
    "aug": 8,
    "september": 9,
    "sep": 9,
    "sept": 9,
    "october": 10,
    "oct": 10,
    "november": 11,
    "nov": 11,
    "december": 12,
    "dec": 12,
}

_DIGITS = re.compile(r"[0-9]+")
_SPACE_RUNS = re.compile(r" {2,}")


@dataclass(frozen=True)
class DateFilter:
    """
    A (year?, month?) predicate over timestamps.

    Attributes:
        label: Human readable form ("June 2024", "July", "2024").
        year: Calendar year, or None to match any year.
        month: Month number 1-12, or None to match any month.
    """

    label: str
    year: int | None = None
    month: int | None = None

    @classmethod
    def for_components(cls, year: int | None, month: int | None) -> DateFilter:
        """Build a filter with its canonical label."""
        parts = []
        if month is not None:
            parts.append(MONTH_NAMES[month - 1])
        if year is not None:
            parts.append(str(year))
        return cls(label=" ".join(parts), year=year, month=month)

    @property
    def key(self) -> tuple[int, int]:
        """Identity used for de-duplication (-1 marks an unset component)."""
        return (
            self.year if self.year is not None else -1,
            self.month if self.month is not None else -1,
        )

    def matches(self, timestamp: datetime) -> bool:
        """True when every populated component equals the timestamp's."""
        if self.year is not None and timestamp.year != self.year:
            return False
        if self.month is not None and timestamp.month != self.month:
            return False
        return True


class DateParseResult(NamedTuple):
    """Residual search text plus the filters detected in the input."""

    residual: str
    filters: list[DateFilter]


def parse_year(token: str) -> int | None:
    """Return the year a token denotes, or None."""
    if not _DIGITS.fullmatch(token):
        return None
    value = int(token)
    if MIN_YEAR <= value <= MAX_YEAR:
        return value
    return None


def parse_month(token: str) -> int | None:
    """Return the month number a token denotes, or None."""
    return MONTH_LOOKUP.get(token.lower())


def _remove_word(text: str, word: str) -> str:
    """Remove the first whitespace-delimited occurrence of ``word``."""
    pattern = re.compile(rf"(?<!\S){re.escape(word)}(?!\S)", re.IGNORECASE)
    return pattern.sub("", text, count=1)


def parse_date_expressions(text: str) -> DateParseResult:
    """
    Split a search string into residual text and date filters.

    Tokens are scanned in their original order; removals are applied to
    the text, never to the token list, so later lookups are unaffected.

    Args:
        text: Raw search input.

    Returns:
        DateParseResult. When nothing date-like is found the input is
        returned untouched with an empty filter list.
    """
    tokens = text.split()
    consumed: set[int] = set()
    found: list[DateFilter] = []
    removed: list[str] = []

    def _month_at(index: int) -> int | None:
        if 0 <= index < len(tokens) and index not in consumed:
            return parse_month(tokens[index])
        return None

    for i, token in enumerate(tokens):
        if i in consumed:
            continue

        year = parse_year(token)
        if year is not None:
            consumed.add(i)
            removed.append(token)

            month = _month_at(i - 1)
            if month is not None:
                consumed.add(i - 1)
                removed.append(tokens[i - 1])
            else:
                month = _month_at(i + 1)
                if month is not None:
                    consumed.add(i + 1)
                    removed.append(tokens[i + 1])

            found.append(DateFilter.for_components(year, month))
            continue

        month = parse_month(token)
        if month is None:
            continue
        # The next token is a year that will claim this month as its predecessor
        if i + 1 < len(tokens) and parse_year(tokens[i + 1]) is not None:
            continue
        consumed.add(i)
        removed.append(token)
        found.append(DateFilter.for_components(None, month))

    if not found:
        return DateParseResult(residual=text, filters=[])

    residual = text
    for word in removed:
        residual = _remove_word(residual, word)
    residual = _SPACE_RUNS.sub(" ", residual).strip()

    return DateParseResult(residual=residual, filters=dedupe_filters(found))


def dedupe_filters(filters: list[DateFilter]) -> list[DateFilter]:
    """Drop filters whose (year, month) was already seen; first one wins."""
    seen: set[tuple[int, int]] = set()
    unique: list[DateFilter] = []
    for date_filter in filters:
        if date_filter.key in seen:
            continue
        seen.add(date_filter.key)
        unique.append(date_filter)
    return unique

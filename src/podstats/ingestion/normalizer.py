"""
Field normalization: numeric and date parsing, episode construction, ordering.
"""

import re
from datetime import date, datetime
from typing import List, Optional, Sequence

from podstats.models import Episode


# Placeholders the export uses for "no data yet": empty, hyphen, en dash
NO_DATA_MARKERS = {"", "-", "–"}

_LEADING_INTEGER = re.compile(r"^[+-]?\d+")

# Tried in order after ISO parsing fails
ALTERNATE_DATE_FORMATS = (
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%b %d %Y",
    "%B %d %Y",
    "%d %b %Y",
    "%d %B %Y",
)


def parse_number(value: Optional[str]) -> int:
    """
    Parse a listen count.

    Empty values and the hyphen/en-dash placeholders yield 0. Thousands
    separators are stripped and the leading integer is taken, so "1,781"
    becomes 1781 and "12.7" becomes 12. Anything else yields 0.

    Example:
        >>> parse_number("1,781")
        1781
        >>> parse_number("–")
        0
    """
    if value is None:
        return 0

    value = value.strip()
    if value in NO_DATA_MARKERS:
        return 0

    match = _LEADING_INTEGER.match(value.replace(",", ""))
    if match is None:
        return 0
    return int(match.group(0))


def _looks_iso(value: str) -> bool:
    return (
        len(value) >= 10
        and value[4] == "-"
        and value[7] == "-"
        and (len(value) == 10 or value[10] in "T ")
    )


def parse_published_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a publication date.

    Accepts ISO dates ("2025-08-25"), ISO date-times ("2025-08-25T09:30:00Z",
    "2025-08-25 09:30"), and a few common alternates ("2025/08/25",
    "08/25/2025", "Aug 25, 2025").

    Returns:
        The calendar date, or None if the value cannot be parsed

    Example:
        >>> parse_published_date("2025-08-25")
        datetime.date(2025, 8, 25)
        >>> parse_published_date("2025-02-30") is None
        True
    """
    if value is None:
        return None

    value = value.strip()
    if not value:
        return None

    if _looks_iso(value):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None

    cleaned = " ".join(value.replace(",", " ").split())
    for fmt in ALTERNATE_DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue

    return None


def build_episode(fields: Sequence[str], published: date) -> Episode:
    """
    Build an Episode from a validated, tokenized row.

    Only the first ten fields are read; extra trailing columns are ignored.

    Args:
        fields: Tokenized field values (at least ten)
        published: Already-parsed publication date

    Returns:
        Episode record
    """
    slug, title, _, day1, day7, day14, day30, day90, spotify, all_time = fields[:10]

    return Episode(
        slug=slug.strip(),
        title=title.strip(),
        published=published,
        day1=parse_number(day1),
        day7=parse_number(day7),
        day14=parse_number(day14),
        day30=parse_number(day30),
        day90=parse_number(day90),
        spotify=parse_number(spotify),
        all_time=parse_number(all_time),
    )


def sort_episodes_by_published(episodes: Sequence[Episode]) -> List[Episode]:
    """
    Sort episodes newest first.

    The sort is stable: episodes sharing a publication date keep their
    relative input order.
    """
    return sorted(episodes, key=lambda episode: episode.published, reverse=True)

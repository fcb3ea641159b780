"""
Keyword matching rules for episode titles.

The rule depends on the keyword's shape:

- keywords containing punctuation (".NET", "C#", "CI/CD") match when the
  characters immediately before and after the occurrence are not
  alphanumeric, so ".NET" matches ".NET 10" but not "ASP.NET";
- all other keywords use case-insensitive whole-word matching.
"""

import re
from functools import lru_cache
from typing import Iterable, List, Pattern

from podstats.topics.dictionary import KeywordEntry


@lru_cache(maxsize=1024)
def _word_pattern(keyword: str) -> Pattern[str]:
    return re.compile(r"\b" + re.escape(keyword) + r"\b", re.IGNORECASE)


def _is_boundary(text: str, index: int) -> bool:
    """True if index is outside text or points at a non-alphanumeric char."""
    return index < 0 or index >= len(text) or not text[index].isalnum()


def matches_with_symbol_boundaries(title: str, keyword: str) -> bool:
    """
    Match a punctuated keyword anywhere it is not embedded in a longer token.

    Every occurrence is tried, so a rejected embedded occurrence does not hide
    a later standalone one.
    """
    haystack = title.lower()
    needle = keyword.lower()
    if not needle:
        return False

    start = haystack.find(needle)
    while start != -1:
        end = start + len(needle)
        if _is_boundary(haystack, start - 1) and _is_boundary(haystack, end):
            return True
        start = haystack.find(needle, start + 1)

    return False


def matches_whole_word(title: str, keyword: str) -> bool:
    """Case-insensitive whole-word match."""
    return _word_pattern(keyword).search(title) is not None


def keyword_matches(title: str, entry: KeywordEntry) -> bool:
    """Apply the shape-dependent match rule for one dictionary entry."""
    if entry.has_punctuation:
        return matches_with_symbol_boundaries(title, entry.keyword)
    return matches_whole_word(title, entry.keyword)


def find_keyword_matches(title: str, entries: Iterable[KeywordEntry]) -> List[KeywordEntry]:
    """
    Return every entry whose keyword matches the title, in evaluation order.

    Args:
        title: Episode title
        entries: Ranked dictionary entries

    Returns:
        Matching entries, in the order they were supplied
    """
    return [entry for entry in entries if keyword_matches(title, entry)]

"""
Hand-curated keyword dictionary for topic classification.

Each keyword carries a priority tier. Tiers order evaluation only: final
precedence between overlapping keywords is decided by containment (see
``podstats.topics.classifier.resolve_overlaps``).
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Iterable, List, Optional, Sequence


class KeywordTier(IntEnum):
    """Priority tiers, most specific first."""

    SPECIFIC_TERM = 1
    PLATFORM = 2
    TECHNOLOGY = 3
    SERVICE = 4
    COMPANY = 5
    ACRONYM = 6
    CATEGORY = 7


@dataclass(frozen=True)
class KeywordEntry:
    """A dictionary keyword and its tier."""

    keyword: str
    tier: KeywordTier

    @property
    def has_punctuation(self) -> bool:
        """True when the keyword contains a symbol such as '.', '#' or '/'."""
        return any(not (char.isalnum() or char.isspace()) for char in self.keyword)


_TIERED_KEYWORDS = {
    KeywordTier.SPECIFIC_TERM: [
        ".NET MAUI",
        "Visual Studio Code",
        "Visual Studio",
        "VS Code",
        "GitHub Copilot",
        "Apple Vision Pro",
        "Vision Pro",
        "Machine Learning",
        "Kotlin Multiplatform",
        "React Native",
        "Xamarin.Forms",
        "Cross Platform",
        "Liquid Glass",
        "Cloud Gaming",
        "Remote Play",
        "Microsoft Build",
        "Google I/O",
    ],
    KeywordTier.PLATFORM: [
        "iOS",
        "iPadOS",
        "Android",
        "macOS",
        "watchOS",
        "tvOS",
        "visionOS",
        "Windows",
        "Linux",
    ],
    KeywordTier.TECHNOLOGY: [
        "SwiftUI",
        "Swift",
        "Kotlin",
        "C#",
        "F#",
        ".NET",
        "MAUI",
        "Xamarin",
        "Blazor",
        "React",
        "Flutter",
        "Rust",
        "Spark",
        "Docker",
        "Kubernetes",
        "GraphQL",
        "REST",
    ],
    KeywordTier.SERVICE: [
        "Azure",
        "GitHub",
        "Copilot",
        "ChatGPT",
        "Gemini",
        "AWS",
        "Xcode",
        "Xbox",
        "PlayStation",
        "Nintendo",
    ],
    KeywordTier.COMPANY: [
        "Apple",
        "Microsoft",
        "Google",
        "Meta",
        "OpenAI",
        "Amazon",
    ],
    KeywordTier.ACRONYM: [
        "AI",
        "ML",
        "LLM",
        "VR",
        "AR",
        "XR",
        "GPT",
        "API",
        "SQL",
        "CI/CD",
        "WWDC",
    ],
    KeywordTier.CATEGORY: [
        "Mobile",
        "Web",
        "Desktop",
        "Cloud",
        "Testing",
        "Security",
        "Database",
        "DevOps",
        "Backend",
        "Gaming",
        "Coding",
        "Programming",
        "Debugging",
        "Development",
    ],
}

DEFAULT_KEYWORDS: List[KeywordEntry] = [
    KeywordEntry(keyword=keyword, tier=tier)
    for tier, keywords in sorted(_TIERED_KEYWORDS.items())
    for keyword in keywords
]


def rank_entries(entries: Iterable[KeywordEntry]) -> List[KeywordEntry]:
    """
    Order entries for evaluation: by tier, then by dictionary position.

    Duplicate keywords (case-insensitive) keep their first, highest-ranked
    occurrence.
    """
    ranked = sorted(entries, key=lambda entry: int(entry.tier))
    seen = set()
    unique: List[KeywordEntry] = []
    for entry in ranked:
        key = entry.keyword.lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(entry)
    return unique


def build_dictionary(
    extra_keywords: Optional[Sequence[Dict[str, Any]]] = None,
    base: Optional[Sequence[KeywordEntry]] = None,
) -> List[KeywordEntry]:
    """
    Build a ranked dictionary from the defaults plus configured additions.

    Args:
        extra_keywords: Mappings with "keyword" and "tier" (1-7), e.g. from
            the analytics config's ``extra_topic_keywords``
        base: Base entries (default: DEFAULT_KEYWORDS)

    Returns:
        Ranked list of KeywordEntry

    Raises:
        ValueError: If an extra keyword is empty or has an unknown tier
    """
    entries = list(DEFAULT_KEYWORDS if base is None else base)

    for item in extra_keywords or []:
        keyword = str(item.get("keyword", "")).strip()
        if not keyword:
            raise ValueError(f"Topic keyword must not be empty: {item!r}")
        try:
            tier = KeywordTier(int(item.get("tier", KeywordTier.CATEGORY)))
        except ValueError:
            raise ValueError(f"Unknown tier for topic keyword {keyword!r}: {item.get('tier')!r}")
        entries.append(KeywordEntry(keyword=keyword, tier=tier))

    return rank_entries(entries)

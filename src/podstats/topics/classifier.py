"""
Topic classification: map topics to the episodes whose titles mention them.

Classification runs in two independent steps per title:

1. matching - every dictionary keyword is tested in tier order
   (``podstats.topics.matcher``);
2. overlap resolution - redundant hits are dropped so that, for any span of
   text, only the most specific matching keyword survives.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from podstats.logger import get_default_logger
from podstats.models import Episode
from podstats.topics.dictionary import DEFAULT_KEYWORDS, KeywordEntry, rank_entries
from podstats.topics.matcher import find_keyword_matches


logger = get_default_logger()


def resolve_overlaps(keywords: Iterable[str]) -> List[str]:
    """
    Drop keywords made redundant by a more specific match.

    Keywords are considered in the order given. A keyword whose text is
    contained (case-insensitively) in an already accepted, different keyword
    is suppressed; a keyword whose text contains accepted keywords replaces
    them. Containment is checked against everything accepted so far, so the
    longest matching term wins regardless of evaluation order.

    Args:
        keywords: Matched keywords in evaluation order

    Returns:
        Surviving keywords in acceptance order

    Example:
        >>> resolve_overlaps([".NET MAUI", ".NET", "MAUI"])
        ['.NET MAUI']
        >>> resolve_overlaps(["MAUI", ".NET MAUI"])
        ['.NET MAUI']
    """
    accepted: List[str] = []

    for keyword in keywords:
        if keyword in accepted:
            continue

        lowered = keyword.lower()
        if any(lowered in existing.lower() for existing in accepted if existing != keyword):
            continue

        accepted = [existing for existing in accepted if existing.lower() not in lowered]
        accepted.append(keyword)

    return accepted


@dataclass(frozen=True)
class TopicSummary:
    """Aggregate view of one topic, as shown in topic rankings."""

    topic: str
    count: int
    total_listens: int
    avg_listens: float
    episodes: List[Episode] = field(default_factory=list)


class TopicClassifier:
    """
    Classifies episode titles against a ranked keyword dictionary.
    """

    def __init__(self, entries: Optional[Sequence[KeywordEntry]] = None):
        """
        Initialize classifier.

        Args:
            entries: Dictionary entries (default: DEFAULT_KEYWORDS); they are
                ranked by tier before use
        """
        self.entries: List[KeywordEntry] = rank_entries(
            DEFAULT_KEYWORDS if entries is None else entries
        )

    def classify_title(self, title: str) -> List[str]:
        """
        Return the topics a single title belongs to.

        Example:
            >>> TopicClassifier().classify_title(".NET MAUI deep dive")
            ['.NET MAUI']
        """
        matches = find_keyword_matches(title, self.entries)
        return resolve_overlaps(entry.keyword for entry in matches)

    def classify(self, episodes: Iterable[Episode]) -> Dict[str, List[Episode]]:
        """
        Build the topic → episodes index.

        Topics appear in the order they are first encountered; each topic's
        episodes keep the order in which episodes were supplied.

        Args:
            episodes: Episode collection (normally newest first)

        Returns:
            Mapping from topic name to matching episodes
        """
        topics: Dict[str, List[Episode]] = {}
        episode_count = 0

        for episode in episodes:
            episode_count += 1
            for topic in self.classify_title(episode.title):
                topics.setdefault(topic, []).append(episode)

        logger.debug(f"Classified {episode_count} episodes into {len(topics)} topics")
        return topics


def classify_topics(
    episodes: Iterable[Episode],
    entries: Optional[Sequence[KeywordEntry]] = None,
) -> Dict[str, List[Episode]]:
    """
    Convenience function to classify an episode collection.

    Args:
        episodes: Episode collection
        entries: Optional dictionary entries (default: DEFAULT_KEYWORDS)

    Returns:
        Mapping from topic name to matching episodes
    """
    return TopicClassifier(entries).classify(episodes)


def summarize_topics(topic_map: Dict[str, List[Episode]]) -> List[TopicSummary]:
    """
    Summarize each topic's reach.

    Summaries are ordered by total all-time listens (descending); within a
    summary, episodes are ordered by all-time listens (descending). Ties keep
    their existing order.

    Args:
        topic_map: Output of classify_topics

    Returns:
        List of TopicSummary
    """
    summaries: List[TopicSummary] = []

    for topic, episodes in topic_map.items():
        if not episodes:
            continue
        total_listens = sum(episode.all_time for episode in episodes)
        summaries.append(TopicSummary(
            topic=topic,
            count=len(episodes),
            total_listens=total_listens,
            avg_listens=total_listens / len(episodes),
            episodes=sorted(episodes, key=lambda episode: episode.all_time, reverse=True),
        ))

    summaries.sort(key=lambda summary: summary.total_listens, reverse=True)
    return summaries


def search_topics(summaries: Iterable[TopicSummary], term: str) -> List[TopicSummary]:
    """Filter summaries whose topic name contains term (case-insensitive)."""
    needle = term.strip().lower()
    return [summary for summary in summaries if needle in summary.topic.lower()]

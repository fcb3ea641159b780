"""
Topic classification of episode titles.
"""

from podstats.topics.classifier import (
    TopicClassifier,
    TopicSummary,
    classify_topics,
    resolve_overlaps,
    search_topics,
    summarize_topics,
)
from podstats.topics.dictionary import KeywordEntry, KeywordTier, DEFAULT_KEYWORDS

__all__ = [
    "TopicClassifier",
    "TopicSummary",
    "classify_topics",
    "resolve_overlaps",
    "search_topics",
    "summarize_topics",
    "KeywordEntry",
    "KeywordTier",
    "DEFAULT_KEYWORDS",
]

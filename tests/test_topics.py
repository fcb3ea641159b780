"""
Unit tests for topic classification: dictionary, matching rules, overlap
resolution, and topic summaries.
"""

from datetime import date
from itertools import permutations

import pytest

from podstats.topics.classifier import (
    TopicClassifier,
    classify_topics,
    resolve_overlaps,
    search_topics,
    summarize_topics,
)
from podstats.topics.dictionary import (
    DEFAULT_KEYWORDS,
    KeywordEntry,
    KeywordTier,
    build_dictionary,
    rank_entries,
)
from podstats.topics.matcher import (
    keyword_matches,
    matches_whole_word,
    matches_with_symbol_boundaries,
)

from conftest import make_episode


@pytest.fixture
def classifier() -> TopicClassifier:
    return TopicClassifier()


# ============================================================================
# Dictionary Tests
# ============================================================================

class TestDictionary:
    """Test keyword entries and ranking."""

    def test_has_punctuation(self):
        assert KeywordEntry(".NET", KeywordTier.TECHNOLOGY).has_punctuation
        assert KeywordEntry("CI/CD", KeywordTier.ACRONYM).has_punctuation
        assert not KeywordEntry("Swift", KeywordTier.TECHNOLOGY).has_punctuation
        assert not KeywordEntry("Visual Studio", KeywordTier.SPECIFIC_TERM).has_punctuation

    def test_default_keywords_ranked_by_tier(self):
        tiers = [int(entry.tier) for entry in rank_entries(DEFAULT_KEYWORDS)]
        assert tiers == sorted(tiers)

    def test_rank_entries_deduplicates_case_insensitively(self):
        entries = [
            KeywordEntry("foo", KeywordTier.CATEGORY),
            KeywordEntry("Foo", KeywordTier.SPECIFIC_TERM),
        ]

        ranked = rank_entries(entries)

        assert ranked == [KeywordEntry("Foo", KeywordTier.SPECIFIC_TERM)]

    def test_build_dictionary_adds_extra_keywords(self):
        entries = build_dictionary([{"keyword": "Tauri", "tier": 3}])

        assert KeywordEntry("Tauri", KeywordTier.TECHNOLOGY) in entries
        assert TopicClassifier(entries).classify_title("Shipping with Tauri") == ["Tauri"]

    def test_build_dictionary_rejects_unknown_tier(self):
        with pytest.raises(ValueError):
            build_dictionary([{"keyword": "Tauri", "tier": 9}])

    def test_build_dictionary_rejects_empty_keyword(self):
        with pytest.raises(ValueError):
            build_dictionary([{"keyword": "  ", "tier": 3}])


# ============================================================================
# Matcher Tests
# ============================================================================

class TestMatching:
    """Test shape-dependent keyword matching."""

    def test_symbol_keyword_matches_standalone(self):
        assert matches_with_symbol_boundaries(".NET 10 is here", ".NET")
        assert matches_with_symbol_boundaries("What's new in .NET", ".NET")

    def test_symbol_keyword_not_embedded(self):
        assert not matches_with_symbol_boundaries("ASP.NET Core", ".NET")

    def test_symbol_keyword_later_standalone_occurrence(self):
        assert matches_with_symbol_boundaries("ASP.NET and .NET 9", ".NET")

    def test_symbol_keyword_is_case_insensitive(self):
        assert matches_with_symbol_boundaries("c# tips", "C#")

    def test_whole_word(self):
        assert matches_whole_word("Learning Swift today", "Swift")
        assert not matches_whole_word("SwiftUI tips", "Swift")

    def test_whole_word_is_case_insensitive(self):
        assert matches_whole_word("building with swiftui", "SwiftUI")

    def test_keyword_matches_dispatches_on_shape(self):
        assert keyword_matches("C# 14 Features", KeywordEntry("C#", KeywordTier.TECHNOLOGY))
        assert not keyword_matches("Rustacean", KeywordEntry("Rust", KeywordTier.TECHNOLOGY))


# ============================================================================
# Overlap Resolution Tests
# ============================================================================

class TestResolveOverlaps:
    """Test containment-based overlap resolution."""

    def test_longest_term_wins(self):
        assert resolve_overlaps([".NET MAUI", ".NET", "MAUI"]) == [".NET MAUI"]

    @pytest.mark.parametrize("order", list(permutations([".NET MAUI", ".NET", "MAUI"])))
    def test_order_independent(self, order):
        assert resolve_overlaps(order) == [".NET MAUI"]

    def test_containing_keyword_replaces_contained(self):
        assert resolve_overlaps(["Visual Studio", "Visual Studio Code"]) == ["Visual Studio Code"]

    def test_unrelated_keywords_kept_in_order(self):
        assert resolve_overlaps(["iOS", "Android"]) == ["iOS", "Android"]

    def test_duplicates_collapse(self):
        assert resolve_overlaps(["AI", "AI"]) == ["AI"]

    def test_empty(self):
        assert resolve_overlaps([]) == []


# ============================================================================
# Classifier Tests
# ============================================================================

class TestTopicClassifier:
    """Test title classification."""

    def test_specific_term_suppresses_its_parts(self, classifier):
        assert classifier.classify_title(".NET MAUI deep dive") == [".NET MAUI"]
        assert classifier.classify_title("480: .NET MAUI in .NET 10 Deep Dive") == [".NET MAUI"]

    def test_dotted_specific_term(self, classifier):
        assert classifier.classify_title("Xamarin.Forms End of Life Migration") == ["Xamarin.Forms"]

    def test_company_suppressed_by_event(self, classifier):
        assert classifier.classify_title("Google I/O and Gemini Everywhere") == ["Google I/O", "Gemini"]

    def test_service_names_suppressed_by_product(self, classifier):
        topics = classifier.classify_title("GitHub Copilot vs ChatGPT for Coding")
        assert topics == ["GitHub Copilot", "ChatGPT", "Coding"]

    def test_acronym_inside_company_name_is_suppressed(self, classifier):
        topics = classifier.classify_title("OpenAI, Meta and the AI Arms Race")
        assert topics == ["Meta", "OpenAI"]

    def test_quoted_title_topics(self, classifier):
        topics = classifier.classify_title("477: From Spark, To Blazor, To Mobile")
        assert set(topics) == {"Spark", "Blazor", "Mobile"}

    def test_no_topics(self, classifier):
        assert classifier.classify_title("Listener Questions Lightning Round") == []

    def test_idempotent(self, classifier):
        title = "WWDC 2025 Recap: macOS, watchOS and visionOS"
        assert classifier.classify_title(title) == classifier.classify_title(title)

    def test_classify_builds_topic_index(self):
        episodes = [
            make_episode("2", title="SwiftUI Navigation"),
            make_episode("1", title="SwiftUI and Android"),
        ]

        topics = classify_topics(episodes)

        assert [e.slug for e in topics["SwiftUI"]] == ["2", "1"]
        assert [e.slug for e in topics["Android"]] == ["1"]
        assert "Swift" not in topics


# ============================================================================
# Summary Tests
# ============================================================================

class TestTopicSummaries:
    """Test topic ranking and search."""

    @pytest.fixture
    def topic_map(self):
        return classify_topics([
            make_episode("4", all_time=100, title="Android Basics", published=date(2025, 4, 1)),
            make_episode("3", all_time=900, title="Kotlin for Android", published=date(2025, 3, 1)),
            make_episode("2", all_time=500, title="iOS Widgets", published=date(2025, 2, 1)),
            make_episode("1", all_time=700, title="iOS Privacy", published=date(2025, 1, 1)),
        ])

    def test_ordered_by_total_listens(self, topic_map):
        summaries = summarize_topics(topic_map)

        assert [s.topic for s in summaries] == ["iOS", "Android", "Kotlin"]
        assert summaries[0].total_listens == 1200
        assert summaries[0].count == 2
        assert summaries[0].avg_listens == 600

    def test_episodes_ordered_by_listens(self, topic_map):
        android = next(s for s in summarize_topics(topic_map) if s.topic == "Android")
        assert [e.slug for e in android.episodes] == ["3", "4"]

    def test_search_is_case_insensitive(self, topic_map):
        found = search_topics(summarize_topics(topic_map), "ANDR")
        assert [s.topic for s in found] == ["Android"]

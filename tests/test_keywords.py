"""Tests for keyword discovery and topic normalization."""

import pytest

from campaign_intel_etl.trends.keywords import (
    KeywordCandidate,
    discover_keywords,
    normalize_topic,
    rank_keywords,
    topic_key,
)


class TestNormalizeTopic:
    """Tests for normalize_topic() and topic_key()."""

    @pytest.mark.parametrize(
        "term,expected",
        [
            ("  trump ", "Donald Trump"),
            ("President Trump", "Donald Trump"),
            ("SCOTUS", "Supreme Court"),
            ("Border   Policy", "Border Policy"),
        ],
    )
    def test_normalize(self, term, expected):
        assert normalize_topic(term) == expected

    def test_topic_key(self):
        assert topic_key("AOC") == "alexandria ocasio-cortez"
        assert topic_key("Border Policy") == "border policy"


class TestDiscoverKeywords:
    """Tests for discover_keywords()."""

    def test_trigram_absorbs_bigrams(self):
        assert discover_keywords("Government Shutdown Looms") == [
            KeywordCandidate("Government Shutdown Looms", "phrase", 1)
        ]

    def test_known_figures_only(self):
        candidates = discover_keywords("Trump and Biden met while Weather stayed calm")
        assert candidates == [
            KeywordCandidate("Donald Trump", "known_entity", 1),
            KeywordCandidate("Joe Biden", "known_entity", 1),
        ]

    def test_stop_phrases_and_skip_words(self):
        assert discover_keywords("The White House said nothing") == []

    def test_entity_covered_by_phrase(self):
        """A known figure inside a kept phrase is not repeated as a single word."""
        assert discover_keywords("Donald Trump rallies supporters") == [
            KeywordCandidate("Donald Trump", "phrase", 1)
        ]

    def test_empty(self):
        assert discover_keywords(None) == []
        assert discover_keywords("") == []


class TestRankKeywords:
    """Tests for rank_keywords()."""

    def test_counts_summed_and_ranked(self):
        texts = [
            "Government Shutdown Looms",
            "Government Shutdown Looms again",
            "Trump speaks",
            "Trump speaks",
            "Trump speaks",
        ]

        ranked = rank_keywords(texts)

        assert ranked == [
            KeywordCandidate("Government Shutdown Looms", "phrase", 2),
            KeywordCandidate("Donald Trump", "known_entity", 3),
        ]
        assert rank_keywords(texts, limit=1) == ranked[:1]

    def test_phrase_wins_tie(self):
        ranked = rank_keywords(["Budget Deal", "Trump", "Trump"])
        assert [c.kind for c in ranked] == ["phrase", "known_entity"]

    def test_phrase_outranks_more_frequent_entity(self):
        ranked = rank_keywords(["Trump spoke"] * 3 + ["Border Patrol Agents arrived"])

        assert ranked[0].kind == "phrase"
        assert ranked[0].count == 1
        assert KeywordCandidate("Donald Trump", "known_entity", 3) in ranked[1:]

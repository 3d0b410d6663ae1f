"""Tests for trigram similarity."""

import pytest

from campaign_intel_etl.attribution.similarity import trigram_similarity, trigrams


class TestTrigrams:
    """Tests for trigrams()."""

    def test_pads_words_like_pg_trgm(self):
        """A word gets two leading spaces and one trailing space."""
        assert trigrams("abc") == {"  a", " ab", "abc", "bc "}

    def test_lowercases_and_splits_on_punctuation(self):
        """Case and separators do not change the trigram set."""
        assert trigrams("ABC_def") == trigrams("abc def")

    def test_empty_input(self):
        """None and empty strings have no trigrams."""
        assert trigrams(None) == set()
        assert trigrams("") == set()
        assert trigrams("___") == set()


class TestTrigramSimilarity:
    """Tests for trigram_similarity()."""

    def test_identical_strings(self):
        """Identical strings are fully similar."""
        assert trigram_similarity("summerfund", "summerfund") == 1.0

    def test_case_insensitive(self):
        """Comparison ignores case."""
        assert trigram_similarity("SummerFund", "summerfund") == 1.0

    def test_single_typo(self):
        """A dropped letter keeps the strings well above the fuzzy threshold."""
        # 9 shared of 12 distinct trigrams
        assert trigram_similarity("summerfund", "sumerfund") == pytest.approx(0.75)

    def test_appended_letter(self):
        """An extra trailing letter changes two trigrams."""
        assert trigram_similarity("summerfund", "summerfundd") == pytest.approx(10 / 13)

    def test_unrelated_strings(self):
        """Unrelated strings share little."""
        assert trigram_similarity("abc", "xyz") == 0.0

    def test_symmetric(self):
        """Argument order does not matter."""
        assert trigram_similarity("abc", "abd") == trigram_similarity("abd", "abc")

    def test_empty_side_is_zero(self):
        """An empty side never matches."""
        assert trigram_similarity("", "abc") == 0.0
        assert trigram_similarity("abc", None) == 0.0

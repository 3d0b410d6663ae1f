"""Tests for trend label validation and headline fallbacks."""

import pytest

from campaign_intel_etl.trends.labels import (
    classify_label,
    fallback_label_from_headline,
    is_event_phrase,
)


class TestIsEventPhrase:
    """Tests for is_event_phrase()."""

    @pytest.mark.parametrize(
        "text",
        ["Senate Passes Tariff Bill", "Impeachment Hearing Begins", "Court Blocks Deportation"],
    )
    def test_event_phrases(self, text):
        assert is_event_phrase(text)

    @pytest.mark.parametrize(
        "text",
        [
            None,
            "",
            "Tariffs",  # too short
            "Donald Trump",  # no verb or event noun
            "Senate votes on the big spending bill today",  # too long
        ],
    )
    def test_not_event_phrases(self, text):
        assert not is_event_phrase(text)


class TestFallbackLabelFromHeadline:
    """Tests for fallback_label_from_headline()."""

    def test_entity_followed_by_verb(self):
        headline = "Donald Trump signs executive order on tariffs"
        assert (
            fallback_label_from_headline(headline, "Donald Trump")
            == "Donald Trump Signs Executive Order"
        )

    def test_event_noun_appended(self):
        headline = "Senate vote on tariffs expected Friday"
        assert fallback_label_from_headline(headline, "Tariffs") == "Tariffs Vote"

    def test_truncated_headline(self):
        headline = "Gavin Newsom speaks at Sacramento gathering"
        assert fallback_label_from_headline(headline, "Newsom") == "Gavin Newsom Speaks At Sacramento"

    def test_unrelated_headline(self):
        assert fallback_label_from_headline("Markets rally on upbeat jobs data", "Newsom") is None

    def test_short_or_missing_headline(self):
        assert fallback_label_from_headline("Too short", "Newsom") is None
        assert fallback_label_from_headline(None, "Newsom") is None
        assert fallback_label_from_headline("Newsom speaks at length today", "") is None


class TestClassifyLabel:
    """Tests for classify_label()."""

    def test_valid_claimed_event_phrase(self):
        assessment = classify_label("Senate Passes Tariff Bill", claimed_event_phrase=True)
        assert assessment.label_quality == "event_phrase"
        assert assessment.label_source == "event_phrase"
        assert not assessment.downgraded

    def test_invalid_claim_downgraded(self):
        """A claimed event phrase without a verb or event noun is downgraded."""
        assessment = classify_label("Donald Trump", claimed_event_phrase=True)
        assert assessment.label_quality == "entity_only"
        assert assessment.display_label == "Donald Trump"
        assert assessment.label_source == "event_phrase_downgraded"
        assert assessment.downgraded

    def test_invalid_claim_replaced_by_headline(self):
        assessment = classify_label(
            "Donald Trump",
            claimed_event_phrase=True,
            top_headline="Donald Trump signs executive order on tariffs",
        )
        assert assessment.label_quality == "fallback_generated"
        assert assessment.display_label == "Donald Trump Signs Executive Order"
        assert assessment.label_source == "fallback_after_downgrade"
        assert assessment.downgraded

    def test_fallback_hint_without_claim_is_entity(self):
        assessment = classify_label("Tariffs", label_quality_hint="fallback_generated")
        assert assessment.label_quality == "entity_only"
        assert assessment.label_source == "entity_from_fallback"

    def test_fallback_hint_validated(self):
        assessment = classify_label(
            "Tariffs Vote Delayed",
            claimed_event_phrase=True,
            label_quality_hint="fallback_generated",
        )
        assert assessment.label_quality == "fallback_generated"

    def test_unflagged_event_phrase(self):
        assessment = classify_label("Impeachment Hearing Begins")
        assert assessment.label_quality == "event_phrase"
        assert assessment.label_source == "validated_phrase"

    def test_unflagged_entity_pattern(self):
        """Two capitalized words read as a name even with an event noun."""
        assessment = classify_label("Senate Vote")
        assert assessment.label_quality == "entity_only"
        assert assessment.label_source == "entity_only"

    def test_unflagged_headline_fallback(self):
        assessment = classify_label(
            "Tariffs", top_headline="Senate vote on tariffs expected Friday"
        )
        assert assessment.label_quality == "fallback_generated"
        assert assessment.display_label == "Tariffs Vote"
        assert assessment.label_source == "headline_fallback"
        assert not assessment.downgraded

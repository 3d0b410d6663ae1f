"""Tests for the attribution summary."""

from campaign_intel_etl.attribution.summary import summarize_attribution
from campaign_intel_etl.attribution.types import NO_MATCH, AttributionMethod, AttributionResult


def result(tier: int, score: float, platform: str = "meta") -> AttributionResult:
    methods = {
        1: AttributionMethod.CLICK_ID,
        2: AttributionMethod.PATTERN_RULE,
        3: AttributionMethod.REFCODE_MAPPING_NO_AD,
        4: AttributionMethod.TEMPORAL_CORRELATION,
    }
    return AttributionResult.create(platform, score, methods[tier], tier)


class TestSummarizeAttribution:
    """Tests for summarize_attribution()."""

    def test_counts_and_percentages(self):
        """Levels, platforms and tiers are counted; percentages sum to 100."""
        results = [result(1, 1.0), result(2, 0.9, "sms"), result(3, 0.75), NO_MATCH]

        summary = summarize_attribution(results)

        assert summary.total == 4
        assert summary.level_counts == {
            "deterministic": 1,
            "high": 1,
            "medium": 1,
            "low": 0,
            "none": 1,
        }
        assert summary.level_percentages["deterministic"] == 25.0
        assert sum(summary.level_percentages.values()) == 100.0
        assert summary.platform_counts == {"meta": 2, "sms": 1, "unattributed": 1}
        assert summary.tier_counts == {0: 1, 1: 1, 2: 1, 3: 1}
        assert summary.warnings == []

    def test_every_level_reported(self):
        """Levels with no results still appear with zero."""
        summary = summarize_attribution([result(1, 1.0)])
        assert set(summary.level_counts) == {"deterministic", "high", "medium", "low", "none"}
        assert summary.level_counts["low"] == 0

    def test_empty_range(self):
        """An empty range is a warning, not an error."""
        summary = summarize_attribution([])

        assert summary.total == 0
        assert all(count == 0 for count in summary.level_counts.values())
        assert "No transactions found for this range" in summary.warnings

    def test_missing_spend_warning(self):
        """Absent spend data is surfaced instead of silently producing no tier 4."""
        summary = summarize_attribution([result(1, 1.0)], spend_available=False)

        assert summary.tier_counts.get(4, 0) == 0
        assert any("tier 4" in warning for warning in summary.warnings)

    def test_rule_errors_warned(self):
        summary = summarize_attribution(
            [result(1, 1.0)], rule_errors=["Rule 'Broken' has an invalid regex pattern"]
        )
        assert summary.warnings == [
            "Attribution rule skipped: Rule 'Broken' has an invalid regex pattern"
        ]

    def test_high_unattributed_share_warned(self):
        """More than half unattributed triggers a warning."""
        summary = summarize_attribution([NO_MATCH, NO_MATCH, result(1, 1.0)])
        assert any("unattributed" in warning for warning in summary.warnings)

    def test_to_dict(self):
        data = summarize_attribution([result(4, 0.4)]).to_dict()
        assert data["total"] == 1
        assert data["level_counts"]["low"] == 1

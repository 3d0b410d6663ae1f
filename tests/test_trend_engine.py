"""Tests for the trend recompute engine."""

from datetime import UTC, datetime, timedelta

import pytest

from campaign_intel_etl.trends.engine import recompute_topic, recompute_trends
from campaign_intel_etl.trends.types import EvidenceRecord

NOW = datetime(2026, 10, 1, 12, 0, tzinfo=UTC)


def mention(topic: str, document_id: str, minutes_ago: float, **kwargs) -> EvidenceRecord:
    return EvidenceRecord(
        topic_key=topic,
        document_id=document_id,
        observed_at=NOW - timedelta(minutes=minutes_ago),
        **kwargs,
    )


def breaking_burst() -> list[EvidenceRecord]:
    """Eight news mentions within the hour from two outlets, one of them tier1."""
    return [
        mention(
            "tariffs",
            f"doc-{i}",
            minutes_ago=6 * (i + 1),
            source="apnews.com" if i % 2 else "reuters.com",
            source_tier="tier1" if i == 0 else "tier2",
            title=f"Senate passes tariff bill, update {i}",
            label="Senate Passes Tariff Bill",
            is_event_phrase=True,
            sentiment=0.2,
        )
        for i in range(8)
    ]


def tier3_burst() -> list[EvidenceRecord]:
    return [
        mention(
            "border policy",
            f"blog-{i}",
            minutes_ago=6 * (i + 1),
            source="policyblog.org" if i % 2 else "issuewatch.org",
            source_tier="tier3",
            label="Border Policy",
        )
        for i in range(8)
    ]


class TestRecomputeTopic:
    """Tests for recompute_topic()."""

    def test_breaking_burst(self):
        result = recompute_topic("tariffs", breaking_burst(), NOW)

        assert result.counts.count_1h == 8
        assert result.counts.count_24h == 8
        assert result.velocity == 300.0
        assert result.is_trending
        assert result.is_breaking
        assert result.breaking_path == "extreme_activity"
        assert result.event_title == "Senate Passes Tariff Bill"
        assert result.label_quality == "event_phrase"
        assert result.evidence_count == 8
        assert result.source_count == 2
        assert result.has_tier12_corroboration
        assert result.quality_score == 100.0
        assert result.freshness == "fresh"
        assert result.sentiment_label == "positive"
        assert result.first_seen_at == NOW - timedelta(minutes=48)
        assert result.last_seen_at == NOW - timedelta(minutes=6)

    def test_duplicates_and_future_ignored(self):
        evidence = breaking_burst()
        evidence.append(mention("tariffs", "doc-0", minutes_ago=2))
        evidence.append(mention("tariffs", "doc-future", minutes_ago=-30))

        result = recompute_topic("Tariffs", evidence, NOW)

        assert result.event_key == "tariffs"
        assert result.counts.count_1h == 8
        assert result.evidence_count == 8

    def test_tier3_only_never_breaks(self):
        result = recompute_topic("border policy", tier3_burst(), NOW)

        assert result.is_trending
        assert result.is_tier3_only
        assert not result.is_breaking
        assert result.breaking_path is None

    def test_no_evidence(self):
        result = recompute_topic("tariffs", [], NOW)

        assert not result.is_trending
        assert not result.is_breaking
        assert result.evidence_count == 0
        assert result.velocity == 0.0
        assert result.first_seen_at is None
        assert result.freshness == "stale"
        assert result.label_quality == "entity_only"
        assert result.quality_score == 5.0

    def test_old_evidence_not_trending(self):
        evidence = [mention("shutdown", f"old-{i}", minutes_ago=30 * 60 + i) for i in range(3)]

        result = recompute_topic("shutdown", evidence, NOW)

        assert result.counts.count_24h == 0
        assert result.counts.count_7d == 3
        assert not result.is_trending
        assert result.evidence_count == 0
        assert result.freshness == "stale"


class TestRecomputeTrends:
    """Tests for recompute_trends()."""

    def test_topics_ranked(self):
        evidence = breaking_burst() + tier3_burst()

        results = recompute_trends(evidence, NOW)

        assert [r.event_key for r in results] == ["tariffs", "border policy"]
        assert results[0].rank_score > results[1].rank_score

    def test_matches_single_topic_recompute(self):
        evidence = breaking_burst() + tier3_burst()

        batch = {r.event_key: r for r in recompute_trends(evidence, NOW)}
        single = recompute_topic("tariffs", breaking_burst(), NOW)

        assert batch["tariffs"].counts == single.counts
        assert batch["tariffs"].baseline == single.baseline
        assert batch["tariffs"].z_score == single.z_score
        assert batch["tariffs"].event_title == single.event_title
        assert batch["tariffs"].breaking_path == single.breaking_path

    def test_rerun_is_identical(self):
        """Recomputing from the same evidence always yields the same state."""
        evidence = breaking_burst() + tier3_burst()

        first = [r.to_dict() for r in recompute_trends(evidence, NOW)]
        second = [r.to_dict() for r in recompute_trends(list(reversed(evidence)), NOW)]

        assert first == second

    def test_empty(self):
        assert recompute_trends([], NOW) == []

    def test_naive_reference_time_treated_as_utc(self):
        naive = NOW.replace(tzinfo=None)
        results = recompute_trends(breaking_burst(), naive)
        assert results[0].calculated_at == NOW

    def test_to_dict_serializes_times(self):
        result = recompute_trends(breaking_burst(), NOW)[0]
        data = result.to_dict()
        assert data["calculated_at"] == NOW.isoformat()
        assert data["counts"]["count_1h"] == 8
        assert data["confidence_factors"] == pytest.approx(result.confidence_factors)

"""Tests for the database-backed trend service and its repositories."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import func, select

from campaign_intel_etl.models import TrendEvent
from campaign_intel_etl.repos.trend_event_repo import TrendEventRepo
from campaign_intel_etl.repos.trend_evidence_repo import TrendEvidenceRepo
from campaign_intel_etl.services.trend_service import TrendService
from campaign_intel_etl.trends.engine import recompute_topic
from campaign_intel_etl.trends.types import EvidenceRecord
from campaign_intel_etl.utils.timeutils import ensure_utc

NOW = datetime(2026, 10, 1, 12, 0, tzinfo=UTC)


def store_burst(session, topic: str, count: int = 8, tier: str = "tier1") -> None:
    repo = TrendEvidenceRepo()
    for i in range(count):
        repo.add_evidence(
            session,
            EvidenceRecord(
                topic_key=topic,
                document_id=f"{topic}-{i}",
                observed_at=NOW - timedelta(minutes=5 * (i + 1)),
                source="apnews.com" if i % 2 else "reuters.com",
                source_tier=tier,
                title=f"{topic} headline {i}",
            ),
        )


def event_count(session) -> int:
    return session.execute(select(func.count()).select_from(TrendEvent)).scalar_one()


class TestTrendEvidenceRepo:
    """Tests for TrendEvidenceRepo."""

    def test_duplicate_document_skipped(self, session):
        repo = TrendEvidenceRepo()
        record = EvidenceRecord(topic_key=" Tariffs ", document_id="doc-1", observed_at=NOW)

        first = repo.add_evidence(session, record)
        second = repo.add_evidence(session, record)

        assert first is not None
        assert first.topic_key == "tariffs"
        assert second is None

    def test_same_document_other_topic_kept(self, session):
        repo = TrendEvidenceRepo()
        repo.add_evidence(session, EvidenceRecord("tariffs", "doc-1", NOW))
        assert repo.add_evidence(session, EvidenceRecord("trade war", "doc-1", NOW)) is not None

    def test_get_records_since(self, session):
        repo = TrendEvidenceRepo()
        for hours in (1, 5, 50):
            repo.add_evidence(
                session, EvidenceRecord("tariffs", f"doc-{hours}", NOW - timedelta(hours=hours))
            )
        repo.add_evidence(session, EvidenceRecord("ceasefire", "doc-x", NOW))

        records = repo.get_records_since(
            session, NOW - timedelta(hours=10), until=NOW, topic_keys=["TARIFFS"]
        )

        assert [r.document_id for r in records] == ["doc-5", "doc-1"]


def burst_records(topic: str, count: int) -> list[EvidenceRecord]:
    return [
        EvidenceRecord(
            topic_key=topic,
            document_id=f"{topic}-{i}",
            observed_at=NOW - timedelta(minutes=5 * (i + 1)),
            source="apnews.com" if i % 2 else "reuters.com",
            source_tier="tier1",
        )
        for i in range(count)
    ]


class TestTrendEventRepo:
    """Tests for TrendEventRepo."""

    def test_upsert_creates_then_updates(self, session):
        repo = TrendEventRepo()
        repo.upsert_event(session, recompute_topic("tariffs", burst_records("tariffs", 2), NOW))

        later = recompute_topic("tariffs", burst_records("tariffs", 8), NOW + timedelta(minutes=5))
        event = repo.upsert_event(session, later)

        assert event_count(session) == 1
        assert event.current_1h == 8
        assert repo.get_by_key(session, "tariffs").current_1h == 8

    def test_older_result_does_not_overwrite_newer(self, session):
        """A slow worker finishing late must not roll the row back."""
        repo = TrendEventRepo()
        newer = recompute_topic("tariffs", burst_records("tariffs", 8), NOW + timedelta(minutes=5))
        older = recompute_topic("tariffs", burst_records("tariffs", 2), NOW)

        repo.upsert_event(session, newer)
        skipped = repo.upsert_event(session, older)

        event = repo.get_by_key(session, "tariffs")
        assert skipped is None
        assert event_count(session) == 1
        assert event.current_1h == 8
        assert ensure_utc(event.calculated_at) == NOW + timedelta(minutes=5)

    def test_mark_inactive_resets_live_metrics(self, session):
        repo = TrendEventRepo()
        repo.upsert_event(session, recompute_topic("tariffs", burst_records("tariffs", 8), NOW))

        event = repo.mark_inactive(session, "tariffs", NOW + timedelta(days=10))

        assert event.current_7d == 0
        assert event.tier1_count == 0
        assert event.source_count == 0
        assert not event.has_tier12_corroboration
        assert event.quality_score == 0.0
        assert event.rank_score == 0.0
        assert event.freshness == "stale"

    def test_mark_inactive_ignores_older_time(self, session):
        repo = TrendEventRepo()
        repo.upsert_event(session, recompute_topic("tariffs", burst_records("tariffs", 8), NOW))

        event = repo.mark_inactive(session, "tariffs", NOW - timedelta(hours=1))

        assert event.current_1h == 8
        assert event.is_trending

    def test_mark_inactive_missing(self, session):
        assert TrendEventRepo().mark_inactive(session, "tariffs", NOW) is None


class TestTrendService:
    """Tests for TrendService."""

    def test_lookback_validated(self, session):
        with pytest.raises(ValueError, match="lookback_days"):
            TrendService(session, lookback_days=1)

    def test_compute_does_not_write(self, session):
        store_burst(session, "tariffs")

        results = TrendService(session).compute(NOW)

        assert [r.event_key for r in results] == ["tariffs"]
        assert event_count(session) == 0

    def test_recompute_stores_events(self, session):
        store_burst(session, "tariffs")

        outcome = TrendService(session).recompute(NOW)

        event = TrendEventRepo().get_by_key(session, "tariffs")
        assert len(outcome["results"]) == 1
        assert outcome["decayed"] == []
        assert event.is_trending
        assert event.is_breaking
        assert event.breaking_path == "extreme_activity"
        assert event.current_1h == 8

    def test_recompute_overwrites(self, session):
        """Re-running updates the existing row instead of adding one."""
        store_burst(session, "tariffs", count=4)
        service = TrendService(session)
        service.recompute(NOW)

        store_burst(session, "tariffs", count=8)
        service.recompute(NOW)

        assert event_count(session) == 1
        assert TrendEventRepo().get_by_key(session, "tariffs").current_1h == 8

    def test_events_without_evidence_decay(self, session):
        store_burst(session, "tariffs")
        service = TrendService(session)
        service.recompute(NOW)

        outcome = service.recompute(NOW + timedelta(days=10))

        event = TrendEventRepo().get_by_key(session, "tariffs")
        assert outcome["results"] == []
        assert outcome["decayed"] == ["tariffs"]
        assert not event.is_trending
        assert not event.is_breaking
        assert event.breaking_path is None
        assert event.current_1h == 0
        assert event.current_7d == 0
        assert event.tier1_count == 0
        assert not event.has_tier12_corroboration
        assert event.quality_score == 0.0
        assert event.freshness == "stale"

    def test_topic_filter(self, session):
        store_burst(session, "tariffs")
        store_burst(session, "ceasefire", tier="tier2")
        service = TrendService(session)

        outcome = service.recompute(NOW, topic_keys=["Tariffs"])

        assert [r.event_key for r in outcome["results"]] == ["tariffs"]
        assert TrendEventRepo().get_by_key(session, "ceasefire") is None

    def test_decay_limited_to_filter(self, session):
        store_burst(session, "tariffs")
        service = TrendService(session)
        service.recompute(NOW)

        outcome = service.recompute(NOW + timedelta(days=10), topic_keys=["ceasefire"])

        assert outcome["decayed"] == []
        assert TrendEventRepo().get_by_key(session, "tariffs").is_trending

    def test_get_active(self, session):
        store_burst(session, "tariffs")
        store_burst(session, "border policy", tier="tier3")
        TrendService(session).recompute(NOW)
        repo = TrendEventRepo()

        active = repo.get_active(session, since=NOW - timedelta(hours=24))
        breaking = repo.get_active(session, since=NOW - timedelta(hours=24), breaking_only=True)

        assert [e.event_key for e in active] == ["tariffs", "border policy"]
        assert [e.event_key for e in breaking] == ["tariffs"]

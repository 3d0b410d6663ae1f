"""Database-backed trend recompute service."""

import logging
from collections.abc import Iterable
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from campaign_intel_etl.repos.trend_event_repo import TrendEventRepo
from campaign_intel_etl.repos.trend_evidence_repo import TrendEvidenceRepo
from campaign_intel_etl.trends.engine import recompute_trends
from campaign_intel_etl.trends.types import EvidenceRecord, TrendEventResult, TrendPolicy
from campaign_intel_etl.utils.timeutils import ensure_utc

logger = logging.getLogger(__name__)

# Extra day so the previous 24h window is complete on the oldest day
PREVIOUS_PERIOD = timedelta(days=1)


class TrendService:
    """
    Recomputes trend events from stored evidence.

    Evidence is never mutated here. Each topic's trend_events row is locked
    while it is rewritten so two recomputes of the same topic cannot interleave.
    """

    def __init__(self, session: Session, policy: TrendPolicy | None = None, lookback_days: int = 7):
        """
        Initialize service.

        Args:
            session: SQLAlchemy session (the caller owns the transaction)
            policy: Trend thresholds, defaults when omitted
            lookback_days: Days of evidence that feed the weekly windows
        """
        if lookback_days < 2:
            raise ValueError("lookback_days must be at least 2")

        self.session = session
        self.policy = policy or TrendPolicy()
        self.lookback = timedelta(days=lookback_days)
        self.evidence_repo = TrendEvidenceRepo()
        self.event_repo = TrendEventRepo()

    def load_evidence(
        self, reference_time: datetime, topic_keys: Iterable[str] | None = None
    ) -> list[EvidenceRecord]:
        """
        Load the evidence needed to score topics at a reference time.

        Args:
            reference_time: Scoring time
            topic_keys: Optional topic filter

        Returns:
            Evidence observed in the lookback plus the previous period
        """
        now = ensure_utc(reference_time)
        since = now - self.lookback - PREVIOUS_PERIOD
        return self.evidence_repo.get_records_since(
            self.session, since, until=now, topic_keys=topic_keys
        )

    def compute(
        self, reference_time: datetime, topic_keys: Iterable[str] | None = None
    ) -> list[TrendEventResult]:
        """
        Recompute trend state without writing anything.

        Args:
            reference_time: Scoring time
            topic_keys: Optional topic filter

        Returns:
            One result per topic with evidence, highest rank first
        """
        keys = None if topic_keys is None else sorted({k.strip().lower() for k in topic_keys})
        evidence = self.load_evidence(reference_time, keys)
        return recompute_trends(evidence, reference_time, self.policy)

    def store(self, result: TrendEventResult) -> None:
        """Upsert one topic's recomputed state unless a newer one is already stored."""
        self.event_repo.upsert_event(self.session, result)

    def decay_missing(
        self,
        reference_time: datetime,
        recomputed_keys: Iterable[str],
        topic_keys: Iterable[str] | None = None,
    ) -> list[str]:
        """
        Clear flags of trending events that no longer have any evidence.

        Args:
            reference_time: Scoring time
            recomputed_keys: Topics that were just recomputed
            topic_keys: Restrict decay to these topics when given

        Returns:
            Keys of decayed events
        """
        now = ensure_utc(reference_time)
        seen = set(recomputed_keys)
        scope = None if topic_keys is None else {k.strip().lower() for k in topic_keys}

        decayed = []
        for key in self.event_repo.get_flagged_keys(self.session):
            if key in seen or (scope is not None and key not in scope):
                continue
            self.event_repo.mark_inactive(self.session, key, now)
            decayed.append(key)

        if decayed:
            logger.info(f"Decayed {len(decayed)} trend events with no remaining evidence")
        return decayed

    def recompute(
        self, reference_time: datetime, topic_keys: Iterable[str] | None = None
    ) -> dict[str, list]:
        """
        Recompute and persist every topic in one transaction.

        Args:
            reference_time: Scoring time
            topic_keys: Optional topic filter

        Returns:
            Dictionary with 'results' and 'decayed' keys
        """
        keys = None if topic_keys is None else list(topic_keys)
        results = self.compute(reference_time, keys)
        for result in results:
            self.store(result)

        decayed = self.decay_missing(reference_time, [r.event_key for r in results], keys)
        return {"results": results, "decayed": decayed}

"""Repository for trend evidence operations."""

from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from campaign_intel_etl.models.trend_evidence import TrendEvidence
from campaign_intel_etl.trends.types import EvidenceRecord


# noinspection PyMethodMayBeStatic
class TrendEvidenceRepo:
    """Repository for appending and reading trend evidence."""

    def get_records_since(
        self,
        session: Session,
        since: datetime,
        until: datetime | None = None,
        topic_keys: Iterable[str] | None = None,
    ) -> list[EvidenceRecord]:
        """
        Load evidence observed in [since, until] as plain records.

        Args:
            session: Database session
            since: Earliest observed_at to include
            until: Latest observed_at to include (open when None)
            topic_keys: Optional topic filter

        Returns:
            List of EvidenceRecord ordered by observed_at
        """
        stmt = select(TrendEvidence).where(TrendEvidence.observed_at >= since)

        if until is not None:
            stmt = stmt.where(TrendEvidence.observed_at <= until)

        if topic_keys is not None:
            keys = sorted({key.strip().lower() for key in topic_keys})
            stmt = stmt.where(TrendEvidence.topic_key.in_(keys))

        stmt = stmt.order_by(TrendEvidence.observed_at, TrendEvidence.id)
        return [self.to_record(row) for row in session.execute(stmt).scalars().all()]

    def add_evidence(self, session: Session, record: EvidenceRecord) -> TrendEvidence | None:
        """
        Append evidence unless the same document was already recorded for the topic.

        Args:
            session: Database session
            record: Evidence to store

        Returns:
            The new TrendEvidence, or None for a duplicate
        """
        topic_key = record.topic_key.strip().lower()
        stmt = select(TrendEvidence.id).where(
            TrendEvidence.topic_key == topic_key,
            TrendEvidence.document_id == record.document_id,
        )
        if session.execute(stmt).scalar_one_or_none() is not None:
            return None

        evidence = TrendEvidence(
            topic_key=topic_key,
            document_id=record.document_id,
            source=record.source,
            source_type=record.source_type,
            source_tier=record.source_tier,
            observed_at=record.observed_at,
            sentiment=record.sentiment,
            title=record.title,
            label=record.label,
            is_event_phrase=record.is_event_phrase,
            label_quality_hint=record.label_quality_hint,
        )
        session.add(evidence)
        session.flush()
        return evidence

    def to_record(self, row: TrendEvidence) -> EvidenceRecord:
        """Copy a row into an immutable record."""
        return EvidenceRecord(
            topic_key=row.topic_key,
            document_id=row.document_id,
            observed_at=row.observed_at,
            source_type=row.source_type,
            source=row.source,
            source_tier=row.source_tier,
            sentiment=row.sentiment,
            title=row.title,
            label=row.label,
            is_event_phrase=row.is_event_phrase,
            label_quality_hint=row.label_quality_hint,
        )

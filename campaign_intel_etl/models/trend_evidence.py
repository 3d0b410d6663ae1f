"""Trend evidence model."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from campaign_intel_etl.database import Base
from campaign_intel_etl.models.base import TimestampMixin


class TrendEvidence(TimestampMixin, Base):
    """
    A single mention of a topic or entity in an ingested document.

    Append-only: rows are produced by upstream topic extraction and expire out
    of the rolling windows by age, never by update or delete.
    """

    __tablename__ = "trend_evidence"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    topic_key: Mapped[str] = mapped_column(
        String(255), nullable=False, comment="Canonical lower-case topic key"
    )
    document_id: Mapped[str] = mapped_column(
        String(255), nullable=False, comment="Article/post id (or content hash)"
    )
    source: Mapped[str | None] = mapped_column(
        String(255), nullable=True, comment="Publication or account, e.g. apnews.com"
    )
    source_type: Mapped[str] = mapped_column(
        String(30), nullable=False, comment="rss, google_news, bluesky"
    )
    source_tier: Mapped[str | None] = mapped_column(
        String(10), nullable=True, comment="tier1, tier2, tier3 or NULL when unclassified"
    )
    observed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    sentiment: Mapped[float | None] = mapped_column(Float, nullable=True)
    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    label: Mapped[str | None] = mapped_column(
        String(255), nullable=True, comment="Display label proposed by topic extraction"
    )
    is_event_phrase: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    label_quality_hint: Mapped[str | None] = mapped_column(String(30), nullable=True)

    __table_args__ = (
        UniqueConstraint("topic_key", "document_id", name="uq_trend_evidence_topic_document"),
        Index("ix_trend_evidence_observed_at", "observed_at"),
        Index("ix_trend_evidence_topic_observed", "topic_key", "observed_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<TrendEvidence(topic_key={self.topic_key}, source={self.source}, "
            f"source_tier={self.source_tier}, observed_at={self.observed_at})>"
        )

"""Trend event model."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from campaign_intel_etl.database import Base
from campaign_intel_etl.models.base import TimestampMixin


class TrendEvent(TimestampMixin, Base):
    """
    Rolling trend state for one canonical topic key.

    One row per topic, upserted by the trend recompute job. Every metric is
    recomputed from raw evidence on each run; rows are never deleted and fall
    out of active views once ``last_seen_at`` ages past the display window.
    """

    __tablename__ = "trend_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    event_key: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    event_title: Mapped[str] = mapped_column(String(255), nullable=False)
    label_quality: Mapped[str] = mapped_column(
        String(30), nullable=False, default="entity_only",
        comment="event_phrase, entity_only, fallback_generated",
    )
    label_source: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Rolling windows
    current_1h: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    current_6h: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    current_24h: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    current_7d: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    baseline_7d: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    baseline_stddev: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    # Derived metrics
    velocity: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    momentum: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    acceleration: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    z_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    # Evidence authority
    evidence_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    source_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    news_source_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    social_source_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tier1_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tier2_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tier3_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    has_tier12_corroboration: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_tier3_only: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    weighted_evidence_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    # Classification
    is_trending: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_breaking: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    breaking_path: Mapped[str | None] = mapped_column(String(20), nullable=True)
    trend_stage: Mapped[str] = mapped_column(String(20), nullable=False, default="stable")
    freshness: Mapped[str] = mapped_column(String(20), nullable=False, default="stale")
    confidence_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    quality_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    rank_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    # Context
    sentiment_avg: Mapped[float | None] = mapped_column(Float, nullable=True)
    sentiment_label: Mapped[str | None] = mapped_column(String(20), nullable=True)
    top_headline: Mapped[str | None] = mapped_column(Text, nullable=True)
    first_seen_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_seen_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    calculated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_trend_events_trending", "is_trending", "last_seen_at"),
        Index("ix_trend_events_breaking", "is_breaking", "rank_score"),
    )

    def __repr__(self) -> str:
        return (
            f"<TrendEvent(event_key={self.event_key}, current_24h={self.current_24h}, "
            f"velocity={self.velocity}, is_trending={self.is_trending}, "
            f"is_breaking={self.is_breaking})>"
        )

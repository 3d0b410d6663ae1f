"""Records and policy for the trend engine."""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class SourceTier(str, Enum):
    """Authority of the publication an evidence item came from."""

    TIER1 = "tier1"  # official / government
    TIER2 = "tier2"  # national news
    TIER3 = "tier3"  # issue specialists


class LabelQuality(str, Enum):
    EVENT_PHRASE = "event_phrase"
    ENTITY_ONLY = "entity_only"
    FALLBACK_GENERATED = "fallback_generated"


TIER_WEIGHTS = {
    SourceTier.TIER1.value: 1.0,
    SourceTier.TIER2.value: 0.7,
    SourceTier.TIER3.value: 0.4,
}
UNCLASSIFIED_TIER_WEIGHT = 0.5

SOURCE_TYPE_WEIGHTS = {
    "rss": 1.0,
    "google_news": 0.8,
    "bluesky": 0.3,
}
DEFAULT_SOURCE_TYPE_WEIGHT = 0.5

NEWS_SOURCE_TYPES = frozenset({"rss", "google_news"})
SOCIAL_SOURCE_TYPES = frozenset({"bluesky"})


@dataclass(frozen=True)
class EvidenceRecord:
    """One mention of a topic in a document."""

    topic_key: str
    document_id: str
    observed_at: datetime
    source_type: str = "rss"
    source: str | None = None
    source_tier: str | None = None
    sentiment: float | None = None
    title: str | None = None
    label: str | None = None
    is_event_phrase: bool = False
    label_quality_hint: str | None = None

    @property
    def is_news(self) -> bool:
        return self.source_type in NEWS_SOURCE_TYPES

    @property
    def is_social(self) -> bool:
        return self.source_type in SOCIAL_SOURCE_TYPES


@dataclass(frozen=True)
class WindowCounts:
    """Deduplicated mention counts over nested trailing windows."""

    count_1h: int = 0
    count_6h: int = 0
    count_24h: int = 0
    count_7d: int = 0
    prev_count_6h: int = 0  # 6h-12h ago
    prev_count_24h: int = 0  # 24h-48h ago


@dataclass(frozen=True)
class HourlyBaseline:
    """Hourly mention rate over the previous week."""

    mean: float = 0.0
    stddev: float = 0.0
    data_points: int = 0


@dataclass
class TrendPolicy:
    """Tunable thresholds for trend classification."""

    # Trending: sustained growth OR burst
    velocity_threshold: float = 50.0
    min_daily_count: int = 3
    burst_six_hour_count: int = 5
    new_topic_velocity: float = 500.0

    # Z-score
    min_baseline_points: int = 3
    z_score_floor: float = -2.0
    z_score_ceiling: float = 10.0
    poisson_scale: float = 0.6

    # Breaking
    breaking_z_score: float = 3.0
    breaking_extreme_z_score: float = 4.0
    breaking_fresh_hours: float = 8.0
    breaking_max_age_hours: float = 24.0

    # Quality
    stale_hours: float = 12.0
    min_evidence_count: int = 3
    min_confidence_score: float = 30.0
    tier3_only_penalty: float = 0.5

    def __post_init__(self) -> None:
        """Validate policy parameters."""
        if self.min_daily_count < 0 or self.burst_six_hour_count < 1:
            raise ValueError("Trending count thresholds must be positive")

        if self.z_score_floor >= self.z_score_ceiling:
            raise ValueError("Z-score floor must be below the ceiling")

        if self.breaking_extreme_z_score < self.breaking_z_score:
            raise ValueError("Extreme breaking z-score must be at least the breaking z-score")

        if self.stale_hours <= 0:
            raise ValueError("Stale hours must be positive")

    @classmethod
    def from_settings(cls, settings: Any) -> "TrendPolicy":
        """Build a policy from application settings."""
        return cls(
            velocity_threshold=settings.trend_velocity_threshold,
            min_daily_count=settings.trend_min_daily_count,
            burst_six_hour_count=settings.trend_burst_six_hour_count,
            breaking_z_score=settings.trend_breaking_z_score,
            breaking_extreme_z_score=max(
                settings.trend_breaking_z_score, cls.breaking_extreme_z_score
            ),
            stale_hours=settings.trend_stale_hours,
        )


@dataclass
class TrendEventResult:
    """Recomputed state of one topic, ready to upsert."""

    event_key: str
    event_title: str
    label_quality: str
    label_source: str | None
    counts: WindowCounts
    baseline: HourlyBaseline
    velocity: float
    momentum: float
    acceleration: float
    z_score: float
    evidence_count: int
    source_count: int
    news_source_count: int
    social_source_count: int
    tier1_count: int
    tier2_count: int
    tier3_count: int
    has_tier12_corroboration: bool
    is_tier3_only: bool
    weighted_evidence_score: float
    is_trending: bool
    is_breaking: bool
    breaking_path: str | None
    trend_stage: str
    freshness: str
    confidence_score: float
    quality_score: float
    rank_score: float
    sentiment_avg: float | None
    sentiment_label: str | None
    top_headline: str | None
    first_seen_at: datetime | None
    last_seen_at: datetime | None
    calculated_at: datetime
    confidence_factors: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        data = asdict(self)
        for key in ("first_seen_at", "last_seen_at", "calculated_at"):
            if data[key] is not None:
                data[key] = data[key].isoformat()
        return data

    def to_row(self) -> dict[str, Any]:
        """Flatten into trend_events column values."""
        return {
            "event_key": self.event_key,
            "event_title": self.event_title,
            "label_quality": self.label_quality,
            "label_source": self.label_source,
            "current_1h": self.counts.count_1h,
            "current_6h": self.counts.count_6h,
            "current_24h": self.counts.count_24h,
            "current_7d": self.counts.count_7d,
            "baseline_7d": self.baseline.mean,
            "baseline_stddev": self.baseline.stddev,
            "velocity": self.velocity,
            "momentum": self.momentum,
            "acceleration": self.acceleration,
            "z_score": self.z_score,
            "evidence_count": self.evidence_count,
            "source_count": self.source_count,
            "news_source_count": self.news_source_count,
            "social_source_count": self.social_source_count,
            "tier1_count": self.tier1_count,
            "tier2_count": self.tier2_count,
            "tier3_count": self.tier3_count,
            "has_tier12_corroboration": self.has_tier12_corroboration,
            "is_tier3_only": self.is_tier3_only,
            "weighted_evidence_score": self.weighted_evidence_score,
            "is_trending": self.is_trending,
            "is_breaking": self.is_breaking,
            "breaking_path": self.breaking_path,
            "trend_stage": self.trend_stage,
            "freshness": self.freshness,
            "confidence_score": self.confidence_score,
            "quality_score": self.quality_score,
            "rank_score": self.rank_score,
            "sentiment_avg": self.sentiment_avg,
            "sentiment_label": self.sentiment_label,
            "top_headline": self.top_headline,
            "first_seen_at": self.first_seen_at,
            "last_seen_at": self.last_seen_at,
            "calculated_at": self.calculated_at,
        }

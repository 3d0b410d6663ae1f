"""Evidence authority, classification and quality scoring for trend events."""

import math
from collections.abc import Sequence
from dataclasses import dataclass

from campaign_intel_etl.trends.types import (
    DEFAULT_SOURCE_TYPE_WEIGHT,
    SOURCE_TYPE_WEIGHTS,
    TIER_WEIGHTS,
    UNCLASSIFIED_TIER_WEIGHT,
    EvidenceRecord,
    LabelQuality,
    SourceTier,
    TrendPolicy,
    WindowCounts,
)

DEFAULT_POLICY = TrendPolicy()

# Weighted mentions that map to a full evidence score
IDEAL_WEIGHTED_MENTIONS = 10


@dataclass(frozen=True)
class TierCounts:
    tier1: int = 0
    tier2: int = 0
    tier3: int = 0
    unclassified: int = 0

    @property
    def has_tier12_corroboration(self) -> bool:
        return self.tier1 + self.tier2 > 0

    @property
    def is_tier3_only(self) -> bool:
        return self.tier3 > 0 and not self.has_tier12_corroboration


@dataclass(frozen=True)
class SourceMix:
    source_count: int = 0
    news_count: int = 0
    social_count: int = 0


def tier_counts(evidence: Sequence[EvidenceRecord]) -> TierCounts:
    """Count evidence per source tier."""
    counts = {tier.value: 0 for tier in SourceTier}
    unclassified = 0
    for item in evidence:
        if item.source_tier in counts:
            counts[item.source_tier] += 1
        else:
            unclassified += 1
    return TierCounts(
        tier1=counts[SourceTier.TIER1.value],
        tier2=counts[SourceTier.TIER2.value],
        tier3=counts[SourceTier.TIER3.value],
        unclassified=unclassified,
    )


def source_mix(evidence: Sequence[EvidenceRecord]) -> SourceMix:
    """Distinct sources, and how many of them are news vs social."""
    news = {e.source or e.document_id for e in evidence if e.is_news}
    social = {e.source or e.document_id for e in evidence if e.is_social}
    sources = {e.source or e.document_id for e in evidence}
    return SourceMix(source_count=len(sources), news_count=len(news), social_count=len(social))


def weighted_evidence_score(evidence: Sequence[EvidenceRecord]) -> float:
    """
    Authority-weighted evidence volume on a 0-100 scale.

    Each mention contributes its tier weight times its source-type weight.

    Args:
        evidence: Evidence items

    Returns:
        Score in [0, 100]
    """
    total = sum(
        TIER_WEIGHTS.get(item.source_tier or "", UNCLASSIFIED_TIER_WEIGHT)
        * SOURCE_TYPE_WEIGHTS.get(item.source_type, DEFAULT_SOURCE_TYPE_WEIGHT)
        for item in evidence
    )
    return round(min(100.0, total / IDEAL_WEIGHTED_MENTIONS * 100), 2)


def confidence_factors(
    counts: WindowCounts,
    baseline_mean: float,
    has_history: bool,
    sources: SourceMix,
) -> dict[str, float]:
    """
    Component scores (each 0-25) behind a trend's confidence score.

    Args:
        counts: Window counts
        baseline_mean: Weekly hourly baseline
        has_history: Whether the baseline is backed by enough history
        sources: Source mix

    Returns:
        Dict with baseline_delta, cross_source, volume and recency
    """
    if baseline_mean > 0:
        delta = (counts.count_1h - baseline_mean) / baseline_mean
    else:
        delta = float(counts.count_1h)
    baseline_quality = 1.0 if has_history else 0.6

    cross_bonus = 5 if sources.news_count > 0 and sources.social_count > 0 else 0
    recency = 15 + min(10, counts.count_1h * 2) if counts.count_1h > 0 else 0

    return {
        "baseline_delta": round(min(25.0, max(0.0, delta * 5)) * baseline_quality, 2),
        "cross_source": float(min(25, sources.source_count * 8 + cross_bonus)),
        "volume": round(min(25.0, math.log2(counts.count_24h + 1) * 5), 2),
        "recency": float(min(25, recency)),
    }


def confidence_score(factors: dict[str, float]) -> float:
    return round(min(100.0, sum(factors.values())), 2)


def meets_volume_gate(counts: WindowCounts, sources: SourceMix) -> bool:
    return counts.count_1h >= 2 or counts.count_24h >= 5 or sources.source_count >= 2


def breaking_path(
    trending: bool,
    tiers: TierCounts,
    counts: WindowCounts,
    sources: SourceMix,
    z_score: float,
    hours_old: float,
    has_history: bool,
    baseline_mean: float,
    policy: TrendPolicy = DEFAULT_POLICY,
) -> str | None:
    """
    Decide whether a trend is breaking, and by which path.

    Every path requires the topic to be trending, corroborated by a tier1 or
    tier2 source and past the volume gate. Tier3-only topics never break.

    Args:
        trending: Whether the topic is trending
        tiers: Tier counts
        counts: Window counts
        sources: Source mix
        z_score: Last-hour z-score
        hours_old: Hours since the topic was first seen
        has_history: Whether the baseline has enough history
        baseline_mean: Weekly hourly baseline
        policy: Thresholds

    Returns:
        Path name, or None when not breaking
    """
    if not trending or not tiers.has_tier12_corroboration or tiers.is_tier3_only:
        return None
    if not meets_volume_gate(counts, sources):
        return None

    has_news = sources.news_count >= 1
    if z_score > policy.breaking_z_score and has_news and hours_old < policy.breaking_fresh_hours:
        return "fresh_spike"
    if (
        z_score >= policy.breaking_extreme_z_score
        and has_news
        and hours_old < policy.breaking_max_age_hours
    ):
        return "extreme_zscore"
    if has_history and baseline_mean > 0:
        delta = (counts.count_1h - baseline_mean) / baseline_mean
        if delta > 4 and sources.source_count >= 2 and hours_old < 12:
            return "baseline_surge"
    if counts.count_1h >= 8 and sources.news_count >= 2 and hours_old < 3:
        return "extreme_activity"
    return None


def trend_stage(z_score: float, acceleration: float, hours_old: float) -> str:
    """Lifecycle stage of a trend: emerging, surging, peaking, declining or stable."""
    if z_score > 3 and acceleration > 50 and hours_old < 3:
        return "emerging"
    if z_score > 2 and acceleration > 20:
        return "surging"
    if z_score > 1.5 and acceleration < -20:
        return "peaking"
    if z_score < 0 or (z_score < 0.5 and acceleration < -30):
        return "declining"
    if z_score > 0.5:
        return "surging"
    return "stable"


def freshness(hours_since_last_seen: float | None) -> str:
    """Bucket time since the latest evidence: fresh, recent, aging or stale."""
    if hours_since_last_seen is None:
        return "stale"
    if hours_since_last_seen < 1:
        return "fresh"
    if hours_since_last_seen < 6:
        return "recent"
    if hours_since_last_seen < 24:
        return "aging"
    return "stale"


def quality_score(
    label: str,
    tier1_count: int,
    tier2_count: int,
    hours_since_last_seen: float | None,
    evidence_count: int,
    confidence: float,
    label_quality: str,
    policy: TrendPolicy = DEFAULT_POLICY,
) -> float:
    """
    Composite 0-100 quality score for filtering noisy trends.

    Starts at 100 and subtracts:
    - 15 for a single-word label
    - 20 without any tier1/tier2 evidence
    - 25 when the latest evidence is older than the stale threshold (or unknown)
    - 15 for fewer than the minimum evidence items
    - 10 for a confidence score below the minimum
    - 10 for an entity-only label
    - 5 for a headline fallback label

    Args:
        label: Display label
        tier1_count: Tier 1 evidence count
        tier2_count: Tier 2 evidence count
        hours_since_last_seen: Hours since the latest evidence
        evidence_count: Evidence items
        confidence: Confidence score (0-100)
        label_quality: Label quality value
        policy: Thresholds

    Returns:
        Score floored at 0
    """
    score = 100.0

    if len(label.split()) <= 1:
        score -= 15
    if tier1_count + tier2_count == 0:
        score -= 20
    if hours_since_last_seen is None or hours_since_last_seen > policy.stale_hours:
        score -= 25
    if evidence_count < policy.min_evidence_count:
        score -= 15
    if confidence < policy.min_confidence_score:
        score -= 10
    if label_quality == LabelQuality.ENTITY_ONLY.value:
        score -= 10
    elif label_quality == LabelQuality.FALLBACK_GENERATED.value:
        score -= 5

    return max(0.0, score)


def rank_score(
    confidence: float,
    is_breaking: bool,
    z_score: float,
    is_tier3_only: bool,
    policy: TrendPolicy = DEFAULT_POLICY,
) -> float:
    """Ordering score for trend lists; tier3-only trends are demoted."""
    score = confidence + (50 if is_breaking else 0) + max(0.0, z_score) * 10
    if is_tier3_only:
        score *= policy.tier3_only_penalty
    return round(score, 2)


def sentiment_summary(evidence: Sequence[EvidenceRecord]) -> tuple[float | None, str | None]:
    """Average sentiment (-1..1) and its label."""
    values = [e.sentiment for e in evidence if e.sentiment is not None]
    if not values:
        return None, None

    average = round(sum(values) / len(values), 3)
    if average > 0.1:
        label = "positive"
    elif average < -0.1:
        label = "negative"
    else:
        label = "neutral"
    return average, label

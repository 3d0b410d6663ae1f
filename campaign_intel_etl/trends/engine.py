"""
Trend recompute engine.

Rebuilds every topic's trend state from raw evidence: window counts, velocity,
momentum, z-score, evidence authority, trending/breaking flags and quality.
Nothing is patched incrementally, so a recompute can always be re-run from
scratch.
"""

import logging
from collections import Counter, defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import datetime, timedelta

from campaign_intel_etl.transformers.evidence import EvidenceFrameTransformer, evidence_to_frame
from campaign_intel_etl.trends import scoring
from campaign_intel_etl.trends.labels import classify_label
from campaign_intel_etl.trends.types import (
    EvidenceRecord,
    HourlyBaseline,
    TrendEventResult,
    TrendPolicy,
    WindowCounts,
)
from campaign_intel_etl.trends.velocity import (
    calculate_acceleration,
    calculate_momentum,
    calculate_velocity,
    calculate_z_score,
    has_historical_baseline,
    is_trending,
)
from campaign_intel_etl.trends.windows import count_windows, hourly_baselines
from campaign_intel_etl.utils.frames import clean_nan_values
from campaign_intel_etl.utils.timeutils import ensure_utc

logger = logging.getLogger(__name__)


def _hours_between(later: datetime, earlier: datetime | None) -> float | None:
    if earlier is None:
        return None
    return (later - earlier).total_seconds() / 3600


def _deduplicate(
    evidence: Iterable[EvidenceRecord], reference_time: datetime
) -> list[EvidenceRecord]:
    """Earliest mention per document, ignoring anything after the reference time."""
    earliest: dict[str, EvidenceRecord] = {}
    for item in evidence:
        observed = ensure_utc(item.observed_at)
        if observed > reference_time:
            continue
        current = earliest.get(item.document_id)
        if current is None or observed < ensure_utc(current.observed_at):
            earliest[item.document_id] = item
    return sorted(earliest.values(), key=lambda e: (ensure_utc(e.observed_at), e.document_id))


def _pick_label(topic: str, evidence: Sequence[EvidenceRecord]) -> tuple[str, bool, str | None]:
    """Most common proposed label, whether any proposal claims an event phrase, latest hint."""
    labels = Counter(e.label.strip() for e in evidence if e.label and e.label.strip())
    if labels:
        label = sorted(labels.items(), key=lambda item: (-item[1], item[0]))[0][0]
    else:
        label = topic.title()

    claimed = any(e.is_event_phrase and (e.label or "").strip() == label for e in evidence)
    hints = [e.label_quality_hint for e in evidence if e.label_quality_hint]
    return label, claimed, hints[-1] if hints else None


def _top_headline(evidence: Sequence[EvidenceRecord]) -> str | None:
    """Latest headline, preferring news over social and higher tiers."""
    titled = [e for e in evidence if e.title]
    if not titled:
        return None
    tier_rank = {"tier1": 0, "tier2": 1, "tier3": 2}
    best = min(
        titled,
        key=lambda e: (
            not e.is_news,
            tier_rank.get(e.source_tier or "", 3),
            -ensure_utc(e.observed_at).timestamp(),
        ),
    )
    return best.title


def recompute_topic(
    topic_key: str,
    evidence: Sequence[EvidenceRecord],
    reference_time: datetime,
    policy: TrendPolicy | None = None,
    counts: WindowCounts | None = None,
    baseline: HourlyBaseline | None = None,
) -> TrendEventResult:
    """
    Recompute one topic's trend state from its evidence.

    Args:
        topic_key: Canonical topic key
        evidence: Evidence for the topic (any order, duplicates allowed)
        reference_time: Scoring time
        policy: Thresholds (defaults used when omitted)
        counts: Precomputed window counts (computed from evidence when omitted)
        baseline: Precomputed hourly baseline (computed from evidence when omitted)

    Returns:
        TrendEventResult
    """
    policy = policy or TrendPolicy()
    now = ensure_utc(reference_time)
    topic_key = topic_key.strip().lower()
    items = [replace(e, topic_key=topic_key) for e in _deduplicate(evidence, now)]

    if counts is None or baseline is None:
        frame = EvidenceFrameTransformer().transform(
            evidence_to_frame(items), reference_time=now
        )
        if counts is None:
            counts = count_windows(frame, now).get(topic_key, WindowCounts())
        if baseline is None:
            baseline = hourly_baselines(frame, now).get(topic_key, HourlyBaseline())

    velocity = calculate_velocity(counts.count_6h, counts.count_24h, policy)
    momentum = calculate_momentum(counts, velocity)
    acceleration = calculate_acceleration(counts.count_1h, counts.count_6h)
    z_score = calculate_z_score(counts.count_1h, baseline, policy)
    history = has_historical_baseline(baseline, policy)
    trending = is_trending(velocity, counts.count_24h, counts.count_6h, policy)

    # Authority and quality describe current activity (last 24h)
    recent = [e for e in items if now - ensure_utc(e.observed_at) < timedelta(hours=24)]
    tiers = scoring.tier_counts(recent)
    sources = scoring.source_mix(recent)
    weighted = scoring.weighted_evidence_score(recent)

    first_seen = ensure_utc(items[0].observed_at) if items else None
    last_seen = ensure_utc(items[-1].observed_at) if items else None
    hours_old = _hours_between(now, first_seen)
    hours_since_last = _hours_between(now, last_seen)

    factors = scoring.confidence_factors(counts, baseline.mean, history, sources)
    confidence = scoring.confidence_score(factors)

    path = scoring.breaking_path(
        trending,
        tiers,
        counts,
        sources,
        z_score,
        hours_old if hours_old is not None else float("inf"),
        history,
        baseline.mean,
        policy,
    )
    breaking = path is not None

    label, claimed, hint = _pick_label(topic_key, items)
    headline = _top_headline(recent or items)
    assessment = classify_label(label, claimed, hint, headline)

    quality = scoring.quality_score(
        assessment.display_label,
        tiers.tier1,
        tiers.tier2,
        hours_since_last,
        len(recent),
        confidence,
        assessment.label_quality,
        policy,
    )
    sentiment_avg, sentiment_label = scoring.sentiment_summary(recent)

    return TrendEventResult(
        event_key=topic_key,
        event_title=assessment.display_label,
        label_quality=assessment.label_quality,
        label_source=assessment.label_source,
        counts=counts,
        baseline=baseline,
        velocity=velocity,
        momentum=momentum,
        acceleration=acceleration,
        z_score=z_score,
        evidence_count=len(recent),
        source_count=sources.source_count,
        news_source_count=sources.news_count,
        social_source_count=sources.social_count,
        tier1_count=tiers.tier1,
        tier2_count=tiers.tier2,
        tier3_count=tiers.tier3,
        has_tier12_corroboration=tiers.has_tier12_corroboration,
        is_tier3_only=tiers.is_tier3_only,
        weighted_evidence_score=weighted,
        is_trending=trending,
        is_breaking=breaking,
        breaking_path=path,
        trend_stage=scoring.trend_stage(
            z_score, acceleration, hours_old if hours_old is not None else float("inf")
        ),
        freshness=scoring.freshness(hours_since_last),
        confidence_score=confidence,
        quality_score=quality,
        rank_score=scoring.rank_score(confidence, breaking, z_score, tiers.is_tier3_only, policy),
        sentiment_avg=sentiment_avg,
        sentiment_label=sentiment_label,
        top_headline=headline,
        first_seen_at=first_seen,
        last_seen_at=last_seen,
        calculated_at=now,
        confidence_factors=factors,
    )


def recompute_trends(
    evidence: Iterable[EvidenceRecord],
    reference_time: datetime,
    policy: TrendPolicy | None = None,
) -> list[TrendEventResult]:
    """
    Recompute every topic present in the evidence.

    Args:
        evidence: Evidence for any number of topics
        reference_time: Scoring time
        policy: Thresholds

    Returns:
        One result per topic, highest rank first
    """
    policy = policy or TrendPolicy()
    now = ensure_utc(reference_time)

    frame = EvidenceFrameTransformer().transform(
        evidence_to_frame(evidence), reference_time=now
    )
    if frame.empty:
        return []

    counts = count_windows(frame, now)
    baselines = hourly_baselines(frame, now)

    by_topic: dict[str, list[EvidenceRecord]] = defaultdict(list)
    for row in frame.to_dict(orient="records"):
        by_topic[row["topic_key"]].append(_record_from_row(row))

    results = [
        recompute_topic(
            topic,
            items,
            now,
            policy,
            counts=counts.get(topic, WindowCounts()),
            baseline=baselines.get(topic, HourlyBaseline()),
        )
        for topic, items in by_topic.items()
    ]
    results.sort(key=lambda r: (-r.rank_score, r.event_key))

    trending = sum(r.is_trending for r in results)
    breaking = sum(r.is_breaking for r in results)
    logger.info(
        f"Recomputed {len(results)} topics: {trending} trending, {breaking} breaking"
    )
    return results


def _record_from_row(row: dict) -> EvidenceRecord:
    """Rebuild a record from a cleaned evidence frame row."""
    row = clean_nan_values(row)
    return EvidenceRecord(
        topic_key=str(row["topic_key"]),
        document_id=str(row["document_id"]),
        observed_at=row["observed_at"].to_pydatetime(),
        source_type=row.get("source_type") or "rss",
        source=row.get("source"),
        source_tier=row.get("source_tier"),
        sentiment=row.get("sentiment"),
        title=row.get("title"),
        label=row.get("label"),
        is_event_phrase=bool(row.get("is_event_phrase")),
        label_quality_hint=row.get("label_quality_hint"),
    )

"""
Trend Recompute Flow

Rebuilds trend_events from stored evidence.
- Compute: score every topic from the last week of evidence (read only)
- Store: upsert each topic atomically, skipping results older than the stored row, and commit
- Decay: clear flags of events whose evidence has aged out
"""

from datetime import UTC, datetime
from typing import Any

from prefect import flow, task
from prefect.cache_policies import NONE

from campaign_intel_etl.config import get_settings
from campaign_intel_etl.database import get_db_session
from campaign_intel_etl.services.trend_service import TrendService
from campaign_intel_etl.trends.types import TrendEventResult, TrendPolicy
from campaign_intel_etl.utils.logger import get_logger

TREND_RETRY_CONFIG = {
    "retries": 2,
    "retry_delay_seconds": 10,
}
TREND_TASK_TIMEOUT = 600  # 10 minutes


def _build_service(session) -> TrendService:
    settings = get_settings()
    return TrendService(
        session,
        policy=TrendPolicy.from_settings(settings),
        lookback_days=settings.trend_lookback_days,
    )


@task(
    name="compute_trends",
    description="Recompute trend state for every topic with recent evidence",
    retries=TREND_RETRY_CONFIG["retries"],
    retry_delay_seconds=TREND_RETRY_CONFIG["retry_delay_seconds"],
    timeout_seconds=TREND_TASK_TIMEOUT,
    cache_policy=NONE,
)
def compute_trends_task(
    reference_time: datetime, topic_keys: list[str] | None = None
) -> list[TrendEventResult]:
    """
    Recompute trend state without writing.

    Args:
        reference_time: Scoring time
        topic_keys: Optional topic filter

    Returns:
        One result per topic, highest rank first
    """
    with get_db_session() as session:
        return _build_service(session).compute(reference_time, topic_keys)


@task(
    name="store_trend_event",
    description="Upsert one topic's trend event",
    retries=TREND_RETRY_CONFIG["retries"],
    retry_delay_seconds=TREND_RETRY_CONFIG["retry_delay_seconds"],
    cache_policy=NONE,
)
def store_trend_event_task(result: TrendEventResult) -> str:
    """Upsert and commit one topic so a failure never rolls back other topics."""
    with get_db_session() as session:
        _build_service(session).store(result)
    return result.event_key


@task(
    name="decay_trend_events",
    description="Clear flags of events with no remaining evidence",
    retries=TREND_RETRY_CONFIG["retries"],
    retry_delay_seconds=TREND_RETRY_CONFIG["retry_delay_seconds"],
    cache_policy=NONE,
)
def decay_trend_events_task(
    reference_time: datetime, recomputed_keys: list[str], topic_keys: list[str] | None = None
) -> list[str]:
    """Decay flagged events that were not recomputed."""
    with get_db_session() as session:
        return _build_service(session).decay_missing(reference_time, recomputed_keys, topic_keys)


@flow(
    name="trend_recompute_flow",
    description="Recompute trend events from stored evidence",
    log_prints=True,
)
def trend_recompute_flow(
    reference_time: datetime | None = None,
    topic_keys: list[str] | None = None,
) -> dict[str, Any]:
    """
    Recompute and store trend events.

    Args:
        reference_time: Scoring time (default: now, UTC)
        topic_keys: Optional topic filter

    Returns:
        Dictionary with per-run statistics
    """
    logger = get_logger()
    logger.info("=" * 60)
    logger.info("TREND RECOMPUTE FLOW")
    logger.info("=" * 60)

    reference_time = reference_time or datetime.now(UTC)
    settings = get_settings()
    compute = compute_trends_task.with_options(
        timeout_seconds=settings.trend_recompute_timeout_seconds
    )

    logger.info(f"Reference time: {reference_time.isoformat()}")
    if topic_keys:
        logger.info(f"Topics: {', '.join(topic_keys)}")

    results = compute(reference_time=reference_time, topic_keys=topic_keys)

    stored: list[str] = []
    failed: list[dict[str, str]] = []
    for result in results:
        try:
            stored.append(store_trend_event_task(result=result))
        except Exception as e:
            logger.error(f"✗ Failed to store trend {result.event_key}: {e}")
            failed.append({"event_key": result.event_key, "error": str(e)})

    decayed = decay_trend_events_task(
        reference_time=reference_time,
        recomputed_keys=[r.event_key for r in results],
        topic_keys=topic_keys,
    )

    trending = [r for r in results if r.is_trending]
    breaking = [r for r in results if r.is_breaking]

    logger.info("\n" + "=" * 60)
    logger.info("TREND RECOMPUTE SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Topics:    {len(results):,}")
    logger.info(f"Stored:    {len(stored):,}")
    logger.info(f"Trending:  {len(trending):,}")
    logger.info(f"Breaking:  {len(breaking):,}")
    logger.info(f"Decayed:   {len(decayed):,}")
    for result in breaking[:10]:
        logger.info(f"  BREAKING {result.event_title} ({result.breaking_path})")
    if failed:
        logger.warning(f"⚠ Failed topics: {len(failed)}")
    logger.info("=" * 60)

    return {
        "reference_time": reference_time.isoformat(),
        "topics": len(results),
        "stored": len(stored),
        "trending": len(trending),
        "breaking": len(breaking),
        "decayed": decayed,
        "failed": failed,
        "top_trends": [r.event_title for r in trending[:10]],
        "success": not failed,
    }

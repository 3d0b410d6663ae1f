"""
Attribution Flows

Runs the attribution waterfall over stored ActBlue transactions.
- Backfill: attribute transactions in keyset-paginated batches, one commit per batch
- Summary: recompute attribution for a date range and report the tier mix
"""

from datetime import date
from typing import Any

from prefect import flow, task
from prefect.cache_policies import NONE

from campaign_intel_etl.config import get_settings
from campaign_intel_etl.database import get_db_session
from campaign_intel_etl.repos.transaction_repo import TransactionRepo
from campaign_intel_etl.services.attribution_service import AttributionService
from campaign_intel_etl.utils.logger import get_logger

# Retry configuration for attribution tasks
ATTRIBUTION_RETRY_CONFIG = {
    "retries": 3,
    "retry_delay_seconds": 10,
}
ATTRIBUTION_TASK_TIMEOUT = 1800  # 30 minutes

transaction_repo = TransactionRepo()


@task(
    name="get_attribution_batch",
    description="Get the next page of transaction ids to attribute",
    retries=ATTRIBUTION_RETRY_CONFIG["retries"],
    retry_delay_seconds=ATTRIBUTION_RETRY_CONFIG["retry_delay_seconds"],
    cache_policy=NONE,
)
def get_attribution_batch_task(
    organization_id: str,
    after_id: int,
    batch_size: int,
    start_date: date | None = None,
    end_date: date | None = None,
    reattribute: bool = False,
) -> list[int]:
    """
    Get ids of the next batch of transactions.

    Args:
        organization_id: Organization ID
        after_id: Keyset cursor (last id of the previous batch)
        batch_size: Maximum ids to return
        start_date: Optional first transaction day
        end_date: Optional last transaction day
        reattribute: Include transactions that already have attribution

    Returns:
        Ascending list of transaction ids
    """
    with get_db_session() as session:
        rows = transaction_repo.get_unattributed(
            session,
            organization_id,
            batch_size=batch_size,
            after_id=after_id,
            start_date=start_date,
            end_date=end_date,
            include_attributed=reattribute,
        )
        return [row.id for row in rows]


@task(
    name="attribute_batch",
    description="Attribute one batch of transactions and store the results",
    retries=ATTRIBUTION_RETRY_CONFIG["retries"],
    retry_delay_seconds=ATTRIBUTION_RETRY_CONFIG["retry_delay_seconds"],
    timeout_seconds=ATTRIBUTION_TASK_TIMEOUT,
    cache_policy=NONE,
)
def attribute_batch_task(organization_id: str, transaction_ids: list[int]) -> dict[str, Any]:
    """
    Attribute a batch of transactions in its own transaction.

    Args:
        organization_id: Organization ID
        transaction_ids: Ids returned by get_attribution_batch_task

    Returns:
        Dictionary with per-tier counts for the batch
    """
    logger = get_logger()

    with get_db_session() as session:
        service = AttributionService(session)
        rows = transaction_repo.get_by_ids(session, organization_id, transaction_ids)
        inputs = [transaction_repo.to_input(row) for row in rows]
        results = service.attribute_transactions(organization_id, inputs)

        tier_counts: dict[int, int] = {}
        for row, result in zip(rows, results, strict=True):
            service.attach(row, result)
            tier_counts[result.tier] = tier_counts.get(result.tier, 0) + 1

    logger.info(f"Attributed {len(rows)} transactions, tiers: {dict(sorted(tier_counts.items()))}")
    return {"processed": len(rows), "tier_counts": tier_counts}


@task(
    name="summarize_attribution",
    description="Summarize attribution quality for a date range",
    retries=ATTRIBUTION_RETRY_CONFIG["retries"],
    retry_delay_seconds=ATTRIBUTION_RETRY_CONFIG["retry_delay_seconds"],
    cache_policy=NONE,
)
def summarize_attribution_task(
    organization_id: str, start_date: date, end_date: date
) -> dict[str, Any]:
    """Recompute and summarize attribution of donations in a range."""
    with get_db_session() as session:
        summary = AttributionService(session).summarize(organization_id, start_date, end_date)
    return summary.to_dict()


@flow(
    name="attribution_backfill_flow",
    description="Attribute stored ActBlue transactions through the waterfall",
    log_prints=True,
)
def attribution_backfill_flow(
    organization_id: str,
    start_date: date | None = None,
    end_date: date | None = None,
    batch_size: int | None = None,
    reattribute: bool = False,
) -> dict[str, Any]:
    """
    Attribute an organization's transactions batch by batch.

    A failed batch is logged and skipped; the batches before and after it keep
    their committed results.

    Args:
        organization_id: Organization ID
        start_date: Optional first transaction day
        end_date: Optional last transaction day
        batch_size: Transactions per batch (default: settings.batch_size)
        reattribute: Recompute transactions that already have attribution

    Returns:
        Dictionary with batch and tier statistics
    """
    logger = get_logger()
    logger.info("=" * 60)
    logger.info("ATTRIBUTION BACKFILL FLOW")
    logger.info("=" * 60)

    if (start_date is None) != (end_date is None):
        raise ValueError("start_date and end_date must be given together")
    if start_date and end_date and start_date > end_date:
        raise ValueError(f"start_date {start_date} is after end_date {end_date}")

    settings = get_settings()
    batch_size = batch_size or settings.batch_size
    attribute_batch = attribute_batch_task.with_options(
        timeout_seconds=settings.attribution_task_timeout_seconds
    )
    logger.info(f"Organization: {organization_id}, batch size: {batch_size}")
    if start_date:
        logger.info(f"Date range: {start_date} to {end_date}")

    after_id = 0
    processed = 0
    batches = 0
    failed_batches: list[dict[str, Any]] = []
    tier_totals: dict[int, int] = {}

    while True:
        ids = get_attribution_batch_task(
            organization_id=organization_id,
            after_id=after_id,
            batch_size=batch_size,
            start_date=start_date,
            end_date=end_date,
            reattribute=reattribute,
        )
        if not ids:
            break

        batches += 1
        try:
            stats = attribute_batch(organization_id=organization_id, transaction_ids=ids)
        except Exception as e:
            logger.error(f"✗ Batch {batches} (ids {ids[0]}-{ids[-1]}) failed: {e}")
            failed_batches.append({"first_id": ids[0], "last_id": ids[-1], "error": str(e)})
        else:
            processed += stats["processed"]
            for tier, count in stats["tier_counts"].items():
                tier_totals[tier] = tier_totals.get(tier, 0) + count
            logger.info(f"✓ Batch {batches}: {stats['processed']} attributed")

        after_id = ids[-1]

    logger.info("\n" + "=" * 60)
    logger.info("ATTRIBUTION BACKFILL SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Batches:      {batches:,}")
    logger.info(f"Attributed:   {processed:,}")
    for tier, count in sorted(tier_totals.items()):
        logger.info(f"Tier {tier}:       {count:,}")
    if failed_batches:
        logger.warning(f"⚠ Failed batches: {len(failed_batches)}")
    logger.info("=" * 60)

    return {
        "organization_id": organization_id,
        "batches": batches,
        "processed": processed,
        "tier_counts": dict(sorted(tier_totals.items())),
        "failed_batches": failed_batches,
        "success": not failed_batches,
    }


@flow(
    name="attribution_summary_flow",
    description="Report attribution quality for a date range",
    log_prints=True,
)
def attribution_summary_flow(
    organization_id: str, start_date: date, end_date: date
) -> dict[str, Any]:
    """
    Summarize attribution for an organization's donations in a date range.

    Args:
        organization_id: Organization ID
        start_date: First day (inclusive)
        end_date: Last day (inclusive)

    Returns:
        Summary dictionary plus a 'success' flag
    """
    logger = get_logger()
    logger.info(f"Summarizing attribution for {organization_id}: {start_date} to {end_date}")

    summary = summarize_attribution_task(
        organization_id=organization_id, start_date=start_date, end_date=end_date
    )
    for warning in summary["warnings"]:
        logger.warning(f"⚠ {warning}")

    return {**summary, "success": True}

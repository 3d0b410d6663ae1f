"""Prefect flows for attribution and trend orchestration."""

from campaign_intel_etl.flows.attribution_flow import (
    attribution_backfill_flow,
    attribution_summary_flow,
)
from campaign_intel_etl.flows.trend_flow import trend_recompute_flow

__all__ = [
    # Attribution flows
    "attribution_backfill_flow",
    "attribution_summary_flow",
    # Trend flows
    "trend_recompute_flow",
]

"""Rolling window counts and hourly baselines over cleaned evidence frames."""

from datetime import datetime

import pandas as pd

from campaign_intel_etl.trends.types import HourlyBaseline, WindowCounts
from campaign_intel_etl.trends.velocity import baseline_from_readings

# (column, lower bound hours inclusive, upper bound hours exclusive)
WINDOWS = (
    ("count_1h", 0, 1),
    ("count_6h", 0, 6),
    ("count_24h", 0, 24),
    ("count_7d", 0, 168),
    ("prev_count_6h", 6, 12),
    ("prev_count_24h", 24, 48),
)

BASELINE_HOURS = 168


def _utc_timestamp(reference_time: datetime) -> pd.Timestamp:
    ts = pd.Timestamp(reference_time)
    return ts.tz_localize("UTC") if ts.tzinfo is None else ts.tz_convert("UTC")


def _with_age(frame: pd.DataFrame, reference_time: datetime) -> pd.DataFrame:
    now = _utc_timestamp(reference_time)
    age_hours = (now - frame["observed_at"]).dt.total_seconds() / 3600
    return frame.assign(age_hours=age_hours)[age_hours >= 0]


def count_windows(frame: pd.DataFrame, reference_time: datetime) -> dict[str, WindowCounts]:
    """
    Count mentions per topic in each trailing window.

    All windows are filters over the same deduplicated rows, so wider windows
    can never hold fewer mentions than the narrower ones they contain.

    Args:
        frame: Cleaned evidence (see EvidenceFrameTransformer)
        reference_time: End of every window

    Returns:
        Mapping of topic key to WindowCounts
    """
    if frame.empty:
        return {}

    aged = _with_age(frame, reference_time)
    if aged.empty:
        return {}

    flags = pd.DataFrame(
        {
            column: (aged["age_hours"] >= low) & (aged["age_hours"] < high)
            for column, low, high in WINDOWS
        }
    )
    flags["topic_key"] = aged["topic_key"].to_numpy()
    totals = flags.groupby("topic_key").sum()

    return {
        topic: WindowCounts(**{column: int(row[column]) for column, _, _ in WINDOWS})
        for topic, row in totals.iterrows()
    }


def hourly_baselines(frame: pd.DataFrame, reference_time: datetime) -> dict[str, HourlyBaseline]:
    """
    Weekly hourly baseline per topic.

    Uses the complete hourly buckets before the current hour (hours 1 to 167
    back), so the hour being scored never inflates its own baseline.

    Args:
        frame: Cleaned evidence
        reference_time: Scoring time

    Returns:
        Mapping of topic key to HourlyBaseline
    """
    if frame.empty:
        return {}

    aged = _with_age(frame, reference_time)
    aged = aged[(aged["age_hours"] >= 1) & (aged["age_hours"] < BASELINE_HOURS)]
    if aged.empty:
        return {}

    buckets = aged.assign(hour=aged["age_hours"].astype(int))
    matrix = (
        buckets.groupby(["topic_key", "hour"])
        .size()
        .unstack(fill_value=0)
        .reindex(columns=range(1, BASELINE_HOURS), fill_value=0)
    )

    return {
        topic: baseline_from_readings([int(v) for v in readings.to_numpy()])
        for topic, readings in matrix.iterrows()
    }

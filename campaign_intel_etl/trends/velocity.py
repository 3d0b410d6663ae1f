"""Velocity, momentum and statistical significance of topic mention rates."""

import math
from collections.abc import Sequence

from campaign_intel_etl.trends.types import HourlyBaseline, TrendPolicy, WindowCounts

DEFAULT_POLICY = TrendPolicy()


def calculate_velocity(
    six_hour_count: int, daily_count: int, policy: TrendPolicy = DEFAULT_POLICY
) -> float:
    """
    Relative growth of the 6h hourly rate over the 24h hourly rate, in percent.

    A topic with no daily history but recent mentions is a brand-new topic and
    gets the capped new-topic velocity.

    Args:
        six_hour_count: Mentions in the last 6 hours
        daily_count: Mentions in the last 24 hours
        policy: Trend policy (for the new-topic cap)

    Returns:
        Velocity percentage rounded to 2 decimals
    """
    six_hour_avg = six_hour_count / 6
    daily_avg = daily_count / 24

    if daily_avg > 0:
        return round(((six_hour_avg - daily_avg) / daily_avg) * 100, 2)
    if six_hour_count > 0:
        return policy.new_topic_velocity
    return 0.0


def _rate_ratio(six_hour_count: int, daily_count: int) -> float:
    return (six_hour_count / 6) / (daily_count / 24)


def calculate_momentum(counts: WindowCounts, velocity: float) -> float:
    """
    Change of the 6h/24h rate ratio against the previous period.

    Only meaningful when both previous-period windows had mentions; otherwise
    falls back to velocity / 100.

    Args:
        counts: Current and previous window counts
        velocity: Current velocity (percent)

    Returns:
        Momentum rounded to 4 decimals
    """
    if counts.prev_count_6h > 0 and counts.prev_count_24h > 0 and counts.count_24h > 0:
        current = _rate_ratio(counts.count_6h, counts.count_24h)
        previous = _rate_ratio(counts.prev_count_6h, counts.prev_count_24h)
        return round(current - previous, 4)
    return round(velocity / 100, 4)


def calculate_acceleration(count_1h: int, count_6h: int) -> float:
    """
    Last hour's rate against the 6h hourly average, in percent.

    Args:
        count_1h: Mentions in the last hour
        count_6h: Mentions in the last 6 hours

    Returns:
        Acceleration percentage (0 without 6h activity)
    """
    rate_6h = count_6h / 6
    if rate_6h <= 0:
        return 0.0
    return round(((count_1h - rate_6h) / rate_6h) * 100, 2)


def is_trending(
    velocity: float,
    daily_count: int,
    six_hour_count: int,
    policy: TrendPolicy = DEFAULT_POLICY,
) -> bool:
    """
    Dual trending rule: sustained growth or a short burst.

    Args:
        velocity: Velocity percentage
        daily_count: Mentions in the last 24 hours
        six_hour_count: Mentions in the last 6 hours
        policy: Thresholds

    Returns:
        True if the topic is trending
    """
    sustained = velocity > policy.velocity_threshold and daily_count >= policy.min_daily_count
    burst = six_hour_count >= policy.burst_six_hour_count
    return sustained or burst


def baseline_from_readings(readings: Sequence[int | float]) -> HourlyBaseline:
    """
    Mean and spread of hourly mention counts.

    With at least three non-zero hours the population standard deviation is
    used. Sparser histories get an estimate so a single spike does not produce
    a zero deviation.

    Args:
        readings: Hourly counts (zeros included)

    Returns:
        HourlyBaseline with data_points = number of non-zero hours
    """
    if not readings:
        return HourlyBaseline()

    mean = sum(readings) / len(readings)
    non_zero = [r for r in readings if r > 0]

    if len(non_zero) >= 3:
        stddev = math.sqrt(sum((r - mean) ** 2 for r in readings) / len(readings))
    elif non_zero:
        stddev = max(mean * 0.5, (max(readings) - mean) / 2)
    else:
        stddev = 0.0

    return HourlyBaseline(mean=round(mean, 4), stddev=round(stddev, 4), data_points=len(non_zero))


def calculate_z_score(
    count_1h: int, baseline: HourlyBaseline, policy: TrendPolicy = DEFAULT_POLICY
) -> float:
    """
    How unusual the last hour is compared to the weekly hourly baseline.

    Topics without enough history use a Poisson estimate around a conservative
    baseline, scaled down so new topics do not read as extreme spikes.

    Args:
        count_1h: Mentions in the last hour
        baseline: Hourly baseline
        policy: Clamp bounds and history requirements

    Returns:
        Z-score clamped to the policy bounds, rounded to 2 decimals
    """
    if baseline.data_points >= policy.min_baseline_points and baseline.stddev > 0:
        z_score = (count_1h - baseline.mean) / baseline.stddev
    else:
        conservative = max(0.5, count_1h / 3)
        stddev = math.sqrt(max(1.0, conservative))
        z_score = ((count_1h - conservative) / stddev) * policy.poisson_scale

    clamped = min(max(z_score, policy.z_score_floor), policy.z_score_ceiling)
    return round(clamped, 2)


def has_historical_baseline(
    baseline: HourlyBaseline, policy: TrendPolicy = DEFAULT_POLICY
) -> bool:
    return baseline.data_points >= policy.min_baseline_points and baseline.stddev > 0

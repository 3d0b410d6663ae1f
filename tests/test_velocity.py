"""Tests for velocity, momentum and z-score calculations."""

import pytest

from campaign_intel_etl.trends.types import HourlyBaseline, TrendPolicy, WindowCounts
from campaign_intel_etl.trends.velocity import (
    baseline_from_readings,
    calculate_acceleration,
    calculate_momentum,
    calculate_velocity,
    calculate_z_score,
    has_historical_baseline,
    is_trending,
)


class TestCalculateVelocity:
    """Tests for calculate_velocity()."""

    def test_no_activity(self):
        """No mentions at all is zero velocity, not a division error."""
        assert calculate_velocity(0, 0) == 0.0

    def test_new_topic(self):
        """Recent mentions without daily history is the capped new-topic velocity."""
        assert calculate_velocity(7, 0) == 500.0

    def test_growth(self):
        """6 in 6h against 12 in 24h is double the daily rate."""
        assert calculate_velocity(6, 12) == 100.0

    def test_flat(self):
        """An even spread over the day is zero velocity."""
        assert calculate_velocity(6, 24) == 0.0

    def test_decline(self):
        """No recent mentions after a busy day is -100%."""
        assert calculate_velocity(0, 24) == -100.0

    def test_rounded(self):
        assert calculate_velocity(1, 7) == round(((1 / 6 - 7 / 24) / (7 / 24)) * 100, 2)

    def test_custom_new_topic_velocity(self):
        assert calculate_velocity(3, 0, TrendPolicy(new_topic_velocity=250.0)) == 250.0


class TestIsTrending:
    """Tests for is_trending()."""

    def test_sustained_growth(self):
        """velocity above threshold with the daily floor met trends."""
        assert is_trending(velocity=51, daily_count=3, six_hour_count=2)

    def test_daily_floor_not_met(self):
        """High velocity on a tiny daily count does not trend without a burst."""
        assert not is_trending(velocity=200, daily_count=2, six_hour_count=2)

    def test_burst_alone(self):
        """A 6h burst trends regardless of velocity."""
        assert is_trending(velocity=10, daily_count=1, six_hour_count=5)

    def test_velocity_at_threshold_not_trending(self):
        """The velocity comparison is strict."""
        assert not is_trending(velocity=50, daily_count=10, six_hour_count=4)

    def test_custom_policy(self):
        policy = TrendPolicy(burst_six_hour_count=10)
        assert not is_trending(velocity=0, daily_count=1, six_hour_count=5, policy=policy)


class TestCalculateMomentum:
    """Tests for calculate_momentum()."""

    def test_compares_with_previous_period(self):
        counts = WindowCounts(count_6h=6, count_24h=12, prev_count_6h=3, prev_count_24h=12)
        # current ratio 2.0, previous ratio 1.0
        assert calculate_momentum(counts, velocity=100.0) == 1.0

    def test_falls_back_to_velocity(self):
        counts = WindowCounts(count_6h=6, count_24h=12)
        assert calculate_momentum(counts, velocity=100.0) == 1.0
        assert calculate_momentum(WindowCounts(), velocity=0.0) == 0.0


class TestCalculateAcceleration:
    """Tests for calculate_acceleration()."""

    def test_speeding_up(self):
        assert calculate_acceleration(count_1h=3, count_6h=6) == 200.0

    def test_no_six_hour_activity(self):
        assert calculate_acceleration(count_1h=0, count_6h=0) == 0.0


class TestBaselineAndZScore:
    """Tests for baseline_from_readings() and calculate_z_score()."""

    def test_population_stddev_with_enough_history(self):
        baseline = baseline_from_readings([2, 4, 4, 4, 5, 5, 7, 9])
        assert baseline.mean == 5.0
        assert baseline.stddev == 2.0
        assert baseline.data_points == 8

    def test_sparse_history_estimate(self):
        """One spike in a quiet week gets a non-zero estimated deviation."""
        baseline = baseline_from_readings([0, 0, 0, 4])
        assert baseline.mean == 1.0
        assert baseline.stddev == 1.5
        assert baseline.data_points == 1

    def test_empty(self):
        assert baseline_from_readings([]) == HourlyBaseline()

    def test_z_score_with_history(self):
        baseline = HourlyBaseline(mean=5.0, stddev=2.0, data_points=8)
        assert has_historical_baseline(baseline)
        assert calculate_z_score(11, baseline) == 3.0

    def test_z_score_clamped(self):
        baseline = HourlyBaseline(mean=1.0, stddev=0.5, data_points=10)
        assert calculate_z_score(100, baseline) == 10.0
        assert calculate_z_score(0, HourlyBaseline(mean=50.0, stddev=1.0, data_points=10)) == -2.0

    def test_poisson_fallback_is_dampened(self):
        """New topics get a scaled Poisson estimate rather than an extreme spike."""
        baseline = HourlyBaseline()
        assert not has_historical_baseline(baseline)

        # conservative = 3, stddev = sqrt(3), z = (9 - 3) / sqrt(3) * 0.6
        assert calculate_z_score(9, baseline) == pytest.approx(2.08, abs=0.01)
        assert calculate_z_score(9, baseline) < 3.0

"""Tests for settings, trend policy construction and flow argument checks."""

from datetime import date

import pytest

from campaign_intel_etl.config import Settings, get_settings
from campaign_intel_etl.flows.attribution_flow import attribution_backfill_flow
from campaign_intel_etl.trends.types import TrendPolicy


@pytest.fixture
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        settings = Settings(database_url="sqlite://")

        assert settings.batch_size == 1000
        assert settings.attribution_fuzzy_threshold == 0.6
        assert settings.attribution_fuzzy_confidence_cap == 0.80
        assert settings.trend_velocity_threshold == 50.0
        assert settings.trend_lookback_days == 7

    def test_environment_overrides(self, monkeypatch, fresh_settings):
        monkeypatch.setenv("TREND_LOOKBACK_DAYS", "3")
        monkeypatch.setenv("ATTRIBUTION_FUZZY_THRESHOLD", "0.7")

        settings = get_settings()

        assert settings.trend_lookback_days == 3
        assert settings.attribution_fuzzy_threshold == 0.7


class TestTrendPolicy:
    """Tests for TrendPolicy validation and construction."""

    def test_from_settings(self):
        settings = Settings(
            database_url="sqlite://",
            trend_min_daily_count=4,
            trend_breaking_z_score=5.0,
        )

        policy = TrendPolicy.from_settings(settings)

        assert policy.min_daily_count == 4
        assert policy.breaking_z_score == 5.0
        # Extreme threshold is raised to stay above the breaking threshold
        assert policy.breaking_extreme_z_score == 5.0

    def test_invalid_z_score_bounds(self):
        with pytest.raises(ValueError, match="floor"):
            TrendPolicy(z_score_floor=5.0, z_score_ceiling=1.0)

    def test_invalid_breaking_thresholds(self):
        with pytest.raises(ValueError, match="Extreme"):
            TrendPolicy(breaking_z_score=5.0)

    def test_invalid_counts(self):
        with pytest.raises(ValueError, match="positive"):
            TrendPolicy(burst_six_hour_count=0)


class TestBackfillArguments:
    """Argument checks that run before any batch is read."""

    def test_dates_required_together(self):
        with pytest.raises(ValueError, match="together"):
            attribution_backfill_flow.fn("org-1", start_date=date(2026, 9, 1))

    def test_date_order(self):
        with pytest.raises(ValueError, match="after end_date"):
            attribution_backfill_flow.fn(
                "org-1", start_date=date(2026, 9, 2), end_date=date(2026, 9, 1)
            )

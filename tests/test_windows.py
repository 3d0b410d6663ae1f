"""Tests for rolling window counts and hourly baselines."""

from datetime import UTC, datetime, timedelta

import pandas as pd

from campaign_intel_etl.transformers.evidence import EvidenceFrameTransformer, evidence_to_frame
from campaign_intel_etl.trends.types import EvidenceRecord
from campaign_intel_etl.trends.windows import count_windows, hourly_baselines

NOW = datetime(2026, 10, 1, 12, 0, tzinfo=UTC)


def frame_for(hours_ago: list[float], topic: str = "tariffs"):
    evidence = [
        EvidenceRecord(
            topic_key=topic, document_id=f"{topic}-{i}", observed_at=NOW - timedelta(hours=h)
        )
        for i, h in enumerate(hours_ago)
    ]
    return EvidenceFrameTransformer().transform(evidence_to_frame(evidence), reference_time=NOW)


class TestCountWindows:
    """Tests for count_windows()."""

    def test_counts_each_window(self):
        frame = frame_for([0.5, 2, 5, 8, 20, 30, 100, 200])

        counts = count_windows(frame, NOW)["tariffs"]

        assert counts.count_1h == 1
        assert counts.count_6h == 3
        assert counts.count_24h == 5
        assert counts.count_7d == 7
        assert counts.prev_count_6h == 1
        assert counts.prev_count_24h == 1

    def test_windows_nested(self):
        """Wider windows never hold fewer mentions than narrower ones."""
        frame = frame_for([0.1, 0.2, 3, 7, 13, 23.9, 24, 47, 90, 160])

        counts = count_windows(frame, NOW)["tariffs"]

        assert counts.count_1h <= counts.count_6h <= counts.count_24h <= counts.count_7d

    def test_boundaries_half_open(self):
        """A mention exactly 1h old belongs to the 6h window, not the 1h window."""
        counts = count_windows(frame_for([1.0]), NOW)["tariffs"]
        assert counts.count_1h == 0
        assert counts.count_6h == 1

    def test_topics_counted_separately(self):
        frame = pd.concat(
            [frame_for([1.5]), frame_for([2.5, 3.5], topic="ceasefire")], ignore_index=True
        )
        counts = count_windows(frame, NOW)
        assert counts["tariffs"].count_6h == 1
        assert counts["ceasefire"].count_6h == 2

    def test_empty(self):
        assert count_windows(frame_for([]), NOW) == {}


class TestHourlyBaselines:
    """Tests for hourly_baselines()."""

    def test_current_hour_excluded(self):
        """Mentions in the hour being scored do not feed the baseline."""
        assert hourly_baselines(frame_for([0.2, 0.5]), NOW) == {}

    def test_weekly_mean(self):
        """Mean is taken over all 167 complete hours, zeros included."""
        frame = frame_for([1.5, 2.5, 3.5, 50.5, 100.5, 150.5])

        baseline = hourly_baselines(frame, NOW)["tariffs"]

        assert baseline.data_points == 6
        assert baseline.mean == round(6 / 167, 4)
        assert baseline.stddev > 0

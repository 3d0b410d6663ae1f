"""Aggregate attribution data-quality summary."""

from collections.abc import Iterable, Sequence
from dataclasses import asdict, dataclass, field
from typing import Any

import pandas as pd

from campaign_intel_etl.attribution.types import (
    UNATTRIBUTED_PLATFORM,
    AttributionResult,
    ConfidenceLevel,
)

UNATTRIBUTED_WARNING_PCT = 50.0


@dataclass
class AttributionSummary:
    """Counts and shares of attribution results for a date range."""

    total: int
    level_counts: dict[str, int] = field(default_factory=dict)
    level_percentages: dict[str, float] = field(default_factory=dict)
    platform_counts: dict[str, int] = field(default_factory=dict)
    tier_counts: dict[int, int] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return asdict(self)


def summarize_attribution(
    results: Sequence[AttributionResult],
    spend_available: bool = True,
    rule_errors: Iterable[str] = (),
    unattributed_warning_pct: float = UNATTRIBUTED_WARNING_PCT,
) -> AttributionSummary:
    """
    Summarize attribution results for dashboards.

    Every confidence level appears in the output, even with a zero count.
    Configuration problems surface as warnings rather than silently skewing
    the numbers.

    Args:
        results: Attribution results for the range
        spend_available: Whether any campaign spend data existed for the range
        rule_errors: Messages for rules that were skipped
        unattributed_warning_pct: Unattributed share that triggers a warning

    Returns:
        AttributionSummary
    """
    levels = [level.value for level in ConfidenceLevel]
    warnings = [f"Attribution rule skipped: {error}" for error in rule_errors]

    if not spend_available:
        warnings.append(
            "No campaign spend data for this range; temporal correlation (tier 4) "
            "matches are unavailable"
        )

    total = len(results)
    if total == 0:
        warnings.append("No transactions found for this range")
        return AttributionSummary(
            total=0,
            level_counts={level: 0 for level in levels},
            level_percentages={level: 0.0 for level in levels},
            warnings=warnings,
        )

    df = pd.DataFrame([result.to_dict() for result in results])

    level_counts = (
        df["confidence_level"].value_counts().reindex(levels, fill_value=0).astype(int)
    )
    level_percentages = (level_counts / total * 100).round(2)
    platform_counts = df["platform"].value_counts().sort_index().astype(int)
    tier_counts = df["tier"].value_counts().sort_index().astype(int)

    unattributed = int(platform_counts.get(UNATTRIBUTED_PLATFORM, 0))
    unattributed_pct = round(unattributed / total * 100, 2)
    if unattributed_pct > unattributed_warning_pct:
        warnings.append(f"{unattributed_pct}% of transactions are unattributed")

    return AttributionSummary(
        total=total,
        level_counts={level: int(count) for level, count in level_counts.items()},
        level_percentages={level: float(pct) for level, pct in level_percentages.items()},
        platform_counts={platform: int(count) for platform, count in platform_counts.items()},
        tier_counts={int(tier): int(count) for tier, count in tier_counts.items()},
        warnings=warnings,
    )

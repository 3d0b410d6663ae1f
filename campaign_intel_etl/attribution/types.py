"""Records exchanged with the attribution waterfall."""

from dataclasses import asdict, dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

UNATTRIBUTED_PLATFORM = "unattributed"


class ConfidenceLevel(str, Enum):
    """Confidence bracket of an attribution result, strongest first."""

    DETERMINISTIC = "deterministic"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


class AttributionMethod(str, Enum):
    """How a transaction was matched to its marketing source."""

    CLICK_ID = "click_id"
    REFCODE_EXACT_WITH_AD = "refcode_exact_with_ad"
    PATTERN_RULE = "pattern_rule"
    REFCODE_MAPPING_NO_AD = "refcode_mapping_no_ad"
    FUZZY_MATCH = "fuzzy_match"
    TEMPORAL_CORRELATION = "temporal_correlation"
    NO_MATCH = "no_match"


# Lower bound of each level, checked in order
CONFIDENCE_LEVEL_FLOORS: tuple[tuple[ConfidenceLevel, float], ...] = (
    (ConfidenceLevel.DETERMINISTIC, 1.0),
    (ConfidenceLevel.HIGH, 0.85),
    (ConfidenceLevel.MEDIUM, 0.60),
)


def confidence_level_for_score(score: float) -> ConfidenceLevel:
    """
    Bucket a confidence score into its confidence level.

    Args:
        score: Confidence score in [0, 1]

    Returns:
        deterministic (1.00), high (>= 0.85), medium (>= 0.60), low (> 0) or none
    """
    for level, floor in CONFIDENCE_LEVEL_FLOORS:
        if score >= floor:
            return level
    if score > 0:
        return ConfidenceLevel.LOW
    return ConfidenceLevel.NONE


@dataclass(frozen=True)
class TransactionInput:
    """The attribution-relevant fields of one transaction."""

    organization_id: str
    transaction_date: datetime | date
    refcode: str | None = None
    click_id: str | None = None
    fbclid: str | None = None
    contribution_form: str | None = None
    transaction_id: str | None = None

    @property
    def calendar_date(self) -> date:
        """Calendar day of the transaction (used for spend and mapping windows)."""
        if isinstance(self.transaction_date, datetime):
            return self.transaction_date.date()
        return self.transaction_date

    @property
    def refcode_key(self) -> str:
        """Lower-cased, trimmed refcode; empty string when absent."""
        return (self.refcode or "").strip().lower()

    @property
    def has_click_identifier(self) -> bool:
        return bool((self.click_id or "").strip() or (self.fbclid or "").strip())


@dataclass(frozen=True)
class MappingRecord:
    """Read-only copy of a refcode mapping row."""

    refcode: str
    platform: str
    campaign_id: str | None = None
    ad_id: str | None = None
    creative_id: str | None = None
    first_seen: date | None = None
    last_seen: date | None = None
    is_active: bool = True

    @property
    def has_ad(self) -> bool:
        return bool(self.ad_id)

    def covers(self, day: date) -> bool:
        """Whether the mapping's seen window includes the given day (open ends allowed)."""
        if self.first_seen is not None and day < self.first_seen:
            return False
        if self.last_seen is not None and day > self.last_seen:
            return False
        return True


@dataclass(frozen=True)
class RuleRecord:
    """Read-only copy of an attribution rule row."""

    name: str
    rule_type: str
    pattern: str
    platform: str
    confidence_score: float = 0.90
    priority: int = 100
    organization_id: str | None = None
    campaign_id: str | None = None
    is_active: bool = True

    @property
    def is_global(self) -> bool:
        return self.organization_id is None


@dataclass(frozen=True)
class SpendRecord:
    """Read-only copy of a daily campaign spend row."""

    campaign_id: str
    spend_date: date
    spend: float
    campaign_name: str | None = None
    ad_id: str | None = None


@dataclass(frozen=True)
class AttributionResult:
    """Outcome of running one transaction through the waterfall."""

    platform: str
    confidence_score: float
    confidence_level: str
    method: str
    tier: int
    matched_ad_id: str | None = None
    matched_campaign_id: str | None = None
    matched_creative_id: str | None = None
    rule_name: str | None = None
    is_global_rule: bool = False
    channel_hint: str | None = None

    @classmethod
    def create(
        cls,
        platform: str,
        confidence_score: float,
        method: AttributionMethod,
        tier: int,
        **kwargs: Any,
    ) -> "AttributionResult":
        """Build a result whose level is always derived from its score."""
        score = round(min(max(confidence_score, 0.0), 1.0), 2)
        return cls(
            platform=platform,
            confidence_score=score,
            confidence_level=confidence_level_for_score(score).value,
            method=method.value,
            tier=tier,
            **kwargs,
        )

    @property
    def is_attributed(self) -> bool:
        return self.tier != 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return asdict(self)


NO_MATCH = AttributionResult.create(
    platform=UNATTRIBUTED_PLATFORM,
    confidence_score=0.0,
    method=AttributionMethod.NO_MATCH,
    tier=0,
)

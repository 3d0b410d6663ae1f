"""Multi-tier donation attribution."""

from campaign_intel_etl.attribution.access import (
    AllowAllAccessPolicy,
    AllowListAccessPolicy,
    OrganizationAccessError,
    OrganizationAccessPolicy,
)
from campaign_intel_etl.attribution.channel import detect_sms_channel
from campaign_intel_etl.attribution.rules import compile_rules, rule_matches
from campaign_intel_etl.attribution.similarity import trigram_similarity
from campaign_intel_etl.attribution.snapshot import AttributionSnapshot
from campaign_intel_etl.attribution.summary import AttributionSummary, summarize_attribution
from campaign_intel_etl.attribution.types import (
    AttributionMethod,
    AttributionResult,
    ConfidenceLevel,
    MappingRecord,
    RuleRecord,
    SpendRecord,
    TransactionInput,
    confidence_level_for_score,
)
from campaign_intel_etl.attribution.waterfall import batch_attribute, resolve_attribution

__all__ = [
    "AllowAllAccessPolicy",
    "AllowListAccessPolicy",
    "AttributionMethod",
    "AttributionResult",
    "AttributionSnapshot",
    "AttributionSummary",
    "ConfidenceLevel",
    "MappingRecord",
    "OrganizationAccessError",
    "OrganizationAccessPolicy",
    "RuleRecord",
    "SpendRecord",
    "TransactionInput",
    "batch_attribute",
    "compile_rules",
    "confidence_level_for_score",
    "detect_sms_channel",
    "resolve_attribution",
    "rule_matches",
    "summarize_attribution",
    "trigram_similarity",
]

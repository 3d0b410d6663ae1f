"""Models package."""

from campaign_intel_etl.database import Base
from campaign_intel_etl.models.attribution_rule import AttributionRule
from campaign_intel_etl.models.campaign_spend import MetaCampaignSpendDaily
from campaign_intel_etl.models.refcode_mapping import RefcodeMapping
from campaign_intel_etl.models.transaction import ActBlueTransaction
from campaign_intel_etl.models.trend_event import TrendEvent
from campaign_intel_etl.models.trend_evidence import TrendEvidence

__all__ = [
    "Base",
    "ActBlueTransaction",
    "RefcodeMapping",
    "AttributionRule",
    "MetaCampaignSpendDaily",
    "TrendEvidence",
    "TrendEvent",
]

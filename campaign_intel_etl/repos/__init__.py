"""Repository classes"""

from campaign_intel_etl.repos.attribution_rule_repo import AttributionRuleRepo
from campaign_intel_etl.repos.campaign_spend_repo import CampaignSpendRepo
from campaign_intel_etl.repos.refcode_mapping_repo import RefcodeMappingRepo
from campaign_intel_etl.repos.transaction_repo import TransactionRepo
from campaign_intel_etl.repos.trend_event_repo import TrendEventRepo
from campaign_intel_etl.repos.trend_evidence_repo import TrendEvidenceRepo

__all__ = [
    "AttributionRuleRepo",
    "CampaignSpendRepo",
    "RefcodeMappingRepo",
    "TransactionRepo",
    "TrendEventRepo",
    "TrendEvidenceRepo",
]

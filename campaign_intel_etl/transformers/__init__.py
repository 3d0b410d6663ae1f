"""Transformers for DataFrame-level processing."""

from campaign_intel_etl.transformers.attribution import TransactionAttributionTransformer
from campaign_intel_etl.transformers.evidence import EvidenceFrameTransformer

__all__ = [
    "TransactionAttributionTransformer",
    "EvidenceFrameTransformer",
]

"""Transformer that cleans raw evidence rows for window aggregation."""

from collections.abc import Iterable
from dataclasses import asdict

import pandas as pd

from campaign_intel_etl.transformers.base import BaseTransformer
from campaign_intel_etl.trends.types import EvidenceRecord, SourceTier
from campaign_intel_etl.utils.logger import get_logger
from campaign_intel_etl.utils.timeutils import ensure_utc

EVIDENCE_COLUMNS = [field for field in EvidenceRecord.__dataclass_fields__]
VALID_TIERS = {tier.value for tier in SourceTier}


def evidence_to_frame(evidence: Iterable[EvidenceRecord]) -> pd.DataFrame:
    """Build a raw evidence DataFrame from records."""
    rows = [{**asdict(e), "observed_at": ensure_utc(e.observed_at)} for e in evidence]
    return pd.DataFrame(rows, columns=EVIDENCE_COLUMNS)


class EvidenceFrameTransformer(BaseTransformer):
    """Normalize and deduplicate evidence before counting."""

    required_columns = ("topic_key", "document_id", "observed_at", "source_tier")

    def get_source_layer(self) -> str:
        """Get source layer name."""
        return "evidence"

    def get_target_layer(self) -> str:
        """Get target layer name."""
        return "evidence_windows"

    def transform(self, df: pd.DataFrame, **kwargs) -> pd.DataFrame:
        """
        Clean raw evidence.

        Cleaning operations:
        - Lower-case and trim topic keys, drop rows without one
        - Parse observed_at as UTC
        - Null out unknown source tiers
        - Drop evidence dated after the reference time
        - Keep the earliest mention per (topic, document)

        Args:
            df: Raw evidence DataFrame
            **kwargs: reference_time (datetime) - evidence after it is dropped

        Returns:
            Cleaned DataFrame sorted by topic and observed_at
        """
        logger = get_logger()
        reference_time = kwargs.get("reference_time")

        if df.empty:
            return pd.DataFrame(columns=EVIDENCE_COLUMNS)

        self.validate_columns(df)
        df = df.copy()

        df["topic_key"] = df["topic_key"].astype("string").str.strip().str.lower()
        df = df[df["topic_key"].notna() & (df["topic_key"] != "")]

        df["observed_at"] = pd.to_datetime(df["observed_at"], utc=True)
        df = df[df["observed_at"].notna()]

        df["source_tier"] = df["source_tier"].where(df["source_tier"].isin(VALID_TIERS), None)

        if reference_time is not None:
            cutoff = pd.Timestamp(reference_time)
            cutoff = cutoff.tz_localize("UTC") if cutoff.tzinfo is None else cutoff.tz_convert("UTC")
            future = df["observed_at"] > cutoff
            if future.any():
                logger.warning(f"Ignoring {int(future.sum())} evidence rows dated in the future")
            df = df[~future]

        before = len(df)
        df = df.sort_values(["topic_key", "observed_at", "document_id"])
        df = df.drop_duplicates(subset=["topic_key", "document_id"], keep="first")
        if len(df) < before:
            logger.debug(f"Removed {before - len(df)} duplicate evidence rows")

        return df.reset_index(drop=True)

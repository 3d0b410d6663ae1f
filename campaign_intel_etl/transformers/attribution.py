"""Transformer that adds attribution columns to a transactions DataFrame."""

from typing import Any

import pandas as pd

from campaign_intel_etl.attribution.snapshot import AttributionSnapshot
from campaign_intel_etl.attribution.types import AttributionResult, TransactionInput
from campaign_intel_etl.attribution.waterfall import batch_attribute
from campaign_intel_etl.transformers.base import BaseTransformer
from campaign_intel_etl.utils.frames import none_if_missing
from campaign_intel_etl.utils.logger import get_logger

# AttributionResult field -> transaction column
RESULT_COLUMNS = {
    "platform": "attributed_platform",
    "confidence_score": "attribution_confidence",
    "confidence_level": "attribution_level",
    "method": "attribution_method",
    "tier": "attribution_tier",
    "matched_campaign_id": "attributed_campaign_id",
    "matched_ad_id": "attributed_ad_id",
    "matched_creative_id": "attributed_creative_id",
    "rule_name": "attribution_rule_name",
    "channel_hint": "attribution_channel_hint",
}

OPTIONAL_INPUT_COLUMNS = ("refcode", "click_id", "fbclid", "contribution_form", "transaction_id")


class TransactionAttributionTransformer(BaseTransformer):
    """Attribute every row of a transactions DataFrame against one snapshot."""

    required_columns = ("organization_id", "transaction_date")

    def __init__(self, snapshot: AttributionSnapshot):
        """
        Initialize transformer.

        Args:
            snapshot: Attribution state of the organization owning the rows
        """
        self.snapshot = snapshot

    def get_source_layer(self) -> str:
        """Get source layer name."""
        return "transactions"

    def get_target_layer(self) -> str:
        """Get target layer name."""
        return "attributed_transactions"

    def transform(self, df: pd.DataFrame, **kwargs) -> pd.DataFrame:
        """
        Add attribution columns to transactions.

        Required columns: organization_id, transaction_date. refcode, click_id,
        fbclid, contribution_form and transaction_id are used when present.

        Args:
            df: Transactions DataFrame
            **kwargs: Additional transformation parameters

        Returns:
            Copy of the input with one column per attribution field

        Raises:
            ValueError: If required columns are missing or rows belong to
                another organization
        """
        logger = get_logger()
        logger.info(f"Attributing {len(df)} transactions")

        df = df.copy()
        if df.empty:
            logger.warning("Empty DataFrame provided for attribution")
            for column in RESULT_COLUMNS.values():
                df[column] = pd.Series(dtype="object", index=df.index)
            return df

        self.validate_columns(df)

        foreign = df["organization_id"] != self.snapshot.organization_id
        if foreign.any():
            raise ValueError(
                f"{int(foreign.sum())} rows do not belong to organization "
                f"{self.snapshot.organization_id}"
            )

        inputs = [self._row_to_input(row) for row in df.to_dict(orient="records")]
        results = batch_attribute(self.snapshot, inputs)

        # Previous attribution values are replaced, never merged
        df = df.drop(columns=[c for c in RESULT_COLUMNS.values() if c in df.columns])
        result_df = self._results_frame(results, df.index)
        df = pd.concat([df, result_df], axis=1)

        tier_counts = df["attribution_tier"].value_counts().sort_index().to_dict()
        logger.info(f"Attribution complete, tier counts: {tier_counts}")
        return df

    def _row_to_input(self, row: dict[str, Any]) -> TransactionInput:
        transaction_date = pd.Timestamp(row["transaction_date"]).to_pydatetime()
        optional = {col: none_if_missing(row.get(col)) for col in OPTIONAL_INPUT_COLUMNS}
        return TransactionInput(
            organization_id=row["organization_id"],
            transaction_date=transaction_date,
            **{k: (str(v) if v is not None else None) for k, v in optional.items()},
        )

    def _results_frame(self, results: list[AttributionResult], index: pd.Index) -> pd.DataFrame:
        records = [
            {column: result.to_dict()[field] for field, column in RESULT_COLUMNS.items()}
            for result in results
        ]
        return pd.DataFrame(records, index=index, columns=list(RESULT_COLUMNS.values()))

"""Utility functions and classes."""

from campaign_intel_etl.utils.frames import clean_nan_values, none_if_missing
from campaign_intel_etl.utils.logger import get_logger
from campaign_intel_etl.utils.timeutils import ensure_utc

__all__ = [
    "clean_nan_values",
    "ensure_utc",
    "get_logger",
    "none_if_missing",
]

"""Helpers for moving values between pandas and plain Python."""

from typing import Any

import pandas as pd


def none_if_missing(value: Any) -> Any:
    """Convert pandas missing markers (NaN, NaT, NA) to None."""
    if value is None or isinstance(value, (list, tuple, dict, set)):
        return value
    if pd.isna(value):
        return None
    return value


def clean_nan_values(data_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Replace NaN values with None for database insertion.

    Pandas uses float NaN to represent missing data, but PostgreSQL
    can't handle Python's NaN properly, causing type errors.

    Args:
        data_dict: Dictionary potentially containing NaN values

    Returns:
        Dictionary with NaN values replaced by None
    """
    return {k: none_if_missing(v) for k, v in data_dict.items()}

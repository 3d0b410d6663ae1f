"""Base class for DataFrame transformers."""

from abc import ABC, abstractmethod

import pandas as pd


class BaseTransformer(ABC):
    """
    Abstract base class for transformers.

    Subclasses declare the columns they cannot work without in
    ``required_columns`` and call ``validate_columns`` before transforming.
    """

    required_columns: tuple[str, ...] = ()

    @abstractmethod
    def transform(self, df: pd.DataFrame, **kwargs) -> pd.DataFrame:
        """
        Transform a DataFrame from one stage to the next.

        Args:
            df: Input DataFrame
            **kwargs: Stage-specific parameters

        Returns:
            Transformed DataFrame
        """

    @abstractmethod
    def get_source_layer(self) -> str:
        """Name of the stage the input comes from (e.g. 'transactions')."""

    @abstractmethod
    def get_target_layer(self) -> str:
        """Name of the stage the output feeds (e.g. 'attributed_transactions')."""

    def validate_columns(self, df: pd.DataFrame) -> None:
        """
        Check that every required column is present.

        Args:
            df: Input DataFrame

        Raises:
            ValueError: If required columns are missing
        """
        missing = set(self.required_columns) - set(df.columns)
        if missing:
            raise ValueError(
                f"{self.get_source_layer().capitalize()} DataFrame missing columns: "
                f"{sorted(missing)}"
            )

"""Attribution and trend detection ETL for campaign analytics."""

__version__ = "0.1.0"

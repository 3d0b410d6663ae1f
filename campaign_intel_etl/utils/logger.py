"""Logger lookup shared by code that runs both inside and outside Prefect."""

import logging

from prefect import get_run_logger
from prefect.exceptions import MissingContextError


def get_logger():
    """Get logger - Prefect if available, otherwise standard logging."""
    try:
        return get_run_logger()
    except MissingContextError:
        return logging.getLogger(__name__)

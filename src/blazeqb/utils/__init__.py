"""
Utility helpers shared across BlazeQB packages.
"""

from .logging import (
    QueryLoggerMeta,
    configure_logging,
    default_query_logger,
    get_logger,
    logged_execution,
    time_call,
)

__all__ = [
    "QueryLoggerMeta",
    "configure_logging",
    "default_query_logger",
    "get_logger",
    "logged_execution",
    "time_call",
]

"""Observability layer for the A/B test admin.

This module provides structured logging for the admin tools.
"""

from .logging_config import setup_logging, get_logger, LoggerMixin, log_execution_time

__all__ = [
    "setup_logging",
    "get_logger",
    "LoggerMixin",
    "log_execution_time",
]

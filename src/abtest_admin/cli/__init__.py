"""CLI interface for the A/B test admin.

This module provides the ``abtest-admin`` command-line interface.
"""

from .main import app

__all__ = [
    "app",
]

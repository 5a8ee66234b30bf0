"""Storage layer for the A/B test admin.

Persists admin preview sessions using SQLAlchemy ORM with SQLite.
"""

from .models import Base, PreviewSessionModel
from .sqlite_backend import SQLPreviewStore

__all__ = [
    "Base",
    "PreviewSessionModel",
    "SQLPreviewStore",
]

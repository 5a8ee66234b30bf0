"""Admin preview overrides."""

from .state import (
    AdminPreviewState,
    InMemoryPreviewStore,
    NO_SELECTION,
    PreviewOption,
    PreviewSession,
)

__all__ = [
    "AdminPreviewState",
    "InMemoryPreviewStore",
    "NO_SELECTION",
    "PreviewOption",
    "PreviewSession",
]

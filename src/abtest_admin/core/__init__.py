"""Core module for the A/B test admin.

This module contains the fundamental building blocks: the persona and funnel
enumerations, the variant and test configuration model, the collaborator
interfaces and the exception hierarchy.
"""

from .types import (
    Persona,
    FunnelStage,
    TestType,
    PresentationConfig,
    CardOrderConfig,
    LayoutConfig,
    LayoutOptions,
    VariantConfiguration,
    Variant,
    TargetingSelection,
    TestConfiguration,
    ContentItem,
    Recommendation,
    Advisory,
    PERSONA_LABELS,
    FUNNEL_STAGE_LABELS,
    TEST_TYPE_LABELS,
    TOTAL_COMBINATIONS,
    combo_key,
    parse_combo_key,
)

from .interfaces import (
    ContentApiInterface,
    LaunchApiInterface,
    PreviewStoreInterface,
)

from .exceptions import (
    AdminError,
    ConfigurationError,
    VariantError,
    VariantNotFoundError,
    VariantRemovalError,
    CombinationUnavailableError,
    LaunchBlockedError,
    ApiError,
)

__all__ = [
    # Types
    "Persona",
    "FunnelStage",
    "TestType",
    "PresentationConfig",
    "CardOrderConfig",
    "LayoutConfig",
    "LayoutOptions",
    "VariantConfiguration",
    "Variant",
    "TargetingSelection",
    "TestConfiguration",
    "ContentItem",
    "Recommendation",
    "Advisory",
    "PERSONA_LABELS",
    "FUNNEL_STAGE_LABELS",
    "TEST_TYPE_LABELS",
    "TOTAL_COMBINATIONS",
    "combo_key",
    "parse_combo_key",

    # Interfaces
    "ContentApiInterface",
    "LaunchApiInterface",
    "PreviewStoreInterface",

    # Exceptions
    "AdminError",
    "ConfigurationError",
    "VariantError",
    "VariantNotFoundError",
    "VariantRemovalError",
    "CombinationUnavailableError",
    "LaunchBlockedError",
    "ApiError",
]

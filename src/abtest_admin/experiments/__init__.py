"""Test configuration: variants, targeting, launch gate and the creation wizard."""

from .overrides import apply_variant_overrides, has_overrides
from .readiness import LaunchReadiness, is_ready
from .registry import (
    LAYOUT_TEMPLATES,
    VARIANT_CONFIG_REGISTRY,
    LayoutTemplate,
    VariantConfigDefinition,
    create_default_config,
    get_config_definition,
    parse_configuration,
    uses_visual_editor,
)
from .targeting import GridCell, TargetingSelector, estimate_reach
from .variants import VariantSetManager
from .wizard import ABTestWizard, WizardStep

__all__ = [
    "ABTestWizard",
    "WizardStep",
    "VariantSetManager",
    "TargetingSelector",
    "GridCell",
    "estimate_reach",
    "LaunchReadiness",
    "is_ready",
    "apply_variant_overrides",
    "has_overrides",
    "LAYOUT_TEMPLATES",
    "VARIANT_CONFIG_REGISTRY",
    "LayoutTemplate",
    "VariantConfigDefinition",
    "create_default_config",
    "get_config_definition",
    "parse_configuration",
    "uses_visual_editor",
]

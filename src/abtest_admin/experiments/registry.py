"""Registry of variant configuration shapes per test type."""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional

from pydantic import TypeAdapter

from ..core.types import (
    CardOrderConfig,
    LayoutConfig,
    LayoutOptions,
    PresentationConfig,
    TestType,
    VariantConfiguration,
)


@dataclass(frozen=True)
class VariantConfigDefinition:
    """How variants of one test type are configured."""
    label: str
    description: str
    create_default_config: Callable[[], VariantConfiguration]
    uses_visual_editor: bool = False
    content_type: Optional[str] = None


@dataclass(frozen=True)
class LayoutTemplate:
    """A predefined page layout."""
    id: str
    name: str
    description: str
    preview: str


VARIANT_CONFIG_REGISTRY: Dict[TestType, VariantConfigDefinition] = {
    TestType.HERO: VariantConfigDefinition(
        label="Hero Section",
        description="Test different hero headlines, images, and CTAs",
        create_default_config=lambda: PresentationConfig(
            title="", cta_text="", image_name="", cta_link="", button_variant="default"
        ),
        content_type="hero",
    ),
    TestType.CTA: VariantConfigDefinition(
        label="Call-to-Action",
        description="Test different CTA button text and styles",
        create_default_config=lambda: PresentationConfig(
            title="", cta_text="", button_variant="default"
        ),
        content_type="cta",
    ),
    TestType.MESSAGING: VariantConfigDefinition(
        label="Messaging",
        description="Test different messaging and copy variations",
        create_default_config=lambda: PresentationConfig(title="", description=""),
    ),
    TestType.CARD_ORDER: VariantConfigDefinition(
        label="Card Ordering",
        description="Test different orderings of content cards",
        create_default_config=lambda: CardOrderConfig(content_type="service", item_ids=[]),
        uses_visual_editor=True,
        content_type="service",
    ),
    TestType.LAYOUT: VariantConfigDefinition(
        label="Page Layout",
        description="Test different page layouts and visual arrangements",
        create_default_config=lambda: LayoutConfig(template="grid-2col", options=LayoutOptions()),
        uses_visual_editor=True,
    ),
}

LAYOUT_TEMPLATES: List[LayoutTemplate] = [
    LayoutTemplate("grid-2col", "2-Column Grid", "Two equal columns with cards arranged side-by-side", "□ □"),
    LayoutTemplate("grid-3col", "3-Column Grid", "Three equal columns for maximum content density", "□ □ □"),
    LayoutTemplate("grid-4col", "4-Column Grid", "Four columns for wide screens (responsive on mobile)", "□ □ □ □"),
    LayoutTemplate("sidebar-left", "Sidebar Left", "Content on right with sidebar navigation on left", "▌ □□"),
    LayoutTemplate("sidebar-right", "Sidebar Right", "Content on left with sidebar navigation on right", "□□ ▌"),
    LayoutTemplate("single-column", "Single Column", "Centered single column for focused content", "□"),
    LayoutTemplate("masonry", "Masonry Layout", "Pinterest-style irregular grid with varied heights", "□ □\n□□□"),
]

_PRESENTATION_TYPES = {TestType.HERO, TestType.CTA, TestType.MESSAGING}

_configuration_adapter: TypeAdapter = TypeAdapter(VariantConfiguration)


def get_config_definition(test_type: TestType) -> VariantConfigDefinition:
    """Get configuration definition for a test type."""
    return VARIANT_CONFIG_REGISTRY[TestType(test_type)]


def uses_visual_editor(test_type: TestType) -> bool:
    """Check if a test type is edited with a visual editor instead of form fields."""
    return get_config_definition(test_type).uses_visual_editor


def create_default_config(test_type: TestType) -> VariantConfiguration:
    """Create default configuration for a test type."""
    return get_config_definition(test_type).create_default_config()


def content_type_for(test_type: TestType) -> Optional[str]:
    """Content type whose items variants of this test type pick from."""
    return get_config_definition(test_type).content_type


def parse_configuration(
    data: Any,
    test_type: Optional[TestType] = None,
) -> Optional[VariantConfiguration]:
    """Parse a raw configuration payload into the tagged union.

    Payloads without a ``kind`` are legacy form overrides; they are read as
    presentation overrides for hero, cta and messaging tests.

    Raises:
        pydantic.ValidationError: If the payload matches no configuration shape.
    """
    if data is None or isinstance(data, (PresentationConfig, CardOrderConfig, LayoutConfig)):
        return data
    if isinstance(data, Mapping) and not data:
        return None
    if isinstance(data, Mapping) and "kind" not in data:
        if test_type is not None and TestType(test_type) in _PRESENTATION_TYPES:
            data = {**data, "kind": "presentation"}
    return _configuration_adapter.validate_python(data)

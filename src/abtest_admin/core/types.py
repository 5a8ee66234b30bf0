"""Core types and enumerations for the A/B test admin."""

from enum import Enum
from typing import Annotated, Any, ClassVar, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Persona(str, Enum):
    """Visitor segment a piece of content or a test is aimed at."""
    STUDENT = "student"
    PROVIDER = "provider"
    PARENT = "parent"
    VOLUNTEER = "volunteer"
    DONOR = "donor"


class FunnelStage(str, Enum):
    """Journey stage of a visitor."""
    AWARENESS = "awareness"
    CONSIDERATION = "consideration"
    DECISION = "decision"
    RETENTION = "retention"


class TestType(str, Enum):
    """Kind of page element an A/B test varies."""
    HERO = "hero"
    CTA = "cta"
    CARD_ORDER = "card_order"
    MESSAGING = "messaging"
    LAYOUT = "layout"

    # Not a test class, keep pytest from collecting it
    __test__ = False

    @property
    def internal_name(self) -> str:
        """Name the backend uses for this test type."""
        return _INTERNAL_TEST_TYPES[self]


_INTERNAL_TEST_TYPES = {
    TestType.HERO: "hero_variation",
    TestType.CTA: "cta_variation",
    TestType.CARD_ORDER: "service_card_order",
    TestType.MESSAGING: "messaging_test",
    TestType.LAYOUT: "layout_test",
}

PERSONA_LABELS: Dict[Persona, str] = {
    Persona.STUDENT: "Adult Education Student",
    Persona.PROVIDER: "Service Provider",
    Persona.PARENT: "Parent",
    Persona.VOLUNTEER: "Volunteer",
    Persona.DONOR: "Donor",
}

FUNNEL_STAGE_LABELS: Dict[FunnelStage, str] = {
    FunnelStage.AWARENESS: "Awareness (TOFU)",
    FunnelStage.CONSIDERATION: "Consideration (MOFU)",
    FunnelStage.DECISION: "Decision (BOFU)",
    FunnelStage.RETENTION: "Retention",
}

TEST_TYPE_LABELS: Dict[TestType, str] = {
    TestType.HERO: "Hero Section Variation",
    TestType.CTA: "Call-to-Action Variation",
    TestType.CARD_ORDER: "Service Card Order",
    TestType.MESSAGING: "Messaging Test",
    TestType.LAYOUT: "Layout Test",
}

# 5 personas x 4 stages
TOTAL_COMBINATIONS = len(Persona) * len(FunnelStage)


def combo_key(persona: Union[Persona, str], stage: Union[FunnelStage, str]) -> str:
    """Build the ``persona:stage`` key used for multi-target selections."""
    return f"{Persona(persona).value}:{FunnelStage(stage).value}"


def parse_combo_key(key: str) -> Tuple[Persona, FunnelStage]:
    """Split a ``persona:stage`` key, validating both halves."""
    persona, _, stage = key.partition(":")
    if not stage:
        raise ValueError(f"Invalid combination key: {key!r}")
    return Persona(persona), FunnelStage(stage)


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys for the REST backend."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# Variant configuration tagged union

class PresentationConfig(CamelModel):
    """Text, image and CTA overrides for hero, cta and messaging tests."""
    kind: Literal["presentation"] = "presentation"
    title: Optional[str] = None
    description: Optional[str] = None
    image_name: Optional[str] = None
    image_url: Optional[str] = None
    cta_text: Optional[str] = None
    cta_link: Optional[str] = None
    secondary_cta_text: Optional[str] = None
    secondary_cta_link: Optional[str] = None
    button_variant: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class CardOrderConfig(CamelModel):
    """Explicit ordering of content cards of one content type."""
    kind: Literal["card_order"] = "card_order"
    content_type: Literal["service", "event", "testimonial", "lead_magnet"] = "service"
    item_ids: List[str] = Field(default_factory=list)

    @field_validator("item_ids")
    @classmethod
    def _unique_items(cls, value: List[str]) -> List[str]:
        if len(value) != len(set(value)):
            raise ValueError("Card order item ids must be unique")
        return value


class LayoutOptions(CamelModel):
    """Visual options applied on top of a layout template."""
    card_style: Literal["elevated", "flat", "bordered"] = "elevated"
    spacing: Literal["compact", "comfortable", "spacious"] = "comfortable"
    image_position: Literal["top", "left", "right", "background"] = "top"
    show_images: bool = True
    columns_on_mobile: Literal["1", "2"] = "1"


class LayoutConfig(CamelModel):
    """Page layout template selection."""
    kind: Literal["layout"] = "layout"
    template: Literal[
        "grid-2col",
        "grid-3col",
        "grid-4col",
        "sidebar-left",
        "sidebar-right",
        "single-column",
        "masonry",
    ] = "grid-2col"
    options: LayoutOptions = Field(default_factory=LayoutOptions)


VariantConfiguration = Annotated[
    Union[PresentationConfig, CardOrderConfig, LayoutConfig],
    Field(discriminator="kind"),
]


class Variant(CamelModel):
    """One version of the content under test."""
    id: str
    name: str
    description: str = ""
    traffic_weight: int = Field(50, ge=0, le=100)
    is_control: bool = False
    content_item_id: Optional[str] = None
    configuration: Optional[VariantConfiguration] = None


class TargetingSelection(CamelModel):
    """Audience a test applies to.

    Single mode uses ``persona``/``funnel_stage`` (``None`` meaning all).
    Multi mode uses ``combinations``, a set of ``persona:stage`` keys.
    """
    multi: bool = False
    persona: Optional[Persona] = None
    funnel_stage: Optional[FunnelStage] = None
    combinations: List[str] = Field(default_factory=list)
    traffic_allocation: int = Field(100, ge=10, le=100)

    @field_validator("combinations")
    @classmethod
    def _valid_keys(cls, value: List[str]) -> List[str]:
        for key in value:
            parse_combo_key(key)
        return sorted(set(value))


class TestConfiguration(CamelModel):
    """Complete A/B test definition handed to the backend on launch."""
    name: str = ""
    description: str = ""
    type: TestType = TestType.HERO
    target_persona: Optional[Persona] = None
    target_funnel_stage: Optional[FunnelStage] = None
    traffic_allocation: int = Field(100, ge=10, le=100)
    variants: List[Variant] = Field(default_factory=list)
    target_combinations: List[str] = Field(default_factory=list)

    __test__: ClassVar[bool] = False

    def targeting(self) -> TargetingSelection:
        """Targeting selection described by this configuration."""
        return TargetingSelection(
            multi=bool(self.target_combinations),
            persona=self.target_persona,
            funnel_stage=self.target_funnel_stage,
            combinations=self.target_combinations,
            traffic_allocation=self.traffic_allocation,
        )

    def to_api_payload(self) -> Dict[str, Any]:
        """JSON-ready payload with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=False)


class ContentItem(CamelModel):
    """Content item owned by the content manager backend."""
    id: str
    type: str
    title: str = ""
    description: Optional[str] = None
    image_name: Optional[str] = None
    image_url: Optional[str] = None
    order: int = 0
    is_active: bool = True
    metadata: Dict[str, Any] = Field(default_factory=dict)


class Recommendation(CamelModel):
    """Suggested test produced by the performance metrics endpoint."""
    type: TestType
    reason: str
    suggested_test: str
    priority: Literal["high", "medium", "low"] = "medium"


class Advisory(CamelModel):
    """Advisory issue surfaced inline; never blocks editing."""
    code: str
    message: str

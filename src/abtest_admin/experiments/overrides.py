"""Apply variant presentation overrides to content items."""

from typing import Any, Dict, Optional

from ..core.types import PresentationConfig, VariantConfiguration

# Presentation field -> content metadata key
_CTA_METADATA_KEYS = {
    "cta_text": "primaryButton",
    "cta_link": "primaryButtonLink",
    "secondary_cta_text": "secondaryButton",
    "secondary_cta_link": "secondaryButtonLink",
    "button_variant": "buttonVariant",
}

# Presentation field -> content item key
_CONTENT_KEYS = {
    "title": "title",
    "description": "description",
    "image_name": "imageName",
    "image_url": "imageUrl",
}


def apply_variant_overrides(
    content: Dict[str, Any],
    config: Optional[VariantConfiguration],
) -> Dict[str, Any]:
    """Return a copy of ``content`` with a variant's overrides applied.

    The content item is the one already chosen for the visitor's persona and
    journey stage; the variant only changes how it is presented. Only
    presentation overrides touch content. Unset fields leave the content
    value in place.
    """
    if not isinstance(config, PresentationConfig):
        return content

    merged = dict(content)

    for field_name, key in _CONTENT_KEYS.items():
        value = getattr(config, field_name)
        if value is not None:
            merged[key] = value

    existing = content.get("metadata")
    metadata = dict(existing) if isinstance(existing, dict) else {}
    touched = False

    if config.metadata is not None:
        metadata.update(config.metadata)
        touched = True

    for field_name, key in _CTA_METADATA_KEYS.items():
        value = getattr(config, field_name)
        if value is not None:
            metadata[key] = value
            touched = True

    if touched:
        merged["metadata"] = metadata

    return merged


def has_overrides(config: Optional[VariantConfiguration]) -> bool:
    """True when a configuration overrides anything besides metadata."""
    if config is None:
        return False
    if not isinstance(config, PresentationConfig):
        # Card order and layout configs always replace the default presentation
        return True
    return any(
        getattr(config, name) is not None
        for name in list(_CONTENT_KEYS) + list(_CTA_METADATA_KEYS)
    )

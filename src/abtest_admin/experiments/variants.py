"""Variant set management for the test creation wizard."""

from typing import Any, Dict, List, Optional, Set
from uuid import uuid4

from ..core.exceptions import VariantNotFoundError, VariantRemovalError
from ..core.types import Advisory, TestType, Variant, VariantConfiguration
from ..observability import LoggerMixin
from .registry import create_default_config, parse_configuration

CONTROL_NAME = "Control (Original)"

MIN_WEIGHT = 0
MAX_WEIGHT = 100

WEIGHTS_NOT_100 = "weights_not_100"
NO_CONTROL = "no_control"
MULTIPLE_CONTROLS = "multiple_controls"
BASELINE_REQUIRED = "baseline_required"


def default_variant_name(index: int) -> str:
    """Name given to the variant added at ``index``."""
    if index == 0:
        return CONTROL_NAME
    return f"Variant {chr(ord('A') + index)}"


def clamp_weight(value: Any) -> int:
    """Coerce a traffic weight to an integer in [0, 100]."""
    try:
        weight = int(value)
    except (TypeError, ValueError):
        weight = 0
    return max(MIN_WEIGHT, min(MAX_WEIGHT, weight))


class VariantSetManager(LoggerMixin):
    """Ordered, editable list of variants for one test.

    Violations of the launch invariants (weights summing to 100, a single
    control, at least two variants) are tolerated while editing and reported
    through :meth:`warnings`; they only block at the launch gate.
    """

    def __init__(self, test_type: TestType = TestType.HERO, variants: Optional[List[Variant]] = None):
        self.test_type = TestType(test_type)
        self._variants: List[Variant] = [v.model_copy(deep=True) for v in variants or []]
        self._baseline_missing: Set[str] = set()

    @property
    def variants(self) -> List[Variant]:
        """Copy of the variants in display order."""
        return [v.model_copy(deep=True) for v in self._variants]

    @property
    def total_weight(self) -> int:
        return sum(v.traffic_weight for v in self._variants)

    @property
    def control(self) -> Optional[Variant]:
        """First variant flagged as control, if any."""
        for variant in self._variants:
            if variant.is_control:
                return variant.model_copy(deep=True)
        return None

    def __len__(self) -> int:
        return len(self._variants)

    def _index(self, variant_id: str) -> int:
        for index, variant in enumerate(self._variants):
            if variant.id == variant_id:
                return index
        raise VariantNotFoundError(variant_id)

    def get(self, variant_id: str) -> Variant:
        return self._variants[self._index(variant_id)].model_copy(deep=True)

    def add_variant(self) -> Variant:
        """Append a variant with generated id and default name, weight and config."""
        count = len(self._variants)
        variant = Variant(
            id=f"variant-{uuid4().hex}",
            name=default_variant_name(count),
            traffic_weight=50,
            is_control=count == 0,
            configuration=create_default_config(self.test_type),
        )
        self._variants.append(variant)
        self.logger.debug("Variant added", variant_id=variant.id, name=variant.name)
        return variant.model_copy(deep=True)

    def remove_variant(self, variant_id: str) -> None:
        """Remove a variant.

        Raises:
            VariantNotFoundError: If the id is unknown.
            VariantRemovalError: If the variant is the only control while
                other variants exist.
        """
        index = self._index(variant_id)
        target = self._variants[index]
        if target.is_control and len(self._variants) > 1:
            other_controls = [v for v in self._variants if v.is_control and v.id != variant_id]
            if not other_controls:
                raise VariantRemovalError(variant_id)

        del self._variants[index]
        self._baseline_missing.discard(variant_id)
        self.logger.debug("Variant removed", variant_id=variant_id)

    def set_control(
        self,
        variant_id: str,
        is_control: bool,
        baseline: Optional[Dict[str, Any]] = None,
    ) -> Variant:
        """Flag or unflag a variant as the control.

        Flagging clears the flag on every other variant. When a baseline
        configuration is supplied it becomes the control's configuration;
        otherwise the configuration is left alone and a baseline warning is
        reported until one is provided.
        """
        index = self._index(variant_id)

        if not is_control:
            self._variants[index] = self._variants[index].model_copy(update={"is_control": False})
            self._baseline_missing.discard(variant_id)
            return self._variants[index].model_copy(deep=True)

        for i, variant in enumerate(self._variants):
            if i != index and variant.is_control:
                self._variants[i] = variant.model_copy(update={"is_control": False})
                self._baseline_missing.discard(variant.id)

        update: Dict[str, Any] = {"is_control": True}
        if baseline is not None:
            update["configuration"] = parse_configuration(baseline, self.test_type)
            self._baseline_missing.discard(variant_id)
        else:
            self._baseline_missing.add(variant_id)

        self._variants[index] = self._variants[index].model_copy(update=update)
        self.logger.info(
            "Control variant set",
            variant_id=variant_id,
            baseline_applied=baseline is not None,
        )
        return self._variants[index].model_copy(deep=True)

    def update_weight(self, variant_id: str, value: Any) -> Variant:
        """Set a variant's traffic weight, clamped to [0, 100].

        Other weights are never rebalanced.
        """
        index = self._index(variant_id)
        self._variants[index] = self._variants[index].model_copy(
            update={"traffic_weight": clamp_weight(value)}
        )
        return self._variants[index].model_copy(deep=True)

    def update_variant(
        self,
        variant_id: str,
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
        content_item_id: Optional[str] = None,
        configuration: Optional[Any] = None,
    ) -> Variant:
        """Edit the descriptive fields of a variant."""
        index = self._index(variant_id)
        update: Dict[str, Any] = {}
        if name is not None:
            update["name"] = name
        if description is not None:
            update["description"] = description
        if content_item_id is not None:
            update["content_item_id"] = content_item_id or None
        if configuration is not None:
            parsed: Optional[VariantConfiguration] = parse_configuration(configuration, self.test_type)
            update["configuration"] = parsed
            self._baseline_missing.discard(variant_id)

        self._variants[index] = self._variants[index].model_copy(update=update)
        return self._variants[index].model_copy(deep=True)

    def distribute_evenly(self) -> None:
        """Split 100% evenly, giving any remainder to the first variants."""
        count = len(self._variants)
        if count == 0:
            return
        share, remainder = divmod(MAX_WEIGHT, count)
        for i, variant in enumerate(self._variants):
            weight = share + (1 if i < remainder else 0)
            self._variants[i] = variant.model_copy(update={"traffic_weight": weight})

    def change_test_type(self, test_type: TestType) -> None:
        """Switch test type, resetting every variant to the new default config."""
        self.test_type = TestType(test_type)
        self._variants = [
            v.model_copy(update={"configuration": create_default_config(self.test_type)})
            for v in self._variants
        ]
        self._baseline_missing.clear()

    def warnings(self) -> List[Advisory]:
        """Advisory issues to show inline while editing."""
        if not self._variants:
            return []

        warnings = []
        total = self.total_weight
        if total != MAX_WEIGHT:
            warnings.append(Advisory(
                code=WEIGHTS_NOT_100,
                message=f"Traffic weights should sum to 100%. Currently: {total}%",
            ))

        controls = [v for v in self._variants if v.is_control]
        if not controls:
            warnings.append(Advisory(
                code=NO_CONTROL,
                message="One variant should be marked as the control (baseline) for comparison.",
            ))
        elif len(controls) > 1:
            warnings.append(Advisory(
                code=MULTIPLE_CONTROLS,
                message=f"Only one variant can be the control; {len(controls)} are marked.",
            ))

        if any(v.is_control and v.id in self._baseline_missing for v in self._variants):
            warnings.append(Advisory(
                code=BASELINE_REQUIRED,
                message="Select a persona and journey stage to load the live baseline for the control.",
            ))

        return warnings

    def reset(self) -> None:
        self._variants = []
        self._baseline_missing.clear()

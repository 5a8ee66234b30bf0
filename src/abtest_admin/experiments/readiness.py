"""Launch gate for A/B test configurations."""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..core.types import TargetingSelection, Variant

NEED_TWO_VARIANTS = "need ≥2 variants"
NEED_ONE_CONTROL = "need exactly one control"
WEIGHTS_MUST_SUM = "weights must sum to 100"
NEED_COMBINATION = "select at least one persona×stage combination"


@dataclass(frozen=True)
class LaunchReadiness:
    """Verdict of the launch gate; ``reasons`` are shown to the admin verbatim."""
    ready: bool
    reasons: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"ready": self.ready, "reasons": list(self.reasons)}


def is_ready(
    variants: Sequence[Variant],
    targeting: Optional[TargetingSelection] = None,
) -> LaunchReadiness:
    """Decide whether a test may be activated.

    Deterministic and side-effect free. A test needs at least two variants,
    exactly one control and traffic weights summing to 100. A multi-target
    selection must also include at least one combination.
    """
    reasons = []

    if len(variants) < 2:
        reasons.append(NEED_TWO_VARIANTS)

    if sum(1 for v in variants if v.is_control) != 1:
        reasons.append(NEED_ONE_CONTROL)

    if sum(v.traffic_weight for v in variants) != 100:
        reasons.append(WEIGHTS_MUST_SUM)

    if targeting is not None and targeting.multi and not targeting.combinations:
        reasons.append(NEED_COMBINATION)

    return LaunchReadiness(ready=not reasons, reasons=reasons)

"""Audience targeting for A/B tests.

The reach estimate computed here is a display-only hint for the admin UI. It
is not a statistical guarantee and has no bearing on how visitors are
actually split between variants; that is owned by the serving system.
"""

import math
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Set, Union

from ..core.exceptions import CombinationUnavailableError
from ..core.types import (
    Advisory,
    FunnelStage,
    Persona,
    TargetingSelection,
    TOTAL_COMBINATIONS,
    combo_key,
    parse_combo_key,
)
from ..observability import LoggerMixin

MIN_TRAFFIC = 10
MAX_TRAFFIC = 100
TRAFFIC_STEP = 10

BASE_REACH = 100.0
PERSONA_REACH_FACTOR = 0.20
STAGE_REACH_FACTOR = 0.25
SMALL_AUDIENCE_THRESHOLD = 20

SMALL_AUDIENCE = "small_audience"
NO_COMBINATION = "no_combination"


@dataclass(frozen=True)
class GridCell:
    """One persona x stage cell of the multi-target grid."""
    persona: Persona
    funnel_stage: FunnelStage
    key: str
    available: bool
    selected: bool


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_traffic(
    value: int,
    minimum: int = MIN_TRAFFIC,
    maximum: int = MAX_TRAFFIC,
    step: Optional[int] = TRAFFIC_STEP,
) -> int:
    """Clamp a traffic allocation to [minimum, maximum].

    With a ``step`` the value is first snapped to the nearest multiple of it,
    halves rounding up. ``step=None`` keeps the value as given.
    """
    value = int(value)
    if step:
        value = round_half_up(value / step) * step
    return max(minimum, min(maximum, value))


def estimate_reach(selection: TargetingSelection, total_combinations: int = TOTAL_COMBINATIONS) -> int:
    """Rough percentage of site visitors a targeting selection covers."""
    traffic = selection.traffic_allocation / 100

    if selection.multi:
        selected = len(selection.combinations)
        if selected == 0:
            return 0
        return round_half_up(selected / total_combinations * 100 * traffic)

    reach = BASE_REACH
    if selection.persona is not None:
        reach *= PERSONA_REACH_FACTOR
    if selection.funnel_stage is not None:
        reach *= STAGE_REACH_FACTOR
    return round_half_up(reach * traffic)


class TargetingSelector(LoggerMixin):
    """Editable audience selection.

    In single mode one optional persona and one optional funnel stage are
    chosen, ``None`` meaning "all". In multi mode any number of
    ``persona:stage`` combinations may be chosen, restricted to those the
    content backend reports as having content.
    """

    def __init__(
        self,
        multi: bool = False,
        available: Optional[Iterable[Union[str, Mapping[str, str]]]] = None,
        min_traffic: int = MIN_TRAFFIC,
        max_traffic: int = MAX_TRAFFIC,
        traffic_step: int = TRAFFIC_STEP,
        small_audience_threshold: int = SMALL_AUDIENCE_THRESHOLD,
        total_combinations: int = TOTAL_COMBINATIONS,
    ):
        self.multi = multi
        self.min_traffic = min_traffic
        self.max_traffic = max_traffic
        self.traffic_step = traffic_step
        self.small_audience_threshold = small_audience_threshold
        self.total_combinations = total_combinations
        self._available: Set[str] = set()
        self.reset()
        self.set_available(available or [])

    def reset(self) -> None:
        self.persona: Optional[Persona] = None
        self.funnel_stage: Optional[FunnelStage] = None
        self.traffic_allocation: int = self.max_traffic
        self._selected: Set[str] = set()

    def set_available(self, combinations: Iterable[Union[str, Mapping[str, str]]]) -> None:
        """Replace the set of combinations that have content.

        Accepts ``persona:stage`` keys or ``{"persona", "funnelStage"}``
        records as returned by the content backend. Selections that are no
        longer available are dropped.
        """
        keys = set()
        for combo in combinations:
            if isinstance(combo, str):
                keys.add(combo_key(*parse_combo_key(combo)))
            else:
                keys.add(combo_key(combo["persona"], combo["funnelStage"]))
        self._available = keys
        self._selected &= keys

    @property
    def selected_combinations(self) -> List[str]:
        return sorted(self._selected)

    def set_persona(self, persona: Optional[Union[Persona, str]]) -> None:
        self.persona = Persona(persona) if persona else None

    def set_funnel_stage(self, stage: Optional[Union[FunnelStage, str]]) -> None:
        self.funnel_stage = FunnelStage(stage) if stage else None

    def set_traffic_allocation(self, value: int, snap: bool = True) -> int:
        """Set traffic, clamped to the configured bounds.

        ``snap=False`` is used for saved configurations, whose allocation is
        kept exactly instead of moved onto the slider step.
        """
        self.traffic_allocation = clamp_traffic(
            value, self.min_traffic, self.max_traffic, self.traffic_step if snap else None
        )
        return self.traffic_allocation

    def is_available(self, persona: Union[Persona, str], stage: Union[FunnelStage, str]) -> bool:
        return combo_key(persona, stage) in self._available

    def toggle_combination(
        self,
        persona: Union[Persona, str],
        stage: Union[FunnelStage, str],
        selected: bool,
    ) -> None:
        """Add or remove a persona x stage combination.

        Raises:
            CombinationUnavailableError: When selecting a combination without content.
        """
        key = combo_key(persona, stage)
        if not selected:
            self._selected.discard(key)
            return
        if key not in self._available:
            raise CombinationUnavailableError(key)
        self._selected.add(key)
        self.logger.debug("Combination selected", combination=key, selected_count=len(self._selected))

    def grid(self) -> List[GridCell]:
        """All persona x stage cells; unavailable ones are shown disabled."""
        cells = []
        for persona in Persona:
            for stage in FunnelStage:
                key = combo_key(persona, stage)
                cells.append(GridCell(
                    persona=persona,
                    funnel_stage=stage,
                    key=key,
                    available=key in self._available,
                    selected=key in self._selected,
                ))
        return cells

    def to_selection(self) -> TargetingSelection:
        return TargetingSelection(
            multi=self.multi,
            persona=self.persona,
            funnel_stage=self.funnel_stage,
            combinations=sorted(self._selected),
            traffic_allocation=self.traffic_allocation,
        )

    def estimate_reach(self) -> int:
        """Display-only audience reach hint, see :func:`estimate_reach`."""
        return estimate_reach(self.to_selection(), self.total_combinations)

    def warnings(self) -> List[Advisory]:
        if not self.multi:
            return []
        if not self._selected:
            return [Advisory(
                code=NO_COMBINATION,
                message="Please select at least one persona×stage combination to target.",
            )]
        if self.estimate_reach() < self.small_audience_threshold:
            return [Advisory(
                code=SMALL_AUDIENCE,
                message="Small audience size may require 2-4 weeks to reach statistical significance.",
            )]
        return []

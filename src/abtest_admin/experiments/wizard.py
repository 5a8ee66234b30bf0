"""Step-by-step A/B test creation wizard."""

import json
from enum import Enum
from typing import Any, Dict, List, Optional

from ..core.exceptions import LaunchBlockedError
from ..core.interfaces import ContentApiInterface, LaunchApiInterface
from ..core.types import Advisory, Recommendation, TestConfiguration, TestType
from ..observability import LoggerMixin
from .readiness import LaunchReadiness, is_ready
from .targeting import TargetingSelector
from .variants import VariantSetManager

RECOMMENDATION_DESCRIPTION = "Automatically suggested based on performance data"


class WizardStep(int, Enum):
    """Wizard screens, in order."""
    DISCOVER = 0
    CONFIGURE = 1
    TARGET = 2
    REVIEW = 3

    @property
    def label(self) -> str:
        return self.name.title()


class ABTestWizard(LoggerMixin):
    """In-memory state of the test creation wizard.

    Navigation is strictly linear: Discover, Configure, Target, Review.
    Nothing is persisted between steps; cancelling at any point restores the
    defaults, and only a successful launch hands the configuration to the
    backend.
    """

    def __init__(self, targeting: Optional[TargetingSelector] = None):
        self.targeting = targeting or TargetingSelector()
        self.variants = VariantSetManager()
        self.cancel()

    def cancel(self) -> None:
        """Discard everything and return to the first step."""
        self.step = WizardStep.DISCOVER
        self.name = ""
        self.description = ""
        self.test_type = TestType.HERO
        self.variants.change_test_type(TestType.HERO)
        self.variants.reset()
        self.targeting.reset()

    @property
    def progress(self) -> float:
        """Completion percentage shown in the progress bar."""
        return (self.step.value + 1) / len(WizardStep) * 100

    @property
    def is_first_step(self) -> bool:
        return self.step == WizardStep.DISCOVER

    @property
    def is_last_step(self) -> bool:
        return self.step == WizardStep.REVIEW

    def next(self) -> WizardStep:
        if not self.is_last_step:
            self.step = WizardStep(self.step.value + 1)
        return self.step

    def back(self) -> WizardStep:
        if not self.is_first_step:
            self.step = WizardStep(self.step.value - 1)
        return self.step

    def set_test_type(self, test_type: TestType) -> None:
        self.test_type = TestType(test_type)
        self.variants.change_test_type(self.test_type)

    def select_recommendation(self, recommendation: Recommendation) -> WizardStep:
        """Start from a suggested test and move on to configuration."""
        self.set_test_type(recommendation.type)
        self.name = recommendation.suggested_test
        self.description = RECOMMENDATION_DESCRIPTION
        self.logger.info(
            "Recommendation selected",
            test_type=self.test_type.value,
            priority=recommendation.priority,
        )
        return self.next()

    def load_configuration(self, config: TestConfiguration) -> None:
        """Restore a saved configuration and jump to the review step.

        Targeted combinations are taken as available until
        :meth:`load_available_combinations` refreshes them from the backend.
        """
        self.cancel()
        self.name = config.name
        self.description = config.description
        self.test_type = config.type
        self.variants = VariantSetManager(config.type, config.variants)

        selection = config.targeting()
        self.targeting.multi = selection.multi
        self.targeting.set_available(selection.combinations)
        for key in selection.combinations:
            self.targeting.toggle_combination(*key.split(":", 1), True)
        self.targeting.set_persona(selection.persona)
        self.targeting.set_funnel_stage(selection.funnel_stage)
        self.targeting.set_traffic_allocation(selection.traffic_allocation, snap=False)
        self.step = WizardStep.REVIEW

    async def load_available_combinations(self, api: ContentApiInterface) -> None:
        """Refresh which persona x stage combinations may be targeted."""
        self.targeting.set_available(await api.get_available_combinations())

    async def populate_baseline(self, api: ContentApiInterface, variant_id: str) -> bool:
        """Make ``variant_id`` the control, pre-filled with the live configuration.

        The baseline can only be looked up for a specific persona, stage and
        test type. Without all three, or when the backend has none, the
        variant is still flagged as control and a baseline warning remains.

        Returns:
            True when a baseline configuration was applied.
        """
        baseline = None
        persona = self.targeting.persona
        stage = self.targeting.funnel_stage
        if persona is not None and stage is not None:
            baseline = await api.get_baseline_config(persona, stage, self.test_type)

        self.variants.set_control(variant_id, True, baseline=baseline or None)
        return bool(baseline)

    def configuration(self) -> TestConfiguration:
        """Snapshot of the wizard state as a test configuration."""
        selection = self.targeting.to_selection()
        return TestConfiguration(
            name=self.name,
            description=self.description,
            type=self.test_type,
            target_persona=selection.persona,
            target_funnel_stage=selection.funnel_stage,
            traffic_allocation=selection.traffic_allocation,
            variants=self.variants.variants,
            target_combinations=selection.combinations if selection.multi else [],
        )

    def readiness(self) -> LaunchReadiness:
        return is_ready(self.variants.variants, self.targeting.to_selection())

    def warnings(self) -> List[Advisory]:
        """Inline advisories for the current step."""
        if self.step == WizardStep.CONFIGURE:
            return self.variants.warnings()
        if self.step == WizardStep.TARGET:
            return self.targeting.warnings()
        if self.step == WizardStep.REVIEW:
            return self.variants.warnings() + self.targeting.warnings()
        return []

    async def launch(self, api: LaunchApiInterface) -> Dict[str, Any]:
        """Submit the test and its variants, then reset the wizard.

        Raises:
            LaunchBlockedError: If the configuration does not pass the launch gate.
            ApiError: If the backend rejects a request; the wizard keeps its
                state so the admin can correct it and resubmit.
        """
        readiness = self.readiness()
        if not readiness.ready:
            raise LaunchBlockedError(readiness.reasons)

        config = self.configuration()
        created = await api.create_test(build_test_payload(config))

        for variant_payload in build_variant_payloads(config):
            await api.create_variant(created["id"], variant_payload)

        self.logger.info(
            "Test launched",
            test_id=created["id"],
            test_type=config.type.value,
            variants=len(config.variants),
        )
        self.cancel()
        return created


def build_test_payload(config: TestConfiguration) -> Dict[str, Any]:
    """Body of the create-test request; tests start active once fully configured."""
    payload = {
        "name": config.name,
        "description": config.description,
        "type": config.type.value,
        "targetPersona": config.target_persona.value if config.target_persona else None,
        "targetFunnelStage": config.target_funnel_stage.value if config.target_funnel_stage else None,
        "trafficAllocation": config.traffic_allocation,
        "status": "active",
    }
    if config.target_combinations:
        payload["targetCombinations"] = list(config.target_combinations)
    return payload


def build_variant_payloads(config: TestConfiguration) -> List[Dict[str, Any]]:
    """Bodies of the create-variant requests, in display order."""
    payloads = []
    for variant in config.variants:
        configuration = (
            variant.configuration.model_dump(mode="json", by_alias=True, exclude_none=True)
            if variant.configuration is not None
            else {}
        )
        payloads.append({
            "name": variant.name,
            "description": variant.description,
            "trafficWeight": variant.traffic_weight,
            "configuration": json.dumps(configuration),
            "isControl": variant.is_control,
            "contentItemId": variant.content_item_id,
        })
    return payloads

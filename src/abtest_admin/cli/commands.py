"""Command implementations behind the abtest-admin CLI."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx

from ..api import AdminApiClient
from ..config import Settings
from ..core.types import FunnelStage, Persona, TargetingSelection, TestConfiguration
from ..experiments import ABTestWizard, TargetingSelector
from ..observability import get_logger, log_execution_time
from ..preview import AdminPreviewState, PreviewOption, PreviewSession
from ..storage import SQLPreviewStore

logger = get_logger(__name__)


def load_test_configuration(file_path: str) -> TestConfiguration:
    """Read a test configuration from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        pydantic.ValidationError: If the file does not describe a test.
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Test configuration file not found: {file_path}")

    with open(path, "r") as f:
        return TestConfiguration.model_validate(json.load(f))


def build_wizard(config: TestConfiguration, settings: Settings) -> ABTestWizard:
    wizard_settings = settings.wizard
    wizard = ABTestWizard(TargetingSelector(
        min_traffic=wizard_settings.min_traffic_allocation,
        max_traffic=wizard_settings.max_traffic_allocation,
        traffic_step=wizard_settings.traffic_step,
        small_audience_threshold=wizard_settings.small_audience_threshold,
        total_combinations=wizard_settings.total_combinations,
    ))
    wizard.load_configuration(config)
    return wizard


def validate_test(file_path: str, settings: Settings) -> Dict[str, Any]:
    """Launch gate verdict and review-step advisories for a configuration file."""
    wizard = build_wizard(load_test_configuration(file_path), settings)
    readiness = wizard.readiness()
    return {
        **readiness.to_dict(),
        "warnings": [w.model_dump() for w in wizard.warnings()],
        "reach": wizard.targeting.estimate_reach(),
    }


def estimate_reach(
    settings: Settings,
    persona: Optional[str] = None,
    stage: Optional[str] = None,
    traffic: int = 100,
    combinations: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """Reach estimate for a targeting selection given on the command line."""
    selection = TargetingSelection(
        multi=bool(combinations),
        persona=Persona(persona) if persona else None,
        funnel_stage=FunnelStage(stage) if stage else None,
        combinations=combinations or [],
    )
    config = TestConfiguration(
        target_persona=selection.persona,
        target_funnel_stage=selection.funnel_stage,
        target_combinations=selection.combinations,
    )
    wizard = build_wizard(config, settings)
    wizard.targeting.set_traffic_allocation(traffic, snap=False)
    return {
        "reach": wizard.targeting.estimate_reach(),
        "trafficAllocation": wizard.targeting.traffic_allocation,
        "warnings": [w.model_dump() for w in wizard.targeting.warnings()],
    }


@log_execution_time(logger)
async def launch_test(
    file_path: str,
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dict[str, Any]:
    """Validate a configuration file and submit it to the backend.

    Raises:
        LaunchBlockedError: If the configuration is not ready to launch.
        ApiError: If the backend rejects the test or one of its variants.
    """
    config = load_test_configuration(file_path)
    wizard = build_wizard(config, settings)

    async with AdminApiClient.from_settings(settings.api, transport=transport) as client:
        if config.target_combinations:
            await wizard.load_available_combinations(client)
        return await wizard.launch(client)


def _preview_store(settings: Settings) -> SQLPreviewStore:
    return SQLPreviewStore.from_settings(settings)


async def preview_show(
    session_id: str,
    settings: Settings,
    include_options: bool = False,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dict[str, Any]:
    """Stored preview session, optionally with the selectable variants."""
    store = _preview_store(settings)
    try:
        state = AdminPreviewState(store, session_id)
        session = await state.load()
        result: Dict[str, Any] = {
            "active": state.is_active,
            "session": session.model_dump(mode="json", by_alias=True),
        }
        if include_options:
            async with AdminApiClient.from_settings(settings.api, transport=transport) as client:
                options: List[PreviewOption] = await state.preview_options(client)
            result["options"] = [option.to_dict() for option in options]
        return result
    finally:
        await store.close()


async def preview_apply(
    session_id: str,
    settings: Settings,
    persona: Optional[str] = None,
    stage: Optional[str] = None,
    variant: Optional[str] = None,
) -> PreviewSession:
    """Store a preview selection; ``variant`` is given as ``TEST_ID:VARIANT_ID``.

    Raises:
        ValueError: If a value is not a known persona, stage or variant reference.
    """
    store = _preview_store(settings)
    try:
        state = AdminPreviewState(store, session_id)
        state.set_persona(persona)
        state.set_funnel_stage(stage)
        if variant:
            test_id, sep, variant_id = variant.partition(":")
            if not sep or not test_id or not variant_id:
                raise ValueError(f"Variant must be given as TEST_ID:VARIANT_ID, got {variant!r}")
            state.select_variant(variant_id, test_id)
        return await state.apply()
    finally:
        await store.close()


async def preview_reset(session_id: str, settings: Settings) -> PreviewSession:
    store = _preview_store(settings)
    try:
        return await AdminPreviewState(store, session_id).reset()
    finally:
        await store.close()

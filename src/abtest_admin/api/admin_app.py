"""HTTP service exposing test validation and admin preview to the front end."""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import Settings
from ..core.exceptions import AdminError
from ..core.interfaces import PreviewStoreInterface
from ..core.types import (
    FUNNEL_STAGE_LABELS,
    PERSONA_LABELS,
    TEST_TYPE_LABELS,
    Advisory,
    PresentationConfig,
    TargetingSelection,
    TestConfiguration,
    TestType,
)
from ..experiments.readiness import is_ready
from ..experiments.registry import LAYOUT_TEMPLATES, get_config_definition
from ..experiments.targeting import TargetingSelector
from ..experiments.variants import VariantSetManager
from ..observability import get_logger
from ..preview import AdminPreviewState, PreviewSession
from ..storage import SQLPreviewStore

logger = get_logger(__name__)


class ReadinessResponse(BaseModel):
    """Launch gate verdict with inline advisories."""
    ready: bool
    reasons: List[str]
    warnings: List[Advisory]


class ReachResponse(BaseModel):
    """Display-only audience reach estimate."""
    reach: int
    warnings: List[Advisory]


class PreviewResponse(BaseModel):
    """Preview session as seen by the admin UI."""
    active: bool
    session: PreviewSession


def build_selector(selection: TargetingSelection, settings: Settings) -> TargetingSelector:
    """Editable selector mirroring a submitted selection.

    Submitted combinations are treated as available; availability is checked
    by the content backend when the admin picks them.
    """
    wizard = settings.wizard
    selector = TargetingSelector(
        multi=selection.multi,
        available=selection.combinations,
        min_traffic=wizard.min_traffic_allocation,
        max_traffic=wizard.max_traffic_allocation,
        traffic_step=wizard.traffic_step,
        small_audience_threshold=wizard.small_audience_threshold,
        total_combinations=wizard.total_combinations,
    )
    selector.set_persona(selection.persona)
    selector.set_funnel_stage(selection.funnel_stage)
    selector.set_traffic_allocation(selection.traffic_allocation, snap=False)
    for key in selection.combinations:
        persona, stage = key.split(":", 1)
        selector.toggle_combination(persona, stage, True)
    return selector


def review_configuration(config: TestConfiguration, settings: Settings) -> ReadinessResponse:
    """Run the launch gate and collect the advisories shown on the review step."""
    selection = config.targeting()
    readiness = is_ready(config.variants, selection)
    warnings = VariantSetManager(config.type, config.variants).warnings()
    warnings += build_selector(selection, settings).warnings()
    return ReadinessResponse(ready=readiness.ready, reasons=readiness.reasons, warnings=warnings)


def registry_payload() -> Dict[str, Any]:
    test_types = []
    for test_type in TestType:
        definition = get_config_definition(test_type)
        default = definition.create_default_config()
        test_types.append({
            "type": test_type.value,
            "label": TEST_TYPE_LABELS[test_type],
            "description": definition.description,
            "usesVisualEditor": definition.uses_visual_editor,
            "contentType": definition.content_type,
            "defaultConfig": default.model_dump(
                mode="json",
                by_alias=True,
                exclude_none=isinstance(default, PresentationConfig),
            ),
        })
    return {
        "testTypes": test_types,
        "layoutTemplates": [
            {"id": t.id, "name": t.name, "description": t.description, "preview": t.preview}
            for t in LAYOUT_TEMPLATES
        ],
        "personas": {p.value: label for p, label in PERSONA_LABELS.items()},
        "funnelStages": {s.value: label for s, label in FUNNEL_STAGE_LABELS.items()},
    }


def create_app(
    settings: Optional[Settings] = None,
    preview_store: Optional[PreviewStoreInterface] = None,
) -> FastAPI:
    """Build the admin service.

    Args:
        settings: Application settings; loaded from the environment when omitted.
        preview_store: Store for preview sessions; a SQLite store at the
            configured database when omitted.
    """
    settings = settings or Settings()
    if preview_store is None:
        preview_store = SQLPreviewStore.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await preview_store.initialize()
        logger.info("Admin service started", app_name=settings.app_name)
        yield
        await preview_store.close()
        logger.info("Admin service stopped")

    app = FastAPI(
        title="A/B Test Admin",
        description="Validation and preview endpoints for persona A/B tests",
        version=settings.version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.preview_store = preview_store

    @app.exception_handler(AdminError)
    async def admin_error_handler(request: Request, exc: AdminError):
        logger.warning("Request rejected", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.post("/api/wizard/readiness", response_model=ReadinessResponse)
    async def readiness(config: TestConfiguration):
        """Check whether a test configuration may be launched."""
        return review_configuration(config, settings)

    @app.post("/api/wizard/reach", response_model=ReachResponse)
    async def reach(selection: TargetingSelection):
        """Estimate the audience a targeting selection covers."""
        selector = build_selector(selection, settings)
        return ReachResponse(reach=selector.estimate_reach(), warnings=selector.warnings())

    @app.get("/api/wizard/registry")
    async def registry():
        return registry_payload()

    @app.get("/api/preview/{session_id}", response_model=PreviewResponse)
    async def get_preview(session_id: str):
        state = AdminPreviewState(preview_store, session_id)
        session = await state.load()
        return PreviewResponse(active=state.is_active, session=session)

    @app.put("/api/preview/{session_id}", response_model=PreviewResponse)
    async def apply_preview(session_id: str, session: PreviewSession):
        state = AdminPreviewState(preview_store, session_id)
        state.set_persona(session.persona)
        state.set_funnel_stage(session.funnel_stage)
        if session.variant_overrides:
            test_id, variant_id = next(iter(session.variant_overrides.items()))
            state.select_variant(variant_id, test_id)
        applied = await state.apply()
        return PreviewResponse(active=state.is_active, session=applied)

    @app.delete("/api/preview/{session_id}", response_model=PreviewResponse)
    async def reset_preview(session_id: str):
        state = AdminPreviewState(preview_store, session_id)
        cleared = await state.reset()
        return PreviewResponse(active=state.is_active, session=cleared)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "timestamp": datetime.now(),
            "version": settings.version,
        }

    return app

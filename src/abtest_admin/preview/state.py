"""Admin preview of persona, journey stage and variant overrides.

An admin can browse the site as a given persona and funnel stage and force a
specific A/B variant. The selection lives in a :class:`PreviewStoreInterface`
keyed by session id, so it survives reloads of the admin UI.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from pydantic import Field

from ..core.interfaces import PreviewStoreInterface
from ..core.types import CamelModel, FunnelStage, Persona
from ..observability import LoggerMixin

NO_SELECTION = "none"


class PreviewSession(CamelModel):
    """Overrides applied to an admin's view of the site."""
    persona: Optional[Persona] = None
    funnel_stage: Optional[FunnelStage] = None
    variant_overrides: Dict[str, str] = Field(default_factory=dict)


@dataclass
class PreviewOption:
    """One selectable variant in the preview dropdown."""
    variant_id: str
    test_id: str
    test_name: str
    test_type: str
    is_control: bool
    variant: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "variantId": self.variant_id,
            "testId": self.test_id,
            "testName": self.test_name,
            "testType": self.test_type,
            "isControl": self.is_control,
            "variant": self.variant,
        }


class InMemoryPreviewStore(PreviewStoreInterface):
    """Process-local store, used by tests and one-off CLI runs."""

    def __init__(self):
        self._sessions: Dict[str, Dict[str, Any]] = {}

    async def load(self, session_id: str) -> Optional[Dict[str, Any]]:
        record = self._sessions.get(session_id)
        return copy.deepcopy(record) if record is not None else None

    async def save(self, session_id: str, data: Dict[str, Any]) -> None:
        self._sessions[session_id] = copy.deepcopy(data)

    async def clear(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)


class AdminPreviewState(LoggerMixin):
    """Pending and applied preview selection for one admin session.

    Selections are edited in memory and only written to the store by
    :meth:`apply`. Stored records use ``"none"`` for an explicitly cleared
    persona and omit the funnel stage and variant overrides when unset.
    """

    def __init__(
        self,
        store: PreviewStoreInterface,
        session_id: str,
        visitor_persona: Optional[Persona] = None,
    ):
        self.store = store
        self.session_id = session_id
        self.visitor_persona = Persona(visitor_persona) if visitor_persona else None
        self.selected_persona: Optional[Persona] = self.visitor_persona
        self.selected_funnel: Optional[FunnelStage] = None
        self.selected_variants: Dict[str, str] = {}
        self._active = False

    @property
    def is_active(self) -> bool:
        """True when a persona override has been stored for this session."""
        return self._active

    def session(self) -> PreviewSession:
        return PreviewSession(
            persona=self.selected_persona,
            funnel_stage=self.selected_funnel,
            variant_overrides=dict(self.selected_variants),
        )

    async def load(self) -> PreviewSession:
        """Restore the selection from the store.

        Without a stored persona override the current visitor persona is used.
        """
        record = await self.store.load(self.session_id) or {}
        self._active = "persona" in record

        persona = record.get("persona")
        if persona and persona != NO_SELECTION:
            self.selected_persona = Persona(persona)
        else:
            self.selected_persona = self.visitor_persona

        stage = record.get("funnel_stage")
        self.selected_funnel = FunnelStage(stage) if stage and stage != NO_SELECTION else None

        overrides = record.get("variant_overrides")
        if isinstance(overrides, dict):
            self.selected_variants = {str(k): str(v) for k, v in overrides.items()}
        else:
            self.selected_variants = {}

        return self.session()

    def set_persona(self, persona: Optional[Union[Persona, str]]) -> None:
        self.selected_persona = Persona(persona) if persona and persona != NO_SELECTION else None

    def set_funnel_stage(self, stage: Optional[Union[FunnelStage, str]]) -> None:
        self.selected_funnel = FunnelStage(stage) if stage and stage != NO_SELECTION else None

    def select_variant(self, variant_id: str, test_id: str = "") -> Dict[str, str]:
        """Force a single variant; ``"none"`` clears the override.

        Only one variant may be forced at a time, across all tests.
        """
        if not variant_id or variant_id == NO_SELECTION:
            self.selected_variants = {}
        else:
            self.selected_variants = {test_id: variant_id}
        return dict(self.selected_variants)

    async def apply(self) -> PreviewSession:
        """Persist the pending selection."""
        record: Dict[str, Any] = {
            "persona": self.selected_persona.value if self.selected_persona else NO_SELECTION,
        }
        if self.selected_funnel is not None:
            record["funnel_stage"] = self.selected_funnel.value
        if self.selected_variants:
            record["variant_overrides"] = dict(self.selected_variants)

        await self.store.save(self.session_id, record)
        self._active = True
        self.logger.info(
            "Preview applied",
            session_id=self.session_id,
            persona=record["persona"],
            funnel_stage=record.get("funnel_stage"),
            variant_overrides=len(self.selected_variants),
        )
        return self.session()

    async def reset(self) -> PreviewSession:
        """Drop every override, stored and pending."""
        await self.store.clear(self.session_id)
        self.selected_persona = None
        self.selected_funnel = None
        self.selected_variants = {}
        self._active = False
        self.logger.info("Preview reset", session_id=self.session_id)
        return self.session()

    async def preview_options(self, api: Any) -> List[PreviewOption]:
        """Variants of the tests active for the selected persona and stage.

        Controls come first, then options are ordered by test name.
        """
        tests = await api.get_active_tests(self.selected_persona, self.selected_funnel)
        options = []
        for test in tests:
            for variant in await api.get_test_variants(test["id"]):
                options.append(PreviewOption(
                    variant_id=variant["id"],
                    test_id=test["id"],
                    test_name=test.get("name", ""),
                    test_type=test.get("type", ""),
                    is_control=bool(variant.get("isControl")),
                    variant=variant,
                ))

        options.sort(key=lambda option: (not option.is_control, option.test_name.casefold()))
        return options

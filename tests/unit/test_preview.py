"""Unit tests for admin preview state."""

from unittest.mock import AsyncMock

import pytest

from abtest_admin.core.types import FunnelStage, Persona
from abtest_admin.preview import AdminPreviewState, InMemoryPreviewStore


class TestLoad:
    """Test restoring the preview selection."""

    @pytest.mark.asyncio
    async def test_falls_back_to_visitor_persona(self, memory_store):
        state = AdminPreviewState(memory_store, "s1", visitor_persona="parent")

        session = await state.load()

        assert session.persona == Persona.PARENT
        assert session.funnel_stage is None
        assert session.variant_overrides == {}
        assert state.is_active is False

    @pytest.mark.asyncio
    async def test_restores_stored_overrides(self, memory_store):
        await memory_store.save("s1", {
            "persona": "donor",
            "funnel_stage": "retention",
            "variant_overrides": {"t1": "v2"},
        })
        state = AdminPreviewState(memory_store, "s1", visitor_persona="parent")

        session = await state.load()

        assert session.persona == Persona.DONOR
        assert session.funnel_stage == FunnelStage.RETENTION
        assert session.variant_overrides == {"t1": "v2"}
        assert state.is_active is True

    @pytest.mark.asyncio
    async def test_stored_none_persona_uses_visitor(self, memory_store):
        await memory_store.save("s1", {"persona": "none"})
        state = AdminPreviewState(memory_store, "s1", visitor_persona="student")

        session = await state.load()

        assert session.persona == Persona.STUDENT
        assert state.is_active is True

    @pytest.mark.asyncio
    async def test_malformed_overrides_ignored(self, memory_store):
        await memory_store.save("s1", {"persona": "donor", "variant_overrides": "not-a-dict"})
        state = AdminPreviewState(memory_store, "s1")

        session = await state.load()

        assert session.variant_overrides == {}


class TestApply:
    """Test persisting the selection."""

    @pytest.mark.asyncio
    async def test_apply_full_selection(self, memory_store):
        state = AdminPreviewState(memory_store, "s1")
        state.set_persona("volunteer")
        state.set_funnel_stage("consideration")
        state.select_variant("v1", "t1")

        await state.apply()

        assert await memory_store.load("s1") == {
            "persona": "volunteer",
            "funnel_stage": "consideration",
            "variant_overrides": {"t1": "v1"},
        }
        assert state.is_active is True

    @pytest.mark.asyncio
    async def test_apply_without_persona_stores_none(self, memory_store):
        state = AdminPreviewState(memory_store, "s1")

        await state.apply()

        assert await memory_store.load("s1") == {"persona": "none"}

    @pytest.mark.asyncio
    async def test_sessions_are_isolated(self, memory_store):
        first = AdminPreviewState(memory_store, "s1")
        first.set_persona("donor")
        await first.apply()

        second = AdminPreviewState(memory_store, "s2")
        await second.load()

        assert second.is_active is False
        assert second.selected_persona is None


class TestSelectVariant:
    """Test the single forced variant."""

    def test_only_one_override(self, memory_store):
        state = AdminPreviewState(memory_store, "s1")
        state.select_variant("v1", "t1")

        assert state.select_variant("v9", "t2") == {"t2": "v9"}

    def test_none_clears(self, memory_store):
        state = AdminPreviewState(memory_store, "s1")
        state.select_variant("v1", "t1")

        assert state.select_variant("none", "") == {}


class TestReset:
    """Test clearing the preview."""

    @pytest.mark.asyncio
    async def test_reset(self, memory_store):
        state = AdminPreviewState(memory_store, "s1", visitor_persona="parent")
        state.set_persona("donor")
        state.select_variant("v1", "t1")
        await state.apply()

        session = await state.reset()

        assert session.persona is None
        assert session.variant_overrides == {}
        assert state.is_active is False
        assert await memory_store.load("s1") is None


class TestPreviewOptions:
    """Test listing selectable variants."""

    @pytest.mark.asyncio
    async def test_controls_first_then_test_name(self, memory_store):
        api = AsyncMock()
        api.get_active_tests.return_value = [
            {"id": "t-zeta", "name": "Zeta layout", "type": "layout"},
            {"id": "t-alpha", "name": "alpha hero", "type": "hero"},
        ]
        api.get_test_variants.side_effect = lambda test_id: {
            "t-zeta": [
                {"id": "z-ctl", "name": "Control (Original)", "isControl": True},
                {"id": "z-b", "name": "Variant B", "isControl": False},
            ],
            "t-alpha": [
                {"id": "a-b", "name": "Variant B", "isControl": False},
                {"id": "a-ctl", "name": "Control (Original)", "isControl": True},
            ],
        }[test_id]

        state = AdminPreviewState(memory_store, "s1")
        state.set_persona("student")
        options = await state.preview_options(api)

        assert [o.variant_id for o in options] == ["a-ctl", "z-ctl", "a-b", "z-b"]
        api.get_active_tests.assert_awaited_once_with(Persona.STUDENT, None)
        assert options[0].to_dict()["testName"] == "alpha hero"


class TestInMemoryPreviewStore:
    """Test the in-memory store."""

    @pytest.mark.asyncio
    async def test_returns_copies(self):
        store = InMemoryPreviewStore()
        record = {"persona": "donor", "variant_overrides": {"t1": "v1"}}
        await store.save("s1", record)
        record["variant_overrides"]["t1"] = "changed"

        loaded = await store.load("s1")
        loaded["persona"] = "parent"

        assert await store.load("s1") == {"persona": "donor", "variant_overrides": {"t1": "v1"}}

    @pytest.mark.asyncio
    async def test_clear_missing_session(self):
        store = InMemoryPreviewStore()
        await store.clear("missing")
        assert await store.load("missing") is None

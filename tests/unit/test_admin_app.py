"""Unit tests for the admin HTTP service."""

import pytest
from fastapi.testclient import TestClient

from abtest_admin.api import create_app
from abtest_admin.preview import InMemoryPreviewStore


@pytest.fixture
def preview_store():
    return InMemoryPreviewStore()


@pytest.fixture
def client(settings, preview_store):
    with TestClient(create_app(settings, preview_store=preview_store)) as test_client:
        yield test_client


class TestHealth:
    """Test the health endpoint."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["version"] == "0.1.0"


class TestWizardEndpoints:
    """Test validation endpoints."""

    def test_readiness_ready(self, client, ready_config):
        response = client.post("/api/wizard/readiness", json=ready_config.to_api_payload())

        assert response.status_code == 200
        body = response.json()
        assert body["ready"] is True
        assert body["reasons"] == []
        assert body["warnings"] == []

    def test_readiness_not_ready(self, client, ready_config):
        payload = ready_config.to_api_payload()
        payload["variants"] = payload["variants"][:1]

        body = client.post("/api/wizard/readiness", json=payload).json()

        assert body["ready"] is False
        assert body["reasons"] == ["need ≥2 variants", "weights must sum to 100"]
        assert [w["code"] for w in body["warnings"]] == ["weights_not_100"]

    def test_readiness_multi_target_warning(self, client, ready_config):
        payload = ready_config.to_api_payload()
        payload["targetCombinations"] = ["student:awareness"]

        body = client.post("/api/wizard/readiness", json=payload).json()

        assert body["ready"] is True
        assert [w["code"] for w in body["warnings"]] == ["small_audience"]

    def test_readiness_invalid_payload(self, client):
        response = client.post("/api/wizard/readiness", json={"type": "popup"})
        assert response.status_code == 422

    def test_reach_single(self, client):
        body = client.post("/api/wizard/reach", json={"persona": "student", "trafficAllocation": 50}).json()
        assert body == {"reach": 10, "warnings": []}

    def test_reach_rounds_half_up(self, client):
        body = client.post("/api/wizard/reach", json={
            "multi": True,
            "combinations": ["student:awareness"],
            "trafficAllocation": 50,
        }).json()
        # 5% of combinations at 50% traffic is 2.5
        assert body["reach"] == 3

    def test_reach_total_combinations_setting(self, settings, preview_store):
        settings.wizard.total_combinations = 10
        with TestClient(create_app(settings, preview_store=preview_store)) as client:
            body = client.post("/api/wizard/reach", json={
                "multi": True,
                "combinations": ["student:awareness"],
            }).json()
        assert body["reach"] == 10

    def test_reach_multi_empty(self, client):
        body = client.post("/api/wizard/reach", json={"multi": True}).json()
        assert body["reach"] == 0
        assert body["warnings"][0]["code"] == "no_combination"

    def test_registry(self, client):
        body = client.get("/api/wizard/registry").json()

        types = {t["type"]: t for t in body["testTypes"]}
        assert set(types) == {"hero", "cta", "card_order", "messaging", "layout"}
        assert types["layout"]["usesVisualEditor"] is True
        assert types["layout"]["defaultConfig"]["template"] == "grid-2col"
        assert types["hero"]["defaultConfig"]["buttonVariant"] == "default"
        assert len(body["layoutTemplates"]) == 7
        assert body["funnelStages"]["awareness"] == "Awareness (TOFU)"


class TestPreviewEndpoints:
    """Test preview session endpoints."""

    def test_empty_session(self, client):
        body = client.get("/api/preview/s1").json()
        assert body["active"] is False
        assert body["session"] == {"persona": None, "funnelStage": None, "variantOverrides": {}}

    def test_apply_and_load(self, client, preview_store):
        response = client.put("/api/preview/s1", json={
            "persona": "donor",
            "funnelStage": "retention",
            "variantOverrides": {"t1": "v2"},
        })
        assert response.status_code == 200
        assert response.json()["active"] is True

        body = client.get("/api/preview/s1").json()
        assert body["active"] is True
        assert body["session"]["persona"] == "donor"
        assert body["session"]["funnelStage"] == "retention"
        assert body["session"]["variantOverrides"] == {"t1": "v2"}

    def test_apply_keeps_single_variant_override(self, client):
        body = client.put("/api/preview/s1", json={
            "persona": "donor",
            "variantOverrides": {"t1": "v2", "t2": "v5"},
        }).json()
        assert len(body["session"]["variantOverrides"]) == 1

    def test_apply_invalid_persona(self, client):
        response = client.put("/api/preview/s1", json={"persona": "alien"})
        assert response.status_code == 422

    def test_reset(self, client):
        client.put("/api/preview/s1", json={"persona": "donor"})

        body = client.delete("/api/preview/s1").json()

        assert body["active"] is False
        assert client.get("/api/preview/s1").json()["active"] is False

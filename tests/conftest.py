"""Shared test configuration and fixtures."""

import json
from typing import Any, Callable, Dict, List, Tuple

import httpx
import pytest
import pytest_asyncio

from abtest_admin.api import AdminApiClient
from abtest_admin.config import Settings
from abtest_admin.core.types import PresentationConfig, TestConfiguration, Variant
from abtest_admin.preview import InMemoryPreviewStore
from abtest_admin.storage import SQLPreviewStore


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch, tmp_path):
    """Keep settings and stores away from the real environment and home directory."""
    for name in ["ABTEST_API_BASE_URL", "ABTEST_API_TOKEN", "DATABASE_URL", "DATABASE_PATH", "LOG_LEVEL"]:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def settings(tmp_path):
    """Settings with the preview database in a temporary directory."""
    return Settings(storage={"path": str(tmp_path / "preview.db")})


@pytest.fixture
def control_variant():
    return Variant(
        id="variant-control",
        name="Control (Original)",
        traffic_weight=50,
        is_control=True,
        configuration=PresentationConfig(title="Learn at your own pace"),
    )


@pytest.fixture
def challenger_variant():
    return Variant(
        id="variant-b",
        name="Variant B",
        traffic_weight=50,
        configuration=PresentationConfig(title="Finish your diploma this year", cta_text="Enroll now"),
    )


@pytest.fixture
def ready_config(control_variant, challenger_variant):
    """A hero test that passes the launch gate."""
    return TestConfiguration(
        name="Student hero headline",
        description="Compare headline copy for students",
        target_persona="student",
        target_funnel_stage="awareness",
        variants=[control_variant, challenger_variant],
    )


@pytest.fixture
def write_config(tmp_path) -> Callable[[TestConfiguration], str]:
    """Write a test configuration to a JSON file and return its path."""
    def _write(config: TestConfiguration, name: str = "test.json") -> str:
        path = tmp_path / name
        path.write_text(json.dumps(config.to_api_payload()))
        return str(path)
    return _write


class RecordingBackend:
    """Fake REST backend for httpx.MockTransport that records requests."""

    def __init__(self):
        self.requests: List[Tuple[str, str, Any]] = []
        self.routes: Dict[Tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}

    def route(self, method: str, path: str, status_code: int = 200, json_body: Any = None) -> None:
        self.routes[(method, path)] = lambda request: httpx.Response(status_code, json=json_body)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.requests.append((request.method, request.url.path, body))
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"message": "Not found"})
        return handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def backend():
    return RecordingBackend()


@pytest_asyncio.fixture
async def api_client(backend):
    client = AdminApiClient(base_url="http://backend.test", token="secret", transport=backend.transport)
    try:
        yield client
    finally:
        await client.close()


@pytest.fixture
def memory_store():
    return InMemoryPreviewStore()


@pytest_asyncio.fixture
async def sql_store(tmp_path):
    """SQLite preview store in a temporary directory."""
    store = SQLPreviewStore(database_path=str(tmp_path / "preview.db"))
    await store.initialize()
    try:
        yield store
    finally:
        await store.close()

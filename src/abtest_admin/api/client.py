"""Async client for the marketing site's REST backend."""

from typing import Any, Dict, List, Optional

import httpx

from ..config.settings import ApiSettings
from ..core.exceptions import ApiError
from ..core.types import ContentItem, FunnelStage, Persona, Recommendation, TestType
from ..observability import get_logger

logger = get_logger(__name__)


class AdminApiClient:
    """Client for the content and A/B test endpoints the admin relies on.

    Requests are not retried; failures surface as :class:`ApiError` so the
    caller can report them and let the admin correct input and resubmit.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:5000",
        token: Optional[str] = None,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            base_url: Base URL of the backend.
            token: Optional bearer token sent with every request.
            timeout: Request timeout in seconds.
            transport: Custom httpx transport, used by tests.
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(cls, settings: ApiSettings, **kwargs: Any) -> "AdminApiClient":
        return cls(base_url=settings.base_url, token=settings.token, timeout=settings.timeout, **kwargs)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            headers = {"Accept": "application/json"}
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "AdminApiClient":
        await self._get_client()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        client = await self._get_client()
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        try:
            response = await client.request(method, path, params=params, json=json)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            message = _error_message(e.response)
            logger.warning(
                "API request rejected",
                method=method,
                path=path,
                status_code=e.response.status_code,
                error=message,
            )
            raise ApiError(message, status_code=e.response.status_code) from e
        except httpx.RequestError as e:
            logger.error("API request failed", method=method, path=path, error=str(e))
            raise ApiError(f"Failed to reach backend at {self.base_url}: {e}") from e

        if not response.content:
            return None
        return response.json()

    # Content manager

    async def get_content_items(self, content_type: str) -> List[ContentItem]:
        data = await self._request("GET", f"/api/content/type/{content_type}")
        return [ContentItem.model_validate(item) for item in data or []]

    async def create_content_item(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/api/content", json=payload)

    async def get_available_combinations(self) -> List[Dict[str, str]]:
        """Persona x stage pairs that currently have visible content."""
        return await self._request("GET", "/api/content/available-combinations") or []

    # A/B tests

    async def get_baseline_config(
        self,
        persona: Persona,
        funnel_stage: FunnelStage,
        test_type: TestType,
    ) -> Optional[Dict[str, Any]]:
        """Configuration currently live for a persona x stage x test type."""
        return await self._request(
            "GET",
            "/api/ab-tests/baseline-config",
            params={
                "persona": Persona(persona).value,
                "funnelStage": FunnelStage(funnel_stage).value,
                "testType": TestType(test_type).internal_name,
            },
        )

    async def get_historical_results(
        self,
        persona: Persona,
        funnel_stage: FunnelStage,
        test_type: TestType,
    ) -> Optional[Dict[str, Any]]:
        """Most recent completed test for a persona x stage x test type."""
        return await self._request(
            "GET",
            "/api/ab-tests/historical-results",
            params={
                "persona": Persona(persona).value,
                "funnelStage": FunnelStage(funnel_stage).value,
                "testType": TestType(test_type).internal_name,
            },
        )

    async def get_active_tests(
        self,
        persona: Optional[Persona] = None,
        funnel_stage: Optional[FunnelStage] = None,
    ) -> List[Dict[str, Any]]:
        return await self._request(
            "GET",
            "/api/ab-tests/active",
            params={
                "persona": Persona(persona).value if persona else None,
                "funnelStage": FunnelStage(funnel_stage).value if funnel_stage else None,
            },
        ) or []

    async def get_test_variants(self, test_id: str) -> List[Dict[str, Any]]:
        return await self._request("GET", f"/api/ab-tests/{test_id}/variants") or []

    async def get_recommendations(self) -> List[Recommendation]:
        """Suggested tests from the performance metrics endpoint."""
        data = await self._request("GET", "/api/performance-metrics") or {}
        recommendations = []
        for item in data.get("recommendations", []):
            try:
                recommendations.append(Recommendation.model_validate(item))
            except ValueError:
                logger.debug("Skipping recommendation with unknown test type", recommendation=item)
        return recommendations

    async def create_test(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        created = await self._request("POST", "/api/ab-tests", json=payload)
        if not created or not created.get("id"):
            raise ApiError("Failed to create test - no ID returned")
        return created

    async def create_variant(self, test_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", f"/api/ab-tests/{test_id}/variants", json=payload)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body)
    return str(body)

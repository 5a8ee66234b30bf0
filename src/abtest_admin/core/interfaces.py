"""Collaborator interfaces for the A/B test admin."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Protocol

from .types import ContentItem, FunnelStage, Persona, Recommendation, TestType


class ContentApiInterface(Protocol):
    """Read side of the REST backend used while building a test."""

    async def get_content_items(self, content_type: str) -> List[ContentItem]:
        """Return content items of the given type."""
        ...

    async def get_available_combinations(self) -> List[Dict[str, str]]:
        """Return persona x stage pairs that have visible content."""
        ...

    async def get_baseline_config(
        self,
        persona: Persona,
        funnel_stage: FunnelStage,
        test_type: TestType,
    ) -> Optional[Dict[str, Any]]:
        """Return the live configuration for a persona x stage x test type."""
        ...

    async def get_recommendations(self) -> List[Recommendation]:
        """Return suggested tests for the Discover step."""
        ...


class LaunchApiInterface(Protocol):
    """Write side of the REST backend used at the launch gate."""

    async def create_test(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Create a test and return it."""
        ...

    async def create_variant(self, test_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Create a variant under an existing test."""
        ...


class PreviewStoreInterface(ABC):
    """Abstract base class for admin preview session stores."""

    @abstractmethod
    async def load(self, session_id: str) -> Optional[Dict[str, Any]]:
        """Load the stored overrides for a session, if any."""
        pass

    @abstractmethod
    async def save(self, session_id: str, data: Dict[str, Any]) -> None:
        """Persist the overrides for a session."""
        pass

    @abstractmethod
    async def clear(self, session_id: str) -> None:
        """Remove all overrides for a session."""
        pass

    async def initialize(self) -> None:
        """Prepare the store for use."""

    async def close(self) -> None:
        """Release store resources."""

"""Exception hierarchy for the A/B test admin."""

from typing import List, Optional


class AdminError(Exception):
    """Base class for all admin errors."""


class ConfigurationError(AdminError):
    """Raised when settings or a configuration file cannot be used."""


class VariantError(AdminError):
    """Base class for variant set errors."""


class VariantNotFoundError(VariantError):
    """Raised when a variant id is not part of the set."""

    def __init__(self, variant_id: str):
        super().__init__(f"Variant not found: {variant_id}")
        self.variant_id = variant_id


class VariantRemovalError(VariantError):
    """Raised when removing a variant would leave the set without a control."""

    def __init__(self, variant_id: str):
        super().__init__(
            f"Cannot remove control variant {variant_id}: mark another variant as control first"
        )
        self.variant_id = variant_id


class CombinationUnavailableError(AdminError):
    """Raised when selecting a persona x stage combination that has no content."""

    def __init__(self, key: str):
        super().__init__(f"No content available for combination: {key}")
        self.key = key


class LaunchBlockedError(AdminError):
    """Raised at the launch gate when the configuration is not ready."""

    def __init__(self, reasons: List[str]):
        super().__init__("Test is not ready to launch: " + "; ".join(reasons))
        self.reasons = list(reasons)


class ApiError(AdminError):
    """Raised when the REST backend rejects a request or cannot be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message if status_code is None else f"{status_code}: {message}")
        self.message = message
        self.status_code = status_code

    @property
    def is_auth_error(self) -> bool:
        """True for 401/403 responses."""
        return self.status_code in (401, 403)

"""REST client for the content backend and the admin HTTP service."""

from .admin_app import create_app
from .client import AdminApiClient

__all__ = ["AdminApiClient", "create_app"]

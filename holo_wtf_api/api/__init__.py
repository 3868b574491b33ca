"""API layer package for FastAPI application and route composition."""

from .application import create_api_application
from .routers import API_HEALTH_PATHS

__all__ = ["API_HEALTH_PATHS", "create_api_application"]

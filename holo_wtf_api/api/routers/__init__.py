"""API router package for endpoint composition."""

from .dispatch import api_create_dispatch_router
from .health import (
    API_HEALTH_LIVENESS_PATH,
    API_HEALTH_METHODS,
    API_HEALTH_PATHS,
    API_HEALTH_READINESS_PATH,
    API_HEALTH_SUMMARY_PATH,
    api_create_health_router,
)

__all__ = [
    "API_HEALTH_LIVENESS_PATH",
    "API_HEALTH_METHODS",
    "API_HEALTH_PATHS",
    "API_HEALTH_READINESS_PATH",
    "API_HEALTH_SUMMARY_PATH",
    "api_create_dispatch_router",
    "api_create_health_router",
]

"""FastAPI application factory for the service boundary.

This module composes the health endpoints and the dispatcher bridge into one
ASGI application and ties the health flags to the server lifespan.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from holo_wtf_api.config import AppSettings
from holo_wtf_api.routing import RequestDispatcher
from holo_wtf_api.service import HealthState

from .routers import api_create_dispatch_router, api_create_health_router


def create_api_application(
    settings: AppSettings,
    health_state: HealthState,
    dispatcher: RequestDispatcher,
    ready_on_startup: bool = True,
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings used for runtime metadata.
        health_state: Health cell read by health endpoints and written on lifespan events.
        dispatcher: Dispatcher serving every non-health path.
        ready_on_startup: Mark the process ready once startup completes; False leaves
            readiness to the first dependency check.

    Returns:
        FastAPI: Framework application instance.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if settings is None:
        raise ValueError("settings must not be None")
    if health_state is None:
        raise ValueError("health_state must not be None")

    @asynccontextmanager
    async def api_lifespan(_application: FastAPI) -> AsyncIterator[None]:
        health_state.health_set_live(True)
        if ready_on_startup:
            health_state.health_set_ready(True, "startup complete")
        else:
            health_state.health_set_ready(False, "awaiting first readiness check")
        yield
        health_state.health_set_ready(False, "shutting down")

    application = FastAPI(
        title="holo-wtf-api",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=api_lifespan,
    )
    application.state.environment = settings.environment

    application.include_router(api_create_health_router(health_state=health_state))
    application.include_router(api_create_dispatch_router(dispatcher=dispatcher))

    return application

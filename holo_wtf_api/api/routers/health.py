"""Health endpoint router for liveness and readiness checks."""

from typing import Final

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse

from holo_wtf_api.routing import ROUTING_SUPPORTED_METHODS, routing_error_response
from holo_wtf_api.service import HealthState

from .dispatch import api_render_service_response

API_HEALTH_LIVENESS_PATH: Final[str] = "/health/live"
API_HEALTH_READINESS_PATH: Final[str] = "/health/ready"
API_HEALTH_SUMMARY_PATH: Final[str] = "/health"
API_HEALTH_PATHS: Final[tuple[str, ...]] = (
    API_HEALTH_SUMMARY_PATH,
    API_HEALTH_LIVENESS_PATH,
    API_HEALTH_READINESS_PATH,
)
API_HEALTH_METHODS: Final[tuple[str, ...]] = ("GET", "HEAD")


def api_create_health_router(health_state: HealthState) -> APIRouter:
    """Create health-check router answering independently of business handlers.

    Args:
        health_state: Process health cell.

    Returns:
        APIRouter: Router exposing `/health`, `/health/live`, and `/health/ready`.

    Raises:
        ValueError: Raised when health_state is invalid.
    """

    if health_state is None:
        raise ValueError("health_state must not be None")

    router = APIRouter(tags=["health"])

    @router.api_route(API_HEALTH_LIVENESS_PATH, methods=list(API_HEALTH_METHODS))
    def api_health_liveness() -> JSONResponse:
        """Return 200 once startup completed, 503 before that or after stop."""

        live = health_state.health_is_live()
        payload = {"status": "ok" if live else "down", "live": live}
        status_code = status.HTTP_200_OK if live else status.HTTP_503_SERVICE_UNAVAILABLE
        return JSONResponse(content=payload, status_code=status_code)

    @router.api_route(API_HEALTH_READINESS_PATH, methods=list(API_HEALTH_METHODS))
    def api_health_readiness() -> JSONResponse:
        """Return 200 while ready, 503 while dependencies are unavailable or draining."""

        snapshot = health_state.health_snapshot()
        payload = {
            "status": "ok" if snapshot.ready else "unavailable",
            "ready": snapshot.ready,
            "detail": snapshot.detail,
        }
        status_code = status.HTTP_200_OK if snapshot.ready else status.HTTP_503_SERVICE_UNAVAILABLE
        return JSONResponse(content=payload, status_code=status_code)

    @router.api_route(API_HEALTH_SUMMARY_PATH, methods=list(API_HEALTH_METHODS))
    def api_health_status() -> JSONResponse:
        """Return both flags; healthy only when live and ready.

        Returns:
            JSONResponse: Deterministic health payload for operational checks.

        Raises:
            RuntimeError: This endpoint does not raise runtime errors.
        """

        snapshot = health_state.health_snapshot()
        healthy = snapshot.live and snapshot.ready
        payload = {
            "status": "ok" if healthy else "degraded",
            "live": snapshot.live,
            "ready": snapshot.ready,
            "detail": snapshot.detail,
            "changed_at_utc": snapshot.changed_at_utc,
        }
        status_code = status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE
        return JSONResponse(content=payload, status_code=status_code)

    rejected_methods = sorted(ROUTING_SUPPORTED_METHODS.difference(API_HEALTH_METHODS))

    async def api_health_method_not_allowed(request: Request) -> Response:
        """Answer 405 for health paths requested with a method other than GET or HEAD."""

        service_response = routing_error_response(
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            error_code="method_not_allowed",
            message=f"method {request.method} not allowed for path {request.url.path!r}",
            details={"allowed_methods": list(API_HEALTH_METHODS)},
            headers={"allow": ", ".join(API_HEALTH_METHODS)},
        )
        return api_render_service_response(service_response)

    for health_path in API_HEALTH_PATHS:
        router.add_api_route(
            health_path,
            api_health_method_not_allowed,
            methods=rejected_methods,
            include_in_schema=False,
        )

    return router

"""Tests for API health endpoint behavior.

These tests validate that liveness and readiness are reported
independently and that the server lifespan drives both flags.
"""

from fastapi.testclient import TestClient

from holo_wtf_api.api.application import create_api_application
from holo_wtf_api.config import AppSettings
from holo_wtf_api.routing import RequestDispatcher, RouteTable, ServiceRequest, ServiceResponse
from holo_wtf_api.service import HealthState


class _RootHandler:
    """Minimal business handler for application factory dependency injection."""

    def handler_process(self, request: ServiceRequest) -> ServiceResponse:
        """Return deterministic plain response.

        Args:
            request: Dispatched request.

        Returns:
            ServiceResponse: Fixed success response.

        Raises:
            RuntimeError: Never raised by this test double.
        """

        return ServiceResponse(status_code=200, body=b"root")


def _build_client(health_state: HealthState, ready_on_startup: bool = True) -> tuple[TestClient, RequestDispatcher]:
    """Create a test client around a one-route dispatcher.

    Args:
        health_state: Health cell shared with the application.
        ready_on_startup: Forwarded to the application factory.

    Returns:
        tuple[TestClient, RequestDispatcher]: Client and dispatcher to shut down after the test.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    route_table = RouteTable()
    route_table.table_register("GET", "/", _RootHandler())
    dispatcher = RequestDispatcher(route_table, request_timeout_seconds=2.0, worker_count=2)
    settings = AppSettings(calendar_feed_url="https://calendar.example.test/feed.ics")
    application = create_api_application(
        settings=settings,
        health_state=health_state,
        dispatcher=dispatcher,
        ready_on_startup=ready_on_startup,
    )
    return TestClient(application), dispatcher


def test_api_health_reports_unavailable_before_startup() -> None:
    """Return 503 from every health path while startup has not completed.

    Returns:
        None: Assertions validate pre-startup health responses.

    Raises:
        AssertionError: Raised when health paths report healthy too early.
    """

    client, dispatcher = _build_client(HealthState())
    try:
        live_response = client.get("/health/live")
        ready_response = client.get("/health/ready")
        summary_response = client.get("/health")
    finally:
        dispatcher.dispatcher_shutdown()

    assert live_response.status_code == 503
    assert live_response.json() == {"status": "down", "live": False}
    assert ready_response.status_code == 503
    assert ready_response.json()["detail"] == "starting"
    assert summary_response.status_code == 503
    assert summary_response.json()["status"] == "degraded"


def test_api_health_readiness_toggles_without_affecting_liveness() -> None:
    """Flip readiness at runtime while liveness keeps answering 200.

    Returns:
        None: Assertions validate independent flags.

    Raises:
        AssertionError: Raised when readiness changes leak into liveness.
    """

    health_state = HealthState()
    health_state.health_set_live(True)
    health_state.health_set_ready(True, "startup complete")
    client, dispatcher = _build_client(health_state)
    try:
        assert client.get("/health/ready").status_code == 200
        assert client.get("/health").json()["status"] == "ok"

        health_state.health_set_ready(False, "calendar feed unreachable")
        ready_response = client.get("/health/ready")
        live_response = client.get("/health/live")

        health_state.health_set_ready(True)
        recovered_response = client.get("/health/ready")
    finally:
        dispatcher.dispatcher_shutdown()

    assert ready_response.status_code == 503
    assert ready_response.json() == {"status": "unavailable", "ready": False, "detail": "calendar feed unreachable"}
    assert live_response.status_code == 200
    assert live_response.json() == {"status": "ok", "live": True}
    assert recovered_response.status_code == 200


def test_api_health_lifespan_drives_flags() -> None:
    """Mark the process live and ready on startup and not ready on shutdown.

    Returns:
        None: Assertions validate lifespan integration.

    Raises:
        AssertionError: Raised when lifespan events do not update flags.
    """

    health_state = HealthState()
    client, dispatcher = _build_client(health_state)
    try:
        with client:
            summary_response = client.get("/health")
            root_response = client.get("/")
    finally:
        dispatcher.dispatcher_shutdown()

    assert summary_response.status_code == 200
    assert summary_response.json()["live"] is True
    assert summary_response.json()["ready"] is True
    assert root_response.text == "root"
    assert health_state.health_is_live()
    assert not health_state.health_is_ready()


def test_api_health_lifespan_defers_readiness_to_dependency_checks() -> None:
    """Stay not ready after startup when readiness is owned by dependency checks.

    Returns:
        None: Assertions validate deferred readiness.

    Raises:
        AssertionError: Raised when startup marks the process ready on its own.
    """

    health_state = HealthState()
    client, dispatcher = _build_client(health_state, ready_on_startup=False)
    try:
        with client:
            live_response = client.get("/health/live")
            ready_response = client.get("/health/ready")
            health_state.health_set_ready(True, "calendar feed reachable")
            checked_response = client.get("/health/ready")
    finally:
        dispatcher.dispatcher_shutdown()

    assert live_response.status_code == 200
    assert ready_response.status_code == 503
    assert ready_response.json()["detail"] == "awaiting first readiness check"
    assert checked_response.status_code == 200


def test_api_health_answers_head_requests() -> None:
    """Serve HEAD on every health path with the same status as GET.

    Returns:
        None: Assertions validate HEAD support.

    Raises:
        AssertionError: Raised when HEAD is not routed to the health endpoints.
    """

    health_state = HealthState()
    client, dispatcher = _build_client(health_state)
    try:
        before_startup_response = client.head("/health/live")
        with client:
            live_response = client.head("/health/live")
            ready_response = client.head("/health/ready")
            summary_response = client.head("/health")
    finally:
        dispatcher.dispatcher_shutdown()

    assert before_startup_response.status_code == 503
    assert live_response.status_code == 200
    assert ready_response.status_code == 200
    assert summary_response.status_code == 200


def test_api_health_rejects_other_methods_with_allow_header() -> None:
    """Answer 405 with the allowed methods instead of falling through to business routes.

    Returns:
        None: Assertions validate method rejection on health paths.

    Raises:
        AssertionError: Raised when a non-GET method reaches the dispatcher or gets 404.
    """

    health_state = HealthState()
    health_state.health_set_live(True)
    client, dispatcher = _build_client(health_state)
    try:
        post_response = client.post("/health/live", content=b"{}")
        delete_response = client.delete("/health")
        put_response = client.put("/health/ready", content=b"")
    finally:
        dispatcher.dispatcher_shutdown()

    assert post_response.status_code == 405
    assert post_response.headers["allow"] == "GET, HEAD"
    assert post_response.json()["error"] == "method_not_allowed"
    assert post_response.json()["allowed_methods"] == ["GET", "HEAD"]
    assert delete_response.status_code == 405
    assert delete_response.headers["allow"] == "GET, HEAD"
    assert put_response.status_code == 405

"""Service process lifecycle: socket binding, serving, and bounded shutdown."""

from __future__ import annotations

import logging
import socket
import threading
import time
from typing import Final

import uvicorn
from fastapi import FastAPI

from holo_wtf_api.config import AppSettings
from holo_wtf_api.routing import RequestDispatcher

from .health_state import HealthState
from .readiness import ReadinessMonitor

_SERVICE_STARTUP_POLL_SECONDS: Final[float] = 0.05
_SERVICE_SHUTDOWN_MARGIN_SECONDS: Final[float] = 2.0
_SERVICE_MINIMUM_GRACE_SECONDS: Final[float] = 0.01

logger = logging.getLogger(__name__)


class ServiceStartupError(RuntimeError):
    """Raised when the service cannot bind its socket or start serving."""


def service_bind_socket(host: str, port: int) -> socket.socket:
    """Bind the listening socket before any request can be accepted.

    Args:
        host: Interface address; IPv6 literals are supported.
        port: TCP port.

    Returns:
        socket.socket: Bound socket ready to be handed to the server.

    Raises:
        ServiceStartupError: Raised when the address cannot be bound.
    """

    address_family = socket.AF_INET6 if ":" in host else socket.AF_INET
    listening_socket = socket.socket(address_family, socket.SOCK_STREAM)
    try:
        listening_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        listening_socket.bind((host, port))
    except OSError as error:
        listening_socket.close()
        raise ServiceStartupError(f"could not bind {host}:{port}: {error}") from error
    listening_socket.set_inheritable(True)
    return listening_socket


class RunningService:
    """Handle to a serving process started by `service_start`."""

    def __init__(
        self,
        server: uvicorn.Server,
        server_thread: threading.Thread,
        listening_socket: socket.socket,
        health_state: HealthState,
        dispatcher: RequestDispatcher,
        shutdown_grace_seconds: float,
        readiness_monitor: ReadinessMonitor | None = None,
    ):
        self._server = server
        self._server_thread = server_thread
        self._listening_socket = listening_socket
        self._health_state = health_state
        self._dispatcher = dispatcher
        self._shutdown_grace_seconds = shutdown_grace_seconds
        self._readiness_monitor = readiness_monitor
        self._address = listening_socket.getsockname()[:2]
        self._shutdown_lock = threading.Lock()
        self._shutdown_complete = False

    @property
    def address(self) -> tuple[str, int]:
        return self._address

    def service_is_running(self) -> bool:
        return self._server_thread.is_alive()

    def service_wait(self, timeout_seconds: float | None = None) -> bool:
        """Block until the server stops or the timeout elapses.

        Args:
            timeout_seconds: Maximum wait, None waits indefinitely.

        Returns:
            bool: True when the server has stopped.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        self._server_thread.join(timeout=timeout_seconds)
        return not self._server_thread.is_alive()

    def service_shutdown(self, deadline_seconds: float | None = None) -> None:
        """Stop accepting connections and drain in-flight requests within a deadline.

        Readiness drops first so health checks report the drain. Requests still
        running when the grace deadline expires are cancelled, and the
        dispatcher pool is released without waiting for stragglers.

        Args:
            deadline_seconds: Grace deadline; defaults to `shutdown_grace_seconds`.

        Returns:
            None: Shutdown happens as a side effect.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        with self._shutdown_lock:
            if self._shutdown_complete:
                return
            self._shutdown_complete = True

        grace_seconds = self._shutdown_grace_seconds if deadline_seconds is None else deadline_seconds
        grace_seconds = max(float(grace_seconds), _SERVICE_MINIMUM_GRACE_SECONDS)
        logger.info("Shutting down service on %s:%s with %.2fs grace", self._address[0], self._address[1], grace_seconds)

        if self._readiness_monitor is not None:
            self._readiness_monitor.monitor_stop()
        self._health_state.health_set_ready(False, "shutting down")

        self._server.config.timeout_graceful_shutdown = grace_seconds
        self._server.should_exit = True
        self._server_thread.join(timeout=grace_seconds + _SERVICE_SHUTDOWN_MARGIN_SECONDS)
        if self._server_thread.is_alive():
            logger.warning("Server did not stop within the grace deadline, forcing exit")
            self._server.force_exit = True
            self._server_thread.join(timeout=_SERVICE_SHUTDOWN_MARGIN_SECONDS)

        self._dispatcher.dispatcher_shutdown()
        self._listening_socket.close()
        self._health_state.health_set_live(False)
        logger.info("Service stopped")


def service_start(
    settings: AppSettings,
    application: FastAPI,
    health_state: HealthState,
    dispatcher: RequestDispatcher,
    readiness_monitor: ReadinessMonitor | None = None,
) -> RunningService:
    """Bind the socket and serve the application on a background thread.

    The application lifespan marks the process live once the socket is
    bound and before connections are accepted.

    Args:
        settings: Validated runtime settings.
        application: Assembled HTTP application.
        health_state: Health cell shared with the application.
        dispatcher: Dispatcher released on shutdown.
        readiness_monitor: Optional dependency monitor started after startup.

    Returns:
        RunningService: Handle used to wait for or stop the service.

    Raises:
        ServiceStartupError: Raised when binding fails or the server does not start in time.
    """

    listening_socket = service_bind_socket(settings.host, settings.port)
    server_config = uvicorn.Config(
        application,
        log_level=settings.log_level,
        log_config=None,
        lifespan="on",
        timeout_graceful_shutdown=max(settings.shutdown_grace_seconds, _SERVICE_MINIMUM_GRACE_SECONDS),
    )
    server = uvicorn.Server(server_config)
    server_thread = threading.Thread(
        target=server.run,
        kwargs={"sockets": [listening_socket]},
        name="holo-wtf-server",
        daemon=True,
    )
    server_thread.start()

    startup_deadline = time.monotonic() + settings.startup_timeout_seconds
    while not server.started:
        if not server_thread.is_alive():
            listening_socket.close()
            raise ServiceStartupError("server exited during startup")
        if time.monotonic() >= startup_deadline:
            server.should_exit = True
            server_thread.join(timeout=_SERVICE_SHUTDOWN_MARGIN_SECONDS)
            listening_socket.close()
            raise ServiceStartupError(f"server did not start within {settings.startup_timeout_seconds:.2f}s")
        server_thread.join(timeout=_SERVICE_STARTUP_POLL_SECONDS)

    running_service = RunningService(
        server=server,
        server_thread=server_thread,
        listening_socket=listening_socket,
        health_state=health_state,
        dispatcher=dispatcher,
        shutdown_grace_seconds=settings.shutdown_grace_seconds,
        readiness_monitor=readiness_monitor,
    )
    if readiness_monitor is not None:
        readiness_monitor.monitor_start()
    logger.info("Serving on %s:%s (%s)", running_service.address[0], running_service.address[1], settings.environment)
    return running_service

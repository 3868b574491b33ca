"""Background dependency checks that drive the readiness flag."""

from __future__ import annotations

import logging
import threading
from typing import Protocol, Sequence

from holo_wtf_api.domain import HealthStatus

from .health_state import HealthState

logger = logging.getLogger(__name__)


class DependencyHealthPort(Protocol):
    """Port definition for one external dependency readiness check."""

    def health_dependency_name(self) -> str:
        """Return a stable dependency label for diagnostics.

        Returns:
            str: Dependency label.

        Raises:
            RuntimeError: Raised when dependency metadata is unavailable.
        """

    def health_check_dependency(self) -> HealthStatus:
        """Check the dependency and return a health payload.

        Returns:
            HealthStatus: Dependency health payload.

        Raises:
            ConnectionError: Raised when the dependency cannot be reached.
            TimeoutError: Raised when the check exceeds its own timeout.
        """


class ReadinessMonitor:
    """Periodically check dependencies and write the readiness flag."""

    def __init__(
        self,
        health_state: HealthState,
        dependencies: Sequence[DependencyHealthPort],
        interval_seconds: float,
    ):
        """Initialize the monitor.

        Args:
            health_state: Health cell updated after every check round.
            dependencies: Dependencies that must all be healthy for readiness.
            interval_seconds: Delay between check rounds.

        Raises:
            ValueError: Raised when dependencies or interval are invalid.
        """

        if health_state is None:
            raise ValueError("health_state must not be None")
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")

        self._health_state = health_state
        self._dependencies = tuple(dependencies)
        self._interval_seconds = interval_seconds
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def monitor_check_once(self) -> bool:
        """Run one check round and update readiness.

        Returns:
            bool: True when every dependency reported healthy.

        Raises:
            RuntimeError: This method does not raise; failures mark the process not ready.
        """

        for dependency in self._dependencies:
            dependency_name = dependency.health_dependency_name()
            try:
                dependency.health_check_dependency()
            except (ConnectionError, TimeoutError) as error:
                logger.warning("Readiness check for %s failed: %s", dependency_name, error)
                self._health_state.health_set_ready(False, f"{dependency_name} unavailable: {error}")
                return False
            except Exception:
                logger.exception("Readiness check for %s raised unexpectedly", dependency_name)
                self._health_state.health_set_ready(False, f"{dependency_name} check failed")
                return False

        if self._stop_event.is_set():
            return True
        self._health_state.health_set_ready(True, "all dependencies reachable")
        return True

    def monitor_start(self) -> None:
        """Start the background check loop; the first round runs immediately."""

        if self._thread is not None:
            raise RuntimeError("readiness monitor already started")
        self._thread = threading.Thread(target=self._monitor_run, name="holo-wtf-readiness", daemon=True)
        self._thread.start()

    def monitor_stop(self, timeout_seconds: float = 1.0) -> None:
        """Stop the check loop without waiting longer than the timeout.

        Args:
            timeout_seconds: Maximum time to wait for the loop thread.

        Returns:
            None: Monitor state is updated in place.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout_seconds)

    def _monitor_run(self) -> None:
        while not self._stop_event.is_set():
            self.monitor_check_once()
            if self._stop_event.wait(self._interval_seconds):
                break

"""Tests for the health cell and the dependency readiness monitor."""

from __future__ import annotations

import threading

import pytest

from holo_wtf_api.domain import HealthStatus
from holo_wtf_api.service import HealthState, ReadinessMonitor


class _ToggleDependency:
    """Dependency stub whose reachability is switched by the test.

    Attributes:
        reachable: Whether the next check succeeds.
        checked: Set after every completed check.
    """

    def __init__(self) -> None:
        self.reachable = True
        self.checked = threading.Event()

    def health_dependency_name(self) -> str:
        return "calendar_feed:test"

    def health_check_dependency(self) -> HealthStatus:
        """Return healthy status or raise a connection error.

        Returns:
            HealthStatus: Healthy payload when reachable.

        Raises:
            ConnectionError: Raised while the dependency is unreachable.
        """

        self.checked.set()
        if not self.reachable:
            raise ConnectionError("connection refused")
        return HealthStatus(status="ok", detail="reachable")


class _BrokenDependency:
    def health_dependency_name(self) -> str:
        return "broken"

    def health_check_dependency(self) -> HealthStatus:
        raise ValueError("unexpected payload")


def test_service_health_state_starts_not_live_and_not_ready() -> None:
    snapshot = HealthState().health_snapshot()

    assert snapshot.live is False
    assert snapshot.ready is False
    assert snapshot.detail == "starting"


def test_service_health_state_flags_are_independent() -> None:
    """Toggle readiness repeatedly without touching liveness.

    Returns:
        None: Assertions validate flag independence.

    Raises:
        AssertionError: Raised when flags affect each other.
    """

    health_state = HealthState()
    health_state.health_set_live(True)
    for ready in (True, False, True):
        health_state.health_set_ready(ready)
        assert health_state.health_is_ready() is ready
        assert health_state.health_is_live() is True

    health_state.health_set_ready(False, "draining")
    assert health_state.health_snapshot().detail == "draining"


def test_service_readiness_monitor_follows_dependency_state() -> None:
    """Mark the process not ready while a dependency fails and ready once it recovers.

    Returns:
        None: Assertions validate readiness transitions.

    Raises:
        AssertionError: Raised when readiness does not follow the dependency.
    """

    health_state = HealthState()
    health_state.health_set_live(True)
    dependency = _ToggleDependency()
    monitor = ReadinessMonitor(health_state=health_state, dependencies=[dependency], interval_seconds=60)

    assert monitor.monitor_check_once() is True
    assert health_state.health_is_ready()

    dependency.reachable = False
    assert monitor.monitor_check_once() is False
    snapshot = health_state.health_snapshot()
    assert snapshot.ready is False
    assert snapshot.live is True
    assert "connection refused" in snapshot.detail

    dependency.reachable = True
    assert monitor.monitor_check_once() is True
    assert health_state.health_is_ready()


def test_service_readiness_monitor_treats_unexpected_errors_as_not_ready() -> None:
    health_state = HealthState()
    monitor = ReadinessMonitor(health_state=health_state, dependencies=[_BrokenDependency()], interval_seconds=1)

    assert monitor.monitor_check_once() is False
    assert health_state.health_snapshot().detail == "broken check failed"


def test_service_readiness_monitor_background_loop_runs_first_round_immediately() -> None:
    """Run a check as soon as the loop starts and stop promptly.

    Returns:
        None: Assertions validate loop start and stop.

    Raises:
        AssertionError: Raised when the loop does not run or stop.
    """

    health_state = HealthState()
    dependency = _ToggleDependency()
    monitor = ReadinessMonitor(health_state=health_state, dependencies=[dependency], interval_seconds=60)

    monitor.monitor_start()
    try:
        assert dependency.checked.wait(2)
    finally:
        monitor.monitor_stop(timeout_seconds=2)

    with pytest.raises(RuntimeError, match="already started"):
        monitor.monitor_start()


def test_service_readiness_monitor_rejects_invalid_interval() -> None:
    with pytest.raises(ValueError, match="interval_seconds"):
        ReadinessMonitor(health_state=HealthState(), dependencies=[], interval_seconds=0)

"""Service process package for health state, readiness, and lifecycle."""

from .health_state import HealthState
from .readiness import DependencyHealthPort, ReadinessMonitor
from .runner import RunningService, ServiceStartupError, service_bind_socket, service_start

__all__ = [
    "DependencyHealthPort",
    "HealthState",
    "ReadinessMonitor",
    "RunningService",
    "ServiceStartupError",
    "service_bind_socket",
    "service_start",
]

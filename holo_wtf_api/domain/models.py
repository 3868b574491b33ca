"""Typed domain models shared across runtime layers.

This module provides simple data contracts for cross-layer communication
between dependency checks, the health state, and the health endpoints.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class HealthStatus:
    """Health result contract returned by dependency checks.

    Attributes:
        status: Overall status text for the dependency.
        detail: Additional message suitable for operational diagnostics.
    """

    status: str
    detail: str


@dataclass(frozen=True)
class HealthSnapshot:
    """Point-in-time copy of the process health flags.

    Attributes:
        live: Whether startup completed and the process is serving.
        ready: Whether the process currently accepts traffic.
        detail: Reason for the most recent readiness change.
        changed_at_utc: ISO-8601 time of the most recent flag change.
    """

    live: bool
    ready: bool
    detail: str
    changed_at_utc: str

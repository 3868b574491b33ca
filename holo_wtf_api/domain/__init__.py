"""Domain models used across application layer boundaries."""

from .models import HealthSnapshot, HealthStatus

__all__ = ["HealthSnapshot", "HealthStatus"]

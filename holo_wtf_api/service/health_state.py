"""Process-wide liveness and readiness flags."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone

from holo_wtf_api.domain import HealthSnapshot

logger = logging.getLogger(__name__)


class HealthState:
    """Lock-guarded health cell shared by health endpoints, monitors and the runner.

    Liveness flips once startup completes. Readiness may toggle any number
    of times during the process lifetime without a restart.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._live = False
        self._ready = False
        self._detail = "starting"
        self._changed_at_utc = datetime.now(timezone.utc).isoformat()

    def health_set_live(self, live: bool) -> None:
        """Set the liveness flag.

        Args:
            live: New liveness value.

        Returns:
            None: State is updated in place.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        with self._lock:
            if self._live == live:
                return
            self._live = live
            self._changed_at_utc = datetime.now(timezone.utc).isoformat()
        logger.info("Liveness changed to %s", live)

    def health_set_ready(self, ready: bool, detail: str | None = None) -> None:
        """Set the readiness flag with an optional diagnostic reason.

        Args:
            ready: New readiness value.
            detail: Human-readable reason for the change.

        Returns:
            None: State is updated in place.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        resolved_detail = detail or ("ready" if ready else "not ready")
        with self._lock:
            changed = self._ready != ready
            self._ready = ready
            self._detail = resolved_detail
            if changed:
                self._changed_at_utc = datetime.now(timezone.utc).isoformat()
        if changed:
            logger.info("Readiness changed to %s: %s", ready, resolved_detail)

    def health_is_live(self) -> bool:
        with self._lock:
            return self._live

    def health_is_ready(self) -> bool:
        with self._lock:
            return self._ready

    def health_snapshot(self) -> HealthSnapshot:
        with self._lock:
            return HealthSnapshot(
                live=self._live,
                ready=self._ready,
                detail=self._detail,
                changed_at_utc=self._changed_at_utc,
            )

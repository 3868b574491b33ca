"""Typed interfaces for adapter-layer responsibilities."""

from typing import Protocol


class CalendarFeedPort(Protocol):
    """Port definition for fetching the raw concert calendar document."""

    def adapter_source_name(self) -> str:
        """Return adapter source identifier for diagnostics.

        Returns:
            str: Human-readable upstream source identifier.

        Raises:
            RuntimeError: Raised when source metadata is unavailable.
        """

    def adapter_fetch_calendar(self) -> bytes:
        """Fetch the raw iCalendar document.

        Returns:
            bytes: Immutable raw feed payload.

        Raises:
            ConnectionError: Raised when upstream connection fails.
            TimeoutError: Raised when request exceeds timeout.
        """

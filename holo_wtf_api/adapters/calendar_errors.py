"""Project-native typed exceptions for calendar feed adapter failures."""

from __future__ import annotations


class CalendarFeedError(Exception):
    """Base exception for adapter-level calendar feed failures.

    Attributes:
        status_code: Optional upstream HTTP status code.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class CalendarFeedConnectionError(CalendarFeedError, ConnectionError):
    """Transport-level or HTTP-status failure while downloading the feed."""


class CalendarFeedTimeoutError(CalendarFeedError, TimeoutError):
    """Feed download exceeded the configured request timeout."""

"""Adapter layer package for upstream integration boundaries."""

from .calendar_errors import CalendarFeedConnectionError, CalendarFeedError, CalendarFeedTimeoutError
from .calendar_feed import CalendarFeedAdapter
from .interfaces import CalendarFeedPort

__all__ = [
    "CalendarFeedAdapter",
    "CalendarFeedConnectionError",
    "CalendarFeedError",
    "CalendarFeedPort",
    "CalendarFeedTimeoutError",
]

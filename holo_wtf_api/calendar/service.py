"""Concert calendar service listing upcoming concerts from the feed."""

from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from typing import Callable

from icalendar import Calendar

from holo_wtf_api.adapters import CalendarFeedPort
from holo_wtf_api.domain import HealthStatus

from .models import LiveConcert
from .parsing import ConcertParseError, calendar_build_concert, calendar_event_start_time

logger = logging.getLogger(__name__)


class CalendarDocumentError(ValueError):
    """Raised when the feed payload is not a readable iCalendar document."""


def calendar_parse_document(payload: bytes) -> Calendar:
    """Parse raw feed bytes into a calendar component.

    Args:
        payload: Raw ICS bytes.

    Returns:
        Calendar: Parsed VCALENDAR component.

    Raises:
        CalendarDocumentError: Raised when the payload cannot be decoded or parsed.
    """

    try:
        return Calendar.from_ical(payload)
    except (ValueError, UnicodeDecodeError) as error:
        raise CalendarDocumentError(f"calendar feed could not be parsed: {error}") from error


class ConcertCalendarService:
    """List upcoming concerts from the configured calendar feed."""

    def __init__(
        self,
        feed_adapter: CalendarFeedPort,
        calendar_zone: tzinfo,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize the calendar service.

        Args:
            feed_adapter: Adapter fetching the raw ICS document.
            calendar_zone: Zone for floating and all-day event times.
            clock: Optional provider of the current aware UTC time.

        Raises:
            ValueError: Raised when dependencies are invalid.
        """

        if feed_adapter is None:
            raise ValueError("feed_adapter must not be None")
        if calendar_zone is None:
            raise ValueError("calendar_zone must not be None")
        self._feed_adapter = feed_adapter
        self._calendar_zone = calendar_zone
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def calendar_list_upcoming_concerts(self) -> list[LiveConcert]:
        """Fetch the feed and return concerts starting after now.

        Events that do not follow the concert conventions are skipped and
        logged instead of failing the whole listing.

        Returns:
            list[LiveConcert]: Upcoming concerts ordered by start time.

        Raises:
            ConnectionError: Raised when the feed cannot be downloaded.
            TimeoutError: Raised when the feed download times out.
            CalendarDocumentError: Raised when the feed is not valid iCalendar.
        """

        calendar = calendar_parse_document(self._feed_adapter.adapter_fetch_calendar())
        now_utc = self._clock()

        concerts: list[LiveConcert] = []
        skipped_count = 0
        for event in calendar.walk("VEVENT"):
            try:
                start_time_utc = calendar_event_start_time(event, self._calendar_zone)
                if start_time_utc <= now_utc:
                    continue
                concerts.append(calendar_build_concert(event, start_time_utc))
            except ConcertParseError as error:
                skipped_count += 1
                logger.warning("Skipping calendar event %s: %s", event.get("UID", "<no uid>"), error)

        if skipped_count:
            logger.info("Listed %s upcoming concert(s), skipped %s malformed event(s)", len(concerts), skipped_count)
        concerts.sort(key=lambda concert: concert.start_time_utc)
        return concerts


class CalendarFeedHealthService:
    """Readiness dependency reporting whether the feed is reachable."""

    def __init__(self, feed_adapter: CalendarFeedPort):
        if feed_adapter is None:
            raise ValueError("feed_adapter must not be None")
        self._feed_adapter = feed_adapter

    def health_dependency_name(self) -> str:
        return self._feed_adapter.adapter_source_name()

    def health_check_dependency(self) -> HealthStatus:
        """Download the feed once to verify reachability.

        Returns:
            HealthStatus: Healthy payload with the downloaded size.

        Raises:
            ConnectionError: Raised when the feed cannot be reached.
            TimeoutError: Raised when the download times out.
        """

        payload = self._feed_adapter.adapter_fetch_calendar()
        return HealthStatus(status="ok", detail=f"calendar feed reachable ({len(payload)} bytes)")

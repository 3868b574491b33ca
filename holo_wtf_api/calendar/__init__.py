"""Concert calendar package: feed parsing and upcoming concert listing."""

from .models import JpyPrice, JpyPriceKind, LiveConcert, LiveFormat, Platform, calendar_concert_to_payload
from .parsing import (
    ConcertParseError,
    calendar_build_concert,
    calendar_clean_description,
    calendar_event_start_time,
    calendar_extract_image_url,
    calendar_extract_twitter_url,
    calendar_parse_format,
    calendar_parse_platform,
    calendar_parse_price,
    calendar_parse_summary,
    calendar_resolve_start_time,
)
from .service import (
    CalendarDocumentError,
    CalendarFeedHealthService,
    ConcertCalendarService,
    calendar_parse_document,
)

__all__ = [
    "CalendarDocumentError",
    "CalendarFeedHealthService",
    "ConcertCalendarService",
    "ConcertParseError",
    "JpyPrice",
    "JpyPriceKind",
    "LiveConcert",
    "LiveFormat",
    "Platform",
    "calendar_build_concert",
    "calendar_clean_description",
    "calendar_concert_to_payload",
    "calendar_event_start_time",
    "calendar_extract_image_url",
    "calendar_extract_twitter_url",
    "calendar_parse_document",
    "calendar_parse_format",
    "calendar_parse_platform",
    "calendar_parse_price",
    "calendar_parse_summary",
    "calendar_resolve_start_time",
]

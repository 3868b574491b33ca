"""Concert calendar event parsing helpers.

Event summaries follow the `(<price>)(<format>)<title>` convention, the first
CATEGORIES value names the platform, and the description may carry an image
marker and an announcement link.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timezone, tzinfo
from typing import Any
from urllib.parse import urlsplit

from icalendar import Event

from .models import JpyPrice, JpyPriceKind, LiveConcert, LiveFormat, Platform


class ConcertParseError(ValueError):
    """Raised when a calendar event does not follow the concert conventions."""


_CALENDAR_SUMMARY_PATTERN = re.compile(r"^\(([^)]*)\)\(([^)]*)\)(.+)$")
_CALENDAR_FIXED_PRICE_PATTERN = re.compile(r"^[¥￥]([\d,]+)$")
_CALENDAR_MULTI_TIER_PRICE_PATTERN = re.compile(r"^[¥￥]([\d,]+)\+$")
_CALENDAR_URL_BODY = r"https?://(?:www\.)?[-a-zA-Z0-9@:%._+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b[-a-zA-Z0-9()@:%_+.~#?&/=]*"
_CALENDAR_IMAGE_MARKER_PATTERN = re.compile(rf"!Image:\s*({_CALENDAR_URL_BODY})")
_CALENDAR_IMAGE_FILE_PATTERN = re.compile(rf"![^\n:]*\.(?:jpe?g|png|gif|webp):\s*({_CALENDAR_URL_BODY})", re.IGNORECASE)
_CALENDAR_TWITTER_PATTERN = re.compile(r"(https?://(?:www\.)?(?:twitter|x)\.com\b[-a-zA-Z0-9()@:%_+.~#?&/=]*)")
_CALENDAR_FORM_FOOTER = "Event Suggestion Submission form: https://forms.gle/tZwY1M19YUgUhn9i6"

_CALENDAR_ONLINE_MARK = "\U0001F310"
_CALENDAR_IRL_MARK = "\U0001FA91"

_CALENDAR_PLATFORM_TAGS = {
    "spwn": Platform.SPWN,
    "youtube": Platform.YOUTUBE,
    "z-an": Platform.ZAN,
    "zaiko": Platform.ZAIKO,
    "tba": Platform.TBA,
    "nico nico douga": Platform.NICONICO,
    "other": Platform.OTHER,
}


def calendar_parse_price(price_text: str) -> JpyPrice:
    """Parse the price part of an event summary.

    Args:
        price_text: Text such as `¥3500`, `¥3500+`, `Free`, or `¥TBD`.

    Returns:
        JpyPrice: Parsed price.

    Raises:
        ConcertParseError: Raised when the text matches no supported price form.
    """

    normalized_text = price_text.strip()
    lowered_text = normalized_text.lower()
    if "tba" in lowered_text or "tbd" in lowered_text:
        return JpyPrice(kind=JpyPriceKind.TBD)
    if "free" in lowered_text:
        return JpyPrice(kind=JpyPriceKind.FREE)

    fixed_match = _CALENDAR_FIXED_PRICE_PATTERN.match(normalized_text)
    if fixed_match is not None:
        return JpyPrice(kind=JpyPriceKind.FIXED, amount=_calendar_parse_amount(fixed_match.group(1), price_text))

    multi_tier_match = _CALENDAR_MULTI_TIER_PRICE_PATTERN.match(normalized_text)
    if multi_tier_match is not None:
        return JpyPrice(
            kind=JpyPriceKind.MULTI_TIER,
            amount=_calendar_parse_amount(multi_tier_match.group(1), price_text),
        )

    raise ConcertParseError(f"Price conversion failed, the string is {price_text}")


def calendar_parse_format(format_text: str) -> LiveFormat:
    """Parse the attendance marks (globe for online, chair for in person)."""

    has_online_mark = _CALENDAR_ONLINE_MARK in format_text
    has_irl_mark = _CALENDAR_IRL_MARK in format_text
    if has_online_mark and has_irl_mark:
        return LiveFormat.BOTH
    if has_online_mark:
        return LiveFormat.ONLINE
    if has_irl_mark:
        return LiveFormat.IRL
    raise ConcertParseError(f"Live format conversion failed, the text is {format_text}")


def calendar_parse_platform(tag_text: str) -> Platform:
    """Map a CATEGORIES tag to a platform, case-insensitively.

    Args:
        tag_text: Category tag such as `SPWN` or `Z-aN`.

    Returns:
        Platform: Matching platform.

    Raises:
        ConcertParseError: Raised for unknown tags.
    """

    platform = _CALENDAR_PLATFORM_TAGS.get(tag_text.strip().lower())
    if platform is None:
        raise ConcertParseError(f"Calendar category parsing failed, the text is {tag_text}")
    return platform


def calendar_parse_summary(summary: str) -> tuple[str, JpyPrice, LiveFormat]:
    """Split a `(<price>)(<format>)<title>` summary.

    Args:
        summary: Event summary text.

    Returns:
        tuple[str, JpyPrice, LiveFormat]: Title, price, and attendance format.

    Raises:
        ConcertParseError: Raised when the summary or one of its parts is malformed.
    """

    summary_match = _CALENDAR_SUMMARY_PATTERN.match(summary.strip())
    if summary_match is None:
        raise ConcertParseError(f'Calendar event summary parsing failed, the text is "{summary}"')

    price = calendar_parse_price(summary_match.group(1))
    live_format = calendar_parse_format(summary_match.group(2))
    title = summary_match.group(3).strip()
    if not title:
        raise ConcertParseError(f'Calendar event summary has no title, the text is "{summary}"')
    return title, price, live_format


def calendar_clean_description(description: str) -> str:
    return description.replace(_CALENDAR_FORM_FOOTER, "").strip()


def calendar_extract_image_url(description: str) -> str | None:
    """Return the key visual URL from an `!Image:` or `!<file>.png:` marker, if any."""

    for image_pattern in (_CALENDAR_IMAGE_MARKER_PATTERN, _CALENDAR_IMAGE_FILE_PATTERN):
        image_match = image_pattern.search(description)
        if image_match is not None and _calendar_is_absolute_url(image_match.group(1)):
            return image_match.group(1)
    return None


def calendar_extract_twitter_url(description: str) -> str | None:
    twitter_match = _CALENDAR_TWITTER_PATTERN.search(description)
    if twitter_match is not None and _calendar_is_absolute_url(twitter_match.group(1)):
        return twitter_match.group(1)
    return None


def calendar_resolve_start_time(start_value: date | datetime, calendar_zone: tzinfo) -> datetime:
    """Convert a DTSTART value to a UTC instant.

    Floating datetimes and all-day dates are interpreted in the calendar zone.

    Args:
        start_value: Decoded DTSTART value.
        calendar_zone: Zone for values without their own offset.

    Returns:
        datetime: Aware UTC datetime.

    Raises:
        ConcertParseError: Raised when the value is not a date or datetime.
    """

    if isinstance(start_value, datetime):
        if start_value.tzinfo is None or start_value.tzinfo.utcoffset(start_value) is None:
            start_value = start_value.replace(tzinfo=calendar_zone)
        return start_value.astimezone(timezone.utc)
    if isinstance(start_value, date):
        return datetime.combine(start_value, time(0, 0), tzinfo=calendar_zone).astimezone(timezone.utc)
    raise ConcertParseError(f"start time unavailable, the value is {start_value!r}")


def calendar_event_start_time(event: Event, calendar_zone: tzinfo) -> datetime:
    """Return the UTC start instant of an event.

    Args:
        event: Parsed VEVENT component.
        calendar_zone: Zone for floating and all-day values.

    Returns:
        datetime: Aware UTC datetime.

    Raises:
        ConcertParseError: Raised when DTSTART is missing or unusable.
    """

    start_property = event.get("DTSTART")
    if start_property is None:
        raise ConcertParseError("start time unavailable")
    return calendar_resolve_start_time(getattr(start_property, "dt", start_property), calendar_zone)


def calendar_build_concert(event: Event, start_time_utc: datetime) -> LiveConcert:
    """Build one concert from a calendar event.

    Args:
        event: Parsed VEVENT component.
        start_time_utc: Start instant already resolved for the event.

    Returns:
        LiveConcert: Parsed concert.

    Raises:
        ConcertParseError: Raised when a required property is missing or malformed.
    """

    summary = _calendar_text_property(event, "SUMMARY")
    if summary is None:
        raise ConcertParseError("failed to get summary")
    categories = _calendar_event_categories(event)
    if not categories:
        raise ConcertParseError("failed to get category")
    description = _calendar_text_property(event, "DESCRIPTION")
    if description is None:
        raise ConcertParseError("failed to get description")

    title, jpy_price, live_format = calendar_parse_summary(summary)
    platform = calendar_parse_platform(categories[0])
    cleaned_description = calendar_clean_description(description)
    return LiveConcert(
        title=title,
        live_format=live_format,
        jpy_price=jpy_price,
        platform=platform,
        description=cleaned_description,
        start_time_utc=start_time_utc,
        image_url=calendar_extract_image_url(cleaned_description),
        twitter_url=calendar_extract_twitter_url(cleaned_description),
    )


def _calendar_parse_amount(amount_text: str, price_text: str) -> int:
    try:
        return int(amount_text.replace(",", ""))
    except ValueError as error:
        raise ConcertParseError(f"Price conversion failed, the string is {price_text}") from error


def _calendar_is_absolute_url(url: str) -> bool:
    parsed_url = urlsplit(url)
    return parsed_url.scheme in ("http", "https") and bool(parsed_url.netloc)


def _calendar_text_property(event: Event, name: str) -> str | None:
    value: Any = event.get(name)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _calendar_event_categories(event: Event) -> list[str]:
    """Flatten CATEGORIES, which may repeat and may hold several values each."""

    raw_categories: Any = event.get("CATEGORIES")
    if raw_categories is None:
        return []
    category_properties = raw_categories if isinstance(raw_categories, list) else [raw_categories]

    categories: list[str] = []
    for category_property in category_properties:
        values = getattr(category_property, "cats", None)
        if values is None:
            values = [category_property]
        categories.extend(str(value).strip() for value in values if str(value).strip())
    return categories

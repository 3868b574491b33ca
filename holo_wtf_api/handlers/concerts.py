"""Request handlers exposing upcoming concerts."""

from __future__ import annotations

from typing import Final

from holo_wtf_api.calendar import (
    CalendarDocumentError,
    ConcertCalendarService,
    LiveConcert,
    Platform,
    calendar_concert_to_payload,
)
from holo_wtf_api.routing import HandlerError, ServiceRequest, ServiceResponse, routing_json_response

CONCERT_LIST_MAX_LIMIT: Final[int] = 500


def handler_resolve_platform(platform_text: str) -> Platform:
    """Resolve a platform name from a path or query value.

    Args:
        platform_text: Platform enum value such as `spwn`.

    Returns:
        Platform: Matching platform.

    Raises:
        HandlerError: Raised with status 404 for unknown platforms.
    """

    try:
        return Platform(platform_text.strip().lower())
    except ValueError as error:
        raise HandlerError(
            f"unknown platform {platform_text!r}",
            status_code=404,
            error_code="unknown_platform",
            details={"supported_platforms": [platform.value for platform in Platform]},
        ) from error


def handler_load_upcoming_concerts(
    calendar_service: ConcertCalendarService,
    request: ServiceRequest,
) -> list[LiveConcert]:
    """Load upcoming concerts, mapping feed failures to gateway errors.

    Args:
        calendar_service: Calendar service shared by concert handlers.
        request: Request whose cancellation flag is honoured.

    Returns:
        list[LiveConcert]: Upcoming concerts.

    Raises:
        HandlerError: Raised with status 502 when the feed is unavailable or invalid,
            or 503 when the request was cancelled meanwhile.
    """

    try:
        concerts = calendar_service.calendar_list_upcoming_concerts()
    except CalendarDocumentError as error:
        raise HandlerError(str(error), status_code=502, error_code="calendar_feed_invalid") from error
    except (ConnectionError, TimeoutError) as error:
        raise HandlerError(
            f"calendar feed unavailable: {error}",
            status_code=502,
            error_code="calendar_feed_unavailable",
        ) from error

    if request.cancellation.cancellation_is_cancelled():
        raise HandlerError("request cancelled", status_code=503, error_code="request_cancelled")
    return concerts


class ConcertListHandler:
    """`GET /`: list upcoming concerts, optionally filtered by `platform` and capped by `limit`."""

    def __init__(self, calendar_service: ConcertCalendarService):
        if calendar_service is None:
            raise ValueError("calendar_service must not be None")
        self._calendar_service = calendar_service

    def handler_process(self, request: ServiceRequest) -> ServiceResponse:
        platform_text = request.request_query_value("platform")
        platform = handler_resolve_platform(platform_text) if platform_text is not None else None
        limit = request.request_query_int("limit", minimum=0, maximum=CONCERT_LIST_MAX_LIMIT)

        concerts = handler_load_upcoming_concerts(self._calendar_service, request)
        if platform is not None:
            concerts = [concert for concert in concerts if concert.platform is platform]
        if limit is not None:
            concerts = concerts[:limit]
        return routing_json_response([calendar_concert_to_payload(concert) for concert in concerts])


class ConcertPlatformHandler:
    """`GET /platforms/{platform}`: list upcoming concerts hosted on one platform."""

    def __init__(self, calendar_service: ConcertCalendarService):
        if calendar_service is None:
            raise ValueError("calendar_service must not be None")
        self._calendar_service = calendar_service

    def handler_process(self, request: ServiceRequest) -> ServiceResponse:
        platform = handler_resolve_platform(request.request_path_value("platform"))
        concerts = handler_load_upcoming_concerts(self._calendar_service, request)
        return routing_json_response(
            [calendar_concert_to_payload(concert) for concert in concerts if concert.platform is platform]
        )

"""HTTP adapter for the public iCalendar concert feed."""

from __future__ import annotations

import logging
import socket
from typing import Final
from urllib.error import HTTPError, URLError
from urllib.parse import urlsplit
from urllib.request import Request, urlopen

from .calendar_errors import CalendarFeedConnectionError, CalendarFeedTimeoutError
from .interfaces import CalendarFeedPort

logger = logging.getLogger(__name__)


class CalendarFeedAdapter(CalendarFeedPort):
    """Adapter downloading the ICS feed over HTTP(S)."""

    _USER_AGENT: Final[str] = "holo-wtf-api/1.0 (Python/urllib.request)"
    _ACCEPT: Final[str] = "text/calendar, text/plain;q=0.9, */*;q=0.1"

    def __init__(self, feed_url: str, request_timeout_seconds: float = 10.0):
        """Initialize calendar feed adapter.

        Args:
            feed_url: Absolute http(s) feed URL.
            request_timeout_seconds: HTTP request timeout in seconds.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when required config values are invalid.
        """

        normalized_feed_url = feed_url.strip()
        parsed_url = urlsplit(normalized_feed_url)
        if parsed_url.scheme not in ("http", "https") or not parsed_url.netloc:
            raise ValueError("feed_url must be an absolute http(s) URL")
        if request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be > 0")

        self._feed_url = normalized_feed_url
        self._feed_host = parsed_url.netloc
        self._request_timeout_seconds = request_timeout_seconds

    def adapter_source_name(self) -> str:
        """Return stable adapter source label.

        Returns:
            str: Source identifier including the feed host.

        Raises:
            RuntimeError: This implementation does not raise runtime errors.
        """

        return f"calendar_feed:{self._feed_host}"

    def adapter_fetch_calendar(self) -> bytes:
        """Execute one HTTP GET for the feed and return payload bytes.

        Returns:
            bytes: Raw ICS document.

        Raises:
            CalendarFeedConnectionError: Raised for network and non-success HTTP status.
            CalendarFeedTimeoutError: Raised when the request times out.
        """

        request = Request(
            self._feed_url,
            method="GET",
            headers={"User-Agent": self._USER_AGENT, "Accept": self._ACCEPT},
        )
        try:
            with urlopen(request, timeout=self._request_timeout_seconds) as response:
                status_code = int(response.getcode() or 200)
                payload = response.read()
        except TimeoutError as error:
            raise CalendarFeedTimeoutError("Calendar feed request timed out") from error
        except HTTPError as error:
            raise CalendarFeedConnectionError(
                f"Calendar feed returned HTTP {error.code}",
                status_code=error.code,
            ) from error
        except URLError as error:
            if isinstance(error.reason, (TimeoutError, socket.timeout)):
                raise CalendarFeedTimeoutError("Calendar feed request timed out") from error
            raise CalendarFeedConnectionError(f"Calendar feed request failed: {error.reason}") from error

        if status_code >= 400:
            raise CalendarFeedConnectionError(f"Calendar feed returned HTTP {status_code}", status_code=status_code)

        logger.debug("Fetched %s bytes from %s", len(payload), self._feed_host)
        return bytes(payload)

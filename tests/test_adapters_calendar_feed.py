"""Tests for the calendar feed HTTP adapter.

These tests validate request construction and the mapping of transport
failures into adapter exceptions without touching the network.
"""

from __future__ import annotations

import socket
from email.message import Message
from io import BytesIO
from urllib.error import HTTPError, URLError
from urllib.request import Request

import pytest

from holo_wtf_api.adapters import CalendarFeedAdapter, CalendarFeedConnectionError, CalendarFeedTimeoutError
from holo_wtf_api.adapters import calendar_feed as calendar_feed_module

_FEED_URL = "https://ics.example.test/feed/0.ics"


class _FakeResponse:
    """Context-managed response double mimicking `urlopen` results."""

    def __init__(self, payload: bytes, status_code: int = 200):
        self._payload = payload
        self._status_code = status_code

    def __enter__(self) -> "_FakeResponse":
        return self

    def __exit__(self, *_exc_info: object) -> None:
        return None

    def getcode(self) -> int:
        return self._status_code

    def read(self) -> bytes:
        return self._payload


def test_adapter_fetch_calendar_returns_payload(monkeypatch: pytest.MonkeyPatch) -> None:
    """Send one GET with calendar headers and return the raw body.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate request construction and payload.

    Raises:
        AssertionError: Raised when the request or payload is wrong.
    """

    captured_requests: list[tuple[Request, float]] = []

    def _fake_urlopen(request: Request, timeout: float) -> _FakeResponse:
        captured_requests.append((request, timeout))
        return _FakeResponse(b"BEGIN:VCALENDAR\r\nEND:VCALENDAR\r\n")

    monkeypatch.setattr(calendar_feed_module, "urlopen", _fake_urlopen)
    adapter = CalendarFeedAdapter(feed_url=_FEED_URL, request_timeout_seconds=3)

    payload = adapter.adapter_fetch_calendar()

    assert payload.startswith(b"BEGIN:VCALENDAR")
    request, timeout = captured_requests[0]
    assert request.full_url == _FEED_URL
    assert request.get_method() == "GET"
    assert "text/calendar" in request.get_header("Accept")
    assert timeout == 3
    assert adapter.adapter_source_name() == "calendar_feed:ics.example.test"


@pytest.mark.parametrize(
    ("raised_error", "expected_type"),
    [
        (TimeoutError("timed out"), CalendarFeedTimeoutError),
        (URLError(socket.timeout("timed out")), CalendarFeedTimeoutError),
        (URLError("name resolution failed"), CalendarFeedConnectionError),
        (HTTPError(_FEED_URL, 503, "Service Unavailable", Message(), BytesIO(b"")), CalendarFeedConnectionError),
    ],
)
def test_adapter_fetch_calendar_maps_transport_failures(
    monkeypatch: pytest.MonkeyPatch,
    raised_error: Exception,
    expected_type: type[Exception],
) -> None:
    """Translate urllib failures into adapter exceptions.

    Args:
        monkeypatch: Pytest monkeypatch fixture.
        raised_error: Error raised by the patched `urlopen`.
        expected_type: Expected adapter exception type.

    Returns:
        None: Assertions validate error mapping.

    Raises:
        AssertionError: Raised when an error maps to the wrong type.
    """

    def _failing_urlopen(request: Request, timeout: float) -> _FakeResponse:
        raise raised_error

    monkeypatch.setattr(calendar_feed_module, "urlopen", _failing_urlopen)
    adapter = CalendarFeedAdapter(feed_url=_FEED_URL)

    with pytest.raises(expected_type):
        adapter.adapter_fetch_calendar()


def test_adapter_http_status_error_keeps_status_code(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(calendar_feed_module, "urlopen", lambda request, timeout: _FakeResponse(b"", status_code=404))

    with pytest.raises(CalendarFeedConnectionError) as error_info:
        CalendarFeedAdapter(feed_url=_FEED_URL).adapter_fetch_calendar()

    assert error_info.value.status_code == 404
    assert isinstance(error_info.value, ConnectionError)


@pytest.mark.parametrize(("feed_url", "timeout_seconds"), [("ftp://ics.example.test/0.ics", 5), (_FEED_URL, 0)])
def test_adapter_rejects_invalid_configuration(feed_url: str, timeout_seconds: float) -> None:
    with pytest.raises(ValueError):
        CalendarFeedAdapter(feed_url=feed_url, request_timeout_seconds=timeout_seconds)

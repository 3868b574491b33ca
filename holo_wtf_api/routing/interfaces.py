"""Typed request, response, and handler contracts for the routing layer."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Mapping, Protocol

from .errors import HandlerError


class RequestCancellation:
    """Cooperative cancellation flag shared between dispatcher and handler.

    Handlers blocking on I/O should poll `cancellation_is_cancelled` or wait
    through `cancellation_wait` so a timed-out or abandoned request stops
    promptly.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._reason: str | None = None
        self._lock = threading.Lock()

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancellation_cancel(self, reason: str) -> None:
        """Mark the request cancelled; the first reason wins.

        Args:
            reason: Short cause label such as `timeout` or `shutdown`.

        Returns:
            None: State is updated in place.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        with self._lock:
            if self._reason is None:
                self._reason = reason
        self._event.set()

    def cancellation_is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancellation_wait(self, timeout_seconds: float | None = None) -> bool:
        """Block until cancelled or the timeout elapses.

        Args:
            timeout_seconds: Maximum wait, None waits indefinitely.

        Returns:
            bool: True when the request was cancelled.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        return self._event.wait(timeout_seconds)


@dataclass(frozen=True)
class ServiceRequest:
    """Framework-neutral request value owned by one connection.

    Attributes:
        method: Uppercase HTTP method.
        path: Decoded request path.
        headers: Header mapping with lowercase names.
        body: Raw request body bytes.
        query_parameters: Query string values, last value wins.
        path_parameters: Values captured by the matched route pattern.
        cancellation: Cooperative cancellation flag for this request.
    """

    method: str
    path: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""
    query_parameters: Mapping[str, str] = field(default_factory=dict)
    path_parameters: Mapping[str, str] = field(default_factory=dict)
    cancellation: RequestCancellation = field(default_factory=RequestCancellation)

    def request_header(self, name: str, default: str | None = None) -> str | None:
        return self.headers.get(name.lower(), default)

    def request_path_value(self, name: str) -> str:
        """Return one captured path parameter.

        Args:
            name: Parameter name declared in the route pattern.

        Returns:
            str: Captured segment text.

        Raises:
            KeyError: Raised when the pattern declares no such parameter.
        """

        return self.path_parameters[name]

    def request_query_value(self, name: str, default: str | None = None) -> str | None:
        value = self.query_parameters.get(name)
        if value is None:
            return default
        stripped_value = value.strip()
        return stripped_value or default

    def request_query_int(
        self,
        name: str,
        default: int | None = None,
        minimum: int | None = None,
        maximum: int | None = None,
    ) -> int | None:
        """Return one query parameter parsed as a bounded integer.

        Args:
            name: Query parameter name.
            default: Value used when the parameter is absent or blank.
            minimum: Optional inclusive lower bound.
            maximum: Optional inclusive upper bound.

        Returns:
            int | None: Parsed integer or the default.

        Raises:
            HandlerError: Raised with status 400 when the value is not a valid integer in range.
        """

        raw_value = self.request_query_value(name)
        if raw_value is None:
            return default
        try:
            parsed_value = int(raw_value)
        except ValueError as error:
            raise HandlerError(
                f"query parameter {name!r} must be an integer",
                status_code=400,
                error_code="invalid_query_parameter",
                details={"parameter": name},
            ) from error
        if (minimum is not None and parsed_value < minimum) or (maximum is not None and parsed_value > maximum):
            raise HandlerError(
                f"query parameter {name!r} is out of range",
                status_code=400,
                error_code="invalid_query_parameter",
                details={"parameter": name, "minimum": minimum, "maximum": maximum},
            )
        return parsed_value


@dataclass(frozen=True)
class ServiceResponse:
    """Framework-neutral response value.

    Attributes:
        status_code: HTTP status code.
        body: Response body bytes.
        headers: Response headers with lowercase names.
    """

    status_code: int
    body: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)


class RequestHandlerPort(Protocol):
    """Port definition for request handlers registered in the route table."""

    def handler_process(self, request: ServiceRequest) -> ServiceResponse:
        """Produce a response for one dispatched request.

        Args:
            request: Request with path parameters bound by the router.

        Returns:
            ServiceResponse: Response written back to the caller.

        Raises:
            HandlerError: Raised for declared failures with an explicit status.
        """

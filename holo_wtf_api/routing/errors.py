"""Project-native typed exceptions for route registration and dispatch."""

from __future__ import annotations

from typing import Any


class RouteRegistrationError(ValueError):
    """Duplicate, ambiguous, or malformed route detected while building the table."""


class DispatchError(Exception):
    """Base exception for requests that resolve to no handler.

    Attributes:
        status_code: HTTP status the dispatcher answers with.
        error_code: Machine-readable error identifier.
    """

    status_code = 500
    error_code = "dispatch_error"


class RouteNotFoundError(DispatchError):
    """No registered pattern matches the request path."""

    status_code = 404
    error_code = "not_found"

    def __init__(self, path: str):
        super().__init__(f"no route matches path {path!r}")
        self.path = path


class MethodNotAllowedError(DispatchError):
    """The path matches at least one pattern, but none for this method.

    Attributes:
        allowed_methods: Sorted methods registered for matching patterns.
    """

    status_code = 405
    error_code = "method_not_allowed"

    def __init__(self, method: str, path: str, allowed_methods: tuple[str, ...]):
        super().__init__(f"method {method} not allowed for path {path!r}")
        self.method = method
        self.path = path
        self.allowed_methods = allowed_methods


class HandlerError(Exception):
    """Declared handler failure converted into an error response.

    Attributes:
        status_code: HTTP status in the 4xx or 5xx range.
        error_code: Machine-readable error identifier.
        details: Optional JSON-serializable diagnostics merged into the body.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "handler_error",
        details: dict[str, Any] | None = None,
    ):
        if not 400 <= status_code <= 599:
            raise ValueError("status_code must be an HTTP error status (400-599)")
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details


class HandlerTimeoutError(HandlerError, TimeoutError):
    """Handler exceeded the dispatcher per-request deadline."""

    def __init__(self, message: str = "request handler timed out"):
        super().__init__(message=message, status_code=504, error_code="handler_timeout")

"""Request dispatcher running handlers on a bounded worker pool.

The dispatcher is the failure boundary for business handlers: every outcome,
including unknown paths, method mismatches, declared handler errors, timeouts
and unexpected exceptions, is converted into a well-formed `ServiceResponse`.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import CancelledError as FutureCancelledError
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import replace

from .errors import DispatchError, HandlerError, HandlerTimeoutError, MethodNotAllowedError
from .interfaces import RequestCancellation, ServiceRequest, ServiceResponse
from .responses import routing_error_response
from .table import RegisteredRoute, RouteTable

logger = logging.getLogger(__name__)


class RequestDispatcher:
    """Dispatch requests to routes with a per-request deadline."""

    def __init__(
        self,
        route_table: RouteTable,
        request_timeout_seconds: float = 30.0,
        worker_count: int = 16,
    ):
        """Initialize the dispatcher and freeze the route table.

        Args:
            route_table: Fully registered route table.
            request_timeout_seconds: Deadline for one handler invocation.
            worker_count: Maximum concurrently running handlers.

        Raises:
            ValueError: Raised when dependencies or limits are invalid.
        """

        if route_table is None:
            raise ValueError("route_table must not be None")
        if request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be > 0")
        if worker_count < 1:
            raise ValueError("worker_count must be >= 1")

        route_table.table_freeze()
        self._route_table = route_table
        self._request_timeout_seconds = request_timeout_seconds
        self._executor = ThreadPoolExecutor(max_workers=worker_count, thread_name_prefix="holo-wtf-handler")
        self._lock = threading.Lock()
        self._in_flight: set[RequestCancellation] = set()
        self._closed = False

    def dispatch(self, request: ServiceRequest) -> ServiceResponse:
        """Dispatch one request and block until a response is available.

        Args:
            request: Incoming request without path parameters.

        Returns:
            ServiceResponse: Handler response or a converted error response.

        Raises:
            RuntimeError: This method does not raise; failures become responses.
        """

        prepared = self._dispatcher_prepare(request)
        if isinstance(prepared, ServiceResponse):
            return prepared
        route, bound_request = prepared

        future = self._dispatcher_submit(route, bound_request)
        if future is None:
            return self._dispatcher_unavailable_response()
        try:
            return future.result(timeout=self._request_timeout_seconds)
        except TimeoutError:
            future.cancel()
            return self._dispatcher_timeout_response(route, bound_request)
        except FutureCancelledError:
            return self._dispatcher_unavailable_response()

    async def dispatch_async(self, request: ServiceRequest) -> ServiceResponse:
        """Dispatch one request from an event loop without blocking it.

        Cancelling the awaiting task marks the request cancelled so the
        handler can stop cooperatively.

        Args:
            request: Incoming request without path parameters.

        Returns:
            ServiceResponse: Handler response or a converted error response.

        Raises:
            asyncio.CancelledError: Re-raised when the awaiting task is cancelled.
        """

        prepared = self._dispatcher_prepare(request)
        if isinstance(prepared, ServiceResponse):
            return prepared
        route, bound_request = prepared

        future = self._dispatcher_submit(route, bound_request)
        if future is None:
            return self._dispatcher_unavailable_response()
        try:
            return await asyncio.wait_for(asyncio.wrap_future(future), timeout=self._request_timeout_seconds)
        except asyncio.TimeoutError:
            return self._dispatcher_timeout_response(route, bound_request)
        except asyncio.CancelledError:
            current_task = asyncio.current_task()
            if future.cancelled() and (current_task is None or not current_task.cancelling()):
                return self._dispatcher_unavailable_response()
            bound_request.cancellation.cancellation_cancel("caller")
            raise

    def dispatcher_in_flight_count(self) -> int:
        with self._lock:
            return len(self._in_flight)

    def dispatcher_shutdown(self) -> None:
        """Stop accepting work and cancel every in-flight request.

        Worker threads are not awaited; handlers are expected to observe
        their cancellation flag.

        Returns:
            None: Dispatcher state is updated in place.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        with self._lock:
            if self._closed:
                return
            self._closed = True
            in_flight = list(self._in_flight)
        for cancellation in in_flight:
            cancellation.cancellation_cancel("shutdown")
        if in_flight:
            logger.warning("Dispatcher shutting down with %s in-flight request(s) cancelled", len(in_flight))
        self._executor.shutdown(wait=False, cancel_futures=True)

    def _dispatcher_prepare(self, request: ServiceRequest) -> tuple[RegisteredRoute, ServiceRequest] | ServiceResponse:
        """Resolve the route or build the 404/405 response."""

        try:
            route_match = self._route_table.table_resolve(request.method, request.path)
        except MethodNotAllowedError as error:
            return routing_error_response(
                status_code=error.status_code,
                error_code=error.error_code,
                message=str(error),
                details={"allowed_methods": list(error.allowed_methods)},
                headers={"allow": ", ".join(error.allowed_methods)},
            )
        except DispatchError as error:
            return routing_error_response(status_code=error.status_code, error_code=error.error_code, message=str(error))

        bound_request = replace(request, path_parameters=dict(route_match.path_parameters))
        return route_match.route, bound_request

    def _dispatcher_submit(self, route: RegisteredRoute, request: ServiceRequest) -> Future | None:
        """Schedule the handler; returns None once the dispatcher is shut down."""

        with self._lock:
            if self._closed:
                return None
            self._in_flight.add(request.cancellation)
            try:
                future = self._executor.submit(self._dispatcher_invoke, route, request)
            except RuntimeError:
                self._in_flight.discard(request.cancellation)
                return None
        future.add_done_callback(lambda _future: self._dispatcher_forget(request.cancellation))
        return future

    def _dispatcher_forget(self, cancellation: RequestCancellation) -> None:
        with self._lock:
            self._in_flight.discard(cancellation)

    def _dispatcher_invoke(self, route: RegisteredRoute, request: ServiceRequest) -> ServiceResponse:
        """Run one handler and convert every failure into a response."""

        try:
            response = route.handler.handler_process(request)
        except HandlerError as error:
            log_level = logging.ERROR if error.status_code >= 500 else logging.INFO
            logger.log(
                log_level,
                "Handler for %s %s (pattern=%s) declared failure %s: %s",
                request.method,
                request.path,
                route.pattern.raw_pattern,
                error.status_code,
                error.message,
            )
            return routing_error_response(
                status_code=error.status_code,
                error_code=error.error_code,
                message=error.message,
                details=error.details,
            )
        except Exception:
            logger.exception(
                "Unhandled failure in handler for %s %s (pattern=%s)",
                request.method,
                request.path,
                route.pattern.raw_pattern,
            )
            return routing_error_response(status_code=500, error_code="internal_error", message="internal server error")

        if not isinstance(response, ServiceResponse):
            logger.error(
                "Handler for %s %s (pattern=%s) returned %s instead of ServiceResponse",
                request.method,
                request.path,
                route.pattern.raw_pattern,
                type(response).__name__,
            )
            return routing_error_response(status_code=500, error_code="internal_error", message="internal server error")
        return response

    def _dispatcher_timeout_response(self, route: RegisteredRoute, request: ServiceRequest) -> ServiceResponse:
        request.cancellation.cancellation_cancel("timeout")
        logger.warning(
            "Handler for %s %s (pattern=%s) exceeded %.2fs and was cancelled",
            request.method,
            request.path,
            route.pattern.raw_pattern,
            self._request_timeout_seconds,
        )
        timeout_error = HandlerTimeoutError()
        return routing_error_response(
            status_code=timeout_error.status_code,
            error_code=timeout_error.error_code,
            message=timeout_error.message,
        )

    def _dispatcher_unavailable_response(self) -> ServiceResponse:
        return routing_error_response(status_code=503, error_code="shutting_down", message="service is shutting down")

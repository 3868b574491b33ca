"""Catch-all router bridging ASGI requests into the request dispatcher."""

from __future__ import annotations

import asyncio
from typing import Final

from fastapi import APIRouter, Request, Response

from holo_wtf_api.routing import ROUTING_SUPPORTED_METHODS, RequestDispatcher, ServiceRequest, ServiceResponse

_API_DISCONNECT_POLL_SECONDS: Final[float] = 0.25


def api_create_dispatch_router(dispatcher: RequestDispatcher) -> APIRouter:
    """Create the router that forwards every remaining request to the dispatcher.

    Must be included after routers with fixed paths so those keep precedence.

    Args:
        dispatcher: Dispatcher owning the business route table.

    Returns:
        APIRouter: Router with one catch-all route.

    Raises:
        ValueError: Raised when dispatcher is invalid.
    """

    if dispatcher is None:
        raise ValueError("dispatcher must not be None")

    router = APIRouter()

    @router.api_route(
        "/{request_path:path}",
        methods=sorted(ROUTING_SUPPORTED_METHODS),
        include_in_schema=False,
    )
    async def api_dispatch_request(request_path: str, request: Request) -> Response:
        """Dispatch one request and cancel it if the caller disconnects."""

        _ = request_path
        service_request = await api_build_service_request(request)
        dispatch_task = asyncio.ensure_future(dispatcher.dispatch_async(service_request))
        try:
            while True:
                done, _pending = await asyncio.wait({dispatch_task}, timeout=_API_DISCONNECT_POLL_SECONDS)
                if done:
                    break
                if await request.is_disconnected():
                    service_request.cancellation.cancellation_cancel("disconnect")
                    dispatch_task.cancel()
                    return Response(status_code=499)
        except asyncio.CancelledError:
            service_request.cancellation.cancellation_cancel("caller")
            dispatch_task.cancel()
            raise

        return api_render_service_response(dispatch_task.result(), include_body=service_request.method != "HEAD")

    return router


async def api_build_service_request(request: Request) -> ServiceRequest:
    """Convert a framework request into a dispatcher request.

    Args:
        request: Incoming framework request.

    Returns:
        ServiceRequest: Framework-neutral request with the body fully read.

    Raises:
        starlette.requests.ClientDisconnect: Raised when the caller leaves while the body is read.
    """

    body = await request.body()
    return ServiceRequest(
        method=request.method.upper(),
        path=request.url.path,
        headers={name.lower(): value for name, value in request.headers.items()},
        body=body,
        query_parameters=dict(request.query_params),
    )


def api_render_service_response(service_response: ServiceResponse, include_body: bool = True) -> Response:
    return Response(
        content=service_response.body if include_body else b"",
        status_code=service_response.status_code,
        headers=dict(service_response.headers),
    )

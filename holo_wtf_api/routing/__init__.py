"""Routing layer package for route registration and request dispatch."""

from .dispatcher import RequestDispatcher
from .errors import (
    DispatchError,
    HandlerError,
    HandlerTimeoutError,
    MethodNotAllowedError,
    RouteNotFoundError,
    RouteRegistrationError,
)
from .interfaces import RequestCancellation, RequestHandlerPort, ServiceRequest, ServiceResponse
from .patterns import RoutePattern, routing_parse_pattern, routing_split_path
from .responses import routing_error_response, routing_json_response
from .table import ROUTING_SUPPORTED_METHODS, RegisteredRoute, RouteMatch, RouteTable

__all__ = [
    "DispatchError",
    "HandlerError",
    "HandlerTimeoutError",
    "MethodNotAllowedError",
    "ROUTING_SUPPORTED_METHODS",
    "RegisteredRoute",
    "RequestCancellation",
    "RequestDispatcher",
    "RequestHandlerPort",
    "RouteMatch",
    "RouteNotFoundError",
    "RoutePattern",
    "RouteRegistrationError",
    "RouteTable",
    "ServiceRequest",
    "ServiceResponse",
    "routing_error_response",
    "routing_json_response",
    "routing_parse_pattern",
    "routing_split_path",
]
